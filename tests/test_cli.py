"""Tests for the spoolbind command line."""

import json

import pytest
from click.testing import CliRunner

from spoolbind.cli.main import cli
from spoolbind.cli.match_cmd import parse_mapping
from spoolbind.config import configure


@pytest.fixture(autouse=True)
def reset_settings():
    configure(None)
    yield
    configure(None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def job_file(tmp_path):
    """Two-tool job matching the default mock station (PLA red, PETG green)."""
    path = tmp_path / "dragon.json"
    path.write_text(json.dumps({
        "fileName": "dragon.3mf",
        "displayName": "Dragon",
        "metadataType": "ad5x",
        "printingTime": 5400,
        "totalFilamentWeight": 42.0,
        "toolDatas": [
            {"toolId": 0, "materialName": "PLA", "materialColor": "#FF0000"},
            {"toolId": 1, "materialName": "PETG", "materialColor": "#00FF00"},
        ],
    }))
    return path


class TestParseMapping:
    """Tests for TOOL:SLOT parsing."""

    def test_parse(self):
        assert parse_mapping("1:3") == (0, 3)

    @pytest.mark.parametrize("value", ["1", "a:b", "0:1", "1:0"])
    def test_invalid(self, value):
        import click

        with pytest.raises(click.BadParameter):
            parse_mapping(value)


class TestStatusCommand:
    """Tests for the status command."""

    def test_status(self, runner):
        result = runner.invoke(cli, ["--mock", "status"])
        assert result.exit_code == 0
        assert "Mock Mode: True" in result.output

    def test_status_with_printer(self, runner, monkeypatch):
        monkeypatch.setenv("SPOOLBIND_PRINTER_URL", "http://printer:3000")
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "http://printer:3000" in result.output


class TestStationCommand:
    """Tests for station show."""

    def test_show(self, runner):
        """The mock station lists its four slots."""
        result = runner.invoke(cli, ["--mock", "station", "show"])
        assert result.exit_code == 0
        assert "Slot 1" in result.output
        assert "PETG" in result.output
        assert "empty" in result.output
        assert "Loaded: 3 of 4 slots" in result.output


class TestMatchCommand:
    """Tests for the match command."""

    def test_match_and_submit(self, runner, job_file):
        """Complete mappings start the job."""
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:1", "-m", "2:3", "--submit"])
        assert result.exit_code == 0
        assert "Match Materials - Dragon" in result.output
        assert "Estimated time: 1h 30m" in result.output
        assert "Requires material station" in result.output
        assert "Starting print: dragon.3mf" in result.output

    def test_match_without_submit(self, runner, job_file):
        """Partial mappings are shown but not submitted."""
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:1"])
        assert result.exit_code == 0
        assert "Tool 1 -> Slot 1" in result.output
        assert "incomplete" in result.output

    def test_incomplete_submit(self, runner, job_file):
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:1", "--submit"])
        assert result.exit_code == 1
        assert "Map every tool" in result.output

    def test_material_mismatch(self, runner, job_file):
        """A PLA tool cannot take the PETG slot."""
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:3"])
        assert result.exit_code == 1
        assert "Material mismatch" in result.output

    def test_color_warning(self, runner, job_file):
        """A color difference warns but still binds."""
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:2"])
        assert result.exit_code == 0
        assert "does not match" in result.output
        assert "color differs" in result.output

    def test_unknown_slot(self, runner, job_file):
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:9"])
        assert result.exit_code == 1
        assert "Slot 9 is not available" in result.output

    def test_empty_slot(self, runner, job_file):
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "1:4"])
        assert result.exit_code == 1
        assert "empty slot" in result.output

    def test_basic_job(self, runner, tmp_path):
        """Jobs without tool data cannot be matched."""
        path = tmp_path / "cube.json"
        path.write_text(json.dumps({"fileName": "cube.gcode", "metadataType": "basic"}))
        result = runner.invoke(cli, ["--mock", "match", str(path), "-m", "1:1"])
        assert result.exit_code == 1
        assert "not available for this job" in result.output

    def test_invalid_job_file(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = runner.invoke(cli, ["--mock", "match", str(path)])
        assert result.exit_code == 1
        assert "Invalid job file" in result.output

    def test_bad_mapping(self, runner, job_file):
        result = runner.invoke(cli, ["--mock", "match", str(job_file), "-m", "one:1"])
        assert result.exit_code == 2

    def test_interactive(self, runner, job_file):
        """The interactive loop binds and submits."""
        result = runner.invoke(
            cli,
            ["--mock", "match", str(job_file)],
            input="t 1\ns 1\nt 2\ns 3\nsubmit\n",
        )
        assert result.exit_code == 0
        assert "Starting print: dragon.3mf" in result.output

    def test_interactive_quit(self, runner, job_file):
        result = runner.invoke(cli, ["--mock", "match", str(job_file)], input="t 1\nq\n")
        assert result.exit_code == 1
