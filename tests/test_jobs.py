"""Tests for job files, bindings and job start executors."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from pydantic import ValidationError

from spoolbind.config import Settings
from spoolbind.jobs import (
    HttpJobStartExecutor,
    JobFile,
    JobMetadataType,
    JobStartError,
    JobStartRequest,
    MaterialBinding,
    MockJobStartExecutor,
    ToolRequirement,
    create_job_executor,
)


def job_listing(**overrides) -> dict:
    data = {
        "fileName": "dragon.3mf",
        "displayName": "Dragon",
        "metadataType": "ad5x",
        "toolDatas": [
            {"toolId": 0, "materialName": "PLA", "materialColor": "#ff0000", "filamentWeight": 12.5},
            {"toolId": 1, "materialName": "PETG", "materialColor": "#00ff00", "filamentWeight": 3},
        ],
        "printingTime": 3600,
        "totalFilamentWeight": 15.5,
        "useMatlStation": True,
    }
    data.update(overrides)
    return data


def binding(tool_id: int, slot_id: int) -> MaterialBinding:
    return MaterialBinding(tool_id, slot_id, "PLA", "#ff0000", "#ff0000")


class TestJobFile:
    """Tests for JobFile parsing and helpers."""

    def test_from_dict(self):
        """Test parsing the printer job listing shape."""
        job = JobFile.from_dict(job_listing())
        assert job.file_name == "dragon.3mf"
        assert job.name == "Dragon"
        assert job.metadata_type == JobMetadataType.MULTI_MATERIAL
        assert job.tool_count == 2
        assert job.tools[1] == ToolRequirement(1, "PETG", "#00ff00", 3.0)
        assert job.uses_material_station is True

    def test_basic_job_is_not_multi_material(self):
        """Basic jobs have no tool metadata."""
        job = JobFile.from_dict({"fileName": "cube.gcode", "metadataType": "basic"})
        assert job.metadata_type == JobMetadataType.BASIC
        assert job.is_multi_material() is False
        assert job.name == "cube.gcode"

    def test_multi_material_without_tool_data(self):
        """Multi-material tagging without toolDatas degrades to basic."""
        data = job_listing()
        del data["toolDatas"]
        job = JobFile.from_dict(data)
        assert job.is_multi_material() is False

    def test_zero_tools_is_not_multi_material(self):
        """A job declaring zero tools cannot be matched."""
        job = JobFile.from_dict(job_listing(toolDatas=[]))
        assert job.metadata_type == JobMetadataType.MULTI_MATERIAL
        assert job.is_multi_material() is False

    def test_requires_station(self):
        """Only jobs with more than one tool need the station."""
        assert JobFile.from_dict(job_listing()).requires_station() is True
        single = job_listing(toolDatas=[{"toolId": 0, "materialName": "PLA", "materialColor": "#fff"}])
        job = JobFile.from_dict(single)
        assert job.is_multi_material() is True
        assert job.requires_station() is False

    def test_duplicate_tool_ids_rejected(self):
        """toolId values must be unique within a job."""
        tools = [
            {"toolId": 0, "materialName": "PLA", "materialColor": "#fff"},
            {"toolId": 0, "materialName": "PETG", "materialColor": "#000"},
        ]
        with pytest.raises(ValueError, match="Duplicate toolId"):
            JobFile.from_dict(job_listing(toolDatas=tools))

    def test_missing_file_name_rejected(self):
        """Test that fileName is required."""
        with pytest.raises(ValueError, match="fileName"):
            JobFile.from_dict({"toolDatas": []})

    def test_get_tool(self):
        """Test looking up a tool requirement."""
        job = JobFile.from_dict(job_listing())
        assert job.get_tool(1).material_name == "PETG"
        assert job.get_tool(7) is None

    def test_material_summary(self):
        """Test the tooltip text."""
        summary = JobFile.from_dict(job_listing()).material_summary()
        assert summary.splitlines() == [
            "Requires material station",
            "Tool 1: PLA",
            "Tool 2: PETG",
        ]
        assert JobFile("cube.gcode").material_summary() == "Multi-color job"


class TestMaterialBinding:
    """Tests for MaterialBinding."""

    def test_to_payload(self):
        """Test the wire shape."""
        payload = MaterialBinding(1, 2, "PETG", "#00ff00", "#123456").to_payload()
        assert payload == {
            "toolId": 1,
            "slotId": 2,
            "materialName": "PETG",
            "toolMaterialColor": "#00ff00",
            "slotMaterialColor": "#123456",
        }


class TestJobStartRequest:
    """Tests for job start payload validation."""

    def test_build(self):
        """Test building a request from bindings."""
        request = JobStartRequest.build("dragon.3mf", True, [binding(0, 1), binding(1, 2)])
        data = request.model_dump(exclude_none=True)
        assert data["filename"] == "dragon.3mf"
        assert data["leveling"] is True
        assert data["startNow"] is True
        assert [m["slotId"] for m in data["materialMappings"]] == [1, 2]

    def test_no_bindings_omits_mappings(self):
        """Jobs without bindings send no materialMappings."""
        request = JobStartRequest.build("cube.gcode", False, [])
        assert "materialMappings" not in request.model_dump(exclude_none=True)

    def test_duplicate_tool_rejected(self):
        """Duplicate toolIds fail validation."""
        with pytest.raises(ValidationError, match="Duplicate toolId"):
            JobStartRequest.build("a.3mf", False, [binding(0, 1), binding(0, 2)])

    def test_duplicate_slot_rejected(self):
        """Duplicate slotIds fail validation."""
        with pytest.raises(ValidationError, match="Duplicate slotId"):
            JobStartRequest.build("a.3mf", False, [binding(0, 1), binding(1, 1)])

    def test_slot_ids_start_at_one(self):
        """Slot display ids are 1-based."""
        with pytest.raises(ValidationError):
            JobStartRequest.build("a.3mf", False, [binding(0, 0)])

    def test_filename_required(self):
        """Test that an empty filename fails validation."""
        with pytest.raises(ValidationError):
            JobStartRequest(filename="")


class TestMockJobStartExecutor:
    """Tests for MockJobStartExecutor."""

    @pytest.mark.asyncio
    async def test_records_calls(self):
        """Successful starts are recorded."""
        executor = MockJobStartExecutor()
        result = await executor.start("dragon.3mf", False, [binding(0, 1)])
        assert result.success is True
        assert "dragon.3mf" in result.message
        assert len(executor.calls) == 1
        assert executor.calls[0].bindings == [binding(0, 1)]

    @pytest.mark.asyncio
    async def test_failure(self):
        """Configured errors produce a failed result."""
        executor = MockJobStartExecutor(error="Printer busy")
        result = await executor.start("dragon.3mf", False, [])
        assert result.success is False
        assert result.error == "Printer busy"


class TestHttpJobStartExecutor:
    """Tests for HttpJobStartExecutor against a local server."""

    @staticmethod
    def make_app(response):
        received = {}

        async def handler(request):
            received["body"] = await request.json()
            received["context"] = request.query.get("contextId")
            return web.json_response(response)

        app = web.Application()
        app.router.add_post("/api/jobs/start", handler)
        return app, received

    @pytest.mark.asyncio
    async def test_start_success(self):
        """Test posting the job start payload."""
        app, received = self.make_app({"success": True, "message": "Starting print: dragon.3mf"})
        async with TestServer(app) as server:
            executor = HttpJobStartExecutor(str(server.make_url("/")), context_id="ctx-2")
            result = await executor.start("dragon.3mf", True, [binding(0, 1), binding(1, 2)])

        assert result.success is True
        assert result.message == "Starting print: dragon.3mf"
        assert received["context"] == "ctx-2"
        body = received["body"]
        assert body["filename"] == "dragon.3mf"
        assert body["leveling"] is True
        assert body["startNow"] is True
        assert body["materialMappings"][1]["toolId"] == 1

    @pytest.mark.asyncio
    async def test_start_reported_failure(self):
        """Printer-reported failures come back as a failed result."""
        app, _ = self.make_app({"success": False, "error": "Printer not ready"})
        async with TestServer(app) as server:
            executor = HttpJobStartExecutor(str(server.make_url("/")))
            result = await executor.start("dragon.3mf", False, [binding(0, 1)])

        assert result.success is False
        assert result.error == "Printer not ready"

    @pytest.mark.asyncio
    async def test_invalid_bindings_not_sent(self):
        """Bindings that fail validation never reach the printer."""
        executor = HttpJobStartExecutor("http://127.0.0.1:1/")
        result = await executor.start("dragon.3mf", False, [binding(0, 1), binding(1, 1)])
        assert result.success is False
        assert "Invalid job start request" in result.error

    @pytest.mark.asyncio
    async def test_html_error_page_raises(self):
        """A non-JSON error page raises JobStartError with the HTTP status."""

        async def handler(request):
            return web.Response(status=502, text="<html>Bad Gateway</html>", content_type="text/html")

        app = web.Application()
        app.router.add_post("/api/jobs/start", handler)
        async with TestServer(app) as server:
            executor = HttpJobStartExecutor(str(server.make_url("/")))
            with pytest.raises(JobStartError, match="HTTP 502"):
                await executor.start("dragon.3mf", False, [binding(0, 1)])

    @pytest.mark.asyncio
    async def test_non_object_body_raises(self):
        """A JSON body that is not an object raises JobStartError."""
        app, _ = self.make_app(["started"])
        async with TestServer(app) as server:
            executor = HttpJobStartExecutor(str(server.make_url("/")))
            with pytest.raises(JobStartError, match="unexpected response"):
                await executor.start("dragon.3mf", False, [binding(0, 1)])

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        """Transport failures raise JobStartError."""
        executor = HttpJobStartExecutor("http://127.0.0.1:1/", timeout=5)
        with pytest.raises(JobStartError):
            await executor.start("dragon.3mf", False, [binding(0, 1)])


class TestCreateJobExecutor:
    """Tests for the executor factory."""

    def test_mock_mode(self):
        """Mock mode gives the mock executor."""
        executor = create_job_executor(Settings(mock_mode=True))
        assert isinstance(executor, MockJobStartExecutor)

    def test_http(self):
        """A configured printer URL gives the HTTP executor."""
        executor = create_job_executor(Settings(printer_url="http://printer:3000", context_id="c"))
        assert isinstance(executor, HttpJobStartExecutor)
        assert executor.base_url == "http://printer:3000/"
        assert executor.context_id == "c"
