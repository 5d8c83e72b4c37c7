"""Tests for binding validation and the color advisory."""

import pytest

from spoolbind.jobs.models import JobFile, JobMetadataType, MaterialBinding, ToolRequirement
from spoolbind.matching import (
    EmptySlotError,
    ErrorKind,
    MaterialMismatchError,
    SelectionRequiredError,
    SlotAlreadyAssignedError,
    UnknownToolError,
    check_color,
    colors_differ,
    materials_match,
    validate_binding,
)
from spoolbind.station.models import SlotState


@pytest.fixture
def job():
    return JobFile(
        file_name="dragon.3mf",
        metadata_type=JobMetadataType.MULTI_MATERIAL,
        tools=[
            ToolRequirement(0, "PLA", "#ff0000"),
            ToolRequirement(1, "PETG", "#00ff00"),
        ],
    )


PLA_SLOT = SlotState(0, False, "PLA", "#ff0000")
PETG_SLOT = SlotState(1, False, "PETG", "#123456")
EMPTY_SLOT = SlotState(2)


class TestMaterialsMatch:
    """Tests for material name comparison."""

    def test_exact(self):
        assert materials_match("PLA", "PLA") is True

    def test_case_and_whitespace_insensitive(self):
        """Names are trimmed and case-folded."""
        assert materials_match("  pla ", "PLA") is True
        assert materials_match("PETG", "petg\n") is True

    def test_different(self):
        assert materials_match("PLA", "PETG") is False

    def test_missing_slot_material(self):
        assert materials_match("PLA", None) is False

    def test_blank_tool_material_never_matches(self):
        """A tool without a material name cannot match anything."""
        assert materials_match("", "") is False
        assert materials_match("  ", None) is False


class TestColorsDiffer:
    """Tests for color label comparison."""

    def test_same(self):
        assert colors_differ("#FF0000", "#ff0000") is False

    def test_different(self):
        assert colors_differ("#00ff00", "#123456") is True

    def test_unknown_slot_color_differs(self):
        """A missing slot color never silently matches."""
        assert colors_differ("#00ff00", None) is True
        assert colors_differ("#00ff00", "") is True

    def test_blank_tool_color(self):
        """A tool with no color label has nothing to compare."""
        assert colors_differ("", "#123456") is False


class TestValidateBinding:
    """Tests for the ordered validation rules."""

    def test_success(self, job):
        """Test a valid binding."""
        result = validate_binding(job, {}, 0, PLA_SLOT)
        assert result == MaterialBinding(0, 1, "PLA", "#ff0000", "#ff0000")

    def test_selection_required(self, job):
        with pytest.raises(SelectionRequiredError) as exc:
            validate_binding(job, {}, None, PLA_SLOT)
        assert exc.value.kind == ErrorKind.SELECTION_REQUIRED

    def test_empty_slot(self, job):
        with pytest.raises(EmptySlotError, match="empty slot"):
            validate_binding(job, {}, 0, EMPTY_SLOT)

    def test_unknown_tool(self, job):
        with pytest.raises(UnknownToolError):
            validate_binding(job, {}, 9, PLA_SLOT)

    def test_material_mismatch(self, job):
        """Test the mismatch message names both materials."""
        with pytest.raises(MaterialMismatchError) as exc:
            validate_binding(job, {}, 0, PETG_SLOT)
        assert str(exc.value) == (
            "Material mismatch: Tool 1 requires PLA, but Slot 2 contains PETG."
        )

    def test_slot_already_assigned(self, job):
        """A slot bound to another tool is rejected."""
        bindings = {1: MaterialBinding(1, 1, "PLA", "#00ff00", "#ff0000")}
        pla_job = JobFile(
            file_name="x.3mf",
            metadata_type=JobMetadataType.MULTI_MATERIAL,
            tools=[ToolRequirement(0, "PLA", "#ff0000"), ToolRequirement(1, "PLA", "#00ff00")],
        )
        with pytest.raises(SlotAlreadyAssignedError, match="Slot 1 is already assigned to Tool 2"):
            validate_binding(pla_job, bindings, 0, PLA_SLOT)

    def test_rebinding_same_slot_allowed(self, job):
        """Re-binding a tool to the slot it holds is not a conflict."""
        bindings = {0: MaterialBinding(0, 1, "PLA", "#ff0000", "#ff0000")}
        result = validate_binding(job, bindings, 0, PLA_SLOT)
        assert result == bindings[0]

    def test_selection_checked_before_empty_slot(self, job):
        """Rules short-circuit in order."""
        with pytest.raises(SelectionRequiredError):
            validate_binding(job, {}, None, EMPTY_SLOT)

    def test_empty_checked_before_unknown_tool(self, job):
        with pytest.raises(EmptySlotError):
            validate_binding(job, {}, 9, EMPTY_SLOT)

    def test_unknown_tool_checked_before_mismatch(self, job):
        with pytest.raises(UnknownToolError):
            validate_binding(job, {}, 9, PETG_SLOT)

    def test_mismatch_checked_before_conflict(self, job):
        """A taken slot of the wrong material reports the mismatch."""
        bindings = {1: MaterialBinding(1, 2, "PETG", "#00ff00", "#123456")}
        with pytest.raises(MaterialMismatchError):
            validate_binding(job, bindings, 0, PETG_SLOT)

    def test_missing_slot_color_uses_placeholder(self, job):
        """Bindings record a placeholder when the slot reports no color."""
        slot = SlotState(0, False, "PLA", None)
        result = validate_binding(job, {}, 0, slot)
        assert result.slot_material_color == "#333333"


class TestCheckColor:
    """Tests for the color advisory."""

    def test_match_no_advisory(self):
        assert check_color(ToolRequirement(0, "PLA", "#FF0000"), PLA_SLOT) is None

    def test_mismatch_advisory(self):
        """Test the advisory message."""
        advisory = check_color(ToolRequirement(1, "PETG", "#00ff00"), PETG_SLOT)
        assert advisory is not None
        assert advisory.tool_id == 1
        assert advisory.slot_id == 2
        assert advisory.message == (
            "Tool 2 color (#00ff00) does not match Slot 2 color (#123456). "
            "The print will succeed, but appearance may differ."
        )

    def test_unknown_slot_color(self):
        """A slot without a color is reported as unknown."""
        advisory = check_color(ToolRequirement(0, "PLA", "#ff0000"), SlotState(0, False, "PLA", None))
        assert advisory is not None
        assert "(unknown)" in advisory.message
