"""
Requirement validator for tool-to-slot bindings.

Rules are checked in a fixed order and the first failure wins:

1. a tool must be selected
2. the slot must hold filament
3. the selected tool must exist in the job
4. tool material and slot material must match (trimmed, case-insensitive)
5. the slot must not already be bound to a different tool

Re-binding a tool to the slot it already holds passes rule 5.
"""

from typing import Mapping, Optional

from spoolbind.jobs.models import UNKNOWN_SLOT_COLOR, JobFile, MaterialBinding
from spoolbind.matching.errors import (
    EmptySlotError,
    MaterialMismatchError,
    SelectionRequiredError,
    SlotAlreadyAssignedError,
    UnknownToolError,
)
from spoolbind.station.models import SlotState
from spoolbind.utils import normalize_label, slot_label, tool_label


def materials_match(tool_material: Optional[str], slot_material: Optional[str]) -> bool:
    """True if the normalized material names are equal; a blank tool material never matches."""
    if not normalize_label(tool_material):
        return False
    return normalize_label(tool_material) == normalize_label(slot_material)


def colors_differ(tool_color: Optional[str], slot_color: Optional[str]) -> bool:
    """True if the normalized color labels differ; a blank tool color never differs."""
    if not normalize_label(tool_color):
        return False
    return normalize_label(tool_color) != normalize_label(slot_color)


def find_slot_owner(bindings: Mapping[int, MaterialBinding], display_id: int) -> Optional[int]:
    """Tool id currently bound to the slot, if any."""
    for binding in bindings.values():
        if binding.slot_id == display_id:
            return binding.tool_id
    return None


def validate_binding(
    job: JobFile,
    bindings: Mapping[int, MaterialBinding],
    selected_tool_id: Optional[int],
    slot: SlotState,
) -> MaterialBinding:
    """
    Check whether the selected tool may be bound to ``slot``.

    Args:
        job: Job being provisioned
        bindings: Current bindings keyed by tool id
        selected_tool_id: Currently selected tool, or None
        slot: Slot the operator picked

    Returns:
        The binding to upsert

    Raises:
        MatchingError subclass for the first rule that fails
    """
    if selected_tool_id is None:
        raise SelectionRequiredError("Select a tool on the left before choosing a slot.")

    if slot.is_empty:
        raise EmptySlotError("Cannot assign an empty slot. Load filament before starting the print.")

    tool = job.get_tool(selected_tool_id)
    if tool is None:
        raise UnknownToolError("Selected tool data is unavailable.")

    if not materials_match(tool.material_name, slot.material_type):
        raise MaterialMismatchError(
            f"Material mismatch: {tool.label} requires {tool.material_name}, "
            f"but {slot_label(slot.display_id)} contains {slot.material_type or 'no material'}."
        )

    owner = find_slot_owner(bindings, slot.display_id)
    if owner is not None and owner != tool.tool_id:
        raise SlotAlreadyAssignedError(
            f"{slot_label(slot.display_id)} is already assigned to {tool_label(owner)}."
        )

    return MaterialBinding(
        tool_id=tool.tool_id,
        slot_id=slot.display_id,
        material_name=tool.material_name,
        tool_material_color=tool.material_color,
        slot_material_color=slot.material_color or UNKNOWN_SLOT_COLOR,
    )
