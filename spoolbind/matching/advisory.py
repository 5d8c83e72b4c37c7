"""Color advisory: warn, never block, when a bound slot's color differs."""

from dataclasses import dataclass
from typing import Optional

from spoolbind.jobs.models import ToolRequirement
from spoolbind.matching.validator import colors_differ
from spoolbind.station.models import SlotState
from spoolbind.utils import slot_label


@dataclass(frozen=True)
class ColorAdvisory:
    """A non-blocking color discrepancy between a tool and its slot."""
    tool_id: int
    slot_id: int  # display id
    tool_color: str
    slot_color: Optional[str]

    @property
    def message(self) -> str:
        return (
            f"Tool {self.tool_id + 1} color ({self.tool_color}) does not match "
            f"{slot_label(self.slot_id)} color ({self.slot_color or 'unknown'}). "
            "The print will succeed, but appearance may differ."
        )


def check_color(tool: ToolRequirement, slot: SlotState) -> Optional[ColorAdvisory]:
    """
    Compare tool and slot color labels after a successful bind.

    A slot without a color label is "unknown" and always produces an
    advisory when the tool names a color.
    """
    if not colors_differ(tool.material_color, slot.material_color):
        return None
    return ColorAdvisory(
        tool_id=tool.tool_id,
        slot_id=slot.display_id,
        tool_color=tool.material_color,
        slot_color=slot.material_color,
    )
