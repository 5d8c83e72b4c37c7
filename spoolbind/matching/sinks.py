"""
Notification and render sinks, plus the views handed to them.

Sinks are one-way: the workflow pushes messages and views into them and
never reads anything back.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable

from spoolbind.matching.session import MatchingSession
from spoolbind.matching.validator import colors_differ, find_slot_owner
from spoolbind.utils import slot_label, tool_label


class Severity(str, Enum):
    """Toast severity."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ToolView:
    tool_id: int
    label: str
    material_name: str
    material_color: str
    selected: bool = False
    mapped_slot: Optional[int] = None

    @property
    def mapped(self) -> bool:
        return self.mapped_slot is not None


@dataclass(frozen=True)
class SlotView:
    slot_id: int  # 0-based
    display_id: int
    label: str
    material_type: Optional[str]
    material_color: Optional[str]
    is_empty: bool
    assigned: bool = False

    @property
    def disabled(self) -> bool:
        return self.is_empty or self.assigned


@dataclass(frozen=True)
class SlotListView:
    """Slot list, or a placeholder message when the station is unusable."""
    slots: List[SlotView]
    placeholder: Optional[str] = None


@dataclass(frozen=True)
class BindingView:
    tool_id: int
    slot_id: int
    text: str
    color_warning: bool = False


@runtime_checkable
class NotificationSink(Protocol):
    def show_error(self, text: str) -> None: ...

    def show_warning(self, text: str) -> None: ...

    def clear_messages(self) -> None: ...

    def toast(self, text: str, severity: Severity) -> None: ...


@runtime_checkable
class RenderSink(Protocol):
    def render_requirements(self, tools: List[ToolView]) -> None: ...

    def render_slots(self, slots: SlotListView) -> None: ...

    def render_bindings(self, bindings: List[BindingView]) -> None: ...

    def set_submit_enabled(self, enabled: bool) -> None: ...


class NullNotificationSink:
    """Discards notifications."""

    def show_error(self, text: str) -> None:
        pass

    def show_warning(self, text: str) -> None:
        pass

    def clear_messages(self) -> None:
        pass

    def toast(self, text: str, severity: Severity) -> None:
        pass


class NullRenderSink:
    """Discards render updates."""

    def render_requirements(self, tools: List[ToolView]) -> None:
        pass

    def render_slots(self, slots: SlotListView) -> None:
        pass

    def render_bindings(self, bindings: List[BindingView]) -> None:
        pass

    def set_submit_enabled(self, enabled: bool) -> None:
        pass


def build_tool_views(session: MatchingSession) -> List[ToolView]:
    views = []
    for tool in session.job.tools:
        binding = session.binding_for(tool.tool_id)
        views.append(ToolView(
            tool_id=tool.tool_id,
            label=tool.label,
            material_name=tool.material_name or "Unknown Material",
            material_color=tool.material_color or "#cccccc",
            selected=session.selected_tool_id == tool.tool_id,
            mapped_slot=binding.slot_id if binding else None,
        ))
    return views


def build_slot_views(session: MatchingSession) -> SlotListView:
    station = session.station
    if station is None:
        return SlotListView(slots=[], placeholder="Material station status unavailable.")
    if not station.is_usable:
        return SlotListView(
            slots=[], placeholder=station.error_message or "Material station not connected."
        )

    views = []
    for slot in station.slots:
        views.append(SlotView(
            slot_id=slot.slot_id,
            display_id=slot.display_id,
            label=slot_label(slot.display_id),
            material_type=slot.material_type,
            material_color=slot.material_color,
            is_empty=slot.is_empty,
            assigned=find_slot_owner(session.bindings, slot.display_id) is not None,
        ))
    return SlotListView(slots=views)


def build_binding_views(session: MatchingSession) -> List[BindingView]:
    return [
        BindingView(
            tool_id=b.tool_id,
            slot_id=b.slot_id,
            text=f"{tool_label(b.tool_id)} -> {slot_label(b.slot_id)}",
            color_warning=colors_differ(b.tool_material_color, b.slot_material_color),
        )
        for b in session.bindings.values()
    ]
