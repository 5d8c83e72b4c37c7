"""
Material station snapshot types.

A snapshot is what the printer reports about its attached material station:
whether it is connected, and for each slot whether filament is loaded and
which material/color it holds.

Slot ids are 0-based as reported after transformation; operators see the
1-based ``display_id``. Bindings always reference the display id.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from spoolbind.utils import get_logger, slot_label

logger = get_logger("station.models")

EMPTY_STATION_MESSAGE = "Material station not available"


class StationStatus(str, Enum):
    """Overall material station status."""
    READY = "ready"
    BUSY = "busy"  # Loading or unloading filament
    ERROR = "error"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class SlotState:
    """State of a single material station slot."""
    slot_id: int  # 0-based
    is_empty: bool = True
    material_type: Optional[str] = None
    material_color: Optional[str] = None

    @property
    def display_id(self) -> int:
        """1-based slot number shown to the operator and used in bindings."""
        return self.slot_id + 1

    @property
    def display_name(self) -> str:
        """Get human-readable slot name."""
        if self.is_empty:
            return f"{slot_label(self.display_id)} (Empty)"
        return f"{slot_label(self.display_id)}: {self.material_type or 'Unknown'}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slotId": self.slot_id,
            "isEmpty": self.is_empty,
            "materialType": self.material_type,
            "materialColor": self.material_color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotState":
        """Build from the web API slot shape (0-based ``slotId``)."""
        return cls(
            slot_id=int(data["slotId"]),
            is_empty=bool(data.get("isEmpty", True)),
            material_type=data.get("materialType") or None,
            material_color=data.get("materialColor") or None,
        )


@dataclass(frozen=True)
class StationSnapshot:
    """Point-in-time view of the material station."""
    connected: bool
    slots: List[SlotState] = field(default_factory=list)
    active_slot: Optional[int] = None
    status: StationStatus = StationStatus.READY
    error_message: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        """True if slots can be offered to the operator."""
        return self.connected and len(self.slots) > 0

    def get_slot(self, display_id: int) -> Optional[SlotState]:
        """Find a slot by its 1-based display id."""
        for slot in self.slots:
            if slot.display_id == display_id:
                return slot
        return None

    def get_loaded_slots(self) -> List[SlotState]:
        """Get all slots with filament loaded."""
        return [s for s in self.slots if not s.is_empty]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connected": self.connected,
            "slots": [s.to_dict() for s in self.slots],
            "activeSlot": self.active_slot,
            "overallStatus": self.status.value,
            "errorMessage": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StationSnapshot":
        """Build from the web API ``MaterialStationStatus`` shape."""
        raw_status = data.get("overallStatus", StationStatus.READY.value)
        # The web API reports a running load/unload as "warming"
        if raw_status == "warming":
            raw_status = StationStatus.BUSY.value
        return cls(
            connected=bool(data.get("connected", False)),
            slots=[SlotState.from_dict(s) for s in data.get("slots", [])],
            active_slot=data.get("activeSlot"),
            status=StationStatus(raw_status),
            error_message=data.get("errorMessage"),
        )

    def __str__(self) -> str:
        lines = ["Material Station:"]
        if not self.connected:
            lines.append(f"  {self.error_message or 'Not connected'}")
            return "\n".join(lines)
        for slot in self.slots:
            lines.append(f"  {slot.display_name}")
        if len(lines) == 1:
            lines.append("  (No slots reported)")
        return "\n".join(lines)


def empty_station(message: str = EMPTY_STATION_MESSAGE) -> StationSnapshot:
    """Disconnected placeholder snapshot for error cases."""
    return StationSnapshot(
        connected=False,
        slots=[],
        active_slot=None,
        status=StationStatus.DISCONNECTED,
        error_message=message,
    )


def _overall_status(info: Dict[str, Any]) -> StationStatus:
    state_action = info.get("stateAction", 0) or 0
    state_step = info.get("stateStep", 0) or 0
    if state_action == 0 and state_step == 0:
        return StationStatus.READY
    if state_action > 0:
        return StationStatus.BUSY
    return StationStatus.READY


def transform_slot_info(raw: Dict[str, Any], index: int) -> SlotState:
    """
    Convert a raw printer slot entry to a SlotState.

    The printer numbers slots from 1 and reports ``hasFilament``; we index
    by list position from 0 and keep labels only for loaded slots.
    """
    has_filament = bool(raw.get("hasFilament", False))
    return SlotState(
        slot_id=index,
        is_empty=not has_filament,
        material_type=(raw.get("materialName") or None) if has_filament else None,
        material_color=(raw.get("materialColor") or None) if has_filament else None,
    )


def transform_station_info(info: Optional[Dict[str, Any]]) -> StationSnapshot:
    """
    Convert the printer's raw material station payload to a snapshot.

    Args:
        info: ``MatlStationInfo`` dict from the printer (``slotInfos``,
            ``currentSlot``, ``stateAction``, ``stateStep``)

    Returns:
        Connected snapshot, or the disconnected placeholder if the payload
        is missing or malformed
    """
    if not info or not isinstance(info.get("slotInfos"), list):
        return empty_station()

    try:
        slots = [transform_slot_info(raw, i) for i, raw in enumerate(info["slotInfos"])]
    except (TypeError, AttributeError) as e:
        logger.error(f"Malformed material station payload: {e}")
        return empty_station()

    return StationSnapshot(
        connected=True,
        slots=slots,
        active_slot=info.get("currentSlot"),
        status=_overall_status(info),
        error_message=None,
    )
