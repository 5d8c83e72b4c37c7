"""
Material station status providers.

Providers fetch a StationSnapshot from wherever the printer exposes it:

- HttpStationProvider: the printer web API
- MockStationProvider: in-memory station for tests and demos
- DeadlineStationProvider: wraps any provider with a bounded fetch deadline
"""

import asyncio
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import urljoin

import aiohttp

from spoolbind.config import Settings, get_settings
from spoolbind.station.models import SlotState, StationSnapshot, transform_station_info
from spoolbind.utils import get_logger

logger = get_logger("station.provider")

STATION_ENDPOINT = "api/printer/material-station"


class StationUnavailableError(Exception):
    """Raised when the material station status cannot be fetched."""
    pass


@runtime_checkable
class StationProvider(Protocol):
    """Protocol for material station status sources."""

    async def fetch(self, context_id: Optional[str] = None) -> Optional[StationSnapshot]:
        """Fetch the current snapshot, or None if the printer reports none."""
        ...


class HttpStationProvider:
    """
    Fetches material station status from the printer web API.

    Response shape: ``{"success": bool, "status": {...} | null, "error": str}``.
    ``status`` is either the normalized snapshot or the raw printer payload
    (``slotInfos``, ``currentSlot``, ...).
    """

    def __init__(self, base_url: str, api_token: Optional[str] = None):
        """
        Initialize provider.

        Args:
            base_url: Printer web API base URL (e.g. ``http://192.168.1.50:3000/``)
            api_token: Optional bearer token
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.api_token = api_token

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def fetch(self, context_id: Optional[str] = None) -> Optional[StationSnapshot]:
        params = {"contextId": context_id} if context_id else None
        url = urljoin(self.base_url, STATION_ENDPOINT)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, headers=self._get_headers(), params=params) as response:
                    if response.status == 401:
                        raise StationUnavailableError("Not authenticated with printer")
                    data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise StationUnavailableError(f"Failed to load material station status: {e}") from e
        except ValueError as e:
            raise StationUnavailableError("Printer returned an invalid material station response") from e

        if not isinstance(data, dict):
            raise StationUnavailableError("Printer returned an unexpected material station response")
        if not data.get("success"):
            raise StationUnavailableError(data.get("error") or "Material station not available.")

        status = data.get("status")
        if status is None:
            return None
        # Raw printer payloads carry slotInfos instead of the normalized shape
        if isinstance(status, dict) and "slotInfos" in status:
            return transform_station_info(status)
        try:
            return StationSnapshot.from_dict(status)
        except (KeyError, TypeError, ValueError) as e:
            raise StationUnavailableError(f"Invalid material station payload: {e}") from e


class MockStationProvider:
    """
    In-memory material station for testing without hardware.

    Supports failure injection and an artificial delay so that slow or
    failing fetches can be simulated.
    """

    def __init__(
        self,
        slots: Optional[List[SlotState]] = None,
        connected: bool = True,
        error: Optional[str] = None,
        delay: float = 0.0,
    ):
        self.slots = list(slots) if slots is not None else []
        self.connected = connected
        self.error = error
        self.delay = delay
        self.fetch_count = 0

    def set_slot(self, slot_id: int, material_type: str, material_color: Optional[str] = None):
        """Load filament into a 0-based slot."""
        self.slots = [s for s in self.slots if s.slot_id != slot_id]
        self.slots.append(SlotState(slot_id, False, material_type, material_color))
        self.slots.sort(key=lambda s: s.slot_id)

    def clear_slot(self, slot_id: int):
        """Empty a 0-based slot."""
        self.slots = [
            SlotState(s.slot_id) if s.slot_id == slot_id else s for s in self.slots
        ]

    async def fetch(self, context_id: Optional[str] = None) -> Optional[StationSnapshot]:
        self.fetch_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise StationUnavailableError(self.error)
        if not self.connected:
            return StationSnapshot(connected=False, error_message="Material station not connected.")
        return StationSnapshot(connected=True, slots=list(self.slots))


class DeadlineStationProvider:
    """Wraps a provider so that a fetch never outlives ``timeout`` seconds."""

    def __init__(self, inner: StationProvider, timeout: float):
        self.inner = inner
        self.timeout = timeout

    async def fetch(self, context_id: Optional[str] = None) -> Optional[StationSnapshot]:
        try:
            return await asyncio.wait_for(self.inner.fetch(context_id), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StationUnavailableError(
                f"Material station did not respond within {self.timeout:.0f}s"
            ) from e


def create_mock_station() -> MockStationProvider:
    """
    Create a mock station with a common four-slot setup.

    - Slot 1: red PLA
    - Slot 2: white PLA
    - Slot 3: green PETG
    - Slot 4: empty
    """
    return MockStationProvider(slots=[
        SlotState(0, False, "PLA", "#FF0000"),
        SlotState(1, False, "PLA", "#FFFFFF"),
        SlotState(2, False, "PETG", "#00FF00"),
        SlotState(3),
    ])


def create_station_provider(settings: Optional[Settings] = None) -> StationProvider:
    """Build the configured provider, wrapped with the configured deadline."""
    settings = settings or get_settings()

    if settings.mock_mode or not settings.printer_url:
        if not settings.mock_mode:
            logger.warning("No printer URL configured, using mock material station")
        inner: StationProvider = create_mock_station()
    else:
        inner = HttpStationProvider(settings.printer_url, settings.api_token)

    return DeadlineStationProvider(inner, settings.station_fetch_timeout)
