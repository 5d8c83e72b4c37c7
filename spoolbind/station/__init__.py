"""Material station status module."""

from .models import (
    SlotState,
    StationSnapshot,
    StationStatus,
    empty_station,
    transform_station_info,
)
from .provider import (
    StationProvider,
    StationUnavailableError,
    HttpStationProvider,
    MockStationProvider,
    DeadlineStationProvider,
    create_mock_station,
    create_station_provider,
)

__all__ = [
    # Models
    "SlotState",
    "StationSnapshot",
    "StationStatus",
    "empty_station",
    "transform_station_info",
    # Providers
    "StationProvider",
    "StationUnavailableError",
    "HttpStationProvider",
    "MockStationProvider",
    "DeadlineStationProvider",
    "create_mock_station",
    "create_station_provider",
]
