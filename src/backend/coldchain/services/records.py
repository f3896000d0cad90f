"""In-memory records exchanged between the store and the correlation services.

These are plain immutable dataclasses. The store adapter builds them from ORM
rows; every derivation in the services package is a pure function over them.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TelemetryReading:
    """One sampling event reported by a sensor through a gateway."""

    device_id: str
    gateway_id: str
    timestamp: datetime
    temperature: float | None = None
    humidity: float | None = None
    battery_pct: float | None = None
    signal_strength: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    # Legacy location columns
    lat: float | None = None
    lng: float | None = None

    @property
    def resolved_latitude(self) -> float | None:
        return self.latitude if self.latitude is not None else self.lat

    @property
    def resolved_longitude(self) -> float | None:
        return self.longitude if self.longitude is not None else self.lng

    @property
    def resolved_altitude(self) -> float:
        return self.altitude if self.altitude is not None else 0


@dataclass(frozen=True)
class SensorConfig:
    """Stored per-device configuration. At most one per device_id."""

    device_id: str
    display_name: str | None = None
    battery_warning_pct: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    humidity_min: float | None = None
    humidity_max: float | None = None
    linked_door_device_id: str | None = None
    maintenance_mode: bool = False
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DoorStatusEvent:
    """Door open/closed inference keyed by the sensor it was inferred from."""

    device_id: str
    is_open: bool
    observed_at: datetime


@dataclass(frozen=True)
class DeviceDescriptor:
    """One (gateway, device) pair merged with its configuration."""

    gateway_id: str
    device_id: str
    display_name: str
    battery_warning_pct: float | None
    temp_min: float | None = None
    temp_max: float | None = None
    humidity_min: float | None = None
    humidity_max: float | None = None
    linked_door_device_id: str | None = None
    maintenance_mode: bool = False


@dataclass(frozen=True)
class DoorStatus:
    """Door state attached to a latest reading."""

    is_open: bool
    last_change: datetime


@dataclass(frozen=True)
class LatestReading:
    """Most recent reading of a device, enriched for the dashboard."""

    reading: TelemetryReading
    display_name: str
    maintenance_mode: bool
    door_status: DoorStatus | None = None


@dataclass(frozen=True)
class Coordinate:
    ts: datetime
    lat: float
    lng: float
    alt: float = 0


@dataclass(frozen=True)
class SensorInfo:
    """Configuration of a sensor plus the location of its newest reading."""

    config: SensorConfig
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None


@dataclass(frozen=True)
class SensorHistoryView:
    info: SensorInfo
    history: list[TelemetryReading] = field(default_factory=list)


@dataclass(frozen=True)
class DoorStatusEntry:
    """Latest door status of a device as shown on the door board."""

    event: DoorStatusEvent
    display_name: str
    status_text: str
    status_color: str
    is_configured: bool
