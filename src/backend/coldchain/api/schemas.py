"""Response schemas shared by several route modules."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from coldchain.services.records import TelemetryReading

MAC_PATTERN = r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$"


class SensorConfigResponse(BaseModel):
    """Stored sensor configuration."""

    model_config = ConfigDict(from_attributes=True)

    device_id: str
    display_name: str | None
    battery_warning_pct: float | None
    temp_min: float | None
    temp_max: float | None
    humidity_min: float | None
    humidity_max: float | None
    linked_door_device_id: str | None
    maintenance_mode: bool
    updated_at: datetime | None


class ReadingResponse(BaseModel):
    """Single telemetry reading."""

    model_config = ConfigDict(from_attributes=True)

    device_id: str
    gateway_id: str
    timestamp: datetime
    temperature: float | None
    humidity: float | None
    battery_pct: float | None
    signal_strength: float | None
    latitude: float | None
    longitude: float | None
    altitude: float | None

    @classmethod
    def from_reading(cls, reading: TelemetryReading) -> "ReadingResponse":
        """Legacy lat/lng are folded into latitude/longitude."""
        return cls(
            device_id=reading.device_id,
            gateway_id=reading.gateway_id,
            timestamp=reading.timestamp,
            temperature=reading.temperature,
            humidity=reading.humidity,
            battery_pct=reading.battery_pct,
            signal_strength=reading.signal_strength,
            latitude=reading.resolved_latitude,
            longitude=reading.resolved_longitude,
            altitude=reading.altitude,
        )
