"""Cold chain database models."""

from coldchain.models.base import Base
from coldchain.models.door_log import DoorLog
from coldchain.models.sensor_config import SensorConfigRow
from coldchain.models.telemetry_log import TelemetryLog

__all__ = [
    "Base",
    "DoorLog",
    "SensorConfigRow",
    "TelemetryLog",
]
