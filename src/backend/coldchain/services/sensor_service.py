"""Latest readings, history and location queries for sensors."""

import asyncio
from datetime import datetime

import structlog

from coldchain.core.metrics import observe_history_points
from coldchain.services.config_index import build_config_index
from coldchain.services.coordinates import extract_coordinates
from coldchain.services.device_catalog import DEFAULT_BATTERY_WARNING_PCT
from coldchain.services.downsampling import HistoryPeriod, downsample, lookback_cutoff
from coldchain.services.errors import MissingRequiredIdentifier
from coldchain.services.latest_readings import resolve_latest_readings
from coldchain.services.records import (
    Coordinate,
    LatestReading,
    SensorConfig,
    SensorHistoryView,
    SensorInfo,
)
from coldchain.services.telemetry_store import TelemetryStore

logger = structlog.get_logger()

UNCONFIGURED_SENSOR = "Sensor Não Configurado"


def unconfigured_sensor(device_id: str) -> SensorConfig:
    """Placeholder configuration for a sensor that was never configured."""
    return SensorConfig(
        device_id=device_id,
        display_name=UNCONFIGURED_SENSOR,
        battery_warning_pct=DEFAULT_BATTERY_WARNING_PCT,
    )


class SensorService:
    """Per-sensor views for the dashboard."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def latest_readings(self) -> list[LatestReading]:
        """Latest reading of every sensor with name, maintenance and door state."""
        readings, configs, doors = await asyncio.gather(
            self.store.latest_reading_per_device(),
            self.store.config_names_and_maintenance(),
            self.store.door_status_latest(),
        )
        return resolve_latest_readings(readings, build_config_index(configs), doors)

    async def sensor_history(
        self,
        device_id: str,
        period: HistoryPeriod = HistoryPeriod.ONE_DAY,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> SensorHistoryView:
        """Configuration and downsampled history of one sensor.

        ``limit`` caps the store query; downsampling runs on what it returns.
        """
        if not device_id:
            raise MissingRequiredIdentifier("MAC Obrigatório")

        start = lookback_cutoff(period, now)
        raw, config = await asyncio.gather(
            self.store.readings_by_device(device_id, start=start, limit=limit),
            self.store.config_by_device(device_id),
        )

        history = downsample(raw)
        observe_history_points(len(raw), len(history))
        logger.debug(
            "Sensor history downsampled",
            device_id=device_id,
            period=HistoryPeriod(period).value,
            raw=len(raw),
            kept=len(history),
        )

        info = SensorInfo(config=config or unconfigured_sensor(device_id))
        if raw:
            newest = raw[0]
            info = SensorInfo(
                config=info.config,
                latitude=newest.resolved_latitude,
                longitude=newest.resolved_longitude,
                altitude=newest.resolved_altitude,
            )

        return SensorHistoryView(info=info, history=history)

    async def coordinates(
        self,
        device_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Coordinate]:
        """Path over [start, end] in ascending order, or the newest point only.

        The window is only used when both bounds are given.
        """
        if not device_id:
            raise MissingRequiredIdentifier("MAC Obrigatório")

        if start and end:
            readings = await self.store.readings_by_device(
                device_id, start=start, end=end, ascending=True
            )
        else:
            readings = await self.store.readings_by_device(device_id, limit=1)

        return extract_coordinates(readings)
