"""Store access for telemetry, sensor configuration and door status.

The services only depend on the :class:`TelemetryStore` protocol. The SQL
implementation opens one session per read so that concurrent reads issued by
a service through ``asyncio.gather`` really run side by side.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Protocol, TypeVar

import structlog
from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coldchain.core.metrics import record_store_read_failure
from coldchain.models.door_log import DoorLog
from coldchain.models.sensor_config import SensorConfigRow
from coldchain.models.telemetry_log import TelemetryLog
from coldchain.services.config_index import resolve_config
from coldchain.services.errors import UpstreamReadFailure
from coldchain.services.records import DoorStatusEvent, SensorConfig, TelemetryReading

logger = structlog.get_logger()

T = TypeVar("T")


class TelemetryStore(Protocol):
    """Read/write contract consumed by the correlation services."""

    async def readings_by_device(
        self,
        device_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        ascending: bool = False,
    ) -> list[TelemetryReading]: ...

    async def readings_projection_all(self) -> list[tuple[str, str]]: ...

    async def latest_reading_per_device(self) -> list[TelemetryReading]: ...

    async def config_all(self) -> list[SensorConfig]: ...

    async def config_by_device(self, device_id: str) -> SensorConfig | None: ...

    async def config_names_and_maintenance(self) -> list[SensorConfig]: ...

    async def door_status_latest(self) -> list[DoorStatusEvent]: ...

    async def door_events_by_device(
        self, device_id: str, start: datetime, end: datetime
    ) -> list[DoorStatusEvent]: ...

    async def config_upsert(self, config: SensorConfig) -> SensorConfig: ...


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def reading_from_row(row: TelemetryLog) -> TelemetryReading:
    return TelemetryReading(
        device_id=row.device_id,
        gateway_id=row.gateway_id,
        timestamp=as_utc(row.timestamp),
        temperature=row.temperature,
        humidity=row.humidity,
        battery_pct=row.battery_pct,
        signal_strength=row.signal_strength,
        latitude=row.latitude,
        longitude=row.longitude,
        altitude=row.altitude,
        lat=row.lat,
        lng=row.lng,
    )


def config_from_row(row: SensorConfigRow) -> SensorConfig:
    # Stored rows go through the same resolution policy as incoming payloads
    return resolve_config(
        {
            "display_name": row.display_name,
            "batt_warning": row.battery_warning_pct,
            "temp_min": row.temp_min,
            "temp_max": row.temp_max,
            "hum_min": row.humidity_min,
            "hum_max": row.humidity_max,
            "sensor_porta_vinculado": row.linked_door_device_id,
            "em_manutencao": row.maintenance_mode,
            "updated_at": as_utc(row.updated_at),
        },
        device_id=row.device_id,
    )


def door_event_from_row(row: DoorLog) -> DoorStatusEvent:
    return DoorStatusEvent(
        device_id=row.device_id,
        is_open=bool(row.is_open),
        observed_at=as_utc(row.observed_at),
    )


class SqlTelemetryStore:
    """SQLAlchemy implementation of :class:`TelemetryStore`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _run(self, read: str, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            try:
                return await operation(session)
            except (SQLAlchemyError, OSError) as e:
                record_store_read_failure(read)
                logger.error("Store read failed", read=read, error=str(e))
                raise UpstreamReadFailure(read, str(e)) from e

    async def readings_by_device(
        self,
        device_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        ascending: bool = False,
    ) -> list[TelemetryReading]:
        """Readings of one device, newest first unless ``ascending``."""
        query = select(TelemetryLog).where(TelemetryLog.device_id == device_id)

        if start:
            query = query.where(TelemetryLog.timestamp >= as_utc(start))
        if end:
            query = query.where(TelemetryLog.timestamp <= as_utc(end))

        order = TelemetryLog.timestamp.asc() if ascending else TelemetryLog.timestamp.desc()
        query = query.order_by(order, TelemetryLog.id)
        if limit:
            query = query.limit(limit)

        async def operation(session: AsyncSession) -> list[TelemetryReading]:
            result = await session.execute(query)
            return [reading_from_row(row) for row in result.scalars().all()]

        return await self._run("readings_by_device", operation)

    async def readings_projection_all(self) -> list[tuple[str, str]]:
        """(gateway_id, device_id) of every reading, in insertion order."""
        query = select(TelemetryLog.gateway_id, TelemetryLog.device_id).order_by(TelemetryLog.id)

        async def operation(session: AsyncSession) -> list[tuple[str, str]]:
            result = await session.execute(query)
            return [(row[0], row[1]) for row in result.all()]

        return await self._run("readings_projection_all", operation)

    async def latest_reading_per_device(self) -> list[TelemetryReading]:
        """Most recent reading of every device."""
        newest = (
            select(
                TelemetryLog.device_id.label("device_id"),
                func.max(TelemetryLog.timestamp).label("max_ts"),
            )
            .group_by(TelemetryLog.device_id)
            .subquery()
        )
        query = (
            select(TelemetryLog)
            .join(
                newest,
                and_(
                    TelemetryLog.device_id == newest.c.device_id,
                    TelemetryLog.timestamp == newest.c.max_ts,
                ),
            )
            .order_by(TelemetryLog.device_id, TelemetryLog.id.desc())
        )

        async def operation(session: AsyncSession) -> list[TelemetryReading]:
            result = await session.execute(query)
            return [reading_from_row(row) for row in result.scalars().all()]

        return await self._run("latest_reading_per_device", operation)

    async def config_all(self) -> list[SensorConfig]:
        async def operation(session: AsyncSession) -> list[SensorConfig]:
            result = await session.execute(select(SensorConfigRow))
            return [config_from_row(row) for row in result.scalars().all()]

        return await self._run("config_all", operation)

    async def config_by_device(self, device_id: str) -> SensorConfig | None:
        async def operation(session: AsyncSession) -> SensorConfig | None:
            row = await session.get(SensorConfigRow, device_id)
            return config_from_row(row) if row else None

        return await self._run("config_by_device", operation)

    async def config_names_and_maintenance(self) -> list[SensorConfig]:
        """Configurations projected to display name and maintenance flag."""
        query = select(
            SensorConfigRow.device_id,
            SensorConfigRow.display_name,
            SensorConfigRow.maintenance_mode,
        )

        async def operation(session: AsyncSession) -> list[SensorConfig]:
            result = await session.execute(query)
            return [
                resolve_config(
                    {"display_name": name, "em_manutencao": maintenance},
                    device_id=device_id,
                )
                for device_id, name, maintenance in result.all()
            ]

        return await self._run("config_names_and_maintenance", operation)

    async def door_status_latest(self) -> list[DoorStatusEvent]:
        """Most recent door event of every device."""
        newest = (
            select(
                DoorLog.device_id.label("device_id"),
                func.max(DoorLog.observed_at).label("max_ts"),
            )
            .group_by(DoorLog.device_id)
            .subquery()
        )
        query = (
            select(DoorLog)
            .join(
                newest,
                and_(
                    DoorLog.device_id == newest.c.device_id,
                    DoorLog.observed_at == newest.c.max_ts,
                ),
            )
            .order_by(DoorLog.device_id, DoorLog.id.desc())
        )

        async def operation(session: AsyncSession) -> list[DoorStatusEvent]:
            result = await session.execute(query)
            return [door_event_from_row(row) for row in result.scalars().all()]

        return await self._run("door_status_latest", operation)

    async def door_events_by_device(
        self, device_id: str, start: datetime, end: datetime
    ) -> list[DoorStatusEvent]:
        """Door events of one device in [start, end], oldest first."""
        query = (
            select(DoorLog)
            .where(
                DoorLog.device_id == device_id,
                DoorLog.observed_at >= as_utc(start),
                DoorLog.observed_at <= as_utc(end),
            )
            .order_by(DoorLog.observed_at.asc(), DoorLog.id)
        )

        async def operation(session: AsyncSession) -> list[DoorStatusEvent]:
            result = await session.execute(query)
            return [door_event_from_row(row) for row in result.scalars().all()]

        return await self._run("door_events_by_device", operation)

    async def config_upsert(self, config: SensorConfig) -> SensorConfig:
        """Insert or overwrite the configuration of ``config.device_id``.

        Last writer wins; the write is not retried.
        """

        async def operation(session: AsyncSession) -> SensorConfig:
            row = await session.merge(
                SensorConfigRow(
                    device_id=config.device_id,
                    display_name=config.display_name,
                    battery_warning_pct=config.battery_warning_pct,
                    temp_min=config.temp_min,
                    temp_max=config.temp_max,
                    humidity_min=config.humidity_min,
                    humidity_max=config.humidity_max,
                    linked_door_device_id=config.linked_door_device_id,
                    maintenance_mode=config.maintenance_mode,
                    updated_at=config.updated_at or datetime.now(timezone.utc),
                )
            )
            await session.commit()
            await session.refresh(row)
            return config_from_row(row)

        return await self._run("config_upsert", operation)
