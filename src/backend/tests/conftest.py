"""Pytest configuration and fixtures for cold chain tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from coldchain.core.config import Settings, get_settings
from coldchain.core.deps import get_db, get_store
from coldchain.main import fastapi_app as app
from coldchain.models import Base, DoorLog, SensorConfigRow, TelemetryLog
from coldchain.services.records import DoorStatusEvent, SensorConfig, TelemetryReading
from coldchain.services.telemetry_store import SqlTelemetryStore


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """File-backed SQLite engine; one connection per session so reads can overlap."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'coldchain.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> SqlTelemetryStore:
    return SqlTelemetryStore(session_factory)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment="test", api_key="", metrics_enabled=False)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, store, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with store and database overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def add_readings(db_session: AsyncSession):
    """Insert TelemetryReading records into telemetry_logs, in the given order."""

    async def _add(*readings: TelemetryReading) -> None:
        for reading in readings:
            db_session.add(
                TelemetryLog(
                    gateway_id=reading.gateway_id,
                    device_id=reading.device_id,
                    timestamp=reading.timestamp,
                    temperature=reading.temperature,
                    humidity=reading.humidity,
                    battery_pct=reading.battery_pct,
                    signal_strength=reading.signal_strength,
                    latitude=reading.latitude,
                    longitude=reading.longitude,
                    altitude=reading.altitude,
                    lat=reading.lat,
                    lng=reading.lng,
                )
            )
            # Flush one by one so ids follow the given order
            await db_session.flush()
        await db_session.commit()

    return _add


@pytest_asyncio.fixture
async def add_configs(db_session: AsyncSession):
    async def _add(*configs: SensorConfig) -> None:
        for config in configs:
            db_session.add(
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
                    updated_at=config.updated_at,
                )
            )
        await db_session.commit()

    return _add


@pytest_asyncio.fixture
async def add_door_events(db_session: AsyncSession):
    async def _add(*events: DoorStatusEvent) -> None:
        for event in events:
            db_session.add(
                DoorLog(
                    device_id=event.device_id,
                    is_open=event.is_open,
                    observed_at=event.observed_at,
                )
            )
            await db_session.flush()
        await db_session.commit()

    return _add
