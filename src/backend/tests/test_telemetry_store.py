"""Tests for the SQL telemetry store."""

from datetime import timedelta

import pytest

from coldchain.models import Base
from coldchain.services.errors import UpstreamReadFailure
from coldchain.services.telemetry_store import SqlTelemetryStore, as_utc
from tests.factories import BASE_TIME, MAC_A, MAC_B, MAC_C, make_config, make_door, make_reading


class TestAsUtc:
    def test_naive_gets_utc(self):
        assert as_utc(BASE_TIME.replace(tzinfo=None)) == BASE_TIME

    def test_none(self):
        assert as_utc(None) is None


class TestReadingsByDevice:
    """Tests for per-device telemetry reads."""

    @pytest.mark.asyncio
    async def test_newest_first_by_default(self, store: SqlTelemetryStore, add_readings):
        await add_readings(
            make_reading(MAC_A, minutes=0),
            make_reading(MAC_A, minutes=20),
            make_reading(MAC_B, minutes=30),
            make_reading(MAC_A, minutes=10),
        )

        readings = await store.readings_by_device(MAC_A)

        assert [r.timestamp for r in readings] == [
            BASE_TIME + timedelta(minutes=m) for m in (20, 10, 0)
        ]
        assert all(r.device_id == MAC_A for r in readings)

    @pytest.mark.asyncio
    async def test_window_ascending(self, store: SqlTelemetryStore, add_readings):
        await add_readings(*[make_reading(MAC_A, minutes=m) for m in (0, 10, 20, 30, 40)])

        readings = await store.readings_by_device(
            MAC_A,
            start=BASE_TIME + timedelta(minutes=10),
            end=BASE_TIME + timedelta(minutes=30),
            ascending=True,
        )

        assert [r.timestamp for r in readings] == [
            BASE_TIME + timedelta(minutes=m) for m in (10, 20, 30)
        ]

    @pytest.mark.asyncio
    async def test_limit(self, store: SqlTelemetryStore, add_readings):
        await add_readings(*[make_reading(MAC_A, minutes=m) for m in range(5)])

        readings = await store.readings_by_device(MAC_A, limit=2)

        assert [r.timestamp for r in readings] == [
            BASE_TIME + timedelta(minutes=4),
            BASE_TIME + timedelta(minutes=3),
        ]

    @pytest.mark.asyncio
    async def test_fields_round_trip(self, store: SqlTelemetryStore, add_readings):
        reading = make_reading(
            MAC_A,
            temperature=-19.5,
            humidity=41.0,
            battery_pct=77.0,
            signal_strength=-68.0,
            lat=-23.55,
            lng=-46.63,
        )
        await add_readings(reading)

        stored = (await store.readings_by_device(MAC_A))[0]

        assert stored == reading

    @pytest.mark.asyncio
    async def test_unknown_device(self, store: SqlTelemetryStore):
        assert await store.readings_by_device(MAC_C) == []


class TestProjectionAndLatest:
    @pytest.mark.asyncio
    async def test_projection_in_insertion_order(self, store: SqlTelemetryStore, add_readings):
        await add_readings(
            make_reading(MAC_B, gateway_id="G1"),
            make_reading(MAC_A, gateway_id="G2"),
            make_reading(MAC_B, gateway_id="G1", minutes=1),
        )

        assert await store.readings_projection_all() == [
            ("G1", MAC_B),
            ("G2", MAC_A),
            ("G1", MAC_B),
        ]

    @pytest.mark.asyncio
    async def test_latest_reading_per_device(self, store: SqlTelemetryStore, add_readings):
        await add_readings(
            make_reading(MAC_A, minutes=5, temperature=3.0),
            make_reading(MAC_A, minutes=15, temperature=4.0),
            make_reading(MAC_B, minutes=1, temperature=-18.0),
            make_reading(MAC_A, minutes=10, temperature=5.0),
        )

        latest = {r.device_id: r for r in await store.latest_reading_per_device()}

        assert set(latest) == {MAC_A, MAC_B}
        assert latest[MAC_A].temperature == 4.0
        assert latest[MAC_A].timestamp == BASE_TIME + timedelta(minutes=15)
        assert latest[MAC_B].temperature == -18.0


class TestConfigs:
    """Tests for sensor configuration reads and upserts."""

    @pytest.mark.asyncio
    async def test_config_by_device(self, store: SqlTelemetryStore, add_configs):
        await add_configs(make_config(MAC_A, display_name="Freezer", temp_max=-12.0))

        config = await store.config_by_device(MAC_A)

        assert config.display_name == "Freezer"
        assert config.temp_max == -12.0
        assert await store.config_by_device(MAC_B) is None

    @pytest.mark.asyncio
    async def test_config_all(self, store: SqlTelemetryStore, add_configs):
        await add_configs(make_config(MAC_A), make_config(MAC_B))

        configs = await store.config_all()

        assert {c.device_id for c in configs} == {MAC_A, MAC_B}

    @pytest.mark.asyncio
    async def test_names_and_maintenance_projection(self, store: SqlTelemetryStore, add_configs):
        await add_configs(
            make_config(MAC_A, display_name="Balcão", maintenance_mode=True, temp_max=8.0)
        )

        config = (await store.config_names_and_maintenance())[0]

        assert config.device_id == MAC_A
        assert config.display_name == "Balcão"
        assert config.maintenance_mode is True
        assert config.temp_max is None

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_overwrites(self, store: SqlTelemetryStore):
        await store.config_upsert(make_config(MAC_A, display_name="Primeiro", temp_max=5.0))
        saved = await store.config_upsert(make_config(MAC_A, display_name="Segundo"))

        assert saved.display_name == "Segundo"
        stored = await store.config_by_device(MAC_A)
        assert stored.display_name == "Segundo"
        assert stored.temp_max is None
        assert stored.updated_at is not None
        assert len(await store.config_all()) == 1


class TestDoorEvents:
    @pytest.mark.asyncio
    async def test_latest_per_device(self, store: SqlTelemetryStore, add_door_events):
        await add_door_events(
            make_door(MAC_A, is_open=True, minutes=1),
            make_door(MAC_A, is_open=False, minutes=8),
            make_door(MAC_B, is_open=True, minutes=3),
        )

        latest = {e.device_id: e for e in await store.door_status_latest()}

        assert latest[MAC_A].is_open is False
        assert latest[MAC_A].observed_at == BASE_TIME + timedelta(minutes=8)
        assert latest[MAC_B].is_open is True

    @pytest.mark.asyncio
    async def test_window_oldest_first(self, store: SqlTelemetryStore, add_door_events):
        await add_door_events(
            make_door(MAC_A, minutes=30),
            make_door(MAC_A, minutes=5),
            make_door(MAC_A, minutes=90),
            make_door(MAC_B, minutes=10),
        )

        events = await store.door_events_by_device(
            MAC_A, BASE_TIME, BASE_TIME + timedelta(hours=1)
        )

        assert [e.observed_at for e in events] == [
            BASE_TIME + timedelta(minutes=5),
            BASE_TIME + timedelta(minutes=30),
        ]


class TestReadFailures:
    @pytest.mark.asyncio
    async def test_failed_read_raises_upstream_failure(self, store: SqlTelemetryStore, db_engine):
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        with pytest.raises(UpstreamReadFailure) as exc_info:
            await store.config_all()

        assert exc_info.value.read == "config_all"
