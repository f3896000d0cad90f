"""Tests for the sensor, device, door and report services."""

import io
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
from openpyxl import load_workbook

from coldchain.services.device_service import DeviceService
from coldchain.services.door_service import DoorService
from coldchain.services.downsampling import HistoryPeriod
from coldchain.services.errors import (
    EmptyReportWindow,
    MissingRequiredIdentifier,
    UpstreamReadFailure,
)
from coldchain.services.report_exporter import DOOR_SHEET, TELEMETRY_SHEET, XLSX_MEDIA_TYPE
from coldchain.services.report_service import ReportService
from coldchain.services.sensor_service import UNCONFIGURED_SENSOR, SensorService
from tests.factories import BASE_TIME, MAC_A, MAC_B, make_config, make_door, make_reading

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


@pytest.fixture
def mock_store():
    """Store double with every read returning an empty result."""
    store = AsyncMock()
    store.readings_by_device.return_value = []
    store.readings_projection_all.return_value = []
    store.latest_reading_per_device.return_value = []
    store.config_all.return_value = []
    store.config_by_device.return_value = None
    store.config_names_and_maintenance.return_value = []
    store.door_status_latest.return_value = []
    store.door_events_by_device.return_value = []
    store.config_upsert.side_effect = lambda config: config
    return store


class TestSensorHistory:
    """Tests for SensorService.sensor_history."""

    @pytest.mark.asyncio
    async def test_unconfigured_sensor_defaults(self, mock_store):
        view = await SensorService(mock_store).sensor_history(MAC_A)

        assert view.history == []
        assert view.info.config.display_name == UNCONFIGURED_SENSOR
        assert view.info.config.battery_warning_pct == 20.0
        assert view.info.latitude is None

    @pytest.mark.asyncio
    async def test_history_is_downsampled(self, mock_store):
        mock_store.readings_by_device.return_value = [
            make_reading(MAC_A, minutes=m) for m in (25, 12, 5, 2, 0)
        ]

        view = await SensorService(mock_store).sensor_history(MAC_A)

        assert [r.timestamp for r in view.history] == [
            BASE_TIME + timedelta(minutes=m) for m in (25, 12, 2)
        ]

    @pytest.mark.asyncio
    async def test_info_location_from_newest_raw_reading(self, mock_store):
        mock_store.readings_by_device.return_value = [
            make_reading(MAC_A, minutes=20, lat=-23.5, lng=-46.6),
            make_reading(MAC_A, minutes=0, latitude=1.0, longitude=1.0),
        ]
        mock_store.config_by_device.return_value = make_config(MAC_A, display_name="Freezer")

        view = await SensorService(mock_store).sensor_history(MAC_A)

        assert view.info.config.display_name == "Freezer"
        assert (view.info.latitude, view.info.longitude, view.info.altitude) == (-23.5, -46.6, 0)

    @pytest.mark.asyncio
    async def test_period_and_limit_passed_to_store(self, mock_store):
        now = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)

        await SensorService(mock_store).sensor_history(
            MAC_A, period=HistoryPeriod.ONE_HOUR, limit=500, now=now
        )

        mock_store.readings_by_device.assert_awaited_once_with(
            MAC_A, start=now - timedelta(hours=1), limit=500
        )

    @pytest.mark.asyncio
    async def test_period_all_has_no_start(self, mock_store):
        await SensorService(mock_store).sensor_history(MAC_A, period=HistoryPeriod.ALL)

        mock_store.readings_by_device.assert_awaited_once_with(MAC_A, start=None, limit=None)

    @pytest.mark.asyncio
    async def test_missing_id_fails_before_store_reads(self, mock_store):
        with pytest.raises(MissingRequiredIdentifier):
            await SensorService(mock_store).sensor_history("")

        mock_store.readings_by_device.assert_not_called()


class TestLatestReadings:
    @pytest.mark.asyncio
    async def test_joins_config_and_door(self, mock_store):
        mock_store.latest_reading_per_device.return_value = [
            make_reading(MAC_A),
            make_reading(MAC_B),
        ]
        mock_store.config_names_and_maintenance.return_value = [
            make_config(MAC_B, display_name="Antecâmara", maintenance_mode=True)
        ]
        mock_store.door_status_latest.return_value = [make_door(MAC_A, is_open=True)]

        latest = await SensorService(mock_store).latest_readings()

        assert [entry.display_name for entry in latest] == ["Antecâmara", "Sensor Sem Nome"]
        assert latest[0].maintenance_mode is True
        assert latest[0].door_status is None
        assert latest[1].door_status.is_open is True

    @pytest.mark.asyncio
    async def test_any_failed_read_fails_the_request(self, mock_store):
        mock_store.door_status_latest.side_effect = UpstreamReadFailure(
            "door_status_latest", "connection refused"
        )

        with pytest.raises(UpstreamReadFailure):
            await SensorService(mock_store).latest_readings()


class TestCoordinates:
    @pytest.mark.asyncio
    async def test_window_reads_ascending(self, mock_store):
        start, end = BASE_TIME, BASE_TIME + timedelta(hours=2)
        mock_store.readings_by_device.return_value = [
            make_reading(MAC_A, minutes=0, latitude=-23.0, longitude=-46.0),
            make_reading(MAC_A, minutes=5),
            make_reading(MAC_A, minutes=10, lat=-23.1, lng=-46.1),
        ]

        coordinates = await SensorService(mock_store).coordinates(MAC_A, start, end)

        mock_store.readings_by_device.assert_awaited_once_with(
            MAC_A, start=start, end=end, ascending=True
        )
        assert [(c.lat, c.lng) for c in coordinates] == [(-23.0, -46.0), (-23.1, -46.1)]

    @pytest.mark.asyncio
    async def test_without_full_window_returns_newest_point(self, mock_store):
        await SensorService(mock_store).coordinates(MAC_A, start=BASE_TIME)

        mock_store.readings_by_device.assert_awaited_once_with(MAC_A, limit=1)


class TestDeviceService:
    @pytest.mark.asyncio
    async def test_list_devices(self, mock_store):
        mock_store.readings_projection_all.return_value = [
            ("G1", MAC_A),
            ("G1", MAC_A),
            ("G2", MAC_A),
        ]
        mock_store.config_all.return_value = [make_config(MAC_A, display_name="Freezer")]

        devices = await DeviceService(mock_store).list_devices()

        assert [(d.gateway_id, d.display_name) for d in devices] == [
            ("G1", "Freezer"),
            ("G2", "Freezer"),
        ]

    @pytest.mark.asyncio
    async def test_update_normalizes_payload(self, mock_store):
        saved = await DeviceService(mock_store).update_device(
            {"mac": MAC_A, "display_name": "Freezer", "max_temp": "-10", "batt_warning": ""}
        )

        assert saved.device_id == MAC_A
        assert saved.temp_max == -10.0
        assert saved.battery_warning_pct is None
        assert saved.updated_at is not None
        mock_store.config_upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_without_id(self, mock_store):
        with pytest.raises(MissingRequiredIdentifier):
            await DeviceService(mock_store).update_device({"display_name": "X"})

        mock_store.config_upsert.assert_not_called()


class TestDoorService:
    @pytest.mark.asyncio
    async def test_latest_status(self, mock_store):
        mock_store.door_status_latest.return_value = [make_door(MAC_A, is_open=False)]
        mock_store.config_names_and_maintenance.return_value = [
            make_config(MAC_A, display_name="Recebimento")
        ]

        board = await DoorService(mock_store).latest_status()

        assert len(board) == 1
        assert board[0].display_name == "Recebimento"
        assert board[0].status_text == "FECHADO"


class TestReportService:
    """Tests for ReportService.generate_report."""

    @pytest.mark.asyncio
    async def test_empty_window(self, mock_store):
        """A window without telemetry produces no file."""
        service = ReportService(mock_store, SAO_PAULO)

        with pytest.raises(EmptyReportWindow) as exc_info:
            await service.generate_report(MAC_A, BASE_TIME, BASE_TIME + timedelta(days=1))

        assert str(exc_info.value) == "Nenhum dado encontrado para este período."

    @pytest.mark.asyncio
    async def test_missing_id_fails_before_store_reads(self, mock_store):
        service = ReportService(mock_store, SAO_PAULO)

        with pytest.raises(MissingRequiredIdentifier):
            await service.generate_report("", BASE_TIME, BASE_TIME)

        mock_store.readings_by_device.assert_not_called()
        mock_store.door_events_by_device.assert_not_called()

    @pytest.mark.asyncio
    async def test_report_with_door_events(self, mock_store):
        mock_store.readings_by_device.return_value = [make_reading(MAC_A)]
        mock_store.door_events_by_device.return_value = [make_door(MAC_A)]
        generated_at = datetime(2026, 3, 11, tzinfo=timezone.utc)

        report = await ReportService(mock_store, SAO_PAULO).generate_report(
            MAC_A, BASE_TIME, BASE_TIME + timedelta(hours=1), generated_at=generated_at
        )

        assert report.media_type == XLSX_MEDIA_TYPE
        assert report.filename == (
            f"relatorio_AABBCCDDEE01_{int(generated_at.timestamp() * 1000)}.xlsx"
        )
        workbook = load_workbook(io.BytesIO(report.content))
        assert workbook.sheetnames == [TELEMETRY_SHEET, DOOR_SHEET]

    @pytest.mark.asyncio
    async def test_door_read_failure_propagates(self, mock_store):
        mock_store.readings_by_device.return_value = [make_reading(MAC_A)]
        mock_store.door_events_by_device.side_effect = UpstreamReadFailure(
            "door_events_by_device", "timeout"
        )

        with pytest.raises(UpstreamReadFailure):
            await ReportService(mock_store, SAO_PAULO).generate_report(
                MAC_A, BASE_TIME, BASE_TIME + timedelta(hours=1)
            )
