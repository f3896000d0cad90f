"""Spreadsheet report generation service."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import structlog

from coldchain.core.metrics import record_report
from coldchain.services.errors import EmptyReportWindow, MissingRequiredIdentifier
from coldchain.services.report_exporter import (
    XLSX_MEDIA_TYPE,
    build_report_workbook,
    report_filename,
)
from coldchain.services.telemetry_store import TelemetryStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExportedReport:
    filename: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE


class ReportService:
    """Joins a sensor's telemetry window with its door events into a workbook."""

    def __init__(self, store: TelemetryStore, tz: ZoneInfo):
        self.store = store
        self.tz = tz

    async def generate_report(
        self,
        device_id: str,
        start: datetime,
        end: datetime,
        generated_at: datetime | None = None,
    ) -> ExportedReport:
        """Build the xlsx report for ``device_id`` over [start, end].

        Raises:
            MissingRequiredIdentifier: If no device id is given.
            EmptyReportWindow: If the window holds no telemetry.
        """
        if not device_id:
            raise MissingRequiredIdentifier("MAC Obrigatório")

        logger.info("Generating report", device_id=device_id, start=start.isoformat(), end=end.isoformat())

        readings, door_events = await asyncio.gather(
            self.store.readings_by_device(device_id, start=start, end=end),
            self.store.door_events_by_device(device_id, start, end),
        )

        if not readings:
            record_report("empty")
            raise EmptyReportWindow(device_id)

        content = build_report_workbook(readings, door_events, self.tz)
        filename = report_filename(device_id, generated_at or datetime.now(timezone.utc))
        record_report("generated")

        logger.info(
            "Report generated",
            device_id=device_id,
            readings=len(readings),
            door_events=len(door_events),
            filename=filename,
        )
        return ExportedReport(filename=filename, content=content)
