"""Spreadsheet export of a device's telemetry and door events.

The workbook layout (sheet names, header strings, column order, pt-BR date
format) is consumed by existing downstream spreadsheets and must not change.
"""

import io
import re
from collections.abc import Sequence
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from openpyxl import Workbook

from coldchain.services.records import DoorStatusEvent, TelemetryReading

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TELEMETRY_SHEET = "Temperatura e Umidade"
DOOR_SHEET = "Eventos de Porta"

TELEMETRY_HEADERS = (
    "Tipo",
    "Data/Hora",
    "Temperatura (°C)",
    "Umidade (%)",
    "Bateria (%)",
    "Gateway",
    "Sensor MAC",
)
DOOR_HEADERS = ("Data/Hora", "Estado", "Detalhe", "Sensor MAC")

READING_KIND = "Leitura"
DOOR_OPEN_LABEL = "ABERTO (Virtual)"
DOOR_CLOSED_LABEL = "FECHADO"
DOOR_OPEN_DETAIL = "Subida Brusca Temp"
DOOR_CLOSED_DETAIL = "Resfriamento"

# pt-BR short date and time, as rendered by the dashboard
PT_BR_DATETIME = "%d/%m/%Y, %H:%M:%S"

_SEPARATORS = re.compile(r"[:\-]")


def format_timestamp(value: datetime, tz: ZoneInfo) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).strftime(PT_BR_DATETIME)


def telemetry_rows(readings: Sequence[TelemetryReading], tz: ZoneInfo) -> list[tuple]:
    return [
        (
            READING_KIND,
            format_timestamp(reading.timestamp, tz),
            reading.temperature,
            reading.humidity,
            reading.battery_pct,
            reading.gateway_id,
            reading.device_id,
        )
        for reading in readings
    ]


def door_rows(events: Sequence[DoorStatusEvent], tz: ZoneInfo) -> list[tuple]:
    return [
        (
            format_timestamp(event.observed_at, tz),
            DOOR_OPEN_LABEL if event.is_open else DOOR_CLOSED_LABEL,
            DOOR_OPEN_DETAIL if event.is_open else DOOR_CLOSED_DETAIL,
            event.device_id,
        )
        for event in events
    ]


def build_report_workbook(
    readings: Sequence[TelemetryReading],
    door_events: Sequence[DoorStatusEvent],
    tz: ZoneInfo,
) -> bytes:
    """Serialize readings and door events into an xlsx workbook.

    The door sheet is only added when there is at least one event.
    """
    workbook = Workbook()

    telemetry_sheet = workbook.active
    telemetry_sheet.title = TELEMETRY_SHEET
    telemetry_sheet.append(TELEMETRY_HEADERS)
    for row in telemetry_rows(readings, tz):
        telemetry_sheet.append(row)

    if door_events:
        door_sheet = workbook.create_sheet(DOOR_SHEET)
        door_sheet.append(DOOR_HEADERS)
        for row in door_rows(door_events, tz):
            door_sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def report_filename(device_id: str, generated_at: datetime | None = None) -> str:
    """``relatorio_<id without separators>_<epoch ms>.xlsx``."""
    generated_at = generated_at or datetime.now(timezone.utc)
    clean_id = _SEPARATORS.sub("", device_id)
    return f"relatorio_{clean_id}_{int(generated_at.timestamp() * 1000)}.xlsx"
