"""Latest reading per device, enriched with name, maintenance and door state."""

import unicodedata
from collections.abc import Iterable, Mapping

from coldchain.services.records import (
    DoorStatus,
    DoorStatusEvent,
    LatestReading,
    SensorConfig,
    TelemetryReading,
)

UNNAMED_SENSOR = "Sensor Sem Nome"


def display_name_sort_key(name: str) -> tuple[str, str]:
    """Collation key comparing names the way a pt-BR locale would.

    Accents and case are ignored on the first pass; the raw name breaks ties.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def keep_latest_per_device(readings: Iterable[TelemetryReading]) -> list[TelemetryReading]:
    """Keep the first reading seen for each device_id.

    With a newest-first stream the first occurrence is the most recent one.
    On a stream that already holds one row per device this is a no-op.
    """
    latest: dict[str, TelemetryReading] = {}
    for reading in readings:
        if reading.device_id not in latest:
            latest[reading.device_id] = reading
    return list(latest.values())


def index_door_status(events: Iterable[DoorStatusEvent]) -> dict[str, DoorStatusEvent]:
    """Index the latest-door-status feed by device_id (first wins)."""
    index: dict[str, DoorStatusEvent] = {}
    for event in events:
        index.setdefault(event.device_id, event)
    return index


def resolve_latest_readings(
    readings: Iterable[TelemetryReading],
    config_index: Mapping[str, SensorConfig],
    door_status: Iterable[DoorStatusEvent],
) -> list[LatestReading]:
    """One enriched row per device, sorted by display name.

    Door state is joined on the reading's own device_id: the door feed is
    inferred from the same physical sensor. ``linked_door_device_id`` is not
    consulted here.
    """
    doors = index_door_status(door_status)
    resolved: list[LatestReading] = []

    for reading in keep_latest_per_device(readings):
        config = config_index.get(reading.device_id)
        door = doors.get(reading.device_id)

        resolved.append(
            LatestReading(
                reading=reading,
                display_name=(config.display_name if config else None) or UNNAMED_SENSOR,
                maintenance_mode=bool(config.maintenance_mode) if config else False,
                door_status=(
                    DoorStatus(is_open=bool(door.is_open), last_change=door.observed_at)
                    if door
                    else None
                ),
            )
        )

    resolved.sort(key=lambda item: display_name_sort_key(item.display_name))
    return resolved
