"""Latest door status per cold room, labelled for the dashboard."""

from collections.abc import Iterable, Mapping

from coldchain.services.latest_readings import display_name_sort_key
from coldchain.services.records import DoorStatusEntry, DoorStatusEvent, SensorConfig

OPEN_TEXT = "ABERTA (Virtual)"
CLOSED_TEXT = "FECHADO"
OPEN_COLOR = "red"
CLOSED_COLOR = "green"


def room_name(device_id: str) -> str:
    return f"Câmara {device_id}"


def build_door_board(
    events: Iterable[DoorStatusEvent],
    config_index: Mapping[str, SensorConfig],
) -> list[DoorStatusEntry]:
    """Label each door status and sort the board by display name."""
    board: list[DoorStatusEntry] = []
    for event in events:
        config = config_index.get(event.device_id)
        board.append(
            DoorStatusEntry(
                event=event,
                display_name=(config.display_name if config else None) or room_name(event.device_id),
                status_text=OPEN_TEXT if event.is_open else CLOSED_TEXT,
                status_color=OPEN_COLOR if event.is_open else CLOSED_COLOR,
                is_configured=config is not None,
            )
        )

    board.sort(key=lambda entry: display_name_sort_key(entry.display_name))
    return board
