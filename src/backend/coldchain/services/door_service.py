"""Door status board service."""

import asyncio

from coldchain.services.config_index import build_config_index
from coldchain.services.door_board import build_door_board
from coldchain.services.records import DoorStatusEntry
from coldchain.services.telemetry_store import TelemetryStore


class DoorService:
    """Latest virtual door state of every cold room."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def latest_status(self) -> list[DoorStatusEntry]:
        events, configs = await asyncio.gather(
            self.store.door_status_latest(),
            self.store.config_names_and_maintenance(),
        )
        return build_door_board(events, build_config_index(configs))
