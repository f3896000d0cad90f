"""Door status endpoints."""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from coldchain.api.responses import ApiResponse
from coldchain.core.deps import Store
from coldchain.services.door_service import DoorService
from coldchain.services.records import DoorStatusEntry

router = APIRouter()


class DoorBoardResponse(BaseModel):
    """Latest virtual door state of a cold room."""

    device_id: str
    is_open: bool
    observed_at: datetime
    display_name: str
    status_text: str
    status_color: str
    is_configured: bool

    @classmethod
    def from_entry(cls, entry: DoorStatusEntry) -> "DoorBoardResponse":
        return cls(
            device_id=entry.event.device_id,
            is_open=entry.event.is_open,
            observed_at=entry.event.observed_at,
            display_name=entry.display_name,
            status_text=entry.status_text,
            status_color=entry.status_color,
            is_configured=entry.is_configured,
        )


@router.get("/latest", response_model=ApiResponse[list[DoorBoardResponse]])
async def latest_door_status(store: Store) -> ApiResponse[list[DoorBoardResponse]]:
    """Latest door state of every sensor, sorted by display name."""
    entries = await DoorService(store).latest_status()
    return ApiResponse(data=[DoorBoardResponse.from_entry(e) for e in entries])
