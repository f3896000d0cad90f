"""Sensor reading endpoints: latest snapshot and per-sensor history."""

from datetime import datetime

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel

from coldchain.api.responses import ApiResponse
from coldchain.api.schemas import MAC_PATTERN, ReadingResponse, SensorConfigResponse
from coldchain.core.deps import Store
from coldchain.services.downsampling import MAX_HISTORY_LIMIT, HistoryPeriod
from coldchain.services.records import LatestReading, SensorInfo
from coldchain.services.sensor_service import SensorService

router = APIRouter()


class DoorStatusResponse(BaseModel):
    is_open: bool
    last_change: datetime


class LatestReadingResponse(ReadingResponse):
    """Latest reading of a sensor with dashboard labels."""

    display_name: str
    maintenance_mode: bool
    door_status: DoorStatusResponse | None

    @classmethod
    def from_latest(cls, item: LatestReading) -> "LatestReadingResponse":
        base = ReadingResponse.from_reading(item.reading)
        return cls(
            **base.model_dump(),
            display_name=item.display_name,
            maintenance_mode=item.maintenance_mode,
            door_status=(
                DoorStatusResponse(
                    is_open=item.door_status.is_open,
                    last_change=item.door_status.last_change,
                )
                if item.door_status
                else None
            ),
        )


class SensorInfoResponse(SensorConfigResponse):
    """Sensor configuration plus the location of its newest reading."""

    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None

    @classmethod
    def from_info(cls, info: SensorInfo) -> "SensorInfoResponse":
        config = SensorConfigResponse.model_validate(info.config)
        return cls(
            **config.model_dump(),
            latitude=info.latitude,
            longitude=info.longitude,
            altitude=info.altitude,
        )


class SensorHistoryResponse(BaseModel):
    info: SensorInfoResponse
    history: list[ReadingResponse]


@router.get("/latest", response_model=ApiResponse[list[LatestReadingResponse]])
async def latest_readings(store: Store) -> ApiResponse[list[LatestReadingResponse]]:
    """Latest reading of every sensor, sorted by display name."""
    readings = await SensorService(store).latest_readings()
    return ApiResponse(data=[LatestReadingResponse.from_latest(r) for r in readings])


@router.get("/{mac}", response_model=ApiResponse[SensorHistoryResponse])
async def sensor_history(
    store: Store,
    mac: str = Path(..., pattern=MAC_PATTERN),
    period: HistoryPeriod = Query(default=HistoryPeriod.ONE_DAY),
    limit: int | None = Query(default=None, ge=1, le=MAX_HISTORY_LIMIT),
) -> ApiResponse[SensorHistoryResponse]:
    """Configuration and downsampled history (>= 10 min spacing) of a sensor."""
    view = await SensorService(store).sensor_history(mac, period=period, limit=limit)
    return ApiResponse(
        data=SensorHistoryResponse(
            info=SensorInfoResponse.from_info(view.info),
            history=[ReadingResponse.from_reading(r) for r in view.history],
        )
    )
