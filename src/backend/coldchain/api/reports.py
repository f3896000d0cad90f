"""Report export and sensor location endpoints."""

from datetime import datetime

import structlog
from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict

from coldchain.api.responses import ApiResponse
from coldchain.api.schemas import MAC_PATTERN
from coldchain.core.deps import AppSettings, Store
from coldchain.services.report_service import ReportService
from coldchain.services.sensor_service import SensorService
from coldchain.services.telemetry_store import as_utc

logger = structlog.get_logger()

router = APIRouter()


class CoordinateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ts: datetime
    lat: float
    lng: float
    alt: float


@router.get("/report")
async def generate_report(
    store: Store,
    settings: AppSettings,
    mac: str = Query(..., pattern=MAC_PATTERN),
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
) -> Response:
    """Download the xlsx report of a sensor for [startDate, endDate]."""
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="startDate deve ser anterior a endDate",
        )

    report = await ReportService(store, settings.report_tz).generate_report(
        mac, start_date, end_date
    )
    logger.info("Report sent", device_id=mac, filename=report.filename)

    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


@router.get("/coordinates", response_model=ApiResponse[list[CoordinateResponse]])
async def sensor_coordinates(
    store: Store,
    mac: str = Query(..., pattern=MAC_PATTERN),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> ApiResponse[list[CoordinateResponse]]:
    """Sensor path over a window, or its last known position."""
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="startDate deve ser anterior a endDate",
        )

    coordinates = await SensorService(store).coordinates(mac, start=start_date, end=end_date)
    return ApiResponse(data=[CoordinateResponse.model_validate(c) for c in coordinates])
