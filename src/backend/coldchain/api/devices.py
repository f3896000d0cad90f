"""Device catalog and configuration endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field, field_validator

from coldchain.api.responses import ApiResponse
from coldchain.api.schemas import MAC_PATTERN, SensorConfigResponse
from coldchain.core.deps import Store
from coldchain.services.device_service import DeviceService

router = APIRouter()


class DeviceResponse(BaseModel):
    """A sensor as heard by one gateway, with its configuration."""

    model_config = ConfigDict(from_attributes=True)

    gateway_id: str
    device_id: str
    display_name: str
    battery_warning_pct: float | None
    temp_min: float | None
    temp_max: float | None
    humidity_min: float | None
    humidity_max: float | None
    linked_door_device_id: str | None
    maintenance_mode: bool


class DeviceUpdate(BaseModel):
    """Sensor configuration update.

    Every field name written by a dashboard version is accepted: the stored
    column names (``temp_min``, ``hum_max``, ``em_manutencao``...), the older
    ``max_temp``/``min_hum`` form and the plain English names. Blank strings
    mean "unset". ``mac`` or ``device_id`` identifies the sensor.
    """

    mac: str | None = Field(None, pattern=MAC_PATTERN)
    device_id: str | None = Field(None, pattern=MAC_PATTERN)
    display_name: str | None = Field(None, max_length=255)

    batt_warning: float | None = Field(None, ge=0, le=100)
    battery_warning_pct: float | None = Field(None, ge=0, le=100)

    temp_min: float | None = None
    temp_max: float | None = None
    min_temp: float | None = None
    max_temp: float | None = None

    hum_min: float | None = Field(None, ge=0, le=100)
    hum_max: float | None = Field(None, ge=0, le=100)
    min_hum: float | None = Field(None, ge=0, le=100)
    max_hum: float | None = Field(None, ge=0, le=100)
    humidity_min: float | None = Field(None, ge=0, le=100)
    humidity_max: float | None = Field(None, ge=0, le=100)

    sensor_porta_vinculado: str | None = None
    linked_door_device_id: str | None = None

    em_manutencao: bool | None = None
    maintenance_mode: bool | None = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@router.get("", response_model=ApiResponse[list[DeviceResponse]])
async def list_devices(store: Store) -> ApiResponse[list[DeviceResponse]]:
    """List every (gateway, sensor) pair with its configuration."""
    devices = await DeviceService(store).list_devices()
    return ApiResponse(data=[DeviceResponse.model_validate(d) for d in devices])


@router.patch("", response_model=ApiResponse[SensorConfigResponse])
async def update_device(request: DeviceUpdate, store: Store) -> ApiResponse[SensorConfigResponse]:
    """Create or overwrite the configuration of a sensor."""
    saved = await DeviceService(store).update_device(request.model_dump())
    return ApiResponse(
        message="Configuração salva!",
        data=SensorConfigResponse.model_validate(saved),
    )
