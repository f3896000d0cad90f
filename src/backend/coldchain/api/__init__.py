"""API Routes Module."""

from fastapi import APIRouter, Depends

from coldchain.api import devices, doors, reports, sensors
from coldchain.core.security import verify_api_key

router = APIRouter(dependencies=[Depends(verify_api_key)])

router.include_router(devices.router, prefix="/dispositivos", tags=["Dispositivos"])
router.include_router(sensors.router, prefix="/sensores", tags=["Sensores"])
router.include_router(reports.router, prefix="/sensor", tags=["Relatórios"])
router.include_router(doors.router, prefix="/doors", tags=["Portas"])
