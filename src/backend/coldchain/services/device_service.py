"""Device catalog and configuration service."""

import asyncio
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import structlog

from coldchain.services.config_index import build_config_index, resolve_config, resolve_device_id
from coldchain.services.device_catalog import build_device_catalog
from coldchain.services.errors import MissingRequiredIdentifier
from coldchain.services.records import DeviceDescriptor, SensorConfig
from coldchain.services.telemetry_store import TelemetryStore

logger = structlog.get_logger()


class DeviceService:
    """Lists known (gateway, sensor) pairs and saves sensor configuration."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def list_devices(self) -> list[DeviceDescriptor]:
        """Every distinct (gateway, device) pair merged with its configuration."""
        pairs, configs = await asyncio.gather(
            self.store.readings_projection_all(),
            self.store.config_all(),
        )
        catalog = build_device_catalog(pairs, build_config_index(configs))
        logger.debug("Device catalog built", readings=len(pairs), devices=len(catalog))
        return catalog

    async def update_device(self, payload: Mapping[str, Any]) -> SensorConfig:
        """Normalize a configuration payload and upsert it.

        Raises:
            MissingRequiredIdentifier: If the payload carries no device id.
        """
        device_id = resolve_device_id(payload)
        if device_id is None:
            raise MissingRequiredIdentifier("MAC Obrigatório")

        config = replace(
            resolve_config(payload, device_id=device_id),
            updated_at=datetime.now(timezone.utc),
        )
        saved = await self.store.config_upsert(config)
        logger.info("Sensor configuration saved", device_id=device_id)
        return saved
