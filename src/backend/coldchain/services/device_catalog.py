"""Device catalog: one descriptor per (gateway, device) pair."""

from collections.abc import Iterable, Mapping

from coldchain.services.records import DeviceDescriptor, SensorConfig

DEFAULT_DEVICE_NAME = "Novo Sensor"
DEFAULT_BATTERY_WARNING_PCT = 20.0


def build_device_catalog(
    pairs: Iterable[tuple[str, str]],
    config_index: Mapping[str, SensorConfig],
) -> list[DeviceDescriptor]:
    """Reduce a (gateway_id, device_id) stream to unique descriptors.

    Key: the composite (gateway_id, device_id). The same device heard by two
    gateways yields two descriptors. Output order is first-occurrence order of
    the input, so callers that need a stable list must pass a stably ordered
    stream.
    """
    seen: set[tuple[str, str]] = set()
    catalog: list[DeviceDescriptor] = []

    for gateway_id, device_id in pairs:
        key = (gateway_id, device_id)
        if key in seen:
            continue
        seen.add(key)
        catalog.append(describe_device(gateway_id, device_id, config_index.get(device_id)))

    return catalog


def describe_device(
    gateway_id: str, device_id: str, config: SensorConfig | None
) -> DeviceDescriptor:
    """Merge a (gateway, device) pair with its configuration or defaults."""
    if config is None:
        return DeviceDescriptor(
            gateway_id=gateway_id,
            device_id=device_id,
            display_name=DEFAULT_DEVICE_NAME,
            battery_warning_pct=DEFAULT_BATTERY_WARNING_PCT,
        )

    battery_warning = config.battery_warning_pct
    return DeviceDescriptor(
        gateway_id=gateway_id,
        device_id=device_id,
        display_name=config.display_name or DEFAULT_DEVICE_NAME,
        battery_warning_pct=(
            battery_warning if battery_warning is not None else DEFAULT_BATTERY_WARNING_PCT
        ),
        temp_min=config.temp_min,
        temp_max=config.temp_max,
        humidity_min=config.humidity_min,
        humidity_max=config.humidity_max,
        linked_door_device_id=config.linked_door_device_id,
        maintenance_mode=bool(config.maintenance_mode),
    )
