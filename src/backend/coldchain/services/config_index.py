"""Sensor configuration resolution and lookup.

Raw configuration payloads come from two places: rows stored by earlier
versions of the dashboard, and PATCH bodies sent by the current one. Both use
slightly different field names and loose types ('' for "unset", strings for
numbers). Every field of :class:`SensorConfig` is resolved through the single
policy table below instead of ad-hoc fallbacks in each handler.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from coldchain.services.records import SensorConfig

_TRUE_STRINGS = frozenset({"true", "t", "1", "yes", "y", "sim", "on"})


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _strict_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_is(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class FieldPolicy:
    """How one SensorConfig field is read from a raw payload.

    ``sources`` are tried in order; the first one present whose coerced value
    is not None wins. Otherwise ``default`` is used.
    """

    name: str
    sources: tuple[str, ...]
    coerce: Callable[[Any], Any]
    default: Any = None

    def resolve(self, raw: Mapping[str, Any]) -> Any:
        for source in self.sources:
            if source in raw:
                value = self.coerce(raw[source])
                if value is not None:
                    return value
        return self.default


CONFIG_FIELD_POLICIES: tuple[FieldPolicy, ...] = (
    FieldPolicy("display_name", ("display_name",), _text),
    FieldPolicy("battery_warning_pct", ("batt_warning", "battery_warning_pct"), _number),
    FieldPolicy("temp_min", ("temp_min", "min_temp"), _number),
    FieldPolicy("temp_max", ("temp_max", "max_temp"), _number),
    FieldPolicy("humidity_min", ("hum_min", "min_hum", "humidity_min"), _number),
    FieldPolicy("humidity_max", ("hum_max", "max_hum", "humidity_max"), _number),
    FieldPolicy(
        "linked_door_device_id",
        ("sensor_porta_vinculado", "linked_door_device_id"),
        _text,
    ),
    FieldPolicy("maintenance_mode", ("em_manutencao", "maintenance_mode"), _strict_bool, False),
    FieldPolicy("updated_at", ("updated_at",), _as_is),
)

DEVICE_ID_SOURCES = ("mac", "device_id")


def resolve_device_id(raw: Mapping[str, Any]) -> str | None:
    """Return the device identifier of a raw payload, if any."""
    for source in DEVICE_ID_SOURCES:
        value = _text(raw.get(source))
        if value is not None:
            return value
    return None


def resolve_config(raw: Mapping[str, Any], device_id: str | None = None) -> SensorConfig:
    """Build a typed SensorConfig from a loosely-typed payload."""
    resolved_id = device_id or resolve_device_id(raw)
    if resolved_id is None:
        raise ValueError("Configuration payload has no device identifier")

    values = {policy.name: policy.resolve(raw) for policy in CONFIG_FIELD_POLICIES}
    return SensorConfig(device_id=resolved_id, **values)


def build_config_index(configs: Iterable[SensorConfig]) -> dict[str, SensorConfig]:
    """Index configurations by device_id.

    Configurations are unique per device in the store; should duplicates ever
    appear, the last one wins, matching upsert semantics.
    """
    return {config.device_id: config for config in configs}
