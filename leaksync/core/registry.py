"""Static lookup of configurable device parameters."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from leaksync.core.codec import SUPPORTED_WIDTHS, signed_range
from leaksync.core.errors import ParameterRegistryError, SettingValidationError
from leaksync.core.model import ParameterDescriptor, WAKE_UP_INTERVAL_KEY, WakeUpSpec

VALUE_MAPPERS: dict[str, Callable[[int], int]] = {
    "identity": lambda value: value,
    "minutes_to_seconds": lambda value: value * 60,
    "hours_to_seconds": lambda value: value * 3600,
}


def resolve_mapper(name: str | None) -> Callable[[int], int] | None:
    if name is None or name == "identity":
        return None
    mapper = VALUE_MAPPERS.get(name)
    if mapper is None:
        available = ", ".join(sorted(VALUE_MAPPERS))
        raise ParameterRegistryError(f"Unknown value mapper '{name}'. Available: {available}")
    return mapper


class ParameterRegistry:
    """Descriptors indexed by wire parameter number, iterated in ascending id order."""

    def __init__(self, descriptors: Iterable[ParameterDescriptor]) -> None:
        self._by_id: dict[int, ParameterDescriptor] = {}
        self._by_name: dict[str, ParameterDescriptor] = {}
        for descriptor in descriptors:
            _check_descriptor(descriptor)
            if descriptor.id in self._by_id:
                raise ParameterRegistryError(f"Duplicate parameter id {descriptor.id}")
            if descriptor.name in self._by_name:
                raise ParameterRegistryError(f"Duplicate parameter name '{descriptor.name}'")
            self._by_id[descriptor.id] = descriptor
            self._by_name[descriptor.name] = descriptor
        self._ordered = tuple(self._by_id[key] for key in sorted(self._by_id))

    def __iter__(self) -> Iterator[ParameterDescriptor]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def descriptor_for(self, key: int | str) -> ParameterDescriptor | None:
        if isinstance(key, str):
            return self._by_name.get(key)
        return self._by_id.get(key)


def _check_descriptor(descriptor: ParameterDescriptor) -> None:
    if not 1 <= descriptor.id <= 255:
        raise ParameterRegistryError(f"Parameter id {descriptor.id} must be within 1..255")
    if descriptor.wire_size not in SUPPORTED_WIDTHS:
        raise ParameterRegistryError(
            f"Parameter {descriptor.id} ({descriptor.name}) has unsupported size {descriptor.wire_size}"
        )
    low, high = descriptor.valid_range
    if low > high:
        raise ParameterRegistryError(f"Parameter {descriptor.name} has an empty range {low}..{high}")
    wire_low, wire_high = signed_range(descriptor.wire_size)
    if low < wire_low or high > wire_high:
        raise ParameterRegistryError(
            f"Parameter {descriptor.name} range {low}..{high} does not fit "
            f"{descriptor.wire_size} byte(s) ({wire_low}..{wire_high})"
        )
    if not low <= descriptor.default_value <= high:
        raise ParameterRegistryError(
            f"Parameter {descriptor.name} default {descriptor.default_value} is outside {low}..{high}"
        )
    if descriptor.kind == "enum" and descriptor.default_value not in descriptor.options:
        raise ParameterRegistryError(
            f"Parameter {descriptor.name} default {descriptor.default_value} is not one of its options"
        )

    # Everything the planner can encode must fit the wire width.
    if descriptor.fixed_value is not None:
        encoded = (descriptor.fixed_value,)
    elif descriptor.value_mapper is not None:
        encoded = (descriptor.value_mapper(low), descriptor.value_mapper(high))
    else:
        encoded = ()
    for value in encoded:
        if not wire_low <= value <= wire_high:
            raise ParameterRegistryError(
                f"Parameter {descriptor.name} encodes {value} which does not fit "
                f"{descriptor.wire_size} byte(s) ({wire_low}..{wire_high})"
            )


def desired_configuration(registry: ParameterRegistry, settings: dict[str, Any]) -> dict[str, int]:
    """Derive the values the device should hold from settings plus defaults."""
    return {
        descriptor.name: descriptor.desired_value(settings.get(descriptor.name))
        for descriptor in registry
    }


def desired_wake_up_hours(wake_up: WakeUpSpec, settings: dict[str, Any]) -> int:
    value = settings.get(WAKE_UP_INTERVAL_KEY)
    return int(value) if value is not None else wake_up.default_hours


def validate_setting(
    registry: ParameterRegistry,
    wake_up: WakeUpSpec,
    name: str,
    value: int,
) -> int:
    """Range check a user-entered value the way a preference screen would."""
    if name == WAKE_UP_INTERVAL_KEY:
        low, high = wake_up.min_hours, wake_up.max_hours
    else:
        descriptor = registry.descriptor_for(name)
        if descriptor is None:
            available = ", ".join([d.name for d in registry] + [WAKE_UP_INTERVAL_KEY])
            raise SettingValidationError(f"Unknown setting '{name}'. Available: {available}")
        if descriptor.fixed_value is not None:
            raise SettingValidationError(f"Setting '{name}' is fixed at {descriptor.fixed_value}")
        if descriptor.kind == "enum":
            if value not in descriptor.options:
                allowed = ", ".join(f"{k} ({v})" for k, v in sorted(descriptor.options.items()))
                raise SettingValidationError(f"Setting '{name}' must be one of: {allowed}")
            return value
        low, high = descriptor.valid_range
    if not low <= value <= high:
        raise SettingValidationError(f"Setting '{name}' must be within {low}..{high}, got {value}")
    return value
