"""Core data models used across loader, planner, dispatcher, and CLI."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

WAKE_UP_INTERVAL_KEY = "wakeUpInterval"
LOG_ENABLE_KEY = "logEnable"
TXT_ENABLE_KEY = "txtEnable"


@dataclass(frozen=True)
class ParameterDescriptor:
    id: int
    name: str
    wire_size: int
    valid_range: tuple[int, int]
    default_value: int
    title: str = ""
    kind: str = "number"
    options: dict[int, str] = field(default_factory=dict)
    value_mapper: Callable[[int], int] | None = None
    fixed_value: int | None = None

    def desired_value(self, setting: Any) -> int:
        """Value to encode for a raw user setting, defaults and mapper applied."""
        if self.fixed_value is not None:
            return self.fixed_value
        value = int(setting) if setting is not None else self.default_value
        if self.value_mapper is not None:
            value = self.value_mapper(value)
        return value


@dataclass(frozen=True)
class Fingerprint:
    manufacturer_id: int
    product_type_id: int
    product_id: int

    def __str__(self) -> str:
        return f"{self.manufacturer_id:04X}:{self.product_type_id:04X}:{self.product_id:04X}"


@dataclass(frozen=True)
class WakeUpSpec:
    default_hours: int = 12
    min_hours: int = 1
    max_hours: int = 24


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    fingerprints: tuple[Fingerprint, ...]
    parameters: tuple[ParameterDescriptor, ...]
    wake_up: WakeUpSpec = WakeUpSpec()


@dataclass(frozen=True)
class PendingFlags:
    resync: bool = False
    refresh: bool = False


@dataclass(frozen=True)
class DeviceState:
    """Per-device persisted state.

    `last_known` only ever holds values confirmed by a device report.
    """

    last_known: dict[str, int | float] = field(default_factory=dict)
    flags: PendingFlags = PendingFlags()
    metadata: dict[str, str] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Event:
    name: str
    value: str
    unit: str | None = None
    description: str | None = None
    warn: bool = False
