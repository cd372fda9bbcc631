"""Z-Wave application command frames understood by the leak sensor driver.

Inbound frames are decoded into typed report objects carrying an explicit
`ReportKind`; outbound commands know how to serialize themselves. Only the
command classes the driver talks to are modelled, anything else decodes to
`UnrecognizedReport`.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from leaksync.core.errors import FrameDecodeError

COMMAND_CLASS_SUPERVISION = 0x6C
COMMAND_CLASS_CONFIGURATION = 0x70
COMMAND_CLASS_NOTIFICATION = 0x71
COMMAND_CLASS_MANUFACTURER_SPECIFIC = 0x72
COMMAND_CLASS_BATTERY = 0x80
COMMAND_CLASS_WAKE_UP = 0x84
COMMAND_CLASS_VERSION = 0x86

NOTIFICATION_TYPE_WATER = 0x05
WATER_LEAK_DETECTED = 0x02
SUPERVISION_STATUS_SUCCESS = 0xFF

_HEX_RE = re.compile(r"^[0-9a-f]+$")
_MAX_FRAME_BYTES = 256


class ReportKind(str, Enum):
    """Inbound report variants the dispatcher switches on."""

    BATTERY = "battery_report"
    NOTIFICATION = "notification_report"
    CONFIGURATION = "configuration_report"
    WAKE_UP_INTERVAL = "wake_up_interval_report"
    WAKE_UP_NOTIFICATION = "wake_up_notification"
    VERSION = "version_report"
    MANUFACTURER_SPECIFIC = "manufacturer_specific_report"
    SUPERVISION_GET = "supervision_get"
    UNRECOGNIZED = "unrecognized"


class Command:
    """Outbound command base: command class and command byte plus payload."""

    command_class: ClassVar[int]
    command: ClassVar[int]

    def payload(self) -> bytes:
        return b""

    def to_bytes(self) -> bytes:
        return bytes((self.command_class, self.command)) + self.payload()

    def hex(self) -> str:
        return self.to_bytes().hex()


@dataclass(frozen=True)
class ConfigurationSet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_CONFIGURATION
    command: ClassVar[int] = 0x04

    parameter_number: int
    size: int
    value: int

    def payload(self) -> bytes:
        return bytes((self.parameter_number, self.size & 0x07)) + self.value.to_bytes(self.size, "big")


@dataclass(frozen=True)
class ConfigurationGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_CONFIGURATION
    command: ClassVar[int] = 0x05

    parameter_number: int

    def payload(self) -> bytes:
        return bytes((self.parameter_number,))


@dataclass(frozen=True)
class WakeUpIntervalSet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_WAKE_UP
    command: ClassVar[int] = 0x04

    seconds: int
    node_id: int

    def payload(self) -> bytes:
        return self.seconds.to_bytes(3, "big") + bytes((self.node_id,))


@dataclass(frozen=True)
class WakeUpIntervalGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_WAKE_UP
    command: ClassVar[int] = 0x05


@dataclass(frozen=True)
class WakeUpNoMoreInformation(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_WAKE_UP
    command: ClassVar[int] = 0x08


@dataclass(frozen=True)
class BatteryGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_BATTERY
    command: ClassVar[int] = 0x02


@dataclass(frozen=True)
class NotificationGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_NOTIFICATION
    command: ClassVar[int] = 0x04

    notification_type: int
    event: int

    def payload(self) -> bytes:
        # Leading zero is the legacy v1 alarm type.
        return bytes((0x00, self.notification_type, self.event))


@dataclass(frozen=True)
class VersionGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_VERSION
    command: ClassVar[int] = 0x11


@dataclass(frozen=True)
class ManufacturerSpecificGet(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_MANUFACTURER_SPECIFIC
    command: ClassVar[int] = 0x04


@dataclass(frozen=True)
class SupervisionReport(Command):
    command_class: ClassVar[int] = COMMAND_CLASS_SUPERVISION
    command: ClassVar[int] = 0x02

    session_id: int
    status: int = SUPERVISION_STATUS_SUCCESS
    more_status_updates: bool = False
    duration: int = 0

    def payload(self) -> bytes:
        flags = (0x80 if self.more_status_updates else 0x00) | (self.session_id & 0x3F)
        return bytes((flags, self.status, self.duration))


@dataclass(frozen=True)
class BatteryReport:
    kind: ClassVar[ReportKind] = ReportKind.BATTERY

    level: int


@dataclass(frozen=True)
class NotificationReport:
    kind: ClassVar[ReportKind] = ReportKind.NOTIFICATION

    notification_type: int
    event: int
    notification_status: int = 0xFF
    event_parameters: bytes = b""


@dataclass(frozen=True)
class ConfigurationReport:
    kind: ClassVar[ReportKind] = ReportKind.CONFIGURATION

    parameter_number: int
    size: int
    value: int


@dataclass(frozen=True)
class WakeUpIntervalReport:
    kind: ClassVar[ReportKind] = ReportKind.WAKE_UP_INTERVAL

    seconds: int
    node_id: int


@dataclass(frozen=True)
class WakeUpNotification:
    kind: ClassVar[ReportKind] = ReportKind.WAKE_UP_NOTIFICATION


@dataclass(frozen=True)
class VersionReport:
    kind: ClassVar[ReportKind] = ReportKind.VERSION

    library_type: int
    protocol_version: int
    protocol_sub_version: int
    firmware0_version: int
    firmware0_sub_version: int
    hardware_version: int | None = None


@dataclass(frozen=True)
class ManufacturerSpecificReport:
    kind: ClassVar[ReportKind] = ReportKind.MANUFACTURER_SPECIFIC

    manufacturer_id: int
    product_type_id: int
    product_id: int


@dataclass(frozen=True)
class SupervisionGet:
    kind: ClassVar[ReportKind] = ReportKind.SUPERVISION_GET

    session_id: int
    status_updates: bool
    encapsulated: bytes


@dataclass(frozen=True)
class UnrecognizedReport:
    kind: ClassVar[ReportKind] = ReportKind.UNRECOGNIZED

    command_class: int
    command: int
    payload: bytes = b""


Report = (
    BatteryReport
    | NotificationReport
    | ConfigurationReport
    | WakeUpIntervalReport
    | WakeUpNotification
    | VersionReport
    | ManufacturerSpecificReport
    | SupervisionGet
    | UnrecognizedReport
)


def _require(payload: bytes, length: int, name: str) -> None:
    if len(payload) < length:
        raise FrameDecodeError(f"{name} needs at least {length} payload byte(s), got {len(payload)}")


def _battery_report(payload: bytes) -> BatteryReport:
    _require(payload, 1, "BatteryReport")
    return BatteryReport(level=payload[0])


def _notification_report(payload: bytes) -> NotificationReport:
    _require(payload, 6, "NotificationReport")
    params = b""
    if len(payload) > 6:
        params_length = payload[6] & 0x1F
        params = payload[7 : 7 + params_length]
    return NotificationReport(
        notification_type=payload[4],
        event=payload[5],
        notification_status=payload[3],
        event_parameters=params,
    )


def _configuration_report(payload: bytes) -> ConfigurationReport:
    _require(payload, 2, "ConfigurationReport")
    size = payload[1] & 0x07
    if size not in (1, 2, 4):
        raise FrameDecodeError(f"ConfigurationReport has invalid size {size}")
    _require(payload, 2 + size, "ConfigurationReport")
    return ConfigurationReport(
        parameter_number=payload[0],
        size=size,
        value=int.from_bytes(payload[2 : 2 + size], "big"),
    )


def _wake_up_interval_report(payload: bytes) -> WakeUpIntervalReport:
    _require(payload, 4, "WakeUpIntervalReport")
    return WakeUpIntervalReport(seconds=int.from_bytes(payload[0:3], "big"), node_id=payload[3])


def _wake_up_notification(payload: bytes) -> WakeUpNotification:
    return WakeUpNotification()


def _version_report(payload: bytes) -> VersionReport:
    _require(payload, 5, "VersionReport")
    return VersionReport(
        library_type=payload[0],
        protocol_version=payload[1],
        protocol_sub_version=payload[2],
        firmware0_version=payload[3],
        firmware0_sub_version=payload[4],
        hardware_version=payload[5] if len(payload) > 5 else None,
    )


def _manufacturer_specific_report(payload: bytes) -> ManufacturerSpecificReport:
    _require(payload, 6, "ManufacturerSpecificReport")
    return ManufacturerSpecificReport(
        manufacturer_id=int.from_bytes(payload[0:2], "big"),
        product_type_id=int.from_bytes(payload[2:4], "big"),
        product_id=int.from_bytes(payload[4:6], "big"),
    )


def _supervision_get(payload: bytes) -> SupervisionGet:
    _require(payload, 2, "SupervisionGet")
    length = payload[1]
    encapsulated = payload[2 : 2 + length]
    if len(encapsulated) != length:
        raise FrameDecodeError(
            f"SupervisionGet declares {length} encapsulated byte(s), got {len(encapsulated)}"
        )
    return SupervisionGet(
        session_id=payload[0] & 0x3F,
        status_updates=bool(payload[0] & 0x80),
        encapsulated=encapsulated,
    )


_DECODERS: dict[tuple[int, int], Callable[[bytes], Report]] = {
    (COMMAND_CLASS_BATTERY, 0x03): _battery_report,
    (COMMAND_CLASS_NOTIFICATION, 0x05): _notification_report,
    (COMMAND_CLASS_CONFIGURATION, 0x06): _configuration_report,
    (COMMAND_CLASS_WAKE_UP, 0x06): _wake_up_interval_report,
    (COMMAND_CLASS_WAKE_UP, 0x07): _wake_up_notification,
    (COMMAND_CLASS_VERSION, 0x12): _version_report,
    (COMMAND_CLASS_MANUFACTURER_SPECIFIC, 0x05): _manufacturer_specific_report,
    (COMMAND_CLASS_SUPERVISION, 0x01): _supervision_get,
}


def decode_frame(data: bytes) -> Report:
    if len(data) < 2:
        raise FrameDecodeError(f"Command frame too short ({len(data)} byte(s))")
    command_class, command, payload = data[0], data[1], bytes(data[2:])
    decoder = _DECODERS.get((command_class, command))
    if decoder is None:
        return UnrecognizedReport(command_class=command_class, command=command, payload=payload)
    return decoder(payload)


def parse_hex(text: str) -> bytes:
    normalized = text.strip().lower().replace(" ", "")
    if normalized.startswith("0x"):
        normalized = normalized[2:]
    if len(normalized) == 0:
        raise FrameDecodeError("Command frame must not be empty")
    if len(normalized) % 2 != 0:
        raise FrameDecodeError("Command frame must have even-length hex")
    if not _HEX_RE.match(normalized):
        raise FrameDecodeError("Command frame must contain only [0-9a-f]")
    frame = bytes.fromhex(normalized)
    if len(frame) > _MAX_FRAME_BYTES:
        raise FrameDecodeError(f"Command frame exceeds max size {_MAX_FRAME_BYTES} bytes")
    return frame
