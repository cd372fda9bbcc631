"""Inbound report dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from leaksync.core.codec import from_wire
from leaksync.core.errors import FrameDecodeError, WireCodecError
from leaksync.core.frames import (
    NOTIFICATION_TYPE_WATER,
    BatteryReport,
    Command,
    ConfigurationReport,
    ManufacturerSpecificReport,
    NotificationReport,
    Report,
    ReportKind,
    SupervisionGet,
    SupervisionReport,
    VersionReport,
    WakeUpIntervalReport,
    decode_frame,
)
from leaksync.core.model import WAKE_UP_INTERVAL_KEY, DeviceState, Event
from leaksync.core.registry import ParameterRegistry

BATTERY_CRITICAL = 0xFF
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    state: DeviceState
    events: tuple[Event, ...] = ()
    commands: tuple[Command, ...] = ()
    sync_requested: bool = False


@dataclass
class _Outcome:
    events: list[Event] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    sync_requested: bool = False


def hours_from_seconds(seconds: int) -> int | float:
    hours = seconds / 3600
    return int(hours) if hours.is_integer() else hours


class ReportDispatcher:
    """Routes each decoded report to the handler for its `ReportKind`.

    Handlers receive the current state and return the next one; they never
    talk to the transport. Outbound acknowledgments are collected in the
    result for the caller to send.
    """

    def __init__(self, registry: ParameterRegistry) -> None:
        self.registry = registry
        self._handlers: dict[ReportKind, Callable[[DeviceState, Report, _Outcome], DeviceState]] = {
            ReportKind.BATTERY: self._battery,
            ReportKind.NOTIFICATION: self._notification,
            ReportKind.CONFIGURATION: self._configuration,
            ReportKind.WAKE_UP_INTERVAL: self._wake_up_interval,
            ReportKind.WAKE_UP_NOTIFICATION: self._wake_up_notification,
            ReportKind.VERSION: self._version,
            ReportKind.MANUFACTURER_SPECIFIC: self._manufacturer_specific,
            ReportKind.SUPERVISION_GET: self._supervision_get,
            ReportKind.UNRECOGNIZED: self._unrecognized,
        }

    def dispatch(self, state: DeviceState, report: Report) -> DispatchResult:
        outcome = _Outcome()
        state = self._dispatch(state, report, outcome)
        return DispatchResult(
            state=state,
            events=tuple(outcome.events),
            commands=tuple(outcome.commands),
            sync_requested=outcome.sync_requested,
        )

    def _dispatch(self, state: DeviceState, report: Report, outcome: _Outcome) -> DeviceState:
        LOGGER.debug("%s: %s", report.kind.value, report)
        return self._handlers[report.kind](state, report, outcome)

    def _battery(self, state: DeviceState, report: BatteryReport, outcome: _Outcome) -> DeviceState:
        if report.level == BATTERY_CRITICAL:
            outcome.events.append(Event("battery", "0", "%", "Battery is critically low", warn=True))
        else:
            outcome.events.append(Event("battery", str(report.level), "%", f"Battery is {report.level}%"))
        return state

    def _notification(self, state: DeviceState, report: NotificationReport, outcome: _Outcome) -> DeviceState:
        if report.notification_type != NOTIFICATION_TYPE_WATER:
            LOGGER.warning("Unknown NotificationReport: %s", report)
            return state
        value = "wet" if report.event else "dry"
        outcome.events.append(Event("water", value, None, f"Sensor is {value}"))
        return state

    def _configuration(self, state: DeviceState, report: ConfigurationReport, outcome: _Outcome) -> DeviceState:
        descriptor = self.registry.descriptor_for(report.parameter_number)
        if descriptor is None:
            LOGGER.warning("Unknown ConfigurationReport received: %s", report)
            return state
        try:
            value = from_wire(report.size, report.value)
        except WireCodecError as exc:
            LOGGER.warning("Undecodable ConfigurationReport %s: %s", report, exc)
            return state
        last_known = {**state.last_known, descriptor.name: value}
        return replace(state, last_known=last_known)

    def _wake_up_interval(self, state: DeviceState, report: WakeUpIntervalReport, outcome: _Outcome) -> DeviceState:
        hours = hours_from_seconds(report.seconds)
        LOGGER.debug("Wakeup interval %s hours", hours)
        last_known = {**state.last_known, WAKE_UP_INTERVAL_KEY: hours}
        return replace(state, last_known=last_known)

    def _wake_up_notification(self, state: DeviceState, report: Report, outcome: _Outcome) -> DeviceState:
        outcome.sync_requested = True
        return state

    def _version(self, state: DeviceState, report: VersionReport, outcome: _Outcome) -> DeviceState:
        metadata = {
            **state.metadata,
            "firmwareVersion": f"{report.firmware0_version}.{report.firmware0_sub_version}",
            "protocolVersion": f"{report.protocol_version}.{report.protocol_sub_version}",
        }
        if report.hardware_version is not None:
            metadata["hardwareVersion"] = str(report.hardware_version)
        return replace(state, metadata=metadata)

    def _manufacturer_specific(
        self, state: DeviceState, report: ManufacturerSpecificReport, outcome: _Outcome
    ) -> DeviceState:
        metadata = {
            **state.metadata,
            "manufacturer": f"{report.manufacturer_id:04X}",
            "deviceType": f"{report.product_type_id:04X}",
            "deviceId": f"{report.product_id:04X}",
        }
        return replace(state, metadata=metadata)

    def _supervision_get(self, state: DeviceState, report: SupervisionGet, outcome: _Outcome) -> DeviceState:
        try:
            inner = decode_frame(report.encapsulated)
        except FrameDecodeError as exc:
            LOGGER.warning("Undecodable supervised command %s: %s", report.encapsulated.hex(), exc)
        else:
            state = self._dispatch(state, inner, outcome)
        # Acknowledged whether or not the inner command was understood.
        outcome.commands.append(SupervisionReport(session_id=report.session_id))
        return state

    def _unrecognized(self, state: DeviceState, report: Report, outcome: _Outcome) -> DeviceState:
        LOGGER.warning("Unhandled cmd: %s", report)
        return state
