"""Driver service: the host-facing lifecycle of one leak sensor."""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Protocol

from leaksync.core.device_match import fingerprint_from_metadata, match_score
from leaksync.core.dispatcher import DispatchResult, ReportDispatcher
from leaksync.core.errors import FrameDecodeError, SettingValidationError
from leaksync.core.frames import Command, Report, decode_frame, parse_hex
from leaksync.core.model import (
    LOG_ENABLE_KEY,
    TXT_ENABLE_KEY,
    WAKE_UP_INTERVAL_KEY,
    DeviceProfile,
    DeviceState,
    Event,
    PendingFlags,
)
from leaksync.core.planner import COMMAND_INTERVAL_MS, SyncPlan, plan
from leaksync.core.registry import ParameterRegistry, desired_configuration, desired_wake_up_hours
from leaksync.core.scheduler import Scheduler
from leaksync.core.storage import StateStore
from leaksync.transports.base import CommandTransport

INSTALL_SYNC_DELAY_S = 1.0
WAKE_UP_SYNC_DELAY_S = 0.2
LOGS_OFF_DELAY_S = 1800.0
LOGGER = logging.getLogger(__name__)


class EventSink(Protocol):
    def emit(self, event: Event) -> None:
        """Publish a state-change event to the host automation layer."""


class RecordingEventSink:
    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)


def coerce_integer(value: Any) -> int:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise SettingValidationError(f"'{value}' is not a number") from exc
    if not number.is_finite():
        raise SettingValidationError(f"'{value}' is not a finite number")
    return int(number.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class LeakSensorDriver:
    def __init__(
        self,
        profile: DeviceProfile,
        *,
        device_id: str,
        store: StateStore,
        transport: CommandTransport,
        scheduler: Scheduler,
        events: EventSink | None = None,
        hub_node_id: int = 1,
    ) -> None:
        self.profile = profile
        self.device_id = device_id
        self.store = store
        self.transport = transport
        self.scheduler = scheduler
        self.events = events or RecordingEventSink()
        self.hub_node_id = hub_node_id
        self.registry = ParameterRegistry(profile.parameters)
        self.dispatcher = ReportDispatcher(self.registry)

    @property
    def state(self) -> DeviceState:
        return self.store.load(self.device_id)

    def _save(self, state: DeviceState) -> None:
        self.store.save(self.device_id, state)

    def _debug(self, state: DeviceState, msg: str, *args: Any) -> None:
        if state.settings.get(LOG_ENABLE_KEY, True):
            LOGGER.debug(msg, *args)

    def _send(self, commands: tuple[Command, ...] | list[Command]) -> None:
        self.transport.send([command.to_bytes() for command in commands], interval_ms=COMMAND_INTERVAL_MS)

    def _log_event(self, state: DeviceState, event: Event) -> None:
        self.events.emit(event)
        if event.description:
            if event.warn:
                LOGGER.warning(event.description)
            elif state.settings.get(TXT_ENABLE_KEY, True):
                LOGGER.info(event.description)

    def installed(self) -> None:
        state = self.state
        self._save(replace(state, flags=PendingFlags(resync=True, refresh=True)))
        self.scheduler.schedule(INSTALL_SYNC_DELAY_S, self.device_sync, name="deviceSync")
        self.scheduler.schedule(LOGS_OFF_DELAY_S, self.logs_off, name="logsOff")

    def updated(self, settings: dict[str, Any]) -> tuple[str, ...]:
        """Merge preference changes, coercing numeric settings to integers.

        Returns the warnings raised for values that had to be corrected.
        """
        state = self.state
        merged = {**state.settings, **settings}
        self._debug(state, "Updated preferences")

        warnings: list[str] = []
        numeric = [(d.name, d.title or d.name) for d in self.registry if d.kind in ("number", "enum")]
        numeric.append((WAKE_UP_INTERVAL_KEY, WAKE_UP_INTERVAL_KEY))
        for name, title in numeric:
            value = merged.get(name)
            if value is None:
                continue
            coerced = coerce_integer(value)
            if Decimal(str(value).strip()) != coerced:
                warning = f"{title} must be an integer: value changed from {value} to {coerced}"
                LOGGER.warning(warning)
                warnings.append(warning)
            merged[name] = coerced

        self._save(replace(state, settings=merged))
        LOGGER.warning("Debug logging is %s", merged.get(LOG_ENABLE_KEY, True))
        LOGGER.warning("Description logging is %s", merged.get(TXT_ENABLE_KEY, True))
        return tuple(warnings)

    def configure(self) -> None:
        state = self.state
        self._save(replace(state, flags=replace(state.flags, resync=True)))
        LOGGER.warning("Configuration will resync when device wakes up")

    def refresh(self) -> None:
        state = self.state
        self._save(replace(state, flags=replace(state.flags, refresh=True)))
        LOGGER.warning("Data will refresh when device wakes up")

    def logs_off(self) -> None:
        state = self.state
        self._save(replace(state, settings={**state.settings, LOG_ENABLE_KEY: False}))
        LOGGER.warning("Debug logging disabled")

    def parse(self, description: str) -> DispatchResult | None:
        """Decode and dispatch one inbound frame; malformed input is dropped."""
        try:
            report = decode_frame(parse_hex(description))
        except FrameDecodeError as exc:
            LOGGER.warning("Non Z-Wave parse event: %s (%s)", description, exc)
            return None
        return self.handle_report(report)

    def handle_report(self, report: Report) -> DispatchResult:
        state = self.state
        result = self.dispatcher.dispatch(state, report)
        if result.state != state:
            self._save(result.state)
            if result.state.metadata != state.metadata:
                self._check_fingerprint(result.state)

        for event in result.events:
            self._log_event(result.state, event)
        if result.commands:
            self._send(result.commands)
        if result.sync_requested:
            self._debug(result.state, "Received WakeUpNotification")
            self.scheduler.schedule(WAKE_UP_SYNC_DELAY_S, self.device_sync, name="deviceSync")
        return result

    def _check_fingerprint(self, state: DeviceState) -> None:
        fingerprint = fingerprint_from_metadata(state.metadata)
        if fingerprint is None:
            return
        if match_score(fingerprint, self.profile) < 3:
            LOGGER.warning(
                "Device %s reports fingerprint %s which is not listed by profile '%s'",
                self.device_id,
                fingerprint,
                self.profile.id,
            )

    def preview_sync(self) -> SyncPlan:
        """Plan against the stored state without clearing flags or sending."""
        state = self.state
        return plan(
            self.registry,
            desired_configuration(self.registry, state.settings),
            state,
            desired_wake_up_hours(self.profile.wake_up, state.settings),
            hub_node_id=self.hub_node_id,
        )

    def device_sync(self) -> SyncPlan:
        result = self.preview_sync()
        # Flags are persisted as cleared before anything goes on the air.
        self._save(result.state)
        self._debug(result.state, "deviceSync: pendingResync %s, pendingRefresh %s", result.resync, result.refresh)
        self._send(result.batch)
        return result
