"""Stable public API for building tooling on top of leaksync.

This module is the supported integration surface for third-party callers
(hub adapters, simulators, scripts). Avoid importing from internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from leaksync.core.device_match import best_profile_for_fingerprint
from leaksync.core.dispatcher import DispatchResult
from leaksync.core.errors import (
    FrameDecodeError,
    LeaksyncError,
    ParameterRegistryError,
    ProfileLoadError,
    ProfileValidationError,
    SettingValidationError,
    StateStoreError,
    TransportError,
    TransportSendError,
    WireCodecError,
)
from leaksync.core.model import (
    LOG_ENABLE_KEY,
    TXT_ENABLE_KEY,
    DeviceProfile,
    DeviceState,
    Event,
    Fingerprint,
    ParameterDescriptor,
    PendingFlags,
)
from leaksync.core.planner import SyncPlan
from leaksync.core.profile_loader import load_profiles
from leaksync.core.registry import validate_setting
from leaksync.core.scheduler import ManualScheduler, Scheduler
from leaksync.core.service import EventSink, LeakSensorDriver, coerce_integer
from leaksync.core.storage import JsonStateStore, StateStore
from leaksync.transports.base import CommandTransport

__all__ = [
    "LeaksyncError",
    "FrameDecodeError",
    "ParameterRegistryError",
    "ProfileLoadError",
    "ProfileValidationError",
    "SettingValidationError",
    "StateStoreError",
    "TransportError",
    "TransportSendError",
    "WireCodecError",
    "DeviceProfile",
    "DeviceState",
    "DispatchResult",
    "Event",
    "Fingerprint",
    "ParameterDescriptor",
    "PendingFlags",
    "SyncPlan",
    "DeviceSession",
    "Client",
]

DEFAULT_PROFILE_ID = "zooz_zse42"


@dataclass(frozen=True)
class DeviceSession:
    """A profile bound to one device's persisted state."""

    profile: DeviceProfile
    driver: LeakSensorDriver


class Client:
    """Public client for running leak sensor drivers outside a real hub.

    A `Client` wraps profile loading, state persistence, and driver
    construction. Each call to `open_device` returns a driver bound to the
    shared store, transport, and scheduler.
    """

    def __init__(
        self,
        *,
        transport: CommandTransport,
        store: StateStore | None = None,
        scheduler: Scheduler | None = None,
        events: EventSink | None = None,
        hub_node_id: int = 1,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self.transport = transport
        self.store = store or JsonStateStore()
        self.scheduler = scheduler or ManualScheduler()
        self.events = events
        self.hub_node_id = hub_node_id

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def get_profile(self, profile_id: str | None = None) -> DeviceProfile:
        profile_id = profile_id or DEFAULT_PROFILE_ID
        profile = self.profiles.get(profile_id)
        if profile is None:
            available = ", ".join(sorted(self.profiles))
            raise ProfileLoadError(f"Unknown profile '{profile_id}'. Available: {available}")
        return profile

    def match_profile(self, fingerprint: Fingerprint) -> DeviceProfile | None:
        return best_profile_for_fingerprint(fingerprint, self.profiles)

    def open_device(self, device_id: str, *, profile_id: str | None = None) -> DeviceSession:
        profile = self.get_profile(profile_id)
        driver = LeakSensorDriver(
            profile,
            device_id=device_id,
            store=self.store,
            transport=self.transport,
            scheduler=self.scheduler,
            events=self.events,
            hub_node_id=self.hub_node_id,
        )
        return DeviceSession(profile=profile, driver=driver)

    def set_setting(
        self,
        device_id: str,
        name: str,
        value: Any,
        *,
        profile_id: str | None = None,
    ) -> tuple[str, ...]:
        """Range check one preference and apply it through `updated()`."""
        session = self.open_device(device_id, profile_id=profile_id)
        validate_setting(
            session.driver.registry,
            session.profile.wake_up,
            name,
            coerce_integer(value),
        )
        return session.driver.updated({name: value})

    def set_logging(
        self,
        device_id: str,
        *,
        debug: bool | None = None,
        description_text: bool | None = None,
        profile_id: str | None = None,
    ) -> None:
        changes: dict[str, Any] = {}
        if debug is not None:
            changes[LOG_ENABLE_KEY] = debug
        if description_text is not None:
            changes[TXT_ENABLE_KEY] = description_text
        if changes:
            self.open_device(device_id, profile_id=profile_id).driver.updated(changes)
