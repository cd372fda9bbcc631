"""Sync planning: the command batch sent while the sensor is awake."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from leaksync.core.codec import to_wire
from leaksync.core.frames import (
    NOTIFICATION_TYPE_WATER,
    WATER_LEAK_DETECTED,
    BatteryGet,
    Command,
    ConfigurationGet,
    ConfigurationSet,
    ManufacturerSpecificGet,
    NotificationGet,
    VersionGet,
    WakeUpIntervalGet,
    WakeUpIntervalSet,
    WakeUpNoMoreInformation,
)
from leaksync.core.model import WAKE_UP_INTERVAL_KEY, DeviceState, PendingFlags
from leaksync.core.registry import ParameterRegistry

COMMAND_INTERVAL_MS = 200
SECONDS_PER_HOUR = 3600
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncPlan:
    batch: tuple[Command, ...]
    state: DeviceState
    resync: bool
    refresh: bool


def plan(
    registry: ParameterRegistry,
    desired: dict[str, int],
    state: DeviceState,
    wake_interval_hours: int,
    *,
    hub_node_id: int = 1,
) -> SyncPlan:
    """Build the outbound batch for one wake-up window.

    Both pending flags are cleared in the returned state whatever the batch
    contains. `state.last_known` is never touched here; values only become
    known once the device reports them back.
    """
    resync = state.flags.resync
    refresh = state.flags.refresh
    cleared = replace(state, flags=PendingFlags())

    batch: list[Command] = []
    if resync:
        batch.append(ManufacturerSpecificGet())
        batch.append(VersionGet())

    for descriptor in registry:
        value = desired.get(descriptor.name)
        if value is None:
            value = descriptor.desired_value(None)
        if resync or state.last_known.get(descriptor.name) != value:
            LOGGER.warning("Updating device %s: %s", descriptor.name, value)
            batch.append(
                ConfigurationSet(
                    parameter_number=descriptor.id,
                    size=descriptor.wire_size,
                    value=to_wire(descriptor.wire_size, value),
                )
            )
            batch.append(ConfigurationGet(parameter_number=descriptor.id))

    if resync or state.last_known.get(WAKE_UP_INTERVAL_KEY) != wake_interval_hours:
        LOGGER.warning("Updating device %s: %s", WAKE_UP_INTERVAL_KEY, wake_interval_hours)
        batch.append(
            WakeUpIntervalSet(seconds=wake_interval_hours * SECONDS_PER_HOUR, node_id=hub_node_id)
        )
        batch.append(WakeUpIntervalGet())

    if refresh:
        batch.append(BatteryGet())
        batch.append(NotificationGet(notification_type=NOTIFICATION_TYPE_WATER, event=WATER_LEAK_DETECTED))

    batch.append(WakeUpNoMoreInformation())
    return SyncPlan(batch=tuple(batch), state=cleared, resync=resync, refresh=refresh)
