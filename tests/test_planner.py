from __future__ import annotations

from leaksync.core.model import DeviceState, PendingFlags
from leaksync.core.planner import plan
from leaksync.core.registry import desired_configuration
from tests.helpers import SYNCED, zse42_registry


def _plan(state: DeviceState, settings: dict | None = None, hours: int = 12):
    registry = zse42_registry()
    return plan(registry, desired_configuration(registry, settings or {}), state, hours)


def _hex(result) -> list[str]:
    return [command.hex() for command in result.batch]


def test_resync_from_empty_state_sends_everything() -> None:
    result = _plan(DeviceState(flags=PendingFlags(resync=True)))
    assert _hex(result) == [
        "7204",
        "8611",
        "7004010100",
        "700501",
        "7004020400000000",
        "700502",
        "7004030105",
        "700503",
        "700404010a",
        "700504",
        "840400a8c001",
        "8405",
        "8408",
    ]
    assert [type(c).__name__ for c in result.batch].count("WakeUpNoMoreInformation") == 1


def test_resync_resends_even_when_synced() -> None:
    result = _plan(DeviceState(last_known=dict(SYNCED), flags=PendingFlags(resync=True)))
    assert len(result.batch) == 13
    assert result.resync is True


def test_synced_without_flags_sends_only_terminator() -> None:
    result = _plan(DeviceState(last_known=dict(SYNCED)))
    assert _hex(result) == ["8408"]


def test_refresh_only_queries_battery_and_water() -> None:
    result = _plan(DeviceState(last_known=dict(SYNCED), flags=PendingFlags(refresh=True)))
    assert _hex(result) == ["8002", "7104000502", "8408"]


def test_only_differing_parameters_are_sent() -> None:
    last_known = {**SYNCED, "batteryAlertThreshold": 20}
    result = _plan(DeviceState(last_known=last_known))
    assert _hex(result) == ["700404010a", "700504", "8408"]


def test_setting_change_and_wake_interval_change() -> None:
    result = _plan(
        DeviceState(last_known=dict(SYNCED)),
        settings={"leakAlertClearDelay": 3600},
        hours=24,
    )
    assert _hex(result) == [
        "7004020400000e10",
        "700502",
        "840401518001",
        "8405",
        "8408",
    ]


def test_absent_last_known_value_counts_as_different() -> None:
    last_known = {k: v for k, v in SYNCED.items() if k != "wakeUpInterval"}
    result = _plan(DeviceState(last_known=last_known))
    assert _hex(result) == ["840400a8c001", "8405", "8408"]


def test_flags_always_cleared_and_last_known_untouched() -> None:
    for flags in (PendingFlags(), PendingFlags(resync=True), PendingFlags(refresh=True), PendingFlags(True, True)):
        state = DeviceState(last_known={"waterBlinkLED": 1}, flags=flags)
        result = _plan(state)
        assert result.state.flags == PendingFlags()
        assert result.state.last_known == {"waterBlinkLED": 1}
        assert result.batch[-1].hex() == "8408"


def test_hub_node_id_is_used_for_wake_interval() -> None:
    registry = zse42_registry()
    result = plan(registry, {}, DeviceState(last_known=dict(SYNCED)), 1, hub_node_id=7)
    assert result.batch[0].hex() == "8404000e1007"
