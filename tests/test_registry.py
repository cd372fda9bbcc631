from __future__ import annotations

import pytest

from leaksync.core.errors import ParameterRegistryError, SettingValidationError
from leaksync.core.model import ParameterDescriptor, WakeUpSpec
from leaksync.core.registry import (
    ParameterRegistry,
    desired_configuration,
    desired_wake_up_hours,
    resolve_mapper,
    validate_setting,
)
from tests.helpers import ZSE42_PARAMETERS, zse42_registry


def test_iterates_in_ascending_id_order() -> None:
    registry = ParameterRegistry(reversed(ZSE42_PARAMETERS))
    assert [d.id for d in registry] == [1, 2, 3, 4]
    assert len(registry) == 4


def test_lookup_by_id_and_name() -> None:
    registry = zse42_registry()
    assert registry.descriptor_for(2).name == "leakAlertClearDelay"
    assert registry.descriptor_for("batteryAlertThreshold").id == 4
    assert registry.descriptor_for(9) is None
    assert registry.descriptor_for("nope") is None


def test_duplicate_id_rejected() -> None:
    clash = ParameterDescriptor(id=1, name="other", wire_size=1, valid_range=(0, 1), default_value=0)
    with pytest.raises(ParameterRegistryError):
        ParameterRegistry(ZSE42_PARAMETERS + (clash,))


def test_duplicate_name_rejected() -> None:
    clash = ParameterDescriptor(id=9, name="waterBlinkLED", wire_size=1, valid_range=(0, 1), default_value=0)
    with pytest.raises(ParameterRegistryError):
        ParameterRegistry(ZSE42_PARAMETERS + (clash,))


def test_range_must_fit_wire_size() -> None:
    too_wide = ParameterDescriptor(id=5, name="wide", wire_size=1, valid_range=(0, 200), default_value=0)
    with pytest.raises(ParameterRegistryError):
        ParameterRegistry([too_wide])


def test_zero_width_rejected() -> None:
    zero = ParameterDescriptor(id=5, name="zero", wire_size=0, valid_range=(0, 0), default_value=0)
    with pytest.raises(ParameterRegistryError):
        ParameterRegistry([zero])


def test_desired_configuration_uses_defaults_mapper_and_fixed_value() -> None:
    registry = ParameterRegistry(
        [
            ParameterDescriptor(
                id=1,
                name="delayMinutes",
                wire_size=2,
                valid_range=(0, 60),
                default_value=1,
                value_mapper=resolve_mapper("minutes_to_seconds"),
            ),
            ParameterDescriptor(id=2, name="pinned", wire_size=1, valid_range=(0, 1), default_value=0, fixed_value=1),
            ParameterDescriptor(id=3, name="plain", wire_size=1, valid_range=(0, 9), default_value=4),
        ]
    )
    desired = desired_configuration(registry, {"delayMinutes": 2, "pinned": 0})
    assert desired == {"delayMinutes": 120, "pinned": 1, "plain": 4}


def test_unknown_mapper_rejected() -> None:
    with pytest.raises(ParameterRegistryError):
        resolve_mapper("furlongs")
    assert resolve_mapper("identity") is None


def test_desired_wake_up_hours_defaults() -> None:
    assert desired_wake_up_hours(WakeUpSpec(), {}) == 12
    assert desired_wake_up_hours(WakeUpSpec(), {"wakeUpInterval": 6}) == 6


def test_validate_setting_ranges() -> None:
    registry = zse42_registry()
    wake_up = WakeUpSpec()
    assert validate_setting(registry, wake_up, "batteryAlertThreshold", 20) == 20
    assert validate_setting(registry, wake_up, "wakeUpInterval", 24) == 24
    with pytest.raises(SettingValidationError):
        validate_setting(registry, wake_up, "batteryAlertThreshold", 51)
    with pytest.raises(SettingValidationError):
        validate_setting(registry, wake_up, "wakeUpInterval", 0)
    with pytest.raises(SettingValidationError):
        validate_setting(registry, wake_up, "waterBlinkLED", 2)
    with pytest.raises(SettingValidationError) as exc:
        validate_setting(registry, wake_up, "bogus", 1)
    assert "Available:" in str(exc.value)


def test_mapped_range_wider_than_wire_size_rejected() -> None:
    minutes = ParameterDescriptor(
        id=5,
        name="reportMinutes",
        wire_size=1,
        valid_range=(1, 10),
        default_value=1,
        value_mapper=resolve_mapper("minutes_to_seconds"),
    )
    with pytest.raises(ParameterRegistryError, match="encodes 600"):
        ParameterRegistry([minutes])


def test_fixed_value_wider_than_wire_size_rejected() -> None:
    pinned = ParameterDescriptor(
        id=5,
        name="pinned",
        wire_size=1,
        valid_range=(0, 1),
        default_value=0,
        fixed_value=300,
    )
    with pytest.raises(ParameterRegistryError, match="encodes 300"):
        ParameterRegistry([pinned])
