from __future__ import annotations

from leaksync.core.model import DeviceProfile, Fingerprint, ParameterDescriptor, WakeUpSpec
from leaksync.core.registry import ParameterRegistry

ZSE42_PARAMETERS = (
    ParameterDescriptor(
        id=1,
        name="waterBlinkLED",
        wire_size=1,
        valid_range=(0, 1),
        default_value=0,
        kind="enum",
        options={0: "disabled", 1: "enabled"},
    ),
    ParameterDescriptor(id=2, name="leakAlertClearDelay", wire_size=4, valid_range=(0, 3600), default_value=0),
    ParameterDescriptor(id=3, name="batteryReportThreshold", wire_size=1, valid_range=(1, 10), default_value=5),
    ParameterDescriptor(id=4, name="batteryAlertThreshold", wire_size=1, valid_range=(1, 50), default_value=10),
)

SYNCED = {
    "waterBlinkLED": 0,
    "leakAlertClearDelay": 0,
    "batteryReportThreshold": 5,
    "batteryAlertThreshold": 10,
    "wakeUpInterval": 12,
}


def zse42_registry() -> ParameterRegistry:
    return ParameterRegistry(ZSE42_PARAMETERS)


def zse42_profile() -> DeviceProfile:
    return DeviceProfile(
        id="zooz_zse42",
        name="Zooz ZSE42 Water Leak XS Sensor",
        fingerprints=(Fingerprint(0x027A, 0x7000, 0xE002),),
        parameters=ZSE42_PARAMETERS,
        wake_up=WakeUpSpec(),
    )


class FakeTransport:
    def __init__(self) -> None:
        self.batches: list[tuple[list[str], int]] = []

    def send(self, frames, *, interval_ms: int = 200) -> None:
        self.batches.append(([frame.hex() for frame in frames], interval_ms))
