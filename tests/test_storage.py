from __future__ import annotations

from pathlib import Path

import pytest

from leaksync.core.errors import StateStoreError
from leaksync.core.model import DeviceState, PendingFlags
from leaksync.core.storage import JsonStateStore, MemoryStateStore, default_state_dir


def _state() -> DeviceState:
    return DeviceState(
        last_known={"batteryAlertThreshold": 10, "wakeUpInterval": 1.5},
        flags=PendingFlags(resync=False, refresh=True),
        metadata={"manufacturer": "027A"},
        settings={"wakeUpInterval": 6, "logEnable": False},
    )


def test_unknown_device_loads_empty_state(tmp_path: Path) -> None:
    assert JsonStateStore(tmp_path).load("kitchen") == DeviceState()
    assert MemoryStateStore().load("kitchen") == DeviceState()


def test_json_store_round_trips_state(tmp_path: Path) -> None:
    store = JsonStateStore(tmp_path / "devices")
    store.save("kitchen", _state())
    assert (tmp_path / "devices" / "kitchen.json").exists()
    assert JsonStateStore(tmp_path / "devices").load("kitchen") == _state()


def test_default_dir_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert default_state_dir() == tmp_path / "leaksync/devices"


def test_invalid_device_id_rejected(tmp_path: Path) -> None:
    with pytest.raises(StateStoreError):
        JsonStateStore(tmp_path).load("../escape")


def test_corrupt_state_file_raises(tmp_path: Path) -> None:
    (tmp_path / "kitchen.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StateStoreError):
        JsonStateStore(tmp_path).load("kitchen")
