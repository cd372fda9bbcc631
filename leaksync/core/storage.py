"""Per-device state persistence."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Protocol

from leaksync.core.errors import StateStoreError
from leaksync.core.model import DeviceState, PendingFlags

_DEVICE_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StateStore(Protocol):
    def load(self, device_id: str) -> DeviceState:
        """Return stored state, or a fresh empty state for an unknown device."""

    def save(self, device_id: str, state: DeviceState) -> None:
        """Persist the full state for a device."""


def state_to_dict(state: DeviceState) -> dict[str, Any]:
    return {
        "last_known": dict(state.last_known),
        "pending_resync": state.flags.resync,
        "pending_refresh": state.flags.refresh,
        "metadata": dict(state.metadata),
        "settings": dict(state.settings),
    }


def state_from_dict(doc: dict[str, Any]) -> DeviceState:
    return DeviceState(
        last_known=dict(doc.get("last_known", {})),
        flags=PendingFlags(
            resync=bool(doc.get("pending_resync", False)),
            refresh=bool(doc.get("pending_refresh", False)),
        ),
        metadata={str(k): str(v) for k, v in doc.get("metadata", {}).items()},
        settings=dict(doc.get("settings", {})),
    )


class MemoryStateStore:
    def __init__(self) -> None:
        self.states: dict[str, DeviceState] = {}

    def load(self, device_id: str) -> DeviceState:
        return self.states.get(device_id, DeviceState())

    def save(self, device_id: str, state: DeviceState) -> None:
        self.states[device_id] = state


def default_state_dir() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "leaksync/devices"


class JsonStateStore:
    """One JSON document per device under the XDG data directory."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or default_state_dir()

    def _path(self, device_id: str) -> Path:
        if not _DEVICE_ID_RE.match(device_id):
            raise StateStoreError(f"Invalid device id '{device_id}'; use [A-Za-z0-9_.-]")
        return self.root / f"{device_id}.json"

    def load(self, device_id: str) -> DeviceState:
        path = self._path(device_id)
        if not path.exists():
            return DeviceState()
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StateStoreError(f"Could not read device state {path}: {exc}") from exc
        if not isinstance(doc, dict):
            raise StateStoreError(f"Device state {path} must contain an object at root")
        return state_from_dict(doc)

    def save(self, device_id: str, state: DeviceState) -> None:
        path = self._path(device_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(state_to_dict(state), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            raise StateStoreError(f"Could not write device state {path}: {exc}") from exc
