"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class CommandTransport(Protocol):
    def send(self, frames: Sequence[bytes], *, interval_ms: int = 200) -> None:
        """Hand frames to the host for secure encapsulation and transmission."""
