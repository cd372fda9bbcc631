"""Transport that writes outbound frames as hex lines instead of transmitting them."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from leaksync.core.errors import TransportSendError


class ConsoleTransport:
    def __init__(self, echo: Callable[[str], None] = print, *, pace: bool = False) -> None:
        self._echo = echo
        self._pace = pace

    def send(self, frames: Sequence[bytes], *, interval_ms: int = 200) -> None:
        for index, frame in enumerate(frames):
            if index and self._pace:
                time.sleep(interval_ms / 1000)
            delay = f"+{interval_ms}ms " if index else ""
            try:
                self._echo(f"-> {delay}{frame.hex()}")
            except OSError as exc:
                raise TransportSendError(f"Console write failed: {exc}") from exc
