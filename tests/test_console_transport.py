from __future__ import annotations

import pytest

from leaksync.core.errors import TransportSendError
from leaksync.transports.console import ConsoleTransport


def test_frames_are_written_with_spacing() -> None:
    lines: list[str] = []
    transport = ConsoleTransport(lines.append)
    transport.send([bytes.fromhex("8002"), bytes.fromhex("8408")], interval_ms=200)
    assert lines == ["-> 8002", "-> +200ms 8408"]


def test_write_failure_raises_clean_error() -> None:
    def broken(_: str) -> None:
        raise OSError("closed")

    with pytest.raises(TransportSendError):
        ConsoleTransport(broken).send([bytes.fromhex("8408")])
