"""Signed domain values against the unsigned fixed-width wire encoding."""

from __future__ import annotations

from leaksync.core.errors import WireCodecError

SUPPORTED_WIDTHS = (1, 2, 4)


def _bias(width: int) -> int:
    if width not in SUPPORTED_WIDTHS:
        raise WireCodecError(f"Unsupported wire width {width}; expected one of {SUPPORTED_WIDTHS}")
    return 1 << (8 * width)


def signed_range(width: int) -> tuple[int, int]:
    half = _bias(width) >> 1
    return -half, half - 1


def to_wire(width: int, value: int) -> int:
    bias = _bias(width)
    low, high = signed_range(width)
    if not low <= value <= high:
        raise WireCodecError(f"Value {value} does not fit in {width} byte(s) ({low}..{high})")
    if value < 0:
        value += bias
    return value


def from_wire(width: int, value: int) -> int:
    bias = _bias(width)
    if not 0 <= value < bias:
        raise WireCodecError(f"Wire value {value} does not fit in {width} byte(s)")
    if value >= bias >> 1:
        value -= bias
    return value
