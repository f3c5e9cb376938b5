"""Mapping of escape magnitudes to 24-bit RGB colours."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from itertools import pairwise

__all__ = [
    "WHITE",
    "BLACK",
    "RED",
    "ORANGE",
    "YELLOW",
    "YELLEN",
    "GREEN",
    "GRYAN",
    "CYAN",
    "BLYUAN",
    "BLUE",
    "BRED",
    "MAGENTA",
    "REGENTA",
    "RAINBOW_POINTS",
    "lerp_color",
    "multipoint_gradient",
    "rainbow",
]

WHITE = 0xFFFFFF
BLACK = 0x000000

RED = 0xFF0000
ORANGE = 0xFF8800
YELLOW = 0xFFFF00
YELLEN = 0x88FF00
GREEN = 0x00FF00
GRYAN = 0x00FF88
CYAN = 0x00FFFF
BLYUAN = 0x0088FF
BLUE = 0x0000FF
BRED = 0x8800FF
MAGENTA = 0xFF00FF
REGENTA = 0xFF0088

# ln of the largest finite double, used to squeeze magnitudes into (-1, 1).
_LN_MAX = 710.0


def _f32(x: float) -> float:
    """Round ``x`` to single precision."""
    return struct.unpack("<f", struct.pack("<f", x))[0]


def _f32_div(x: float, y: float) -> float:
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return _f32(x / y)


def _to_byte(x: float) -> int:
    """Convert to a byte the saturating way: NaN gives 0, others truncate."""
    if math.isnan(x) or x <= 0:
        return 0
    if x >= 255:
        return 255
    return int(x)


def _check_color(name: str, color: int) -> None:
    if not 0 <= color <= 0xFFFFFFFF:
        raise ValueError(f"{name} must fit in 32 bits, got {color:#x}")


def lerp_color(t: float, p: int, q: int) -> int:
    """Blend colours ``p`` and ``q`` channel by channel; ``t=0`` gives ``p``."""
    _check_color("p", p)
    _check_color("q", q)
    t = _f32(t)
    s = _f32(1.0 - t)
    channels = (
        _to_byte(_f32(_f32(a * s) + _f32(b * t)))
        for a, b in zip(p.to_bytes(4, "little"), q.to_bytes(4, "little"))
    )
    return int.from_bytes(bytes(channels), "little")


def multipoint_gradient(t: float, points: Sequence[tuple[float, int]]) -> int:
    """Colour at ``t`` along a gradient of ``(position, colour)`` stops.

    The stops must be sorted by position. NaN gives white.
    """
    if math.isnan(t):
        return WHITE
    for (u, color_prev), (v, color_next) in pairwise(points):
        if not v < t:
            local = _f32_div(_f32(t - u), _f32(v - u))
            return lerp_color(local, color_prev, color_next)
    raise ValueError(f"{t} lies beyond the last gradient stop")


def _stop(k: int) -> float:
    return _f32(_f32(_f32(k / 11.0) * 2.0) - 1.0)


RAINBOW_POINTS: tuple[tuple[float, int], ...] = (
    (_f32(-1.01), WHITE),
    *zip(
        (_stop(k) for k in range(12)),
        (RED, ORANGE, YELLOW, YELLEN, GREEN, GRYAN, CYAN, BLYUAN, BLUE, BRED, MAGENTA, REGENTA),
    ),
    (_f32(1.01), WHITE),
)


def _ln(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    if math.isinf(x):
        return math.inf
    return math.log(x)


def rainbow(t: float) -> int:
    """Colour for an escape magnitude ``t`` on the rainbow gradient."""
    scaled = _f32(math.tanh((_ln(t) / _LN_MAX) * 2.0 - 1.0))
    return multipoint_gradient(scaled, RAINBOW_POINTS)