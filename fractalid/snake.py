"""Cantor-style diagonal pairing of non-negative integers.

Integers are laid out along anti-diagonals::

    0  2  5  9  14 ...
    1  4  8  13 ...
    3  7  12 ...
    6  11 ...
    10 ...

``snake_2d_split`` maps an integer to its ``(k, l)`` position and
``snake_2d_unsplit`` maps the position back.
"""

from __future__ import annotations

from math import isqrt

__all__ = [
    "snake_2d_split",
    "snake_2d_unsplit",
    "snake_2d_split_u64",
    "snake_2d_unsplit_u64",
]

_U64_LIMIT = 1 << 64
_U64_MASK = _U64_LIMIT - 1


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def _require_u64(name: str, value: int) -> None:
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer, got {value}")


def snake_2d_split(n: int) -> tuple[int, int]:
    """Split ``n`` into the pair ``(k, l)`` it encodes."""
    _require_non_negative("n", n)
    if n == 0:
        return 0, 0
    row = (isqrt(1 + 8 * n) - 1) // 2
    delta = n - row * (row + 1) // 2
    return delta, row - delta


def snake_2d_unsplit(k: int, l: int) -> int:
    """Combine the pair ``(k, l)`` into the single integer that encodes it."""
    _require_non_negative("k", k)
    _require_non_negative("l", l)
    row = k + l
    return row * (row + 1) // 2 + k


def snake_2d_split_u64(n: int) -> tuple[int, int]:
    """Split an unsigned 64-bit integer; both halves are unsigned 64-bit too."""
    _require_u64("n", n)
    k, l = snake_2d_split(n)
    return k & _U64_MASK, l & _U64_MASK


def snake_2d_unsplit_u64(k: int, l: int) -> int:
    """Combine two unsigned 64-bit integers, keeping the low 64 bits of the result."""
    _require_u64("k", k)
    _require_u64("l", l)
    return snake_2d_unsplit(k, l) & _U64_MASK