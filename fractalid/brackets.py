"""Removal of redundant enclosing parentheses."""

from __future__ import annotations

from itertools import accumulate

__all__ = ["remove_outermost_brackets"]

_STEP = {"(": 1, ")": -1}


def _encloses_whole(text: str) -> bool:
    """Tell whether the first '(' is closed only by the last ')'."""
    levels = [0, *accumulate(_STEP.get(c, 0) for c in text)]
    if any(level < 0 for level in levels):
        raise ValueError(f"closing bracket before opening in {text!r}")
    return all(level > 0 for level in levels[1:-1])


def remove_outermost_brackets(text: str) -> str:
    """Strip pairs of parentheses that wrap the whole of ``text``.

    ``"((a+b))"`` becomes ``"a+b"``, while ``"(a)+(b)"`` is left as it is.
    """
    while text.startswith("(") and text.endswith(")") and _encloses_whole(text):
        text = text[1:-1]
    return text