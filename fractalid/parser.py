"""Parsing of formula text into expression trees."""

from __future__ import annotations

import re

from .expr import (
    Binary,
    BinaryOp,
    ComplexConst,
    Expr,
    Float,
    UInt,
    Unary,
    UnaryOp,
    Var,
    Variable,
)

__all__ = [
    "ExprParseError",
    "BadBracketsSequence",
    "BracketClosingBeforeOpening",
    "BadExpression",
    "parse_expr",
]

_U64_LIMIT = 1 << 64

_UINT_RE = re.compile(r"\+?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?)"
)

_KEYWORDS = {
    "z": Var.Z,
    "zinit": Var.INIT_Z,
    "initz": Var.INIT_Z,
    "zprev": Var.PREV_Z,
    "prevz": Var.PREV_Z,
    "i": Var.I,
    "a": Var.ALPHA,
    "alpha": Var.ALPHA,
}

# Binary operators in the order they are tried; "-" becomes a sum with a negation.
_OPERATORS = "+-*/^"
_BINARY_BY_CHAR = {
    "+": BinaryOp.SUM,
    "*": BinaryOp.PROD,
    "/": BinaryOp.DIV,
    "^": BinaryOp.POW,
}

# Function prefixes in the order they are tried; longer names that share a
# start with a shorter one come where the shorter one cannot shadow them.
_PREFIXES = (
    ("abs", UnaryOp.ABS),
    ("arg", UnaryOp.ARG),
    ("re", UnaryOp.RE),
    ("im", UnaryOp.IM),
    ("conj", UnaryOp.CONJ),
    ("exp", UnaryOp.EXP),
    ("ln", UnaryOp.LN),
    ("sqrt", UnaryOp.SQRT),
    ("sinh", UnaryOp.SINH),
    ("cosh", UnaryOp.COSH),
    ("tanh", UnaryOp.TANH),
    ("sin", UnaryOp.SIN),
    ("cos", UnaryOp.COS),
    ("tan", UnaryOp.TAN),
    ("asinh", UnaryOp.ASINH),
    ("acosh", UnaryOp.ACOSH),
    ("atanh", UnaryOp.ATANH),
    ("asin", UnaryOp.ASIN),
    ("acos", UnaryOp.ACOS),
    ("atan", UnaryOp.ATAN),
    ("round", UnaryOp.ROUND),
    ("ceil", UnaryOp.CEIL),
    ("floor", UnaryOp.FLOOR),
)


class ExprParseError(ValueError):
    """Raised when formula text cannot be parsed."""


class BadBracketsSequence(ExprParseError):
    def __init__(self) -> None:
        super().__init__("bad brackets sequence")


class BracketClosingBeforeOpening(ExprParseError):
    def __init__(self, index: int) -> None:
        super().__init__(f"closing bracket before opening at index {index}")
        self.index = index


class BadExpression(ExprParseError):
    def __init__(self) -> None:
        super().__init__("bad expression")


def _parse_uint(text: str) -> int | None:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value < _U64_LIMIT else None


def _parse_float(text: str) -> float | None:
    return float(text) if _FLOAT_RE.fullmatch(text) else None


def _imag_coefficient(text: str) -> float | None:
    if text in ("", "+"):
        return 1.0
    if text == "-":
        return -1.0
    return _parse_float(text)


def _parse_complex(text: str) -> complex | None:
    unit = "j" if "j" in text else "i"
    split = next(
        (
            n
            for n, c in enumerate(text)
            if n > 0 and c in "+-" and text[n - 1] not in "eE"
        ),
        None,
    )
    if split is None:
        if text.endswith(unit):
            im = _imag_coefficient(text[:-1])
            return None if im is None else complex(0.0, im)
        re_part = _parse_float(text)
        return None if re_part is None else complex(re_part, 0.0)

    left = text[:split].rstrip()
    right = text[split + 1 :].lstrip()
    negative = text[split] == "-"
    if not left or not right:
        return None
    if right.endswith(unit):
        re_part = _parse_float(left)
        im = _imag_coefficient(right[:-1])
        if re_part is None or im is None:
            return None
        return complex(re_part, -im if negative else im)
    if left.endswith(unit):
        im = _imag_coefficient(left[:-1])
        re_part = _parse_float(right)
        if re_part is None or im is None:
            return None
        return complex(-re_part if negative else re_part, im)
    return None


def _parse_shifted(text: str, shift: int) -> Expr:
    try:
        return parse_expr(text)
    except BracketClosingBeforeOpening as err:
        raise BracketClosingBeforeOpening(err.index + shift) from None


def parse_expr(text: str) -> Expr:
    """Parse formula text such as ``"z*z + initz"`` into an expression.

    Raises a subclass of :class:`ExprParseError` when the text is malformed.
    """
    s = text.strip().lower()
    if s.startswith("(") and s.endswith(")"):
        return parse_expr(s[1:-1])

    if s in _KEYWORDS:
        return Variable(_KEYWORDS[s])
    if (n := _parse_uint(s)) is not None:
        return UInt(n)
    if (x := _parse_float(s)) is not None:
        return Float(x)
    if (c := _parse_complex(s)) is not None:
        return ComplexConst(c)

    level = 0
    first_at: dict[str, int] = {}
    for i, c in enumerate(s):
        if c == "(":
            level += 1
        elif c == ")":
            level -= 1
        elif level == 0 and (c in "+*/^" or (c == "-" and i > 0)):
            first_at.setdefault(c, i)
        if level < 0:
            raise BracketClosingBeforeOpening(i)
    if level != 0:
        raise BadBracketsSequence()

    for op_char in _OPERATORS:
        if op_char not in first_at:
            continue
        i = first_at[op_char]
        left = parse_expr(s[:i])
        right = _parse_shifted(s[i + 1 :], i + 1)
        if op_char == "-":
            return Binary(BinaryOp.SUM, left, Unary(UnaryOp.NEG, right))
        return Binary(_BINARY_BY_CHAR[op_char], left, right)

    if s.startswith("-"):
        return Unary(UnaryOp.NEG, _parse_shifted(s[1:], 1))
    for prefix, op in _PREFIXES:
        if s.startswith(prefix):
            start = len(prefix) + 1
            return Unary(op, _parse_shifted(s[start:-1], start))
    raise BadExpression()