"""Fractal iteration formulas as expression trees, and their integer ids.

Every expression has exactly one non-negative integer id. Ids 0-4 are the
variables; larger ids are split into a variant code (``(id - 5) % 31``) and
an inner number (``(id - 5) // 31``) that encodes the operands.
"""

from __future__ import annotations

import cmath
import enum
import math
import struct
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .brackets import remove_outermost_brackets
from .snake import snake_2d_split, snake_2d_split_u64, snake_2d_unsplit

__all__ = [
    "Var",
    "UnaryOp",
    "BinaryOp",
    "Expr",
    "Variable",
    "UInt",
    "Float",
    "ComplexConst",
    "Unary",
    "Binary",
    "from_int",
]

NUMBER_OF_FINITE_VARIANTS = 5
NUMBER_OF_INFINITE_VARIANTS = 3 + (10 + 8 + 6) + 4

_UINT_CODE = 0
_FLOAT_CODE = 1
_COMPLEX_CODE = 2

_U64_LIMIT = 1 << 64
_U64_MASK = _U64_LIMIT - 1
_NAN_COMPLEX = complex(math.nan, math.nan)


class Var(enum.Enum):
    """The variables a formula may refer to; values are their ids."""

    Z = 0
    PREV_Z = 1
    INIT_Z = 2
    I = 3  # noqa: E741
    ALPHA = 4

    @property
    def label(self) -> str:
        return _VAR_LABELS[self]


_VAR_LABELS = {
    Var.Z: "Z",
    Var.PREV_Z: "PrevZ",
    Var.INIT_Z: "InitZ",
    Var.I: "I",
    Var.ALPHA: "Alpha",
}


class UnaryOp(enum.Enum):
    """One-argument operations; values are their variant codes."""

    NEG = 3
    ABS = 4
    ARG = 5
    RE = 6
    IM = 7
    CONJ = 8
    EXP = 9
    LN = 10
    SQRT = 11
    SIN = 12
    COS = 13
    TAN = 14
    SINH = 15
    COSH = 16
    TANH = 17
    ASIN = 18
    ACOS = 19
    ATAN = 20
    ASINH = 21
    ACOSH = 22
    ATANH = 23
    ROUND = 24
    CEIL = 25
    FLOOR = 26

    @property
    def label(self) -> str:
        return self.name.capitalize()


class BinaryOp(enum.Enum):
    """Two-argument operations; values are their variant codes."""

    SUM = 27
    PROD = 28
    DIV = 29
    POW = 30


# ---------------------------------------------------------------------------
# Numeric helpers that yield IEEE results (inf, NaN) instead of raising.


def _fdiv(x: float, y: float) -> float:
    if y != 0:
        try:
            return x / y
        except OverflowError:
            return math.copysign(math.inf, x) * math.copysign(1.0, y)
    if math.isnan(x) or x == 0:
        return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _divide(a: complex, b: complex) -> complex:
    norm = b.real * b.real + b.imag * b.imag
    re = a.real * b.real + a.imag * b.imag
    im = a.imag * b.real - a.real * b.imag
    return complex(_fdiv(re, norm), _fdiv(im, norm))


def _guarded(fn: Callable[[complex], complex]) -> Callable[[complex], complex]:
    def apply(w: complex) -> complex:
        try:
            return fn(w)
        except (ValueError, OverflowError, ZeroDivisionError):
            return _NAN_COMPLEX

    return apply


_exp = _guarded(cmath.exp)


def _ln(w: complex) -> complex:
    if w == 0:
        return complex(-math.inf, math.atan2(w.imag, w.real))
    try:
        return cmath.log(w)
    except (ValueError, OverflowError):
        return _NAN_COMPLEX


def _abs(w: complex) -> complex:
    try:
        return complex(math.hypot(w.real, w.imag))
    except OverflowError:
        return complex(math.inf)


def _round_half_away(x: float) -> float:
    if not math.isfinite(x):
        return x
    t = float(math.trunc(x))
    if abs(x - t) >= 0.5:
        t += math.copysign(1.0, x)
    return math.copysign(t, x)


def _ceil(x: float) -> float:
    return x if not math.isfinite(x) else math.copysign(float(math.ceil(x)), x)


def _floor(x: float) -> float:
    return x if not math.isfinite(x) else math.copysign(float(math.floor(x)), x)


def _componentwise(fn: Callable[[float], float]) -> Callable[[complex], complex]:
    return lambda w: complex(fn(w.real), fn(w.imag))


def _powc(base: complex, exponent: complex) -> complex:
    if exponent == 0:
        return complex(1.0, 0.0)
    if base == 0:
        return complex(0.0, 0.0)
    return _exp(exponent * _ln(base))


_UNARY_FUNCS: dict[UnaryOp, Callable[[complex], complex]] = {
    UnaryOp.NEG: lambda w: -w,
    UnaryOp.ABS: _abs,
    UnaryOp.ARG: lambda w: complex(math.atan2(w.imag, w.real)),
    UnaryOp.RE: lambda w: complex(w.real),
    UnaryOp.IM: lambda w: complex(w.imag),
    UnaryOp.CONJ: lambda w: w.conjugate(),
    UnaryOp.EXP: _exp,
    UnaryOp.LN: _ln,
    UnaryOp.SQRT: _guarded(cmath.sqrt),
    UnaryOp.SIN: _guarded(cmath.sin),
    UnaryOp.COS: _guarded(cmath.cos),
    UnaryOp.TAN: _guarded(cmath.tan),
    UnaryOp.SINH: _guarded(cmath.sinh),
    UnaryOp.COSH: _guarded(cmath.cosh),
    UnaryOp.TANH: _guarded(cmath.tanh),
    UnaryOp.ASIN: _guarded(cmath.asin),
    UnaryOp.ACOS: _guarded(cmath.acos),
    UnaryOp.ATAN: _guarded(cmath.atan),
    UnaryOp.ASINH: _guarded(cmath.asinh),
    UnaryOp.ACOSH: _guarded(cmath.acosh),
    UnaryOp.ATANH: _guarded(cmath.atanh),
    UnaryOp.ROUND: _componentwise(_round_half_away),
    UnaryOp.CEIL: _componentwise(_ceil),
    UnaryOp.FLOOR: _componentwise(_floor),
}

_BINARY_FUNCS: dict[BinaryOp, Callable[[complex, complex], complex]] = {
    BinaryOp.SUM: lambda a, b: a + b,
    BinaryOp.PROD: lambda a, b: a * b,
    BinaryOp.DIV: _divide,
    BinaryOp.POW: _powc,
}


# ---------------------------------------------------------------------------
# Bit-level conversions and number formatting.


def _f64_bits(x: float) -> int:
    return int.from_bytes(struct.pack("<d", x), "little")


def _f64_from_bits(bits: int) -> float:
    return struct.unpack("<d", (bits & _U64_MASK).to_bytes(8, "little"))[0]


def _f32_bits(x: float) -> int:
    try:
        packed = struct.pack("<f", x)
    except OverflowError:
        packed = struct.pack("<f", math.copysign(math.inf, x))
    return int.from_bytes(packed, "little")


def _f32_from_bits(bits: int) -> float:
    return struct.unpack("<f", (bits & 0xFFFFFFFF).to_bytes(4, "little"))[0]


def _format_exp(x: float) -> str:
    """Format ``x`` in shortest scientific notation, such as ``1.5e0``."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    sign = "-" if math.copysign(1.0, x) < 0 else ""
    if x == 0:
        return f"{sign}0e0"
    mantissa, _, exp_text = repr(abs(x)).partition("e")
    exponent = int(exp_text) if exp_text else 0
    int_part, _, frac_part = mantissa.partition(".")
    all_digits = int_part + frac_part
    significant = all_digits.lstrip("0")
    leading = len(all_digits) - len(significant)
    significant = significant.rstrip("0")
    power = exponent + len(int_part) - 1 - leading
    body = significant[0] + (f".{significant[1:]}" if len(significant) > 1 else "")
    return f"{sign}{body}e{power}"


def _format_complex(c: complex) -> str:
    re_sign = "-" if c.real < 0 else ""
    re_abs = -c.real if c.real < 0 else c.real
    im_sign = "-" if c.imag < 0 else "+"
    im_abs = -c.imag if c.imag < 0 else c.imag
    return f"{re_sign}{_format_exp(re_abs)}{im_sign}{_format_exp(im_abs)}i"


def _encode(code: int, inner: int) -> int:
    return NUMBER_OF_FINITE_VARIANTS + code + inner * NUMBER_OF_INFINITE_VARIANTS


# ---------------------------------------------------------------------------
# Expression tree.


class Expr(ABC):
    """A formula in ``z``, the previous ``z``, the initial ``z`` and ``alpha``."""

    @abstractmethod
    def eval(self, z: complex, prev_z: complex, init_z: complex, alpha: float) -> complex:
        """Evaluate the formula at the given values."""

    @abstractmethod
    def to_int(self) -> int:
        """Return the id that encodes this formula."""

    @abstractmethod
    def _raw_string(self) -> str:
        """Render the formula, possibly with redundant outer brackets."""

    def _children(self) -> tuple[Expr, ...]:
        return ()

    def _walk(self) -> Iterator[Expr]:
        yield self
        for child in self._children():
            yield from child._walk()

    def _uses(self, var: Var) -> bool:
        return any(isinstance(node, Variable) and node.var is var for node in self._walk())

    def contains_z(self) -> bool:
        """Tell whether the formula refers to ``z``."""
        return self._uses(Var.Z)

    def contains_alpha(self) -> bool:
        """Tell whether the formula refers to ``alpha``."""
        return self._uses(Var.ALPHA)

    def to_string(self) -> str:
        """Render the formula as readable text."""
        return remove_outermost_brackets(self._raw_string())

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class Variable(Expr):
    var: Var

    def eval(self, z, prev_z, init_z, alpha):
        if self.var is Var.Z:
            return complex(z)
        if self.var is Var.PREV_Z:
            return complex(prev_z)
        if self.var is Var.INIT_Z:
            return complex(init_z)
        if self.var is Var.I:
            return 1j
        return complex(alpha)

    def to_int(self):
        return self.var.value

    def _raw_string(self):
        return self.var.label


@dataclass(frozen=True)
class UInt(Expr):
    value: int

    def __post_init__(self):
        if not 0 <= self.value < _U64_LIMIT:
            raise ValueError(f"UInt value must fit in 64 unsigned bits, got {self.value}")

    def eval(self, z, prev_z, init_z, alpha):
        return complex(float(self.value))

    def to_int(self):
        return _encode(_UINT_CODE, self.value)

    def _raw_string(self):
        return str(self.value)


@dataclass(frozen=True)
class Float(Expr):
    value: float

    def eval(self, z, prev_z, init_z, alpha):
        return complex(self.value)

    def to_int(self):
        return _encode(_FLOAT_CODE, _f64_bits(self.value))

    def _raw_string(self):
        return _format_exp(self.value)


@dataclass(frozen=True)
class ComplexConst(Expr):
    value: complex

    def eval(self, z, prev_z, init_z, alpha):
        return complex(self.value)

    def to_int(self):
        c = complex(self.value)
        inner = snake_2d_unsplit(_f32_bits(c.real), _f32_bits(c.imag))
        return _encode(_COMPLEX_CODE, inner)

    def _raw_string(self):
        return _format_complex(complex(self.value))


@dataclass(frozen=True)
class Unary(Expr):
    op: UnaryOp
    arg: Expr

    def eval(self, z, prev_z, init_z, alpha):
        return _UNARY_FUNCS[self.op](self.arg.eval(z, prev_z, init_z, alpha))

    def to_int(self):
        return _encode(self.op.value, self.arg.to_int())

    def _children(self):
        return (self.arg,)

    def _raw_string(self):
        inner = self.arg.to_string()
        if self.op is UnaryOp.NEG:
            return f"-({inner})"
        return f"{self.op.label}({inner})"


@dataclass(frozen=True)
class Binary(Expr):
    op: BinaryOp
    left: Expr
    right: Expr

    def eval(self, z, prev_z, init_z, alpha):
        lhs = self.left.eval(z, prev_z, init_z, alpha)
        rhs = self.right.eval(z, prev_z, init_z, alpha)
        return _BINARY_FUNCS[self.op](lhs, rhs)

    def to_int(self):
        return _encode(self.op.value, snake_2d_unsplit(self.left.to_int(), self.right.to_int()))

    def _children(self):
        return (self.left, self.right)

    def _raw_string(self):
        lhs = self.left.to_string()
        rhs = self.right.to_string()
        if self.op is BinaryOp.SUM:
            return f"({lhs}+{rhs})"
        if self.op is BinaryOp.PROD:
            return f"({lhs}*{rhs})"
        if self.op is BinaryOp.DIV:
            return f"({lhs})/({rhs})"
        return f"({lhs})^({rhs})"


_UNARY_BY_CODE = {op.value: op for op in UnaryOp}
_BINARY_BY_CODE = {op.value: op for op in BinaryOp}


def from_int(id_: int) -> Expr:
    """Build the formula encoded by the non-negative integer ``id_``."""
    if id_ < 0:
        raise ValueError(f"id must be non-negative, got {id_}")
    if id_ < NUMBER_OF_FINITE_VARIANTS:
        return Variable(Var(id_))
    inner, code = divmod(id_ - NUMBER_OF_FINITE_VARIANTS, NUMBER_OF_INFINITE_VARIANTS)
    inner_u64 = inner & _U64_MASK
    if code == _UINT_CODE:
        return UInt(inner_u64)
    if code == _FLOAT_CODE:
        return Float(_f64_from_bits(inner_u64))
    if code == _COMPLEX_CODE:
        k, l = snake_2d_split_u64(inner_u64)
        return ComplexConst(complex(_f32_from_bits(k), _f32_from_bits(l)))
    if code in _UNARY_BY_CODE:
        return Unary(_UNARY_BY_CODE[code], from_int(inner))
    k, l = snake_2d_split(inner)
    return Binary(_BINARY_BY_CODE[code], from_int(k), from_int(l))