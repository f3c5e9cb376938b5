import cmath
import math

import pytest

from fractalid.expr import (
    Binary,
    BinaryOp,
    ComplexConst,
    Float,
    UInt,
    Unary,
    UnaryOp,
    Var,
    Variable,
    from_int,
)

Z = Variable(Var.Z)
PREV_Z = Variable(Var.PREV_Z)
INIT_Z = Variable(Var.INIT_Z)
I = Variable(Var.I)  # noqa: E741
ALPHA = Variable(Var.ALPHA)

UNARY_ORDER = [
    UnaryOp.NEG, UnaryOp.ABS, UnaryOp.ARG, UnaryOp.RE, UnaryOp.IM, UnaryOp.CONJ,
    UnaryOp.EXP, UnaryOp.LN, UnaryOp.SQRT,
    UnaryOp.SIN, UnaryOp.COS, UnaryOp.TAN,
    UnaryOp.SINH, UnaryOp.COSH, UnaryOp.TANH,
    UnaryOp.ASIN, UnaryOp.ACOS, UnaryOp.ATAN,
    UnaryOp.ASINH, UnaryOp.ACOSH, UnaryOp.ATANH,
    UnaryOp.ROUND, UnaryOp.CEIL, UnaryOp.FLOOR,
]
BINARY_ORDER = [BinaryOp.SUM, BinaryOp.PROD, BinaryOp.DIV, BinaryOp.POW]

F32_MIN = 1.401298464324817e-45
F32_MIN2 = 2.802596928649634e-45


def _block(start, n, x, c, child, pair):
    exprs = [
        UInt(n),
        Float(x),
        ComplexConst(c),
        *(Unary(op, child) for op in UNARY_ORDER),
        *(Binary(op, *pair) for op in BINARY_ORDER),
    ]
    return list(enumerate(exprs, start))


CASES = (
    [(0, Z), (1, PREV_Z), (2, INIT_Z), (3, I), (4, ALPHA)]
    + _block(5, 0, 0.0, complex(0.0, 0.0), Z, (Z, Z))
    + _block(36, 1, 5e-324, complex(0.0, F32_MIN), PREV_Z, (Z, PREV_Z))
    + _block(67, 2, 1e-323, complex(F32_MIN, 0.0), INIT_Z, (PREV_Z, Z))
    + _block(98, 3, 1.5e-323, complex(0.0, F32_MIN2), I, (Z, INIT_Z))
    + _block(129, 4, 2e-323, complex(F32_MIN, F32_MIN), ALPHA, (PREV_Z, PREV_Z))
    + _block(160, 5, 2.5e-323, complex(F32_MIN2, 0.0), UInt(0), (INIT_Z, Z))
    + [(20585, Binary(BinaryOp.SUM, Binary(BinaryOp.PROD, Z, Z), INIT_Z))]
)


def test_case_table_is_contiguous():
    assert [n for n, _ in CASES[:-1]] == list(range(191))


@pytest.mark.parametrize("id_, expected", CASES)
def test_from_int(id_, expected):
    assert from_int(id_) == expected


@pytest.mark.parametrize("id_, expr", CASES)
def test_to_int(id_, expr):
    value = expr.to_int()
    assert value == id_
    assert from_int(value) == expr


def test_int_round_trip():
    for id_ in range(3000):
        assert from_int(id_).to_int() == id_


def test_large_id_round_trip():
    id_ = 123456789012345678901234567890
    assert from_int(id_).to_int() == id_


def test_negative_id_rejected():
    with pytest.raises(ValueError):
        from_int(-1)


def test_uint_range_checked():
    with pytest.raises(ValueError):
        UInt(-3)


@pytest.mark.parametrize(
    "expr, text",
    [
        (Z, "Z"),
        (PREV_Z, "PrevZ"),
        (INIT_Z, "InitZ"),
        (I, "I"),
        (ALPHA, "Alpha"),
        (UInt(42), "42"),
        (Float(0.0), "0e0"),
        (Float(1.5), "1.5e0"),
        (Float(42.0), "4.2e1"),
        (Float(5e-324), "5e-324"),
        (Float(0.001), "1e-3"),
        (ComplexConst(complex(0.0, F32_MIN)), "0e0+1.401298464324817e-45i"),
        (ComplexConst(complex(-1.5, -2.0)), "-1.5e0-2e0i"),
        (Unary(UnaryOp.NEG, Z), "-(Z)"),
        (Unary(UnaryOp.SIN, Z), "Sin(Z)"),
        (Unary(UnaryOp.ASINH, ALPHA), "Asinh(Alpha)"),
        (Binary(BinaryOp.SUM, Z, Z), "Z+Z"),
        (Binary(BinaryOp.DIV, Z, Z), "(Z)/(Z)"),
        (Binary(BinaryOp.POW, Z, UInt(2)), "(Z)^(2)"),
        (Binary(BinaryOp.SUM, Binary(BinaryOp.PROD, Z, Z), INIT_Z), "Z*Z+InitZ"),
        (Unary(UnaryOp.ABS, Binary(BinaryOp.SUM, Z, I)), "Abs(Z+I)"),
    ],
)
def test_to_string(expr, text):
    assert expr.to_string() == text
    assert str(expr) == text


def test_contains_z_and_alpha():
    expr = Binary(BinaryOp.SUM, Unary(UnaryOp.SIN, Z), INIT_Z)
    assert expr.contains_z() is True
    assert expr.contains_alpha() is False
    other = Binary(BinaryOp.PROD, PREV_Z, Unary(UnaryOp.EXP, ALPHA))
    assert other.contains_z() is False
    assert other.contains_alpha() is True


def test_eval_variables():
    args = (1 + 2j, 3 + 4j, 5 + 6j, 0.5)
    assert Z.eval(*args) == 1 + 2j
    assert PREV_Z.eval(*args) == 3 + 4j
    assert INIT_Z.eval(*args) == 5 + 6j
    assert I.eval(*args) == 1j
    assert ALPHA.eval(*args) == 0.5


def test_eval_mandelbrot_step():
    expr = Binary(BinaryOp.SUM, Binary(BinaryOp.PROD, Z, Z), INIT_Z)
    assert expr.eval(1 + 1j, 0j, 0.5 + 0j, 0.0) == 0.5 + 2j


def test_eval_pow():
    result = Binary(BinaryOp.POW, Z, UInt(2)).eval(1j, 0j, 0j, 0.0)
    assert result.real == pytest.approx(-1.0)
    assert result.imag == pytest.approx(0.0, abs=1e-12)


def test_eval_pow_zero_exponent_is_one():
    assert Binary(BinaryOp.POW, Z, UInt(0)).eval(0j, 0j, 0j, 0.0) == 1 + 0j


def test_eval_division():
    assert Binary(BinaryOp.DIV, Z, INIT_Z).eval(4 + 2j, 0j, 2 + 0j, 0.0) == 2 + 1j


def test_division_by_zero_gives_nan():
    result = Binary(BinaryOp.DIV, Z, UInt(0)).eval(1 + 0j, 0j, 0j, 0.0)
    assert cmath.isnan(result) is True


def test_ln_of_zero_is_negative_infinity():
    result = Unary(UnaryOp.LN, UInt(0)).eval(0j, 0j, 0j, 0.0)
    assert result.real == -math.inf


def test_abs_arg_re_im_conj():
    w = 3 + 4j
    assert Unary(UnaryOp.ABS, Z).eval(w, 0j, 0j, 0.0) == 5 + 0j
    assert Unary(UnaryOp.ARG, I).eval(w, 0j, 0j, 0.0).real == pytest.approx(math.pi / 2)
    assert Unary(UnaryOp.RE, Z).eval(w, 0j, 0j, 0.0) == 3 + 0j
    assert Unary(UnaryOp.IM, Z).eval(w, 0j, 0j, 0.0) == 4 + 0j
    assert Unary(UnaryOp.CONJ, Z).eval(w, 0j, 0j, 0.0) == 3 - 4j
    assert Unary(UnaryOp.NEG, Z).eval(w, 0j, 0j, 0.0) == -3 - 4j


def test_rounding_is_componentwise_and_half_away_from_zero():
    w = 2.5 - 2.5j
    assert Unary(UnaryOp.ROUND, Z).eval(w, 0j, 0j, 0.0) == 3 - 3j
    assert Unary(UnaryOp.CEIL, Z).eval(1.2 - 1.2j, 0j, 0j, 0.0) == 2 - 1j
    assert Unary(UnaryOp.FLOOR, Z).eval(1.2 - 1.2j, 0j, 0j, 0.0) == 1 - 2j


def test_exp_overflow_gives_non_finite():
    result = Unary(UnaryOp.EXP, UInt(100000)).eval(0j, 0j, 0j, 0.0)
    assert cmath.isfinite(result) is False


def test_sin_matches_cmath():
    w = 0.3 + 0.7j
    assert Unary(UnaryOp.SIN, Z).eval(w, 0j, 0j, 0.0) == cmath.sin(w)


def test_from_int_string_of_known_id():
    assert from_int(20585).to_string() == "Z*Z+InitZ"