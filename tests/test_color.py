import math

import pytest

from fractalid.color import (
    BLACK,
    BLUE,
    GREEN,
    RAINBOW_POINTS,
    RED,
    REGENTA,
    WHITE,
    lerp_color,
    multipoint_gradient,
    rainbow,
)


def channels(color):
    return color.to_bytes(4, "little")


def test_lerp_at_zero_gives_first_colour():
    assert lerp_color(0.0, RED, BLUE) == RED


def test_lerp_at_one_gives_second_colour():
    assert lerp_color(1.0, RED, BLUE) == BLUE


def test_lerp_halfway_truncates_channels():
    assert lerp_color(0.5, BLACK, WHITE) == 0x7F7F7F


@pytest.mark.parametrize("t", [0.1, 0.25, 0.5, 0.75, 0.9])
@pytest.mark.parametrize("p, q", [(RED, BLUE), (GREEN, WHITE), (BLACK, REGENTA)])
def test_lerp_channels_stay_between_endpoints(t, p, q):
    result = lerp_color(t, p, q)
    for c, a, b in zip(channels(result), channels(p), channels(q)):
        assert min(a, b) - 1 <= c <= max(a, b)


def test_lerp_nan_gives_black():
    assert lerp_color(math.nan, RED, BLUE) == BLACK


def test_lerp_rejects_oversized_colour():
    with pytest.raises(ValueError):
        lerp_color(0.5, 1 << 32, RED)


def test_gradient_nan_gives_white():
    assert multipoint_gradient(math.nan, [(-1.0, RED), (1.0, BLUE)]) == WHITE


def test_gradient_at_a_stop_gives_its_colour():
    points = [(-1.0, RED), (0.0, GREEN), (1.0, BLUE)]
    assert multipoint_gradient(0.0, points) == GREEN
    assert multipoint_gradient(1.0, points) == BLUE


def test_gradient_beyond_last_stop_raises():
    with pytest.raises(ValueError):
        multipoint_gradient(2.0, [(-1.0, RED), (1.0, BLUE)])


def test_rainbow_points_are_sorted_and_framed_by_white():
    positions = [p for p, _ in RAINBOW_POINTS]
    assert positions == sorted(positions)
    assert RAINBOW_POINTS[0][1] == WHITE
    assert RAINBOW_POINTS[-1][1] == WHITE
    assert RAINBOW_POINTS[1] == (-1.0, RED)
    assert len(RAINBOW_POINTS) == 14
    for position, color in RAINBOW_POINTS[1:]:
        assert multipoint_gradient(position, RAINBOW_POINTS) == color


def test_rainbow_nan_is_white():
    assert rainbow(math.nan) == WHITE


def test_rainbow_negative_is_white():
    assert rainbow(-1.0) == WHITE


def test_rainbow_infinity_is_last_colour():
    assert rainbow(math.inf) == REGENTA


@pytest.mark.parametrize("t", [0.0, 1e-300, 1e-5, 1.0, 2.0, 100.0, 1e50, 1e300])
def test_rainbow_gives_24_bit_colour(t):
    color = rainbow(t)
    assert 0 <= color <= 0xFFFFFF
    assert channels(color)[3] == 0