"""Escape-time rendering of a formula over a camera view."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .color import BLACK, rainbow
from .expr import Expr

__all__ = [
    "MOVE_STEP",
    "ZOOM_STEP",
    "BASE_ITERATIONS",
    "Quality",
    "Camera",
    "EscapeSettings",
    "screen_to_world",
    "escape_color",
    "render",
]

MOVE_STEP = 0.1
ZOOM_STEP = 1.1
BASE_ITERATIONS = 20

_U32_MAX = (1 << 32) - 1


def _log(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    if math.isinf(x):
        return math.inf
    return math.log(x)


def _fdiv(x: float, y: float) -> float:
    if math.isnan(x) or math.isnan(y):
        return math.nan
    if y == 0:
        if x == 0:
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    if math.isinf(x) and math.isinf(y):
        return math.nan
    return x / y


def _saturating_u32(x: float) -> int:
    """Convert to an unsigned 32-bit integer, clamping and mapping NaN to 0."""
    if math.isnan(x) or x <= 0:
        return 0
    if x >= _U32_MAX:
        return _U32_MAX
    return int(x)


def _is_nan(w: complex) -> bool:
    return math.isnan(w.real) or math.isnan(w.imag)


def _norm(w: complex) -> float:
    try:
        return math.hypot(w.real, w.imag)
    except OverflowError:
        return math.inf


@dataclass
class Quality:
    """Render quality level; higher levels iterate more when zoomed in."""

    level: int = 0

    def zoom_to_iters_n(self, zoom: float) -> int:
        """Number of iterations to run at the given zoom."""
        try:
            log_base = 1.0 + math.exp(-self.level / 5.0)
        except OverflowError:
            log_base = math.inf
        steps = _fdiv(_log(zoom), _log(log_base))
        return BASE_ITERATIONS + _saturating_u32(steps)

    def increase(self) -> None:
        self.level += 1

    def decrease(self) -> None:
        self.level -= 1


def screen_to_world(
    x: float,
    y: float,
    width: float,
    height: float,
    zoom: float,
    cam_x: float,
    cam_y: float,
) -> tuple[float, float]:
    """Map a screen point to world coordinates; the screen centre is the camera."""
    aspect_ratio = height / width
    half_w = width * 0.5
    half_h = height * 0.5
    world_x = cam_x + (x - half_w) / half_w / zoom
    world_y = cam_y + (y - half_h) / half_h / zoom * aspect_ratio
    return world_x, world_y


@dataclass
class Camera:
    """Position and zoom of the view onto the complex plane."""

    zoom: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def screen_to_world(
        self, sx: float, sy: float, width: float, height: float
    ) -> tuple[float, float]:
        return screen_to_world(sx, sy, width, height, self.zoom, self.x, self.y)

    def move(self, dx: float, dy: float) -> None:
        """Move by ``dx``, ``dy`` steps; a step shrinks as the zoom grows."""
        speed = MOVE_STEP / self.zoom
        self.x += dx * speed
        self.y += dy * speed

    def reset(self) -> None:
        self.zoom = 1.0
        self.x = 0.0
        self.y = 0.0

    def zoom_keeping_center(self, factor: float, width: float, height: float) -> None:
        """Multiply the zoom by ``factor`` while the screen centre stays put."""
        cx, cy = width / 2.0, height / 2.0
        before_x, before_y = self.screen_to_world(cx, cy, width, height)
        self.zoom *= factor
        after_x, after_y = self.screen_to_world(cx, cy, width, height)
        self.x += before_x - after_x
        self.y += before_y - after_y


@dataclass(frozen=True)
class EscapeSettings:
    """How escape from the bounded region is detected and recorded."""

    zesc_value: float = 100.0
    assign_zesc_once: bool = False
    break_loop: bool = False


def escape_color(
    expr: Expr,
    z_init: complex,
    n_iters: int,
    alpha: float,
    settings: EscapeSettings,
) -> int:
    """Iterate ``expr`` from ``z_init`` and return the RGB colour of the point."""
    z = prev_z = last_not_nan = complex(z_init)
    z_esc = 0j
    bounded = True
    for _ in range(n_iters):
        if not _is_nan(z):
            last_not_nan = z
        z_new = expr.eval(z, prev_z, z_init, alpha)
        prev_z, z = z, z_new
        escaped = _norm(z) > settings.zesc_value or _is_nan(z)
        if escaped and (bounded or not settings.assign_zesc_once):
            bounded = False
            z_esc = z
            if settings.break_loop:
                break
    if bounded:
        return BLACK
    if _is_nan(last_not_nan):
        raise ArithmeticError(f"no finite iterate to colour from: {last_not_nan}")
    return rainbow(_norm(z_esc if not _is_nan(z_esc) else last_not_nan))


def render(
    expr: Expr,
    width: int,
    height: int,
    camera: Camera,
    quality: Quality,
    alpha: float,
    settings: EscapeSettings,
) -> list[int]:
    """Render a ``width`` by ``height`` frame as row-major RGB values."""
    n_iters = quality.zoom_to_iters_n(camera.zoom)
    return [
        escape_color(
            expr,
            complex(*camera.screen_to_world(float(x), float(y), width, height)),
            n_iters,
            alpha,
            settings,
        )
        for y in range(height)
        for x in range(width)
    ]