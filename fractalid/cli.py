"""Command line entry point and interactive viewer."""

from __future__ import annotations

import argparse
import random
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .expr import Expr, from_int
from .parser import parse_expr
from .render import Camera, EscapeSettings, Quality, ZOOM_STEP, render

__all__ = [
    "ALPHA_STEP_DEFAULT",
    "ALPHA_STEP_STEP",
    "Params",
    "build_parser",
    "is_acceptable",
    "random_fractal",
    "resolve_fractal",
    "next_fractal",
    "prev_fractal",
    "describe",
    "id_report",
    "params_from_args",
    "run_window",
    "main",
]

ALPHA_STEP_DEFAULT = 0.05
ALPHA_STEP_STEP = 1.1
ALPHA_INITIAL = 0.5
ZESC_VALUE_DEFAULT = 100.0

_MAX_RANDOM_DIGITS = 19
_INITIAL_SIZE = (320, 240)
_TARGET_FPS = 60
_VERSION = "3.0.1"

_ID_RE = re.compile(r"\+?[0-9]+")

_DESCRIPTION = """\
Render fractal from Id.

Controls:
  Arrows, WASD, HJKL  camera movement
  ZX, IO              zoom in/out
  R                   reset camera and zoom
  EQ                  inc/dec render quality
  NP                  next/prev fractal by its Id
  B                   toggle break_loop
  Y                   toggle assign_zesc_once
  -=                  dec/inc alpha by alpha_step
  90                  dec/inc alpha_step 1.1 times
  Space               toggle some keys repeat mode
"""


@dataclass
class Params:
    """Settings of a viewing session, some of which change while it runs."""

    fractal_id: int
    expr: Expr
    assign_zesc_once: bool = False
    break_loop: bool = False
    zesc_value: float = ZESC_VALUE_DEFAULT
    keys_repeat: bool = False
    allow_no_z: bool = False
    allow_no_alpha: bool = False
    clamp_alpha: bool = False
    alpha_step: float = ALPHA_STEP_DEFAULT

    def escape_settings(self) -> EscapeSettings:
        return EscapeSettings(
            zesc_value=self.zesc_value,
            assign_zesc_once=self.assign_zesc_once,
            break_loop=self.break_loop,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="fractalid",
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    parser.add_argument("fractal", nargs="?", default=None, help="fractal id or expression")
    parser.add_argument("-s", "--assign-zesc-once", action="store_true")
    parser.add_argument("-b", "--break-loop", action="store_true")
    parser.add_argument("-e", "--zesc-value", type=float, default=ZESC_VALUE_DEFAULT)
    parser.add_argument("-r", "--keys-repeat", action="store_true")
    parser.add_argument("-n", "--get-id-of", default=None, metavar="EXPR")
    parser.add_argument("-z", "--allow-no-z", action="store_true")
    parser.add_argument("-a", "--allow-no-alpha", action="store_true")
    parser.add_argument("-c", "--clamp-alpha", action="store_true")
    parser.add_argument("-l", "--alpha-step", type=float, default=None)
    return parser


def is_acceptable(expr: Expr, allow_no_z: bool, allow_no_alpha: bool) -> bool:
    """Tell whether ``expr`` uses the variables the session requires."""
    return (allow_no_z or expr.contains_z()) and (allow_no_alpha or expr.contains_alpha())


def random_fractal(
    allow_no_z: bool, allow_no_alpha: bool, rng: random.Random | None = None
) -> tuple[int, Expr]:
    """Pick a random acceptable fractal with an id of at most 19 digits."""
    rng = rng or random.Random()
    while True:
        digits = rng.randint(1, _MAX_RANDOM_DIGITS)
        if digits == 1:
            id_ = rng.randint(0, 9)
        else:
            id_ = rng.randrange(10 ** (digits - 1), 10**digits)
        expr = from_int(id_)
        if is_acceptable(expr, allow_no_z, allow_no_alpha):
            return id_, expr


def resolve_fractal(text: str) -> tuple[int, Expr]:
    """Turn an id or a formula given as text into ``(id, expression)``."""
    stripped = text.strip()
    if _ID_RE.fullmatch(stripped):
        id_ = int(stripped)
        return id_, from_int(id_)
    expr = parse_expr(text)
    return expr.to_int(), expr


def next_fractal(id_: int, allow_no_z: bool, allow_no_alpha: bool) -> tuple[int, Expr]:
    """The first acceptable fractal with an id above ``id_``."""
    while True:
        id_ += 1
        expr = from_int(id_)
        if is_acceptable(expr, allow_no_z, allow_no_alpha):
            return id_, expr


def prev_fractal(id_: int, allow_no_z: bool, allow_no_alpha: bool) -> tuple[int, Expr]:
    """The last acceptable fractal with an id below ``id_``.

    Id 0 is returned unchanged. Raises ValueError when no id below is acceptable.
    """
    if id_ <= 0:
        return id_, from_int(id_)
    while id_ > 0:
        id_ -= 1
        expr = from_int(id_)
        if is_acceptable(expr, allow_no_z, allow_no_alpha):
            return id_, expr
    raise ValueError("no acceptable fractal has a smaller id")


def describe(id_: int, expr: Expr) -> str:
    """One-line summary of a fractal: its id and formula."""
    return f"{id_} -> {expr.to_string()}"


def id_report(text: str) -> str:
    """Report the id of a formula and the formula that id decodes to."""
    expr = parse_expr(text)
    id_ = expr.to_int()
    decoded = from_int(id_)
    if decoded != expr:
        raise ValueError("expr from str != expr from int, which is bad...")
    return f"id: {id_}\n{describe(id_, decoded)}"


def params_from_args(args: argparse.Namespace, rng: random.Random | None = None) -> Params:
    """Build session parameters from parsed arguments."""
    if args.fractal is not None:
        id_, expr = resolve_fractal(args.fractal)
    else:
        id_, expr = random_fractal(args.allow_no_z, args.allow_no_alpha, rng)
    return Params(
        fractal_id=id_,
        expr=expr,
        assign_zesc_once=args.assign_zesc_once,
        break_loop=args.break_loop,
        zesc_value=args.zesc_value,
        keys_repeat=args.keys_repeat,
        allow_no_z=args.allow_no_z,
        allow_no_alpha=args.allow_no_alpha,
        clamp_alpha=args.clamp_alpha,
        alpha_step=ALPHA_STEP_DEFAULT if args.alpha_step is None else args.alpha_step,
    )


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _to_image_bytes(pixels: list[int]) -> bytes:
    return b"".join((c & 0xFFFFFF).to_bytes(3, "big") for c in pixels)


def run_window(params: Params) -> None:
    """Open the viewer window and run it until it is closed or Escape is pressed."""
    import pygame

    pygame.init()
    try:
        pygame.display.set_mode(_INITIAL_SIZE, pygame.RESIZABLE)
        pygame.display.set_caption("fractals")
        clock = pygame.time.Clock()
        camera = Camera()
        quality = Quality()
        alpha = ALPHA_INITIAL
        size = pygame.display.get_surface().get_size()
        image = None
        redraw = True

        while True:
            pressed_now: set[int] = set()
            closed = False
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    closed = True
                elif event.type == pygame.KEYDOWN:
                    pressed_now.add(event.key)
            held = pygame.key.get_pressed()
            if closed or held[pygame.K_ESCAPE]:
                break

            screen = pygame.display.get_surface()
            new_size = screen.get_size()
            if new_size != size:
                size = new_size
                redraw = True
            width, height = size

            def down(*keys: int) -> bool:
                return any(held[k] for k in keys)

            def hit(key: int) -> bool:
                return bool(held[key]) if params.keys_repeat else key in pressed_now

            if down(pygame.K_LEFT, pygame.K_h, pygame.K_a):
                camera.move(-1.0, 0.0)
                redraw = True
            if down(pygame.K_RIGHT, pygame.K_l, pygame.K_d):
                camera.move(1.0, 0.0)
                redraw = True
            if down(pygame.K_UP, pygame.K_k, pygame.K_w):
                camera.move(0.0, -1.0)
                redraw = True
            if down(pygame.K_DOWN, pygame.K_j, pygame.K_s):
                camera.move(0.0, 1.0)
                redraw = True

            if pygame.K_SPACE in pressed_now:
                params.keys_repeat = not params.keys_repeat
                print(f"keys_repeat: {_flag(params.keys_repeat)}")

            if hit(pygame.K_e):
                quality.increase()
                print(f"quality: Quality({quality.level})")
                redraw = True
            if hit(pygame.K_q):
                quality.decrease()
                print(f"quality: Quality({quality.level})")
                redraw = True

            if hit(pygame.K_n):
                params.fractal_id, params.expr = next_fractal(
                    params.fractal_id, params.allow_no_z, params.allow_no_alpha
                )
                print(describe(params.fractal_id, params.expr))
                redraw = True
            if hit(pygame.K_p) and params.fractal_id > 0:
                params.fractal_id, params.expr = prev_fractal(
                    params.fractal_id, params.allow_no_z, params.allow_no_alpha
                )
                print(describe(params.fractal_id, params.expr))
                redraw = True

            if hit(pygame.K_b):
                params.break_loop = not params.break_loop
                print(f"break_loop: {_flag(params.break_loop)}")
                redraw = True
            if hit(pygame.K_y):
                params.assign_zesc_once = not params.assign_zesc_once
                print(f"assign_zesc_once: {_flag(params.assign_zesc_once)}")
                redraw = True

            for key, sign in ((pygame.K_EQUALS, 1.0), (pygame.K_MINUS, -1.0)):
                if hit(key):
                    alpha += sign * params.alpha_step
                    if params.clamp_alpha:
                        alpha = min(max(alpha, 0.0), 1.0)
                    print(f"alpha: {alpha}")
                    redraw = True

            if hit(pygame.K_0):
                params.alpha_step *= ALPHA_STEP_STEP
                print(f"alpha_step: {params.alpha_step}")
            if hit(pygame.K_9):
                params.alpha_step /= ALPHA_STEP_STEP
                print(f"alpha_step: {params.alpha_step}")

            if hit(pygame.K_r):
                camera.reset()
                print("zoom reset")
                redraw = True

            if down(pygame.K_z, pygame.K_i):
                camera.zoom_keeping_center(ZOOM_STEP, width, height)
                redraw = True
            if down(pygame.K_x, pygame.K_o):
                camera.zoom_keeping_center(1.0 / ZOOM_STEP, width, height)
                redraw = True

            if redraw and width > 0 and height > 0:
                pixels = render(
                    params.expr, width, height, camera, quality, alpha,
                    params.escape_settings(),
                )
                image = pygame.image.frombuffer(
                    _to_image_bytes(pixels), (width, height), "RGB"
                )
                redraw = False

            screen.fill((0, 0, 0))
            if image is not None:
                screen.blit(image, (0, 0))
            pygame.display.flip()
            clock.tick(_TARGET_FPS)
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line program."""
    args = build_parser().parse_args(argv)
    if args.get_id_of is not None:
        print(id_report(args.get_id_of))
        return 0
    params = params_from_args(args)
    print(describe(params.fractal_id, params.expr))
    run_window(params)
    return 0


if __name__ == "__main__":
    sys.exit(main())