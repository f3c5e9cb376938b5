# fractalid

Every natural number names a fractal. `fractalid` decodes an integer id into a
complex-valued iteration formula, such as `Z*Z+InitZ` (the Mandelbrot set,
id 20585), and draws the escape-time image of that formula in a window you can
pan and zoom. You can also go the other way: write a formula and get its id.

## Installing

```
pip install .
```

The viewer window uses `pygame`. To run the test suite, install the `test`
extra and run `pytest`.

## Usage

Render a fractal by its id:

```
fractalid 20585
```

Render a fractal from a formula. The id is printed next to it:

```
fractalid "z*z + initz"
```

With no argument, an id of at most 19 digits is chosen at random. Unless told
otherwise, the random choice must use both `z` and `alpha`.

Print the id of a formula, and the formula that id decodes to, without opening
a window:

```
fractalid --get-id-of "z^2 + zinit"
```

### Formulas

The variables are `z` (the current value), `zprev` / `prevz` (the previous
value), `zinit` / `initz` (the starting point of the pixel), `i`, and `a` /
`alpha`, a parameter you can change while viewing. Numbers can be integers,
floats or complex literals. The operators are `+ - * / ^`. The functions are
`abs arg re im conj exp ln sqrt sin cos tan sinh cosh tanh asin acos atan
asinh acosh atanh round ceil floor`. Case is ignored. Malformed text raises a
subclass of `fractalid.parser.ExprParseError`.

### Options

| option | meaning |
| --- | --- |
| `-s`, `--assign-zesc-once` | keep the first escaped value for colouring |
| `-b`, `--break-loop` | stop iterating once a point escapes |
| `-e`, `--zesc-value N` | escape radius (default 100) |
| `-r`, `--keys-repeat` | start with held keys repeating |
| `-n`, `--get-id-of EXPR` | print the id of a formula and exit |
| `-z`, `--allow-no-z` | allow formulas without `z` when picking or stepping |
| `-a`, `--allow-no-alpha` | allow formulas without `alpha` |
| `-c`, `--clamp-alpha` | keep `alpha` between 0 and 1 |
| `-l`, `--alpha-step X` | step for changing `alpha` (default 0.05) |
| `--version` | print the version and exit |

### Controls

| keys | action |
| --- | --- |
| Arrows, WASD, HJKL | move the camera |
| Z X, I O | zoom in / out |
| R | reset camera and zoom |
| E Q | raise / lower render quality |
| N P | next / previous fractal by id |
| B | toggle `break_loop` |
| Y | toggle `assign_zesc_once` |
| `-` `=` | lower / raise `alpha` by `alpha_step` |
| 9 0 | divide / multiply `alpha_step` by 1.1 |
| Space | toggle key repeat for the single-press keys above |
| Escape | quit |

## As a library

```python
from fractalid.expr import from_int
from fractalid.parser import parse_expr
from fractalid.render import Camera, EscapeSettings, Quality, render

expr = parse_expr("z*z + initz")
print(expr.to_int())                 # 20585
print(from_int(20585).to_string())   # Z*Z+InitZ

pixels = render(expr, 64, 48, Camera(), Quality(), 0.5, EscapeSettings())
```

`render` returns row-major 24-bit RGB integers; points that never escape are
black, the rest are coloured by `fractalid.color.rainbow`.

## What it does not do

Rendering happens only in the interactive window; there is no option to save
images or video to a file.