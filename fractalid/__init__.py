"""Escape-time fractals whose formulas are numbered by integer ids."""

__version__ = "3.0.1"
__all__ = ["__version__"]