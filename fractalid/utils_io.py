"""Small console input and output helpers."""

from __future__ import annotations

import sys

__all__ = ["press_enter_to_continue", "wait_for_enter", "flush", "echo", "prompt"]


def press_enter_to_continue() -> None:
    """Ask for Enter and wait until a line is read."""
    echo("PRESS ENTER TO CONTINUE")
    wait_for_enter()


def wait_for_enter() -> None:
    """Read and discard one line of standard input."""
    sys.stdin.readline()


def flush() -> None:
    """Flush standard output."""
    sys.stdout.flush()


def echo(msg: object) -> None:
    """Write ``msg`` without a newline and flush at once."""
    sys.stdout.write(str(msg))
    flush()


def prompt(text: str) -> str:
    """Show ``text`` and return the next input line with whitespace trimmed."""
    echo(text)
    return sys.stdin.readline().strip()