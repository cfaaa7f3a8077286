"""
Terminal Display Helpers.

Line redraw, progress messages, info rows and the confirmation prompt
shared by the pg commands. Output goes through Rich.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from rich.console import Console
from rich.control import Control, ControlType

ERROR_PREFIX = " !    "


class LineDisplay(Protocol):
    """A single status line that can be redrawn in place or finalized."""

    def update(self, text: str) -> None:
        """Replace the current line with text."""

    def commit(self, text: str) -> None:
        """Replace the current line with text and end it."""


class ConsoleLine:
    """
    LineDisplay backed by a Rich console.

    On a terminal the line is rewritten in place. When output is piped
    every update is printed as its own line.
    """

    def __init__(self, console: Console) -> None:
        self.console = console

    def _rewind(self) -> None:
        self.console.control(
            Control.move_to_column(0),
            Control((ControlType.ERASE_IN_LINE, 2)),
        )

    def update(self, text: str) -> None:
        if self.console.is_terminal:
            self._rewind()
            self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)
        else:
            self.console.print(text, markup=False, highlight=False)

    def commit(self, text: str) -> None:
        if self.console.is_terminal:
            self._rewind()
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


@contextmanager
def working(display: LineDisplay, message: str) -> Iterator[None]:
    """
    Show "message..." while the body runs, then "message... done".

    Usage:
        with working(line, "Resetting"):
            client.reset()
    """
    display.update(f"{message}...")
    try:
        yield
    except BaseException:
        display.commit(f"{message}... failed")
        raise
    display.commit(f"{message}... done")


def display_info(console: Console, label: str, value: Any) -> None:
    """Print one aligned label/value row."""
    console.print(f"{label + ':':<22} {value}", markup=False, highlight=False, soft_wrap=True)


def display_error(console: Console, message: str) -> None:
    """Print a one-line error, prefixed so it stands out from normal output."""
    console.print(f"{ERROR_PREFIX}{message}", style="red", markup=False, highlight=False, soft_wrap=True)


def confirm_command(console: Console, app: str) -> bool:
    """
    Ask the user to type the app name before a destructive action.

    Returns:
        True when the typed name matches, False otherwise
    """
    console.print()
    display_error(console, "WARNING: Potentially Destructive Action")
    display_error(console, f"This command will affect the app: {app}")
    display_error(console, f'To proceed, type "{app}"')
    console.print()

    answer = console.input("> ").strip()
    if answer == app:
        return True

    display_error(console, f"Confirmation did not match {app}. Aborted.")
    return False
