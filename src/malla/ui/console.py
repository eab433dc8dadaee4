"""Terminal output for malla.

Everything user-facing goes through one Console so the CLI can switch
debug output on and off in a single place.
"""

from __future__ import annotations

import traceback
from typing import Dict, Iterable, Optional

import click


STATUS_MARKS = {
    "completed": "[x]",
    "available": "[ ]",
    "locked": "[#]",
}


class Console:
    def __init__(self, debug: bool = False):
        self.debug = debug

    def _out(self, text: str = "") -> None:
        click.echo(text)

    def _err(self, text: str = "") -> None:
        click.echo(text, err=True)

    def print_header(self, title: str) -> None:
        self._out(f"\n{title}\n{'=' * len(title)}")

    def print_item(self, item_id: str, label: str, status: str) -> None:
        mark = STATUS_MARKS.get(status, "[?]")
        name = item_id if label == item_id else f"{item_id}  {label}"
        self._out(f"  {mark} {name} ({status})")

    def print_summary(self, counts: Dict[str, int]) -> None:
        self._out("\n" + ", ".join(f"{status}: {n}" for status, n in counts.items()))

    def print_toggled(self, item_id: str, action: str) -> None:
        self._out(f"{item_id}: {action.upper()}")

    def print_info(self, message: str) -> None:
        self._out(message)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[Iterable[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Structured error on stderr:

            ERROR: <title>
            <message>
              <detail>...

            <suggestion>
        """
        lines = [f"\nERROR: {title}", message]
        lines.extend(f"  {d}" for d in details or ())
        if suggestion:
            lines.append(f"\n{suggestion}")
        self._err("\n".join(lines))

    def print_exception(self, exc: BaseException) -> None:
        """One line normally; the full traceback with --debug."""
        if self.debug:
            self._err("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())
        else:
            self._err(f"Error: {exc}")

    def print_debug(self, message: str) -> None:
        if self.debug:
            self._err(f"[DEBUG] {message}")


_console: Optional[Console] = None


def get_console() -> Console:
    """Process-wide console; a non-debug one until the CLI installs its own."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    global _console
    _console = console
