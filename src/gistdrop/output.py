"""Terminal output for gistdrop.

stdout carries only the data a script would capture: the gist URL from
``upload``, the key/value listing from ``auth status`` and ``config show``,
the path from ``config path``.  Everything addressed to the person at the
keyboard (device-code instructions, poll dots, warnings, errors, hints)
goes to stderr, so ``url=$(gistdrop upload notes.txt)`` stays clean.

Colour follows ``--no-color``, ``NO_COLOR`` and ``TERM=dumb``.  Rich
markup is only used when stdout is a terminal.

:func:`~gistdrop.app.main_callback` builds one :class:`OutputManager` per
invocation and installs it with :func:`set_output`; commands call the
module-level helpers (:func:`info`, :func:`error`, ...) instead of passing
the manager around.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape


class OutputFormat(str, Enum):
    """How stdout data is rendered.  ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Route data to stdout and diagnostics to stderr.

    Args:
        format: Rendering for :meth:`format_response`.
        no_color: Print stderr messages without Rich markup.
        quiet: Drop info, success, suggestion and progress messages.
            Warnings and errors are always shown.
        verbose: Show :meth:`debug` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format (never ``AUTO``)."""
        return self._format

    # -- stdout ---------------------------------------------------------

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Print a flat mapping (or a scalar) to stdout.

        JSON mode dumps it as one document.  Otherwise every key gets its
        own line: ``key<TAB>value`` in plain mode, a bold key in rich mode.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
            return
        if not isinstance(data, dict):
            self.print_data(str(data))
            return
        for key, value in data.items():
            if self._format == OutputFormat.RICH:
                self._stdout.print(
                    f"[bold]{escape(str(key))}[/bold]  {escape(str(value))}", highlight=False
                )
            else:
                self.print_data(f"{key}\t{value}")

    # -- stderr ---------------------------------------------------------

    def _emit(self, plain: str, markup: Optional[str] = None, end: str = "\n") -> None:
        if self._no_color:
            print(plain, end=end, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup if markup is not None else escape(plain), end=end)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self._emit(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self._emit(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def suggest(self, message: str) -> None:
        """Print a next step, e.g. the command that fixes the last error."""
        if not self._quiet:
            hint = f"→ {message}"
            self._emit(hint, f"[dim]{escape(hint)}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            line = f"[debug] {message}"
            self._emit(line, f"[dim]{escape(line)}[/dim]")

    def progress(self, marker: str, newline: bool = False) -> None:
        """Print *marker* with no line break, e.g. one dot per token poll."""
        if not self._quiet:
            self._emit(marker, f"[dim]{escape(marker)}[/dim]", end="\n" if newline else "")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# -- process-wide instance ----------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (its consoles hold the old streams)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)


def progress(marker: str, newline: bool = False) -> None:
    get_output().progress(marker, newline)
