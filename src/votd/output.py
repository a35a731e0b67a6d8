"""Terminal output for votd.

The verse goes to stdout and nothing else does: the title line and the
wrapped body, or a JSON object with ``--json``. Notices, errors and
``--verbose`` traces go to stderr, so ``votd | fold`` and
``votd --json | jq`` always see clean data.

Styling is used only when stdout is a terminal and colour has not been
turned off with ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.

An :class:`OutputManager` is built once per run by
:func:`~votd.app.votd_command` and installed with :func:`set_output`. The
client, cache and resolver reach it through :func:`get_output`.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape

DEFAULT_WIDTH = 80
"""Wrap width when the terminal size is unknown, e.g. when piped."""


class OutputFormat(str, Enum):
    """How the verse is written to stdout."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes the verse to stdout and diagnostics to stderr.

    Args:
        format: ``AUTO`` becomes ``RICH`` on a colour-capable terminal and
            ``PLAIN`` everywhere else.
        no_color: Force unstyled output.
        quiet: Drop notices (:meth:`info` and :meth:`success`). Errors are
            always printed.
        verbose: Print :meth:`debug` traces.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._plain else OutputFormat.PLAIN
        self._format = format

        self._verse_console = Console(
            file=sys.stdout,
            no_color=self._plain,
            force_terminal=format == OutputFormat.RICH,
            highlight=False,
        )
        self._notice_console = Console(
            file=sys.stderr,
            stderr=True,
            no_color=self._plain,
            highlight=False,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def width(self) -> int:
        """Column count to wrap the verse body at.

        Taken from the console when stdout is a terminal or ``COLUMNS`` is
        set, otherwise :data:`DEFAULT_WIDTH`.
        """
        if not (_is_tty() or os.environ.get("COLUMNS")):
            return DEFAULT_WIDTH
        return self._verse_console.width or DEFAULT_WIDTH

    # -- stdout ---------------------------------------------------------- #

    def print_data(self, text: str) -> None:
        """Write one line of the verse (or the JSON document) to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_title(self, text: str) -> None:
        """Write the title line, in bold when styling is on."""
        if self._format != OutputFormat.RICH:
            self.print_data(text)
            return
        self._verse_console.print(f"[bold]{escape(text)}[/bold]", soft_wrap=True)

    # -- stderr ---------------------------------------------------------- #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._notify(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._notify(message, style="green")

    def error(self, message: str) -> None:
        self._notify(message, label="Error: ", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._notify(message, label="[debug] ", style="dim")

    def _notify(self, message: str, label: str = "", style: str = "") -> None:
        line = f"{label}{message}"
        if self._plain:
            print(line, file=sys.stderr, flush=True)
        elif style:
            self._notice_console.print(f"[{style}]{escape(line)}[/{style}]")
        else:
            self._notice_console.print(escape(line))


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``, turns colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# -- process-wide instance ------------------------------------------------ #

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
    """Forget the installed manager so the next :func:`get_output` builds a new one."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)
