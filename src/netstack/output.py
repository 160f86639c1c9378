"""Terminal output for the ``netstack`` CLI.

Response bodies go to stdout and nothing else does, so
``netstack request get /users | jq`` always sees clean data. Status lines,
retry notes and failure reports go to stderr at one of five levels:

========  ===============================  =====================
level     shown                            rendered as
========  ===============================  =====================
info      unless ``--quiet``               plain
success   unless ``--quiet``               green
warning   always                           ``Warning:`` prefix
error     always                           ``Error:`` prefix
debug     only with ``--verbose``          ``[debug]`` prefix
========  ===============================  =====================

Messages are rendered as :class:`rich.text.Text`, never as Rich markup, so
server-supplied text such as ``field [/name] is required`` prints verbatim.

The CLI installs an :class:`OutputManager` with :func:`set_output`; the
client and the commands reach it through :func:`get_output` or the
module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from functools import partialmethod
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from netstack.exceptions import NetstackError


class OutputFormat(str, Enum):
    """``AUTO`` becomes ``RICH`` on a colour TTY and ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Level(NamedTuple):
    label: str
    label_style: str
    body_style: str
    gate: Optional[str]


_LEVELS = {
    "info": _Level("", "", "", "quiet"),
    "success": _Level("", "", "green", "quiet"),
    "warning": _Level("Warning: ", "yellow", "", None),
    "error": _Level("Error: ", "bold red", "", None),
    "debug": _Level("[debug] ", "dim", "dim", "verbose"),
}


class OutputManager:
    """Writes response data to stdout and leveled diagnostics to stderr.

    Args:
        format: Output format for response data.
        no_color: Disable colour on both streams.
        quiet: Hide ``info`` and ``success`` lines.
        verbose: Show ``debug`` lines, including failure details.
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
        self._format = _resolve_format(format, self._no_color)
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- stdout -------------------------------------------------------------

    def format_response(self, data: Any) -> None:
        """Print a decoded response body.

        JSON mode re-serialises it, plain mode prints one tab-separated line
        per key or list item, and Rich mode syntax-highlights dicts and lists.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        elif self._format == OutputFormat.RICH:
            self._stdout.print(Text(str(data)))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(self, headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return
        table = Table(*headers, title=title, header_style="bold cyan")
        for row in rows:
            table.add_row(*(Text(cell) for cell in row))
        self._stdout.print(table)

    # -- stderr -------------------------------------------------------------

    def _diagnostic(self, level: str, message: str) -> None:
        style = _LEVELS[level]
        if style.gate == "quiet" and self._quiet:
            return
        if style.gate == "verbose" and not self._verbose:
            return
        if self._no_color:
            print(f"{style.label}{message}", file=sys.stderr, flush=True)
        else:
            line = Text.assemble((style.label, style.label_style), (message, style.body_style))
            self._stderr.print(line)

    info = partialmethod(_diagnostic, "info")
    success = partialmethod(_diagnostic, "success")
    warning = partialmethod(_diagnostic, "warning")
    error = partialmethod(_diagnostic, "error")
    debug = partialmethod(_diagnostic, "debug")

    def failure(self, exc: NetstackError) -> None:
        """Report a classified request failure.

        The one-line message always goes out as an error. With ``--verbose``
        the error kind follows, together with the response dump, the
        validation detail or the underlying transport cause, whichever the
        exception carries.
        """
        self.error(str(exc))
        payload = getattr(exc, "diagnostic", None) or getattr(exc, "detail", None)
        cause = getattr(exc, "cause", None) or exc.__cause__
        if payload:
            self.debug(f"{exc.kind}:\n{payload.rstrip()}")
        elif cause is not None:
            self.debug(f"{exc.kind}: caused by {type(cause).__name__}: {cause}")
        else:
            self.debug(exc.kind)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb`` disables colour."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)


def failure(exc: NetstackError) -> None:
    get_output().failure(exc)
