"""
Arbor output: terminal echo, help descriptors and the default help formatter.

What this module provides
- echo(message, err=False): the output sink used by Command.main(). Text is
  printed verbatim (no markup, no highlighting, no re-wrapping) followed by
  a line break, on stdout or stderr.
- OptionHelp / ArgumentHelp / SubcommandHelp: plain descriptors collected
  from a command's parameters and children; they are the only thing a help
  formatter ever sees.
- HelpFormatter: default formatter. Pure functions of their inputs:
    • format_usage(parameters, program_name) -> str
    • format_help(help, epilog, parameters, program_name) -> str
  Sections are laid out with a rich grid and captured to a string, so any
  object with the same two methods can replace it via the context setting
  help_formatter.
"""
import inspect
from typing import NamedTuple

from rich.console import Console
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

stdout = Console(highlight=False, soft_wrap=True)
stderr = Console(stderr=True, highlight=False, soft_wrap=True)


def echo(message="", /, *, err=False):
    """
    Print message followed by a line break.

    Parameters
    - message: str (anything else is converted with str())
    - err: bool (keyword-only)
      write to stderr instead of stdout.
    """
    (stderr if err else stdout).print(Text(str(message)))


class OptionHelp(NamedTuple):
    names: tuple[str, ...]
    metavar: str | None
    help: str


class ArgumentHelp(NamedTuple):
    name: str
    help: str
    required: bool
    repeatable: bool


class SubcommandHelp(NamedTuple):
    name: str
    help: str


class HelpFormatter:
    """
    Default usage/help renderer.

    Parameters
    - width: int | None
      total width of the rendered text; None lets rich pick the terminal
      width (80 columns when not attached to a terminal).
    - max_column: int
      maximum width of the left column (names/metavars) in sections.
    """

    def __init__(self, width=None, max_column=30):
        if width is not None and (not isinstance(width, int) or width < 20):
            raise ValueError("help formatter 'width' must be an integer >= 20")
        if not isinstance(max_column, int) or max_column < 1:
            raise ValueError("help formatter 'max_column' must be a positive integer")
        self.width = width
        self.max_column = max_column

    def __eq__(self, other):
        if not isinstance(other, HelpFormatter):
            return NotImplemented
        return (self.width, self.max_column) == (other.width, other.max_column)

    def __hash__(self):
        return hash((type(self), self.width, self.max_column))

    def __repr__(self):
        return f"{type(self).__name__}(width={self.width!r}, max_column={self.max_column!r})"

    def format_usage(self, parameters, program_name):
        parts = [program_name]
        if any(isinstance(parameter, OptionHelp) for parameter in parameters):
            parts.append("[OPTIONS]")
        for parameter in parameters:
            if not isinstance(parameter, ArgumentHelp):
                continue
            name = parameter.name + ("..." if parameter.repeatable else "")
            parts.append(name if parameter.required else "[%s]" % name)
        if any(isinstance(parameter, SubcommandHelp) for parameter in parameters):
            parts.append("COMMAND [ARGS]...")
        return "Usage: " + " ".join(parts)

    def format_help(self, help, epilog, parameters, program_name):
        sections = [self.format_usage(parameters, program_name)]

        if help:
            sections.append(inspect.cleandoc(help))

        arguments = [
            (parameter.name, parameter.help)
            for parameter in parameters
            if isinstance(parameter, ArgumentHelp) and parameter.help
        ]
        if arguments:
            sections.append(self._section("Arguments", arguments))

        options = [
            (", ".join(parameter.names) + (" " + parameter.metavar if parameter.metavar else ""), parameter.help)
            for parameter in parameters
            if isinstance(parameter, OptionHelp)
        ]
        if options:
            sections.append(self._section("Options", options))

        commands = [
            (parameter.name, parameter.help)
            for parameter in parameters
            if isinstance(parameter, SubcommandHelp)
        ]
        if commands:
            sections.append(self._section("Commands", commands))

        if epilog:
            sections.append(inspect.cleandoc(epilog))

        return "\n\n".join(sections)

    def _section(self, title, rows):
        # Left column never exceeds max_column; descriptions wrap in the right one.
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=False, max_width=self.max_column)
        table.add_column()
        for term, description in rows:
            table.add_row(Text(term), Text(description or ""))

        console = Console(width=self.width, color_system=None, highlight=False, force_terminal=False)
        with console.capture() as capture:
            console.print(Text(title + ":"))
            console.print(Padding(table, (0, 0, 0, 2)))
        return "\n".join(line.rstrip() for line in capture.get().rstrip().splitlines())


__all__ = (
    "echo",
    "OptionHelp",
    "ArgumentHelp",
    "SubcommandHelp",
    "HelpFormatter",
)
