"""
Arbor faults: control-flow signals, usage errors and warnings.

Scope
- Control-flow signals: the closed set of non-local outcomes that short-circuit
  a run and are rendered exactly once by Command.main():
    • PrintHelpMessage  → full help of the carried command, exit code 0
    • PrintMessage      → plain informational message, exit code 0
    • UsageError        → usage line + error message, exit code 1
    • CommandError      → plain error message, exit code 1
    • Abort             → "Aborted!", exit code 1
  Every signal exposes a SignalKind discriminant and the exit code it maps to.

- Usage-error family: structured UsageError subclasses raised by the parser
  (BadParameter, MissingParameter, NoSuchOption, NoSuchSubcommand,
  BadOptionUsage, UnexpectedArguments), each tagged with a stable FaultCode.

- Warnings: CommandWarning and DeprecatedOptionWarning, surfaced through the
  stdlib warnings machinery (non-fatal, never change the exit code).

Integration
- Registration-time contract violations (duplicate option names, ambiguous
  arity, context accessed too early) are NOT signals: they raise
  ValueError/TypeError/RuntimeError and are meant to fail loudly.
"""
from enum import Enum, IntEnum
from types import MappingProxyType

from .utils import pluralize


class SignalKind(Enum):
    """
    discriminant of the control-flow signals.

    each member carries the process exit code it maps to.
    """
    HELP = ("help", 0)
    MESSAGE = ("message", 0)
    USAGE = ("usage", 1)
    FAILURE = ("failure", 1)
    ABORT = ("abort", 1)

    def __init__(self, label, exit_code):
        self.label = label
        self.exit_code = exit_code


class FaultCode(IntEnum):
    """
    canonical fault codes for usage errors and warnings (stable identifiers).

    grouping (by high-level domain)
    - generic usage (11100)
    - routing (1110x)
      • NO_SUCH_SUBCOMMAND
    - options (1111x)
      • NO_SUCH_OPTION, BAD_OPTION_USAGE
    - values (1112x)
      • BAD_PARAMETER, MISSING_PARAMETER
    - positionals (1113x)
      • UNEXPECTED_ARGUMENTS
    - warnings (12xxx)
      • DEPRECATED_OPTION
    """
    # --- generic usage errors (11xxx) ---
    USAGE                = 11100

    # --- routing errors (11xxx) ---
    NO_SUCH_SUBCOMMAND   = 11101

    # --- option errors (11xxx) ---
    NO_SUCH_OPTION       = 11111
    BAD_OPTION_USAGE     = 11112

    # --- value errors (11xxx) ---
    BAD_PARAMETER        = 11121
    MISSING_PARAMETER    = 11122

    # --- positional errors (11xxx) ---
    UNEXPECTED_ARGUMENTS = 11131

    # --- warnings (12xxx) ---
    DEPRECATED_OPTION    = 12111


class CommandError(Exception):
    """
    Generic, unrecoverable application-level failure.

    Raise it from Command.run() to stop the program with a message and exit
    code 1. It is also the base of PrintHelpMessage, PrintMessage and
    UsageError so applications can catch the whole family at once.
    """
    kind = SignalKind.FAILURE
    __match_args__ = ("message",)

    def __init__(self, message="", /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def exit_code(self):
        return self.kind.exit_code


class PrintHelpMessage(CommandError):
    """Request to render the full help of a command and exit successfully."""
    kind = SignalKind.HELP
    __match_args__ = ("command",)

    def __init__(self, command, /):
        super().__init__("")
        self.command = command


class PrintMessage(CommandError):
    """Informational message (e.g., a version string); exits successfully."""
    kind = SignalKind.MESSAGE


class UsageError(CommandError):
    """
    The user misused the command line.

    The optional context is the one of the command being parsed when the
    error was detected; help_message() uses it to render the matching usage
    line. The parser fills it in when the raiser did not.
    """
    kind = SignalKind.USAGE
    code = FaultCode.USAGE
    __match_args__ = ("message", "context")

    def __init__(self, message="", /, context=None, **options):
        super().__init__(message, **options)
        self.context = context

    def format_message(self):
        return self.message

    def help_message(self, context=None, /):
        """
        Return the usage line of the failing command followed by the error.

        The context carried by the error wins over the given fallback.
        """
        context = self.context or context
        message = "Error: %s" % self.format_message()
        if context is None:
            return message
        return "%s\n\n%s" % (context.command.formatted_usage(), message)

    def __str__(self):
        return self.format_message()


class BadParameter(UsageError):
    """A value could not be converted or validated for a parameter."""
    code = FaultCode.BAD_PARAMETER

    def __init__(self, message, /, parameter=None, context=None, **options):
        super().__init__(message, context, **options)
        self.parameter = parameter

    def format_message(self):
        if self.parameter is None:
            return "Invalid value: %s" % self.message
        return "Invalid value for %s: %s" % (self.parameter.display_name, self.message)


class MissingParameter(UsageError):
    """A required option or argument was not provided."""
    code = FaultCode.MISSING_PARAMETER

    def __init__(self, parameter, /, context=None, **options):
        super().__init__("", context, **options)
        self.parameter = parameter

    def format_message(self):
        return "Missing %s %s." % (self.parameter.typename, self.parameter.display_name)


class NoSuchOption(UsageError):
    """An option name is not registered on the command being parsed."""
    code = FaultCode.NO_SUCH_OPTION

    def __init__(self, name, /, possibilities=(), context=None, **options):
        super().__init__("", context, **options)
        self.name = name
        self.possibilities = tuple(possibilities)

    def format_message(self):
        message = "no such option: %r." % self.name
        if self.possibilities:
            message += " Did you mean %r?" % self.possibilities[0]
        return message


class NoSuchSubcommand(UsageError):
    """A token in subcommand position does not name any subcommand."""
    code = FaultCode.NO_SUCH_SUBCOMMAND

    def __init__(self, name, /, possibilities=(), context=None, **options):
        super().__init__("", context, **options)
        self.name = name
        self.possibilities = tuple(possibilities)

    def format_message(self):
        message = "no such subcommand: %r." % self.name
        if self.possibilities:
            message += " Did you mean %r?" % self.possibilities[0]
        return message


class BadOptionUsage(UsageError):
    """An option was given in a malformed way (e.g., missing its values)."""
    code = FaultCode.BAD_OPTION_USAGE

    def __init__(self, message, /, name=None, context=None, **options):
        super().__init__(message, context, **options)
        self.name = name


class UnexpectedArguments(UsageError):
    """Positional tokens remained after every argument was satisfied."""
    code = FaultCode.UNEXPECTED_ARGUMENTS

    def __init__(self, arguments, /, context=None, **options):
        super().__init__("", context, **options)
        self.arguments = tuple(arguments)

    def format_message(self):
        return "Got unexpected extra %s (%s)" % (
            pluralize("argument", len(self.arguments)),
            " ".join(self.arguments),
        )


class Abort(Exception):
    """The user explicitly cancelled; rendered as "Aborted!" with exit code 1."""
    kind = SignalKind.ABORT

    @property
    def exit_code(self):
        return self.kind.exit_code


class CommandWarning(Warning):
    """Base class of the non-fatal diagnostics emitted while parsing."""
    code = None

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)


class DeprecatedOptionWarning(CommandWarning):
    code = FaultCode.DEPRECATED_OPTION


SIGNALS = (PrintHelpMessage, PrintMessage, UsageError, CommandError, Abort)
"""The closed set of control-flow signals handled by Command.main()."""


__all__ = (
    "SignalKind",
    "FaultCode",
    "CommandError",
    "PrintHelpMessage",
    "PrintMessage",
    "UsageError",
    "BadParameter",
    "MissingParameter",
    "NoSuchOption",
    "NoSuchSubcommand",
    "BadOptionUsage",
    "UnexpectedArguments",
    "Abort",
    "CommandWarning",
    "DeprecatedOptionWarning",
    "SIGNALS",
)
