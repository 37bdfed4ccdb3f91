r"""
Arbor parameters: options, flags and positional arguments.

Overview
- Kinds
  • Option: named, value-bearing parameter with one or more names (-o/--output).
  • Flag: named, presence-only option (nargs == 0), binds True/False.
  • Argument: positional parameter with a fixed arity (nargs >= 1) or a
    variable one (nargs < 0, at most one per command).

- Declarative binding
  Parameters are descriptors. Declared as class attributes of a Command subclass,
  they are collected by the command metaclass, copied per instance and
  registered on that instance; reading the attribute on an instance returns
  the bound value (or the default before any parse).

      class Greet(Command):
          count = Option("-c", "--count", type=int, default=1)
          loud = Flag("--loud")
          name = Argument()

- Built-in eager options
  • help_option(names, message): raises PrintHelpMessage for the command
    being parsed.
  • version_option(version, names, message): raises PrintMessage.

Parse-time protocol (driven by arbor.parsers)
- reset(): forget values from a previous parse.
- Option.record(values): remember one occurrence (a tuple of raw tokens).
- finalize(context[, tokens]): convert raw tokens with 'type', enforce
  required-ness and bind the final value. Converter failures (ValueError or
  TypeError) surface as BadParameter.

Validation highlights
- Option names must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique within an option.
- Option nargs is a positive integer; Argument nargs is a non-zero integer.
- help/metavar strings are trimmed; empty strings are rejected.
"""
import re
import warnings

from .faults import (
    BadParameter,
    DeprecatedOptionWarning,
    MissingParameter,
    PrintHelpMessage,
    PrintMessage,
)
from .output import ArgumentHelp, OptionHelp
from .utils import *


def _sanitize_text(cls, name, object, /):
    """
    Internal: validate an optional text field (help/metavar).

    Returns None for Unset, otherwise the trimmed non-empty string.
    """
    if not isinstance(object, str | Unset):
        raise TypeError(f"{cls.typename} {name!r} must be a string")
    elif isinstance(object, str) and not (object := object.strip()):
        raise ValueError(f"{cls.typename} {name!r} cannot be empty")
    return coalesce(object)


def _sanitize_names(cls, names, /):
    """
    Internal: validate option names and return them as an ordered tuple.

    Accepted forms: "-x", "-long", "--long", "--long-name" (unicode letters
    allowed). Underscores, leading digits and duplicates are rejected.
    """
    if not names:
        raise TypeError(f"{cls.typename} must specify at least one name")

    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.typename} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.typename} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.typename} name {name!r} is not a valid shell-style option name")
        elif name in sanitized:
            raise ValueError(f"{cls.typename} names cannot contain duplicates")
        sanitized.append(name)
    return tuple(sanitized)


class Parameter:
    """
    Shared base of options and arguments.

    Holds the descriptor plumbing (attribute name, per-instance lookup) and
    the bound value. Subclasses implement finalize() and parameter_help.
    """
    typename = "parameter"

    def __init__(self, type=str, help=Unset, callback=Unset):
        if not callable(type):
            raise TypeError(f"{self.typename} 'type' must be callable")
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{self.typename} 'callback' must be callable")
        self.type = type
        self.help = _sanitize_text(self, "help", help)
        self.callback = coalesce(callback)
        self.attribute = None
        self._value = Unset

    def __set_name__(self, owner, name):
        self.attribute = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance._declared[self.attribute].value
        except (AttributeError, KeyError):
            raise AttributeError(f"{self.typename} {self.attribute!r} is not bound to this command") from None

    def __set__(self, instance, value):
        raise AttributeError(f"{self.typename} {self.attribute!r} is read-only")

    @property
    def value(self):
        """The bound value, or the default when nothing was bound yet."""
        return coalesce(self._value, self.fallback)

    @property
    def fallback(self):
        return None

    def reset(self):
        self._value = Unset

    def convert(self, token, context):
        """Convert one raw token with 'type', mapping failures to BadParameter."""
        try:
            return self.type(token)
        except (ValueError, TypeError) as exception:
            raise BadParameter(
                str(exception) or "%r is not a valid value" % token,
                parameter=self,
                context=context,
            ) from exception

    def bind(self, context, value):
        # Eager callbacks already ran when the token was seen.
        if self.callback is not None and not getattr(self, "eager", False):
            self.callback(context, value)
        self._value = value


class Option(Parameter):
    """
    Named, value-bearing option.

    Parameters
    - names: one or more str ("-o", "--output"); unique and shell-style.
    - metavar: Unset | str
      label of the value in help; defaults to TEXT for str, otherwise to the
      upper-cased converter name.
    - type: Callable[[str], Any] converter applied to every raw token.
    - nargs: int >= 1; number of tokens consumed per occurrence. Values of
      options with nargs > 1 are tuples.
    - default: value bound when the option is absent.
    - required: absence raises MissingParameter.
    - multiple: every occurrence is kept; the bound value is a tuple.
    - help: short description for help output.
    - hidden: suppress from help output.
    - deprecated: emit DeprecatedOptionWarning when used.
    - eager: run callback(context, value) as soon as the option is seen.
    - callback: Callable[[Context, Any], None] called with the bound value.
    """
    typename = "option"
    minimum = 1

    def __init__(
            self,
            *names,
            metavar=Unset,
            type=str,
            nargs=1,
            default=None,
            required=False,
            multiple=False,
            help=Unset,
            hidden=False,
            deprecated=False,
            eager=False,
            callback=Unset,
    ):
        super().__init__(type, help, callback)
        self.names = _sanitize_names(self, names)
        if not isinstance(nargs, int) or isinstance(nargs, bool) or nargs < self.minimum:
            raise ValueError(f"{self.typename} 'nargs' must be an integer >= {self.minimum}")
        self.nargs = nargs
        self.metavar = _sanitize_text(self, "metavar", metavar)
        self.default = default
        self.required = bool(required)
        self.multiple = bool(multiple)
        self.hidden = bool(hidden)
        self.deprecated = bool(deprecated)
        self.eager = bool(eager)
        self._occurrences = []

        if self.required and self.hidden:
            raise TypeError(f"required {self.typename} cannot be hidden")

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(map(repr, self.names))})"

    @property
    def display_name(self):
        return repr(max(self.names, key=len))

    @property
    def fallback(self):
        if self.multiple:
            return tuple(self.default or ())
        return self.default

    @property
    def parameter_help(self):
        if self.hidden:
            return None
        return OptionHelp(
            tuple(sorted(self.names, key=lambda name: (name.startswith("--"), len(name)))),
            self.display_metavar,
            self.help or "",
        )

    @property
    def display_metavar(self):
        if self.metavar:
            return self.metavar
        if self.type is str:
            return "TEXT"
        return getattr(self.type, "__name__", "value").upper()

    def reset(self):
        super().reset()
        self._occurrences = []

    def record(self, values, /, name=None):
        """
        Remember one occurrence of this option (a tuple of nargs raw tokens).

        Deprecated options warn every time they are used.
        """
        if self.deprecated:
            warnings.warn(DeprecatedOptionWarning(
                "option %r is deprecated" % (name or self.names[0]),
                option=self,
            ), stacklevel=3)
        self._occurrences.append(tuple(values))

    def finalize(self, context):
        if not self._occurrences:
            if self.required:
                raise MissingParameter(self, context)
            return self.bind(context, self.fallback)

        converted = []
        for values in self._occurrences:
            if self.nargs == 1:
                converted.append(self.convert(values[0], context))
            else:
                converted.append(tuple(self.convert(value, context) for value in values))
        self.bind(context, tuple(converted) if self.multiple else converted[-1])


class Flag(Option):
    """
    Named, presence-only option (e.g., -v/--verbose).

    Binds True when given at least once, otherwise the default (False).
    Short flags can be clustered on the command line (-abc).
    """
    typename = "flag"
    minimum = 0

    def __init__(
            self,
            *names,
            default=False,
            help=Unset,
            hidden=False,
            deprecated=False,
            eager=False,
            callback=Unset,
    ):
        super().__init__(
            *names,
            nargs=0,
            default=bool(default),
            help=help,
            hidden=hidden,
            deprecated=deprecated,
            eager=eager,
            callback=callback,
        )

    @property
    def display_metavar(self):
        return None

    def finalize(self, context):
        self.bind(context, True if self._occurrences else self.default)


class Argument(Parameter):
    """
    Positional argument.

    Parameters
    - name: Unset | str
      label in usage/help; defaults to the upper-cased attribute name.
    - type: Callable[[str], Any] converter applied to every raw token.
    - nargs: int != 0; positive values are fixed arities, negative values
      mean "any number" (bound as a tuple).
    - required: missing tokens raise MissingParameter. Variable arguments
      that are required need at least one token.
    - default: value bound when an optional argument receives no token.
    - help: short description for help output.
    """
    typename = "argument"

    def __init__(self, name=Unset, /, type=str, nargs=1, required=True, default=None, help=Unset, callback=Unset):
        super().__init__(type, help, callback)
        if not isinstance(nargs, int) or isinstance(nargs, bool) or nargs == 0:
            raise ValueError(f"{self.typename} 'nargs' must be a non-zero integer")
        self.nargs = -1 if nargs < 0 else nargs
        self._name = _sanitize_text(self, "name", name)
        self.required = bool(required)
        self.default = default

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, nargs={self.nargs!r})"

    @property
    def name(self):
        if self._name:
            return self._name
        if self.attribute:
            return self.attribute.strip("_").replace("_", "-").upper()
        return "ARGUMENT"

    @property
    def variable(self):
        return self.nargs < 0

    @property
    def display_name(self):
        return repr(self.name)

    @property
    def fallback(self):
        if self.variable:
            return tuple(self.default or ())
        return self.default

    @property
    def parameter_help(self):
        return ArgumentHelp(self.name, self.help or "", self.required, self.variable)

    def finalize(self, context, tokens=()):
        tokens = list(tokens)
        if not tokens:
            if self.required:
                raise MissingParameter(self, context)
            return self.bind(context, self.fallback)
        if not self.variable and len(tokens) < self.nargs:
            raise MissingParameter(self, context)

        converted = tuple(self.convert(token, context) for token in tokens)
        self.bind(context, converted if self.variable or self.nargs > 1 else converted[0])


def help_option(names, message, /):
    """
    Build the eager flag that renders the help of the command being parsed.
    """
    @rename("show_help")
    def show_help(context, value):
        raise PrintHelpMessage(context.command)

    return Flag(*sorted(names, key=lambda name: (name.startswith("--"), name)), help=message, eager=True, callback=show_help)


def version_option(version, /, *names, message="{name} version {version}"):
    """
    Build the eager flag that prints a version message.

    Parameters
    - version: str shown in the message.
    - names: option names; defaults to ("--version",).
    - message: format string with {name} (command name) and {version}.
    """
    if not isinstance(version, str) or not version.strip():
        raise TypeError("version_option() 'version' must be a non-empty string")

    @rename("show_version")
    def show_version(context, value):
        raise PrintMessage(message.format(name=context.command.command_name, version=version))

    return Flag(*(names or ("--version",)), help="Show the version and exit", eager=True, callback=show_version)


__all__ = (
    "Parameter",
    "Option",
    "Flag",
    "Argument",
    "help_option",
    "version_option",
)
