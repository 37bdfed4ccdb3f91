"""
Arbor command layer: build, compose and run command trees.

What this module provides
- Command: one node of a command tree with:
  • Options, flags and positional arguments (declared as class attributes or
    registered imperatively).
  • Child commands (subcommands) forming the tree.
  • Inheritable configuration through contexts (arbor.context).
  • Usage/help rendering delegated to the context's help formatter.
  • parse()/main(): the parse → bind → invoke control flow and the
    signal → output → exit code contract.

Quick start
    from arbor import Command, Option, Flag, Argument, echo

    class Greet(Command):
        \"\"\"Greet somebody.\"\"\"
        count = Option("-c", "--count", type=int, default=1, help="Repetitions")
        loud = Flag("--loud", help="Shout")
        name = Argument(help="Who to greet")

        def run(self):
            for _ in range(self.count):
                echo(self.name.upper() if self.loud else self.name)

    if __name__ == "__main__":
        Greet().main()

Control flow
- main() calls parse() and catches exactly the control-flow signals listed in
  arbor.faults.SIGNALS; each one renders a single block of text and exits
  through sys.exit() with the signal's exit code. Any other exception
  propagates unchanged.

See also
- arbor.parsers for the token-level algorithm.
- arbor.context for the inherited settings.
"""
import copy
import re
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .context import Context, validate_settings
from .faults import *
from .output import SubcommandHelp, echo
from .parameters import Argument, Option, Parameter, help_option, version_option
from .parsers import Parser


class CommandType(type):
    """
    Metaclass collecting the parameters declared on Command classes.

    Responsibilities
    - Gather every Parameter found in the class body into __declared__, in
      declaration order, after the ones inherited from base classes. A name
      rebound to something that is not a Parameter drops the inherited one.
    - Derive __typename__ (the default command name) from the class name.
    """

    def __new__(cls, name, bases, namespace, **options):
        declared = {}
        for base in reversed(bases):
            declared.update(getattr(base, "__declared__", {}))
        for attribute, object in namespace.items():
            if isinstance(object, Parameter):
                declared[attribute] = object
            else:
                declared.pop(attribute, None)

        return super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": name.lower(),
                "__declared__": MappingProxyType(declared),
            },
            **options,
        )


class Command(metaclass=CommandType):
    """
    One node of a command tree.

    Parameters
    - help: str
      long help text; defaults to the class docstring.
    - epilog: str
      text rendered after the full help.
    - name: str | None
      name of the command on the command line; defaults to the class name
      lower-cased.
    - invoke_without_subcommand: bool
      run this command even when none of its subcommands was chosen
      (otherwise its help is printed).

    Subclasses override run(). Parameters declared as class attributes are
    copied and registered for every instance; reading them on the instance
    returns the bound values.
    """
    parser = Parser

    def __init__(self, help="", epilog="", name=None, invoke_without_subcommand=False):
        if not isinstance(help, str):
            raise TypeError("command 'help' must be a string")
        if not isinstance(epilog, str):
            raise TypeError("command 'epilog' must be a string")
        if name is not None and (not isinstance(name, str) or not name.strip()):
            raise TypeError("command 'name' must be a non-empty string")

        self.command_name = name.strip() if name is not None else type(self).__typename__
        self.command_help = help or (type(self).__doc__ if type(self) is not Command else None) or ""
        self.command_epilog = epilog
        self.invoke_without_subcommand = bool(invoke_without_subcommand)

        self._subcommands = []
        self._options = []
        self._arguments = []
        self._overrides = {}
        self._context = None
        self._help_option = None
        self._declared = {}

        for attribute, declaration in type(self).__declared__.items():
            parameter = copy.copy(declaration)
            parameter.reset()
            self._declared[attribute] = parameter
            if isinstance(parameter, Option):
                self.register_option(parameter)
            else:
                self.register_argument(parameter)

    def __repr__(self):
        return f"{type(self).__name__}(name={self.command_name!r})"

    def __rich_repr__(self):
        yield "name", self.command_name
        yield "options", self.registered_options()
        yield "arguments", self.registered_arguments()
        yield "subcommands", tuple(command.command_name for command in self._subcommands)

    def registered_options(self):
        return tuple(self._options)

    def registered_arguments(self):
        return tuple(self._arguments)

    def registered_subcommands(self):
        return tuple(self._subcommands)

    def _registered_names(self):
        return {name for option in self._options for name in option.names}

    def register_option(self, option, /):
        """
        Append option to this command's options.

        Raises
        - TypeError: when option is not an Option.
        - ValueError: when one of its names is already registered here.
        """
        if not isinstance(option, Option):
            raise TypeError("register_option() argument must be an option")
        registered = self._registered_names()
        for name in option.names:
            if name in registered:
                raise ValueError(f"duplicate option name {name!r} in command {self.command_name!r}")
        self._options.append(option)
        return option

    def register_argument(self, argument, /):
        """
        Append argument to this command's arguments.

        Raises
        - TypeError: when argument is not an Argument.
        - ValueError: when it takes a variable number of values and another
          argument of this command already does.
        """
        if not isinstance(argument, Argument):
            raise TypeError("register_argument() argument must be an argument")
        if argument.variable and any(existing.variable for existing in self._arguments):
            raise ValueError(
                f"command {self.command_name!r} cannot have more than one argument with a variable number of values"
            )
        self._arguments.append(argument)
        return argument

    def subcommands(self, *commands):
        """Append child commands (iterables of commands are flattened); return self."""
        for command in commands:
            if isinstance(command, Command):
                self._subcommands.append(command)
            elif isinstance(command, Iterable) and not isinstance(command, str):
                self.subcommands(*command)
            else:
                raise TypeError("subcommands() arguments must be commands")
        return self

    def context(self, **overrides):
        """
        Store context setting overrides for this command; return self.

        The overrides are applied the next time the context is built. Calling
        this again replaces the previous overrides.
        """
        self._overrides = validate_settings(overrides)
        return self

    def version_option(self, version, /, *names, message="{name} version {version}"):
        """Register an eager --version option; return self."""
        self.register_option(version_option(version, *names, message=message))
        return self

    def aliases(self):
        """
        Map a token to the list of tokens it stands for.

        Expansions are applied once; tokens they produce are not expanded
        again.
        """
        return {}

    @property
    def current_context(self):
        if self._context is None:
            raise RuntimeError(f"context of command {self.command_name!r} accessed before it was created")
        return self._context

    def create_context(self, parent=None, /):
        """
        Build the context of this command and of every command below it.

        A help option is synthesized under the help names that no registered
        option claims; one synthesized by an earlier call is replaced.
        """
        self._context = Context.build(self, parent, self._overrides)

        if self._help_option is not None:
            self._options.remove(self._help_option)
            self._help_option = None

        if names := self._context.help_option_names - self._registered_names():
            self._help_option = self.register_option(help_option(names, self._context.help_option_message))

        for command in self._subcommands:
            command.create_context(self._context)

    def short_help(self):
        return re.split(r"[.\n]", self.command_help.strip(), maxsplit=1)[0].strip()

    def _parameter_help(self):
        parameters = [
            parameter.parameter_help
            for parameter in (*self._options, *self._arguments)
            if parameter.parameter_help is not None
        ]
        parameters.extend(SubcommandHelp(command.command_name, command.short_help()) for command in self._subcommands)
        return parameters

    def formatted_usage(self):
        if self._context is None:
            self.create_context()
        return self._context.help_formatter.format_usage(self._parameter_help(), self.command_name)

    def formatted_help(self):
        if self._context is None:
            self.create_context()
        return self._context.help_formatter.format_help(
            self.command_help,
            self.command_epilog,
            self._parameter_help(),
            self.command_name,
        )

    def run(self):
        """Application logic of this command, called once its values are bound."""
        raise NotImplementedError(f"command {self.command_name!r} does not implement run()")

    def parse(self, argv, context=None, /):
        """
        Build the context tree (under context when given), then parse argv,
        bind values and invoke the resolved chain of commands.

        Control-flow signals propagate to the caller.
        """
        self._reset()
        self.create_context(context)
        self.parser.parse(argv, self._context)

    def _reset(self):
        # Commands left out of the chosen chain must not keep earlier values.
        for parameter in (*self._options, *self._arguments):
            parameter.reset()
        for command in self._subcommands:
            command._reset()

    def main(self, argv=None, /):
        """
        Process entry point: parse argv (sys.argv[1:] by default), render any
        control-flow signal and exit with its exit code.
        """
        if argv is None:
            argv = sys.argv[1:]
        try:
            self.parse(argv)
        except SIGNALS as signal:
            match signal:
                case PrintHelpMessage(command):
                    echo(command.formatted_help())
                case PrintMessage(message):
                    echo(message)
                case UsageError():
                    echo(signal.help_message(self._context), err=True)
                case CommandError(message):
                    echo(message, err=True)
                case Abort():
                    echo("Aborted!", err=True)
            sys.exit(signal.exit_code)
        sys.exit(0)


__all__ = (
    "Command",
    "CommandType",
)
