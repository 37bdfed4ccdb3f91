"""
Arbor parser: resolve an argument vector against a command tree.

Parser.parse(argv, context) is the only entry point. The context must have
been built by Command.create_context() (which Command.parse() does), so every
command of the tree already owns a context and its help option.

Per command, tokens are walked left to right:

- aliases: a token listed in command.aliases() is replaced by its expansion.
  Tokens produced by an expansion are never expanded again, even by the
  aliases of a subcommand (one level only).
- "--" ends option processing; everything after it is positional.
- long options: "--name=value" or "--name value [value ...]" (nargs tokens);
  names registered with a single dash ("-long") are matched the same way.
- short options: "-o value", "-ovalue", and clustered flags "-abc".
- eager options (help/version) are finalized and their callback runs as soon
  as they are seen, so "--help" wins over later mistakes.
- the first positional that names a subcommand ends this command's tokens;
  a command with subcommands but no arguments rejects any other positional
  with NoSuchSubcommand.
- with allow_interspersed_args=False, every token after the first positional
  is positional.

Then options are finalized, positionals are distributed over the arguments
(fixed arities first, the variable argument takes the rest) and the command
is invoked. A chosen subcommand is parsed afterwards with the remaining
tokens; without one, a command with subcommands raises PrintHelpMessage
unless invoke_without_subcommand is set.
"""
import difflib
from collections.abc import Iterable

from .faults import (
    BadOptionUsage,
    NoSuchOption,
    NoSuchSubcommand,
    PrintHelpMessage,
    UnexpectedArguments,
    UsageError,
)
from .utils import pluralize


class Parser:
    def __init__(self, context, /):
        self.context = context
        self.command = context.command
        self.arguments = self.command.registered_arguments()
        self.registered = self.command.registered_options()
        self.options = {}
        for option in self.registered:
            self.options.update(dict.fromkeys(option.names, option))
        self.subcommands = {command.command_name: command for command in self.command.registered_subcommands()}
        self.aliases = self.command.aliases()

    @classmethod
    def parse(cls, argv, context, /):
        """
        Parse argv for the command owning context, bind values and invoke.

        Raises
        - TypeError: when argv is not an iterable of strings.
        - UsageError / PrintHelpMessage / PrintMessage / CommandError / Abort:
          control-flow signals, left for Command.main() to render.
        """
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        cls(context)._parse(tokens)

    def _parse(self, tokens, expanded=0):
        try:
            self._run(tokens, expanded)
        except UsageError as error:
            if error.context is None:
                error.context = self.context
            raise

    def _run(self, tokens, expanded):
        for parameter in (*self.registered, *self.arguments):
            parameter.reset()
        self.context.invoked_subcommand = None

        positionals = []
        subcommand = None
        literal = False
        index = 0

        while index < len(tokens):
            token = tokens[index]

            if not literal and index >= expanded and token in self.aliases:
                replacement = list(self.aliases[token])
                tokens[index:index + 1] = replacement
                expanded = index + len(replacement)
                continue

            if literal:
                positionals.append(token)
                index += 1
            elif token == "--":
                literal = True
                index += 1
            elif token.startswith("-") and len(token) > 1:
                index = self._parse_option(tokens, index)
            elif token in self.subcommands:
                subcommand = self.subcommands[token]
                index += 1
                break
            elif self.subcommands and not self.arguments:
                raise NoSuchSubcommand(
                    token,
                    difflib.get_close_matches(token, self.subcommands.keys(), 3),
                    self.context,
                )
            else:
                positionals.append(token)
                index += 1
                literal = not self.context.allow_interspersed_args

        for option in self.registered:
            option.finalize(self.context)
        self._distribute(positionals)

        if subcommand is None:
            if self.subcommands and not self.command.invoke_without_subcommand:
                raise PrintHelpMessage(self.command)
            self.command.run()
            return

        self.context.invoked_subcommand = subcommand
        self.command.run()
        type(self)(subcommand.current_context)._parse(tokens[index:], max(0, expanded - index))

    def _lookup(self, name):
        try:
            return self.options[name]
        except KeyError:
            raise NoSuchOption(
                name,
                difflib.get_close_matches(name, self.options.keys(), 3),
                self.context,
            ) from None

    def _take(self, option, name, tokens, start, count, inline=()):
        """
        Collect count values for option starting at tokens[start]; inline
        values (from "--name=value" or "-ovalue") come first.
        """
        values = (*inline, *tokens[start:start + count])
        if len(values) < option.nargs:
            raise BadOptionUsage(
                "option %r requires %d %s" % (name, option.nargs, pluralize("value", option.nargs)),
                name,
                self.context,
            )
        self._record(option, name, values)
        return start + count

    def _record(self, option, name, values):
        option.record(values, name)
        if option.eager and option.callback is not None:
            option.finalize(self.context)
            option.callback(self.context, option.value)

    def _parse_option(self, tokens, index):
        token = tokens[index]
        name, equals, inline = token.partition("=")

        if token.startswith("--") or name in self.options:
            option = self._lookup(name)
            if not option.nargs:
                if equals:
                    raise BadOptionUsage("option %r does not take a value" % name, name, self.context)
                self._record(option, name, ())
                return index + 1
            if equals:
                return self._take(option, name, tokens, index + 1, option.nargs - 1, (inline,))
            return self._take(option, name, tokens, index + 1, option.nargs)

        characters = token[1:]
        for position, character in enumerate(characters):
            option = self._lookup(name := "-" + character)
            if not option.nargs:
                self._record(option, name, ())
                continue
            if rest := characters[position + 1:]:
                return self._take(option, name, tokens, index + 1, option.nargs - 1, (rest,))
            return self._take(option, name, tokens, index + 1, option.nargs)
        return index + 1

    def _distribute(self, positionals):
        index = 0
        for position, argument in enumerate(self.arguments):
            if argument.variable:
                after = sum(other.nargs for other in self.arguments[position + 1:])
                count = max(0, len(positionals) - index - after)
            else:
                count = min(argument.nargs, len(positionals) - index)
            argument.finalize(self.context, positionals[index:index + count])
            index += count

        if index < len(positionals):
            raise UnexpectedArguments(positionals[index:], self.context)


__all__ = (
    "Parser",
)
