"""
Arbor contexts: resolved, inheritable configuration of one command.

A Context is built for every command of a tree right before parsing (or on
the first help rendering). Its settings are resolved by a structural merge:

    explicit override on the command  →  parent's resolved value  →  root default

Settings
- help_option_names: frozenset[str]
  names of the automatic help flag; empty disables it for that command.
- help_option_message: str
  description of the automatic help flag.
- help_formatter: object with format_usage()/format_help()
  collaborator that lays out usage and help text.
- allow_interspersed_args: bool
  options may appear after positional arguments.
- obj: Any
  user object shared down the tree (find_object() looks it up).

Runtime fields
- command, parent: the owning command and the parent context (or None).
- invoked_subcommand: the subcommand chosen by the parser, if any.
"""
from types import MappingProxyType

from .output import HelpFormatter
from .utils import *

DEFAULTS = MappingProxyType({
    "help_option_names": frozenset({"-h", "--help"}),
    "help_option_message": "Show this message and exit",
    "help_formatter": HelpFormatter(),
    "allow_interspersed_args": True,
    "obj": None,
})
"""Root defaults used when neither the command nor any ancestor overrides a setting."""


def validate_settings(overrides, /):
    """
    Check that every key of overrides names a known context setting.

    Raises
    - TypeError: on unknown setting names.
    """
    if unknown := sorted(set(overrides) - set(DEFAULTS)):
        raise TypeError(f"unknown context setting(s): {', '.join(map(repr, unknown))}")
    return dict(overrides)


class Context:
    # Read-only views over the resolved settings.
    command = mirror("command")
    parent = mirror("parent")
    help_option_names = mirror("help_option_names")
    help_option_message = mirror("help_option_message")
    help_formatter = mirror("help_formatter")
    allow_interspersed_args = mirror("allow_interspersed_args")

    @property
    def obj(self):
        # Not mirrored: the user object is shared by identity down the tree.
        return self._obj

    def __init__(self, command, parent=None, /, **overrides):
        if parent is not None and not isinstance(parent, Context):
            raise TypeError("context 'parent' must be a context")
        overrides = validate_settings(overrides)

        self._command = command
        self._parent = parent
        self.invoked_subcommand = None

        for name, default in DEFAULTS.items():
            value = overrides.get(name, Unset)
            if value is Unset:
                value = getattr(parent, name) if parent is not None else default
            setattr(self, "_" + name, value)

        self._help_option_names = frozenset(self._help_option_names)
        if not all(isinstance(name, str) for name in self._help_option_names):
            raise TypeError("context 'help_option_names' must be strings")
        if not isinstance(self._help_option_message, str):
            raise TypeError("context 'help_option_message' must be a string")
        if not all(callable(getattr(self._help_formatter, name, None)) for name in ("format_usage", "format_help")):
            raise TypeError("context 'help_formatter' must provide format_usage() and format_help()")
        self._allow_interspersed_args = bool(self._allow_interspersed_args)

    @classmethod
    def build(cls, command, parent=None, overrides=None, /):
        """
        Build the context of command from its parent and its stored overrides.
        """
        return cls(command, parent, **(overrides or {}))

    def settings(self):
        """Return the resolved settings as a plain dict."""
        return {name: getattr(self, name) for name in DEFAULTS}

    def find_root(self):
        """Return the context of the root command."""
        context = self
        while context.parent is not None:
            context = context.parent
        return context

    def find_object(self, type, /):
        """
        Return the nearest obj (this context first) that is an instance of type.
        """
        context = self
        while context is not None:
            if isinstance(context.obj, type):
                return context.obj
            context = context.parent
        return None

    def __repr__(self):
        return f"{type(self).__name__}(command={getattr(self.command, 'command_name', self.command)!r})"


__all__ = (
    "Context",
    "DEFAULTS",
    "validate_settings",
)
