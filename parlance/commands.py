"""
Parlance command layer: declare commands and keep them in a registry.

What this module provides
- Command: a named text command with aliases, help/manual text, a permission
  predicate, an ordered argument grammar, a handler and an enabled flag.
  Every builder returns the command so declarations read as one chain.
- Registry: the ordered collection of commands owned by the host. It creates
  commands, resolves a typed name to candidate commands and answers the
  "what can this caller use" questions of the help system.

Quick start
    from parlance import Config, Registry, argument

    registry = Registry(Config("!"))
    (registry.create("greet")
        .help("Greets somebody")
        .manual("Sends a friendly greeting to the given name")
        .alias("hi")
        .argument(argument("string", "name").min(1))
        .argument(argument("number", "times").integer().positive().optional(1))
        .exec(lambda client, args, reply, event: reply(f"hello {args['name']}!" * args["times"])))

Design notes
- Matching a line against a grammar is the dispatcher's job; the error
  priority between arguments spans the whole grammar (see dispatcher.py).
- Commands are mutated from setup code or through enable()/disable(); there
  is no locking, the registry assumes a single writer.
- Registry order is insertion order, which is also the help listing order.
"""
import json
import logging

from .arguments import Argument
from .config import Config
from .utils import *

logger = logging.getLogger(__name__)


def _allowed(client):
    return True


def _noop(client, resolved, reply, event):
    return None


def _sanitize_command(command, /, *, label="command"):
    """
    Internal: command names and aliases are non-empty strings.
    """
    if not isinstance(command, str):
        raise TypeError(f"{label} must be a string")
    if not command:
        raise ValueError(f"{label} needs to be at least 1 char long")
    return command


class Command:
    """
    A text command and its grammar.

    Properties (read-only views)
    - command: the name typed after the prefix.
    - aliases: alternative names, in declaration order.
    - helptext: one-line description ("" when unset).
    - manuals: detailed manual lines.
    - arguments: the ordered grammar.
    - enabled: whether the command takes part in dispatching.
    - extras: whether leftover text after a satisfied grammar is tolerated.
    - registry: the owning Registry (None once destroyed).

    Lifecycle
    - Created by Registry.create(); destroy() detaches it and invalidates
      further use.
    """

    __introspectable__ = (
        "command",
        "aliases",
        "helptext",
        "manuals",
        "arguments",
        "enabled",
        "extras",
    )

    command = mirror("command")
    aliases = mirror("aliases")
    helptext = mirror("helptext")
    manuals = mirror("manuals")
    arguments = mirror("arguments")
    enabled = mirror("enabled")
    extras = mirror("extras")

    # Passing this token to Registry.create() allows single-character names.
    ONE_CHAR_OVERRIDE = "YES_I_KNOW_THAT_I_SHOULD_NOT_USE_COMMANDS_WITH_LENGTH_OF_ONE"

    def __init__(self, command, /, registry=None):
        self._command = _sanitize_command(command)
        self._registry = registry
        self._aliases = []
        self._helptext = ""
        self._manuals = []
        self._arguments = []
        self._enabled = True
        self._extras = False
        self._destroyed = False
        self._permission = _allowed
        self._handler = _noop

    def __repr__(self):
        return f"command({', '.join(f'{name}={getattr(self, name)!r}' for name in type(self).__introspectable__)})"

    def _alive(self):
        if self._destroyed:
            raise RuntimeError(f"command {self._command!r} has been destroyed")

    @property
    def registry(self):
        return self._registry

    @property
    def destroyed(self):
        return self._destroyed

    @property
    def names(self):
        """
        The command name followed by its aliases.
        """
        return (self._command, *self._aliases)

    # --- builders ---

    def help(self, text="", /):
        self._alive()
        if not isinstance(text, str):
            raise TypeError("help text must be a string")
        self._helptext = text
        return self

    def manual(self, line="", /):
        """
        Append a line to the detailed manual.
        """
        self._alive()
        if not isinstance(line, str):
            raise TypeError("manual line must be a string")
        self._manuals.append(line)
        return self

    def alias(self, *aliases):
        """
        Add alternative names; they must differ from the name and each other.
        """
        self._alive()
        seen = set(self._aliases)
        for alias in aliases:
            _sanitize_command(alias, label="alias")
            if alias == self._command:
                raise ValueError(f"alias {alias!r} is the same as the command name")
            if alias in seen:
                raise ValueError(f"alias {alias!r} already exists")
            seen.add(alias)
        self._aliases.extend(aliases)
        return self

    def check_permission(self, predicate, /):
        """
        Store the predicate deciding whether a client may use the command.
        """
        self._alive()
        if not callable(predicate):
            raise TypeError("permission predicate must be callable")
        self._permission = predicate
        return self

    def argument(self, argument, /):
        self._alive()
        if not isinstance(argument, Argument):
            raise TypeError("command arguments must be arguments")
        self._arguments.append(argument)
        return self

    def exec(self, handler, /):
        """
        Store the handler: handler(client, resolved, reply, event).

        The handler may return an awaitable; the dispatcher awaits it.
        """
        self._alive()
        if not callable(handler):
            raise TypeError("command handler must be callable")
        self._handler = handler
        return self

    def ignore_extra_args(self):
        """
        Tolerate leftover text once the grammar is satisfied without errors.
        """
        self._alive()
        self._extras = True
        return self

    def enable(self):
        self._alive()
        logger.info("command %r has been enabled", self._command)
        self._enabled = True
        return self

    def disable(self):
        self._alive()
        logger.info("command %r has been disabled", self._command)
        self._enabled = False
        return self

    def destroy(self):
        """
        Remove the command from its registry; it cannot be used afterwards.
        """
        self._alive()
        logger.info("command %r has been destroyed", self._command)
        if self._registry is not None:
            self._registry.remove(self)
        self._registry = None
        self._destroyed = True
        return None

    # --- queries ---

    @property
    def has_help(self):
        return bool(self._helptext)

    @property
    def has_manual(self):
        return bool(self._manuals)

    @property
    def manual_text(self):
        return "\r\n".join(self._manuals)

    @property
    def prefix(self):
        return self._registry.prefix if self._registry is not None else Config().prefix

    @property
    def usage(self):
        """
        "<prefix><name> <manual> <manual> ..." in grammar order.
        """
        return f"{self.prefix}{self._command} {' '.join(argument.manual for argument in self._arguments)}"

    def matches(self, token, /):
        return token in self.names

    def is_allowed(self, client, /):
        """
        Evaluate the permission predicate; exceptions propagate to the caller.
        """
        return bool(self._permission(client))

    def dispatch_command(self, client, resolved, reply, event, /):
        """
        Call the raw handler and return whatever it returns.
        """
        self._alive()
        return self._handler(client, resolved, reply, event)

    def serialize(self):
        return json.dumps({
            "cmd": self._command,
            "alias": self._aliases,
            "help": self._helptext,
            "manual": self._manuals,
        })


class Registry:
    """
    Ordered collection of commands.

    Responsibilities
    - create(): validate names, warn on duplicates, keep insertion order.
    - find(): enabled commands answering to a typed name (dispatch candidates).
    - get(): the first command with a name (aliases ignored).
    - available(): enabled commands the client may use, optionally by name.

    The registry is created once by the host and lives for the process
    lifetime; entries are only added and removed through its methods.
    """

    def __init__(self, config=Unset, /):
        config = Config() if config is Unset else config
        if not isinstance(config, Config):
            raise TypeError("registry config must be a config")
        self._config = config
        self._commands = []

    def __repr__(self):
        return f"registry(commands={[command.command for command in self._commands]!r}, config={self._config!r})"

    def __iter__(self):
        return iter(list(self._commands))

    def __len__(self):
        return len(self._commands)

    def __contains__(self, command):
        return command in self._commands

    @property
    def config(self):
        return self._config

    @property
    def prefix(self):
        """
        The active command prefix, "!" when the host has none.
        """
        return self._config.prefix

    def create(self, command, override=Unset, /):
        """
        Create, register and return a new command.

        Names shorter than two characters need Command.ONE_CHAR_OVERRIDE.
        A second command with an existing name is accepted but logged, since
        every match will then answer the same line.
        """
        if not isinstance(command, str):
            raise TypeError("Expected a string as command name!")
        if not command or (len(command) == 1 and override != Command.ONE_CHAR_OVERRIDE):
            raise ValueError("Command should have a minimum length of 2!")
        logger.info("registering command %r", command)
        if self.get(command) is not None:
            logger.warning("there is already a command with name %r, dispatching may not work as expected", command)
        self._commands.append(instance := Command(command, self))
        return instance

    def remove(self, command, /):
        """
        Drop a command; unknown commands are ignored.
        """
        self._commands = [candidate for candidate in self._commands if candidate is not command]

    def get(self, name, /):
        for command in self._commands:
            if command.command == name:
                return command
        return None

    def find(self, token, /):
        return [command for command in self._commands if command.matches(token) and command.enabled]

    def available(self, client, name=Unset, /):
        """
        Enabled commands the client is allowed to use, in registry order.

        Predicate exceptions are not caught here, matching is_allowed().
        """
        return [
            command for command in self._commands
            if (name is Unset or command.command == name) and command.enabled and command.is_allowed(client)
        ]


__all__ = (
    "Command",
    "Registry",
)
