"""
Parlance dispatcher: from a raw chat line to handler invocations.

Algorithm (one pass per incoming event)
1. Ignore the bot's own messages. The line must start with the prefix; it is
   split into the command token (word characters right after the prefix) and
   the argument text (everything after it).
2. Candidates are the enabled commands whose name or alias equals the token.
   None: a "no such command" notice when Config.not_found_message is on,
   silence otherwise.
3. Candidates whose permission predicate denies the caller, or raises, are
   dropped; a raising predicate is logged and never crashes the pass. None
   left: a single "no permission" notice.
4. Every remaining candidate, in registry order, walks its grammar against a
   fresh copy of the argument text:
   • success: store the value under the argument name, advance the stripped
     remainder;
   • optional failure: store the default, remember a soft error, do not
     advance (the failed argument consumed nothing);
   • required failure: remember the hard error, stop the walk.
5. Then, per candidate and in this order:
   a. hard error: report it;
   b. leftover text, unless extra arguments are tolerated and no soft error
      happened: report the first soft error, or "too many arguments";
   c. invoke handler(client, resolved, reply, event), awaiting awaitables;
      handler exceptions are logged and answered with a generic notice;
   d. anything else (the command went away mid-pass): "invalid usage".

Faults are isolated per candidate and each produces exactly one reply line,
sent privately to the caller. A caller whose chat sink raises only loses that
notice: the error is logged, recorded on the outcome and the pass goes on. The handler's reply sink follows the delivery
mode of the event instead (private, channel or server-wide).
"""
import inspect
import logging
import re
import time
from enum import IntEnum
from typing import Any, NamedTuple

from .commands import Command, Registry
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class Mode(IntEnum):
    PRIVATE = 1
    CHANNEL = 2
    SERVER  = 3


class Event(NamedTuple):
    """
    An inbound chat line.

    - text: the raw line.
    - client: the caller; needs chat(text) and get_channels().
    - mode: delivery channel of the line (Mode or its integer value).
    - is_self: True when the bot itself wrote the line.
    """
    text: str
    client: Any
    mode: int = Mode.PRIVATE
    is_self: bool = False


class Outcome(NamedTuple):
    """
    What happened to one candidate (or to the line, for routing notices).

    error holds the exception that interrupted the candidate, such as a chat
    sink that raised while a notice was being delivered.
    """
    command: Command | None
    resolved: dict
    invoked: bool = False
    fault: CommandException | None = None
    elapsed: float | None = None
    error: Exception | None = None


class Dispatcher:
    """
    Resolves chat events against a registry and runs the matching handlers.

    Parameters
    - registry: Registry holding the commands (and the configuration).
    - backend: object with chat(text) used for server-wide replies (mode 3).
    """

    def __init__(self, registry, /, backend=Unset):
        if not isinstance(registry, Registry):
            raise TypeError("dispatcher registry must be a registry")
        self._registry = registry
        self._backend = backend

    @property
    def registry(self):
        return self._registry

    @property
    def config(self):
        return self._registry.config

    def match(self, text, /):
        """
        Split a line into (command, args), or return None when the line does
        not start with the prefix.
        """
        if not isinstance(text, str):
            return None
        text = text.rstrip("\r\n")
        pattern = rf"{re.escape(self._registry.prefix)}(?P<command>\w*) *(?P<args>.*)"
        if not (match := re.fullmatch(pattern, text, re.IGNORECASE | re.DOTALL)):
            return None
        return match["command"], match["args"]

    def reply(self, event, /):
        """
        Resolve the handler's reply sink from the event's delivery mode.
        """
        match event.mode:
            case Mode.PRIVATE:
                return event.client.chat
            case Mode.CHANNEL:
                return event.client.get_channels()[0].chat
            case Mode.SERVER if self._backend is not Unset:
                return self._backend.chat

        @rename("reply")
        def discard(message):
            logger.warning("no reply channel set for mode %r, message %r not sent", event.mode, message)
        return discard

    def _permitted(self, command, client):
        try:
            return command.is_allowed(client)
        except Exception:
            logger.exception("an error happened during permission handling of command %r", command.command)
            return False

    def evaluate(self, command, text, /):
        """
        Walk a command's grammar over text and decide whether it may run.

        Returns an Outcome that is never invoked: fault is set when the
        candidate must be reported (steps 5a and 5b), None when it may run.
        """
        bold = self.config.bold
        resolved = {}
        soft = []

        for argument in command.arguments:
            try:
                value, rest = argument.validate(text)
            except ParseError as error:
                if not argument.is_optional:
                    return Outcome(command, resolved, fault=RequiredArgumentError(
                        f"Argument parsed with an error {bold(argument.manual)}: {bold(error.message)}",
                        hint=f"for command usage see {bold(f'{self._registry.prefix}man {command.command}')}",
                        command=command,
                        argument=argument,
                    ))
                resolved[argument.name] = coalesce(argument.default)
                soft.append((argument, error))
                continue
            resolved[argument.name] = value
            text = rest.strip()

        if text and (not command.extras or soft):
            logger.debug("argument parsing failed for command %r", command.command)
            logger.debug("should ignore too many args? %s", command.extras)
            logger.debug("how many possible errors? %d", len(soft))
            logger.debug("leftover arguments: %r", text)
            if soft:
                argument, error = soft[0]
                return Outcome(command, resolved, fault=OptionalArgumentError(
                    f"Possible Error during parsing Argument {argument.manual}: {bold(error.message)}",
                    command=command,
                    argument=argument,
                ))
            return Outcome(command, resolved, fault=TooManyArgumentsError(
                "Too many Arguments passed!",
                hint=f"usage: {command.usage}",
                command=command,
            ))

        return Outcome(command, resolved)

    def _notify(self, event, fault, /):
        """
        Send a notice to the caller and return (fault, error).

        A chat sink that raises is logged and handed back as the error, so a
        vanished caller never interrupts the pass.
        """
        try:
            return trigger(fault, event.client.chat), None
        except Exception as error:
            logger.exception("could not deliver %s to the caller", type(fault).__name__)
            return fault, error

    async def _invoke(self, command, resolved, event):
        start = time.perf_counter()
        try:
            result = command.dispatch_command(event.client, resolved, self.reply(event), event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            elapsed = time.perf_counter() - start
            logger.debug("command %r failed after %.0fms", command.command, elapsed * 1000)
            logger.exception(
                "error while handling command %r, this is probably a problem with the script declaring it",
                command.command,
            )
            fault, error = self._notify(event, HandlerFault("An error happened while processing the command :(",
                                                            command=command))
            return Outcome(command, resolved, invoked=True, fault=fault, elapsed=elapsed, error=error)
        elapsed = time.perf_counter() - start
        logger.debug("command %r finished successfully after %.0fms", command.command, elapsed * 1000)
        return Outcome(command, resolved, invoked=True, elapsed=elapsed)

    async def _settle(self, command, args, event):
        """
        Run steps 4 and 5 for one candidate.
        """
        outcome = self.evaluate(command, args)
        if outcome.fault is not None:
            fault, error = self._notify(event, outcome.fault)
            return outcome._replace(fault=fault, error=error)
        if not command.destroyed:
            return await self._invoke(command, outcome.resolved, event)
        fault, error = self._notify(event, InvalidUsageError(
            "Invalid Command usage!",
            hint=f"for command usage see {self.config.bold(f'{self._registry.prefix}man {command.command}')}",
            command=command,
        ))
        return outcome._replace(fault=fault, error=error)

    async def dispatch(self, event, /):
        """
        Process one event and return one Outcome per evaluated candidate.

        Lines that are not commands (or written by the bot) return [].
        Routing notices return a single outcome without a command.
        """
        if event.is_self:
            return []
        if (matched := self.match(event.text)) is None:
            return []
        name, args = matched
        bold = self.config.bold
        prefix = self._registry.prefix

        if not (candidates := self._registry.find(name)):
            if not self.config.not_found_message:
                logger.debug("no enabled command named %r, staying silent", name)
                return []
            fault, error = self._notify(event, CommandNotFoundError(
                f"There is no enabled command named \"{bold(f'{prefix}{name}')}\"",
                hint=f"check {bold(f'{prefix}help')} to get a list of available commands!",
            ))
            return [Outcome(None, {}, fault=fault, error=error)]

        if not (candidates := [command for command in candidates if self._permitted(command, event.client)]):
            fault, error = self._notify(event, PermissionDeniedError(
                f"You have no Permissions to use the Command {bold(name)}",
                hint=f"check {bold(f'{prefix}help')} to get a list of available commands!",
            ))
            return [Outcome(None, {}, fault=fault, error=error)]

        outcomes = []
        for command in candidates:
            try:
                outcomes.append(await self._settle(command, args, event))
            except Exception as error:
                logger.exception("command %r could not be processed", command.command)
                outcomes.append(Outcome(command, {}, error=error))
        return outcomes


__all__ = (
    "Mode",
    "Event",
    "Outcome",
    "Dispatcher",
)
