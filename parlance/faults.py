"""
Parlance faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- CommandException: base type carrying a message plus read-only options, and
  knowing how to render itself as a single reply line (or a rich renderable).
- trigger(): central entry point to surface a fault to a reply sink.

Propagation
- ParseError is raised by argument validators and never leaves grammar
  evaluation: the dispatcher converts it into a RequiredArgumentError (hard) or
  an OptionalArgumentError (soft).
- CommandNotFoundError and PermissionDeniedError short-circuit before grammar
  evaluation.
- HandlerFault carries a generic text only; the handler's traceback goes to
  the log, never to the reply channel.

UX goals
- One reply line per fault: the message, then an optional hint after an arrow.
"""
import logging
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • COMMAND_NOT_FOUND, PERMISSION_DENIED
    - grammar (1111x)
      • PARSE_ERROR, REQUIRED_ARGUMENT, OPTIONAL_ARGUMENT, TOO_MANY_ARGUMENTS,
        INVALID_USAGE
    - execution (1113x)
      • HANDLER_FAULT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (1110x) ---
    COMMAND_NOT_FOUND  = 11101
    PERMISSION_DENIED  = 11102

    # --- grammar errors (1111x) ---
    PARSE_ERROR        = 11111
    REQUIRED_ARGUMENT  = 11112
    OPTIONAL_ARGUMENT  = 11113
    TOO_MANY_ARGUMENTS = 11114
    INVALID_USAGE      = 11115

    # --- execution errors (1113x) ---
    HANDLER_FAULT      = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels. when no mapping is
        present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base fault: a message plus read-only rendering options.

    Class attributes
    - __code__: default FaultCode, overridable through the "code" option.
    - __level__: logging level used when the fault is triggered.

    Recognized options
    - code: FaultCode
    - hint: str, appended to the reply line after an arrow.
    - command: the Command the fault concerns (if any).
    - argument: the Argument the fault concerns (if any).
    """
    __code__ = FaultCode.PARSE_ERROR
    __level__ = logging.INFO

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def level(self):
        return type(self).__level__

    def render(self):
        """
        Render the fault as the single line sent to the caller.
        """
        if self.hint:
            return f"{self.message} → {self.hint}"
        return self.message

    def __rich__(self):
        header = Text.assemble(
            "[ ",
            (self.code.normalize(), "bold cyan"),
            " | ",
            (type(self).__name__, "bold magenta"),
            " ]",
        )
        body = Text(self.message)
        if not self.hint:
            return Group(header, body)
        return Group(header, body, Text.assemble((" → ", "green dim"), (self.hint, "italic green")))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(CommandException):
    """An argument rejected its token (constraint name and offending value in the message)."""
    __code__ = FaultCode.PARSE_ERROR
    __level__ = logging.DEBUG


class RequiredArgumentError(CommandException):
    """A required argument failed; the candidate is blocked."""
    __code__ = FaultCode.REQUIRED_ARGUMENT
    __level__ = logging.DEBUG


class OptionalArgumentError(CommandException):
    """An optional argument failed and leftover text disqualified the candidate."""
    __code__ = FaultCode.OPTIONAL_ARGUMENT
    __level__ = logging.DEBUG


class TooManyArgumentsError(CommandException):
    __code__ = FaultCode.TOO_MANY_ARGUMENTS
    __level__ = logging.DEBUG


class InvalidUsageError(CommandException):
    __code__ = FaultCode.INVALID_USAGE
    __level__ = logging.DEBUG


class PermissionDeniedError(CommandException):
    __code__ = FaultCode.PERMISSION_DENIED
    __level__ = logging.INFO


class CommandNotFoundError(CommandException):
    __code__ = FaultCode.COMMAND_NOT_FOUND
    __level__ = logging.DEBUG


class HandlerFault(CommandException):
    """The handler raised; only a generic text reaches the caller."""
    __code__ = FaultCode.HANDLER_FAULT
    __level__ = logging.ERROR


def trigger(fault, reply, /, **options):
    """
    surface a fault to a reply sink with the given options.

    contract
    - fault must provide render() and __replace__ (see CommandException).
    - options are merged into the fault via __replace__(**options).
    - the fault is logged at its own level, then exactly one rendered line is
      passed to reply(text).

    returns
    - the (possibly replaced) fault, so callers can record it.
    """
    if (
        not hasattr(fault, "render") or
        not callable(fault.render) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have render() and __replace__() methods")
    if not callable(reply):
        raise TypeError("trigger() reply must be callable")
    if options:
        fault = fault.__replace__(**options)
    logger.log(fault.level, "fault %s (%s): %s", fault.code.normalize(), type(fault).__name__, fault.message)
    reply(fault.render())
    return fault


__all__ = (
    "FaultCode",
    "CommandException",
    "ParseError",
    "RequiredArgumentError",
    "OptionalArgumentError",
    "TooManyArgumentsError",
    "InvalidUsageError",
    "PermissionDeniedError",
    "CommandNotFoundError",
    "HandlerFault",
    "trigger",
)
