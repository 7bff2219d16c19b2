"""
Parlance configuration.

Scope
- Verbosity: the host's DEBUGLEVEL select (ERROR, WARNING, INFO, VERBOSE).
- Config: immutable, sanitized process-wide options consumed by the registry,
  the dispatcher and the log sink.

Host options
- PREFIX: command prefix; the host may provide a zero-argument accessor
  instead of a fixed string. Empty or non-string values fall back to "!".
- NOT_FOUND_MESSAGE: "YES" (notify on unknown commands) or "NO". Select
  indices ("0" for YES, "1" for NO) are accepted as delivered by hosts that
  store the option position rather than its label.
- DEBUGLEVEL: verbosity name or index. Only affects logging.

Example
    >>> config = Config.load({"NOT_FOUND_MESSAGE": "NO", "DEBUGLEVEL": "3"})
    >>> config.not_found_message, config.debuglevel
    (False, <Verbosity.VERBOSE: 3>)
"""
import logging
from collections.abc import Mapping
from enum import IntEnum

from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"


class Verbosity(IntEnum):
    ERROR   = 0
    WARNING = 1
    INFO    = 2
    VERBOSE = 3


def _sanitize_prefix(metadata, /):
    """
    Internal: a prefix is either Unset, a string, or a zero-argument callable.

    An explicit empty string is accepted here; it is resolved to the default
    prefix on read, exactly like an empty value coming from the host accessor.
    """
    if not isinstance(prefix := metadata["prefix"], str | Unset) and not callable(prefix):
        raise TypeError("config 'prefix' must be a string or a callable")


def _sanitize_switch(metadata, /):
    """
    Internal: normalize NOT_FOUND_MESSAGE into a bool.
    """
    match value := metadata["not_found_message"]:
        case bool():
            pass
        case "YES" | "yes" | "0" | 0:
            value = True
        case "NO" | "no" | "1" | 1:
            value = False
        case str() | int():
            raise ValueError(f"config 'not_found_message' must be one of 'YES' or 'NO', not {value!r}")
        case _:
            raise TypeError("config 'not_found_message' must be a bool or a string")
    metadata["not_found_message"] = value


def _sanitize_verbosity(metadata, /):
    """
    Internal: normalize DEBUGLEVEL into a Verbosity member.
    """
    value = metadata["debuglevel"]
    if isinstance(value, Verbosity):
        return
    if isinstance(value, bool) or not isinstance(value, str | int):
        raise TypeError("config 'debuglevel' must be a verbosity, a name or an index")
    try:
        if isinstance(value, str) and not value.strip().isdigit():
            metadata["debuglevel"] = Verbosity[value.strip().upper()]
        else:
            metadata["debuglevel"] = Verbosity(int(value))
    except (KeyError, ValueError):
        raise ValueError(
            f"config 'debuglevel' must be one of {', '.join(member.name for member in Verbosity)}, not {value!r}"
        ) from None


class Config:
    """
    Process-wide options, sanitized once and read-only afterwards.

    Properties
    - prefix: the active command prefix (resolved on every read).
    - not_found_message: bool
    - debuglevel: Verbosity
    - bold: callable used to emphasise fragments of notices.
    """

    __introspectable__ = (
        "not_found_message",
        "debuglevel",
        "bold",
    )

    not_found_message = mirror("not_found_message")
    debuglevel = mirror("debuglevel")
    bold = mirror("bold")

    def __init__(self, prefix=Unset, /, *, not_found_message=True, debuglevel=Verbosity.INFO, bold=str):
        metadata = {
            "prefix": prefix,
            "not_found_message": not_found_message,
            "debuglevel": debuglevel,
            "bold": bold,
        }
        _sanitize_prefix(metadata)
        _sanitize_switch(metadata)
        _sanitize_verbosity(metadata)
        if not callable(metadata["bold"]):
            raise TypeError("config 'bold' must be callable")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def load(cls, options, /, **overrides):
        """
        Build a Config from the host's option mapping.

        Recognized keys: PREFIX, NOT_FOUND_MESSAGE, DEBUGLEVEL. Unknown keys
        are ignored; missing keys keep their defaults. Keyword overrides win
        over the mapping (e.g. bold=...).
        """
        if not isinstance(options, Mapping):
            raise TypeError("Config.load() argument must be a mapping")
        arguments = {}
        if "NOT_FOUND_MESSAGE" in options:
            arguments["not_found_message"] = options["NOT_FOUND_MESSAGE"]
        if "DEBUGLEVEL" in options:
            arguments["debuglevel"] = options["DEBUGLEVEL"]
        return cls(options.get("PREFIX", Unset), **(arguments | overrides))

    @property
    def prefix(self):
        """
        The active prefix. A host accessor that raises or returns an empty or
        non-string value yields DEFAULT_PREFIX.
        """
        if callable(self._prefix):
            try:
                prefix = self._prefix()
            except Exception:
                logger.warning("prefix accessor failed, falling back to %r", DEFAULT_PREFIX, exc_info=True)
                return DEFAULT_PREFIX
        else:
            prefix = coalesce(self._prefix)
        if not isinstance(prefix, str) or not prefix:
            return DEFAULT_PREFIX
        return prefix

    def __repr__(self):
        return f"config(prefix={self.prefix!r}, {', '.join(f'{name}={getattr(self, name)!r}' for name in type(self).__introspectable__)})"


__all__ = (
    "Verbosity",
    "Config",
    "DEFAULT_PREFIX",
)
