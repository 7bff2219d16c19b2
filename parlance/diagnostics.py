"""
Parlance log sink.

Every module logs through logging.getLogger(__name__), so all records land
under the "parlance" logger. configure() maps the host DEBUGLEVEL onto that
logger and installs a single rich handler on stderr.

    Verbosity.ERROR   -> logging.ERROR
    Verbosity.WARNING -> logging.WARNING
    Verbosity.INFO    -> logging.INFO
    Verbosity.VERBOSE -> logging.DEBUG
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import Config, Verbosity
from .utils import Unset, coalesce

logger = logging.getLogger("parlance")

LEVELS = {
    Verbosity.ERROR: logging.ERROR,
    Verbosity.WARNING: logging.WARNING,
    Verbosity.INFO: logging.INFO,
    Verbosity.VERBOSE: logging.DEBUG,
}


def level(verbosity, /):
    """
    Translate a Verbosity (or a Config carrying one) into a logging level.
    """
    if isinstance(verbosity, Config):
        verbosity = verbosity.debuglevel
    if not isinstance(verbosity, Verbosity):
        raise TypeError("level() argument must be a verbosity or a config")
    return LEVELS[verbosity]


def configure(config, /, *, console=Unset):
    """
    Apply the configured verbosity to the package logger.

    Parameters
    - config: Config | Verbosity
    - console: rich Console for the handler; defaults to a stderr console.

    Behavior
    - Sets the "parlance" logger level.
    - Installs one RichHandler; repeated calls only update the level.

    Returns
    - the package logger.
    """
    logger.setLevel(level(config))
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(
            console=coalesce(console, Console(stderr=True)),
            show_path=False,
            rich_tracebacks=True,
        ))
    return logger


__all__ = (
    "LEVELS",
    "level",
    "configure",
)
