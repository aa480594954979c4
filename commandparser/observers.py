"""
commandparser observers: optional diagnostic sinks for the parser.

The parser reports what it does (tokens classified, values added, sub-commands
entered, faults raised) to an observer. Observers are a pure side channel: the
parser ignores whatever they return and behaves identically with any of them.

Contract
- four severities: debug, info, warning, error.
- each call receives the unit of work (fully-qualified operation name, e.g.
  "commandparser.parser.parse") and a zero-argument callable returning a
  mapping of label -> value. Sinks call it only when the severity is enabled.

Implementations
- NullObserver: singleton that drops everything (the default).
- LoggingObserver: forwards to the standard logging module.
- ConsoleObserver: prints events on a rich stderr console.
"""
import functools
import logging as logmod
from typing import final

from rich.console import Console
from rich.pretty import Pretty
from rich.text import Text

from .utils import *

##-- logging
logging = logmod.getLogger("commandparser")
##-- end logging

_LEVELS = {
    "debug": logmod.DEBUG,
    "info": logmod.INFO,
    "warning": logmod.WARNING,
    "error": logmod.ERROR,
}


@final
class NullObserver:
    """
    Observer that discards every event.

    A per-process singleton: NullObserver() always returns the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def debug(self, unit, payload, /):
        pass

    def info(self, unit, payload, /):
        pass

    def warning(self, unit, payload, /):
        pass

    def error(self, unit, payload, /):
        pass

    def __repr__(self):
        return "NullObserver()"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'NullObserver' is not an acceptable base type")


class LoggingObserver:
    """
    Observer that forwards events to a logging.Logger.

    Records look like "commandparser.parser.parse: tokens=['tool', '-v']"; the raw
    payload mapping is attached as the 'payload' attribute of the record.
    """

    def __init__(self, logger=Unset, /):
        if not isinstance(logger, logmod.Logger | Unset):
            raise TypeError("LoggingObserver() argument must be a logger")
        self.logger = coalesce(logger, logging)

    def _log(self, level, unit, payload):
        if not self.logger.isEnabledFor(level):
            return
        payload = dict(payload())
        fields = " ".join("%s=%r" % item for item in payload.items())
        self.logger.log(level, "%s: %s", unit, fields, extra={"payload": payload})

    def debug(self, unit, payload, /):
        self._log(logmod.DEBUG, unit, payload)

    def info(self, unit, payload, /):
        self._log(logmod.INFO, unit, payload)

    def warning(self, unit, payload, /):
        self._log(logmod.WARNING, unit, payload)

    def error(self, unit, payload, /):
        self._log(logmod.ERROR, unit, payload)

    def __repr__(self):
        return f"LoggingObserver({self.logger.name!r})"


class ConsoleObserver:
    """
    Observer that prints events on a rich console (stderr by default).

    Events below `level` ("debug", "info", "warning" or "error") are skipped
    without evaluating their payload.
    """

    styles = {
        "debug": "dim",
        "info": "#00E5FF",
        "warning": "bold #FFB400",
        "error": "bold #FF4DA6",
    }

    def __init__(self, console=Unset, /, level="info"):
        if not isinstance(console, Console | Unset):
            raise TypeError("ConsoleObserver() 'console' must be a rich console")
        if level not in _LEVELS:
            raise ValueError("ConsoleObserver() 'level' must be one of %s" % ", ".join(map(repr, _LEVELS)))
        self.console = coalesce(console, Console(stderr=True))
        self.level = level

    def _print(self, severity, unit, payload):
        if _LEVELS[severity] < _LEVELS[self.level]:
            return
        self.console.print(
            Text.assemble(("[%s]" % severity, self.styles[severity]), " ", (unit, "bold")),
            Pretty(dict(payload())),
        )

    def debug(self, unit, payload, /):
        self._print("debug", unit, payload)

    def info(self, unit, payload, /):
        self._print("info", unit, payload)

    def warning(self, unit, payload, /):
        self._print("warning", unit, payload)

    def error(self, unit, payload, /):
        self._print("error", unit, payload)

    def __repr__(self):
        return f"ConsoleObserver(level={self.level!r})"


__all__ = (
    "NullObserver",
    "LoggingObserver",
    "ConsoleObserver",
)
