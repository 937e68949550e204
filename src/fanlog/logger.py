"""
The Logger handle returned by the factory
"""

import weakref
from typing import Any, Optional, Tuple

from loguru import logger as _logger

from .levels import Severity, parse_level
from .record import Attr, to_attrs
from .sinks import Sink

SINK_KEY = "_fanlog_sink"
ATTRS_KEY = "_fanlog_attrs"


def _remove_handler(handler_id: int, sink: Sink) -> None:
    try:
        _logger.remove(handler_id)
    except ValueError:
        # removed elsewhere, e.g. by a host-level logger.remove()
        pass
    sink.close()


class Handle:
    """
    Loguru handler registration shared by a logger and everything derived from it

    The handler is removed and the sink closed on ``close()`` or, failing
    that, once the last Logger referencing this handle is garbage collected.
    """

    def __init__(self, handler_id: int, sink: Sink):
        self.handler_id = handler_id
        self.sink = sink
        self._finalizer = weakref.finalize(self, _remove_handler, handler_id, sink)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        self._finalizer()


class Logger:
    """
    Immutable logger bound to one sink and a minimum level

    Deriving a logger with extra attributes returns a new Logger that shares
    the same sink; the original is never modified, so instances can be
    shared freely between threads.
    """

    __slots__ = ("_logger", "level", "attrs", "_handle")

    def __init__(
        self,
        bound_logger: Any,
        level: Severity = Severity.INFO,
        attrs: Tuple[Attr, ...] = (),
        handle: Optional[Handle] = None,
    ):
        self._logger = bound_logger
        self.level = level
        self.attrs = attrs
        self._handle = handle

    @classmethod
    def discard(cls) -> "Logger":
        """A logger that drops every record"""
        return cls(None, Severity.ERROR)

    @property
    def sink(self) -> Optional[Sink]:
        return self._handle.sink if self._handle else None

    def enabled(self, level: Any) -> bool:
        """Report whether a record at ``level`` would be emitted"""
        if self._logger is None or (self._handle and self._handle.closed):
            return False
        return parse_level(level, fallback=Severity.INFO) >= self.level

    def with_(self, *attrs: Any, **kwargs: Any) -> "Logger":
        """Return a derived logger carrying additional attributes"""
        extra = to_attrs(attrs, kwargs)
        if not extra:
            return self
        return Logger(self._logger, self.level, self.attrs + extra, self._handle)

    def bind(self, **kwargs: Any) -> "Logger":
        return self.with_(**kwargs)

    def debug(self, message: str, *attrs: Any, **kwargs: Any) -> None:
        self._log(Severity.DEBUG, message, attrs, kwargs)

    def info(self, message: str, *attrs: Any, **kwargs: Any) -> None:
        self._log(Severity.INFO, message, attrs, kwargs)

    def warn(self, message: str, *attrs: Any, **kwargs: Any) -> None:
        self._log(Severity.WARN, message, attrs, kwargs)

    warning = warn

    def error(self, message: str, *attrs: Any, **kwargs: Any) -> None:
        self._log(Severity.ERROR, message, attrs, kwargs)

    def exception(self, message: str, *attrs: Any, **kwargs: Any) -> None:
        """Log at ERROR with the exception currently being handled"""
        self._log(Severity.ERROR, message, attrs, kwargs, exception=True)

    def log(self, level: Any, message: str, *attrs: Any, **kwargs: Any) -> None:
        self._log(parse_level(level), message, attrs, kwargs)

    def close(self) -> None:
        """Detach the underlying handler and close the sinks it owns"""
        if self._handle is not None:
            self._handle.close()

    def _log(self, level: Severity, message: str, attrs, kwargs, exception: bool = False) -> None:
        if not self.enabled(level):
            return
        record_attrs = self.attrs + to_attrs(attrs, kwargs)
        # depth=2 skips _log and the public level method
        self._logger.bind(**{ATTRS_KEY: record_attrs}).opt(
            depth=2, exception=exception
        ).log(level.loguru_name, str(message))

    def __repr__(self) -> str:
        if self._logger is None:
            return "Logger(discard)"
        return f"Logger(level={self.level}, attrs={len(self.attrs)}, sink={self.sink!r})"
