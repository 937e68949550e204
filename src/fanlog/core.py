"""
Core logging functionality using Factory and Builder patterns
"""

import logging
import sys
import threading
import traceback
import uuid
from typing import Any, List, Optional, TextIO

from loguru import logger as _logger

from . import config as options
from .config import Encoding, LoggerConfig, LoggerOption, resolve
from .encoding import JSONEncoder, TextEncoder
from .exceptions import SecondarySinkUnavailable
from .levels import Severity
from .logger import ATTRS_KEY, SINK_KEY, Handle, Logger
from .record import Record, Source
from .registry import default_registry
from .sinks import DatagramSink, ErrorObserver, FanoutSink, Sink, StreamSink, dial_datagram

log = logging.getLogger(__name__)

ENCODERS = {
    Encoding.JSON: JSONEncoder,
    Encoding.TEXT: TextEncoder,
}

_stock_lock = threading.Lock()
_stock_removed = False


def _remove_stock_handler() -> None:
    """Drop loguru's preinstalled stderr handler, once per process"""
    global _stock_removed
    with _stock_lock:
        if _stock_removed:
            return
        _stock_removed = True
        try:
            _logger.remove(0)
        except ValueError:
            # already removed by the host application
            pass


class LoguruBridge:
    """Loguru sink callable that turns loguru records into fanlog records"""

    def __init__(self, sink: Sink, add_source: bool):
        self.sink = sink
        self.add_source = add_source

    def __call__(self, message) -> None:
        self.sink.emit(self.to_record(message.record))

    def to_record(self, record: dict) -> Record:
        extra = record["extra"]
        source = None
        if self.add_source:
            source = Source(
                function=f"{record['name']}.{record['function']}",
                file=record["file"].path,
                line=record["line"],
            )

        exception = None
        # opt(exception=True) outside an except block yields an all-None tuple
        if record["exception"] is not None and record["exception"].type is not None:
            exc_type, exc_value, exc_tb = record["exception"]
            exception = "".join(
                traceback.format_exception(exc_type, exc_value, exc_tb)
            ).rstrip()

        return Record(
            time=record["time"],
            level=Severity.from_number(record["level"].no),
            message=record["message"],
            attrs=tuple(extra.get(ATTRS_KEY, ())),
            source=source,
            exception=exception,
            extra={k: v for k, v in extra.items() if not k.startswith("_fanlog_")},
        )


class LoggerFactory:
    """Factory for creating configured loggers"""

    @staticmethod
    def create_sink(
        config: LoggerConfig,
        stream: Optional[TextIO] = None,
        on_error: Optional[ErrorObserver] = None,
    ) -> Sink:
        """
        Build the primary sink and, when enabled, fan it out to the secondary sink

        Raises:
            SecondarySinkUnavailable: the secondary address could not be dialed
        """
        primary = StreamSink(ENCODERS[config.encoding](), stream)
        if not config.secondary.enabled:
            return primary

        sock = dial_datagram(config.secondary.address)
        # secondary output is always JSON, whatever the primary encoding
        secondary = DatagramSink(JSONEncoder(), sock)
        return FanoutSink([primary, secondary], on_error=on_error)

    @staticmethod
    def create_logger(
        config: LoggerConfig,
        stream: Optional[TextIO] = None,
        on_error: Optional[ErrorObserver] = None,
    ) -> Logger:
        """Create logger based on configuration"""
        sink = LoggerFactory.create_sink(config, stream, on_error)

        _remove_stock_handler()
        sink_id = uuid.uuid4().hex
        handler_id = _logger.add(
            LoguruBridge(sink, config.add_source),
            level=config.level.loguru_name,
            format="{message}",
            filter=lambda record: record["extra"].get(SINK_KEY) == sink_id,
            colorize=False,
            backtrace=False,
            diagnose=False,
        )

        logger = Logger(
            _logger.bind(**{SINK_KEY: sink_id}),
            level=config.level,
            attrs=config.attrs,
            handle=Handle(handler_id, sink),
        )
        log.debug("Built logger handler=%d sink=%r set_default=%s", handler_id, sink, config.set_default)

        if config.set_default:
            default_registry.set(logger)

        return logger


class LoggerBuilder:
    """Builder pattern for creating configured loggers"""

    def __init__(self):
        self._options: List[LoggerOption] = []

    def _add(self, option: LoggerOption) -> "LoggerBuilder":
        self._options.append(option)
        return self

    def with_level(self, level: str) -> "LoggerBuilder":
        """Set log level"""
        return self._add(options.with_level(level))

    def with_encoding(self, encoding: Encoding) -> "LoggerBuilder":
        """Set primary output encoding"""
        return self._add(options.with_encoding(encoding))

    def with_json(self, is_json: bool = True) -> "LoggerBuilder":
        return self._add(options.with_json(is_json))

    def with_source(self, add_source: bool = True) -> "LoggerBuilder":
        """Enable/disable source position capture"""
        return self._add(options.with_source(add_source))

    def with_set_default(self, set_default: bool = True) -> "LoggerBuilder":
        return self._add(options.with_set_default(set_default))

    def with_secondary_sink(self, enabled: bool, address: str) -> "LoggerBuilder":
        """Duplicate records as JSON datagrams to ``address``"""
        return self._add(options.with_secondary_sink(enabled, address))

    def with_extra(self, **kwargs: Any) -> "LoggerBuilder":
        """Add attributes bound to every record"""
        return self._add(options.with_attrs(**kwargs))

    @property
    def config(self) -> LoggerConfig:
        return resolve(*self._options)

    def build(
        self,
        stream: Optional[TextIO] = None,
        on_error: Optional[ErrorObserver] = None,
    ) -> Logger:
        """Build and return configured logger"""
        return LoggerFactory.create_logger(self.config, stream, on_error)


def new_logger(*opts: LoggerOption, stream: Optional[TextIO] = None) -> Logger:
    """
    Resolve ``opts`` and build a logger

    A secondary sink that cannot be dialed is fatal: the failure is printed
    to stderr and the process exits with status 1.
    """
    config = resolve(*opts)
    try:
        return LoggerFactory.create_logger(config, stream)
    except SecondarySinkUnavailable as exc:
        print(f"fanlog: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
