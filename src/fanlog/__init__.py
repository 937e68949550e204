"""
fanlog

Structured logging built on top of loguru: JSON or text output on stdout,
an optional UDP sink that receives a JSON copy of every record, a
process-wide default logger and context-scoped logger lookup.
"""

__version__ = "0.1.0"

from .config import (
    Encoding,
    LoggerConfig,
    SecondarySinkConfig,
    resolve,
    with_attrs as with_base_attrs,
    with_encoding,
    with_json,
    with_level,
    with_logstash,
    with_secondary_sink,
    with_set_default,
    with_source,
)
from .context import L, attach, detach, from_context, scoped, with_attrs, with_default_attrs
from .core import LoggerBuilder, LoggerFactory, new_logger
from .exceptions import FanlogError, SecondarySinkUnavailable
from .levels import Severity, parse_level
from .logger import Logger
from .record import Attr
from .registry import LoggerRegistry, default, default_registry, set_default
from .sinks import DatagramSink, FanoutSink, StreamSink

__all__ = [
    "Attr",
    "DatagramSink",
    "Encoding",
    "FanlogError",
    "FanoutSink",
    "L",
    "Logger",
    "LoggerBuilder",
    "LoggerConfig",
    "LoggerFactory",
    "LoggerRegistry",
    "SecondarySinkConfig",
    "SecondarySinkUnavailable",
    "Severity",
    "StreamSink",
    "attach",
    "default",
    "default_registry",
    "detach",
    "from_context",
    "new_logger",
    "parse_level",
    "resolve",
    "scoped",
    "set_default",
    "with_attrs",
    "with_base_attrs",
    "with_default_attrs",
    "with_encoding",
    "with_json",
    "with_level",
    "with_logstash",
    "with_secondary_sink",
    "with_set_default",
    "with_source",
]
