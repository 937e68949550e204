"""
Logger configuration and option functions
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Tuple

from .levels import Severity, parse_level
from .record import Attr, to_attrs


class Encoding(str, Enum):
    """Output encoding of the primary sink"""

    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class SecondarySinkConfig:
    """Secondary network sink configuration"""

    enabled: bool = False
    address: str = ""


@dataclass(frozen=True)
class LoggerConfig:
    """Logger configuration data class"""

    level: Severity = Severity.INFO
    encoding: Encoding = Encoding.JSON
    add_source: bool = True
    set_default: bool = True
    secondary: SecondarySinkConfig = field(default_factory=SecondarySinkConfig)
    attrs: Tuple[Attr, ...] = ()


LoggerOption = Callable[[LoggerConfig], LoggerConfig]


def resolve(*options: LoggerOption) -> LoggerConfig:
    """Apply options in order over the defaults; later options win"""
    config = LoggerConfig()
    for option in options:
        config = option(config)
    return config


def with_level(level: str) -> LoggerOption:
    """Set the minimum level. Unknown names fall back to INFO."""
    severity = parse_level(level)
    return lambda config: replace(config, level=severity)


def with_encoding(encoding: Encoding) -> LoggerOption:
    """Set the primary output encoding"""
    encoding = Encoding(encoding)
    return lambda config: replace(config, encoding=encoding)


def with_json(is_json: bool) -> LoggerOption:
    """Use JSON output when true, plain text otherwise"""
    return with_encoding(Encoding.JSON if is_json else Encoding.TEXT)


def with_source(add_source: bool) -> LoggerOption:
    """Include the source position of each call"""
    return lambda config: replace(config, add_source=bool(add_source))


def with_set_default(set_default: bool) -> LoggerOption:
    """Install the built logger as the process default"""
    return lambda config: replace(config, set_default=bool(set_default))


def with_secondary_sink(enabled: bool, address: str) -> LoggerOption:
    """
    Duplicate every record as JSON to a UDP ``host:port`` address

    The address is not checked here, only when the logger is built.
    """
    secondary = SecondarySinkConfig(enabled=bool(enabled), address=address)
    return lambda config: replace(config, secondary=secondary)


with_logstash = with_secondary_sink


def with_attrs(*attrs: Any, **kwargs: Any) -> LoggerOption:
    """Attach base attributes to every record of the built logger"""
    extra = to_attrs(attrs, kwargs)
    return lambda config: replace(config, attrs=config.attrs + extra)
