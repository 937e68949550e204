"""
Record data passed from the logger to encoders and sinks
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional, Tuple

from .levels import Severity


class Attr(NamedTuple):
    """A key/value pair attached to a logger or a single record"""

    key: str
    value: Any


def to_attrs(attrs: Tuple[Any, ...] = (), kwargs: Optional[Dict[str, Any]] = None) -> Tuple[Attr, ...]:
    """Normalize positional ``Attr``/pairs and keyword arguments into an ordered tuple"""
    result = []
    for item in attrs:
        if isinstance(item, Attr):
            result.append(item)
        elif isinstance(item, tuple) and len(item) == 2:
            result.append(Attr(str(item[0]), item[1]))
        else:
            raise TypeError(f"expected Attr or (key, value) pair, got {item!r}")
    for key, value in (kwargs or {}).items():
        result.append(Attr(key, value))
    return tuple(result)


@dataclass(frozen=True)
class Source:
    """Source position of the logging call"""

    function: str
    file: str
    line: int


@dataclass(frozen=True)
class Record:
    """A single log record as seen by an encoder"""

    time: datetime
    level: Severity
    message: str
    attrs: Tuple[Attr, ...] = ()
    source: Optional[Source] = None
    exception: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
