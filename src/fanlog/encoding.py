"""
Record encoders: one record in, one line out
"""

import json
from typing import Any, Iterator, List, Tuple

from .record import Record


class Encoder:
    """Base class for record encoders"""

    name = ""

    def encode(self, record: Record) -> str:
        """Render a record as a single line without a trailing newline"""
        raise NotImplementedError

    @staticmethod
    def _fields(record: Record) -> Iterator[Tuple[str, Any]]:
        yield "time", record.time.isoformat(timespec="milliseconds")
        yield "level", str(record.level)
        if record.source is not None:
            yield "source", record.source
        yield "msg", record.message
        for key, value in record.extra.items():
            yield key, value
        for attr in record.attrs:
            yield attr.key, attr.value
        if record.exception:
            yield "exc", record.exception


class JSONEncoder(Encoder):
    """Structured encoder producing one JSON object per record

    Keys are written in attachment order and duplicates are kept as-is,
    so a later attribute with the same key does not replace an earlier one.
    """

    name = "json"

    def encode(self, record: Record) -> str:
        members: List[str] = []
        for key, value in self._fields(record):
            if key == "source":
                value = {
                    "function": value.function,
                    "file": value.file,
                    "line": value.line,
                }
            members.append(f"{self._dump(key)}:{self._dump(value)}")
        return "{" + ",".join(members) + "}"

    @staticmethod
    def _dump(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, default=str)


class TextEncoder(Encoder):
    """Human-readable ``key=value`` encoder"""

    name = "text"

    def encode(self, record: Record) -> str:
        parts: List[str] = []
        for key, value in self._fields(record):
            if key == "source":
                value = f"{value.file}:{value.line}"
            parts.append(f"{self._quote(str(key))}={self._quote(self._text(value))}")
        return " ".join(parts)

    @staticmethod
    def _text(value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "<nil>"
        return str(value)

    @staticmethod
    def _quote(text: str) -> str:
        if text and not any(ch in ' ="' or not ch.isprintable() for ch in text):
            return text
        return json.dumps(text, ensure_ascii=False)
