"""
Severity levels and level-name parsing
"""

from enum import IntEnum


class Severity(IntEnum):
    """Ordered log severity"""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @property
    def loguru_name(self) -> str:
        """Name of the matching loguru level"""
        return _LOGURU_NAMES[self]

    @classmethod
    def from_number(cls, no: int) -> "Severity":
        """Map a loguru level number onto the nearest severity at or below it"""
        for severity in sorted(cls, reverse=True):
            if no >= severity:
                return severity
        return cls.DEBUG

    def __str__(self) -> str:
        return self.name


_LOGURU_NAMES = {
    Severity.DEBUG: "DEBUG",
    Severity.INFO: "INFO",
    Severity.WARN: "WARNING",
    Severity.ERROR: "ERROR",
}


def parse_level(text: str, fallback: Severity = Severity.INFO) -> Severity:
    """
    Parse a case-insensitive level name

    Unknown names degrade to ``fallback`` instead of raising.
    """
    if isinstance(text, Severity):
        return text
    name = str(text or "").strip().upper()
    if name in Severity.__members__:
        return Severity[name]
    return fallback
