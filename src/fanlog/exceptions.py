"""
Exceptions raised by fanlog
"""

from typing import Optional


class FanlogError(Exception):
    """Base class for fanlog errors"""


class SecondarySinkUnavailable(FanlogError):
    """The secondary network sink could not be connected"""

    def __init__(self, address: str, cause: Optional[BaseException] = None):
        self.address = address
        self.cause = cause
        message = f"failed to connect to secondary sink at {address!r}"
        if cause is not None:
            message = f"{message}: dial udp: {cause}"
        super().__init__(message)
