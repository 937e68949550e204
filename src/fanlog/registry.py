"""
Process-wide default logger
"""

import threading
from typing import Optional

from .logger import Logger


class LoggerRegistry:
    """Holds a single Logger reference, replaced by later ``set`` calls"""

    def __init__(self, initial: Optional[Logger] = None):
        self._lock = threading.Lock()
        self._logger = initial if initial is not None else Logger.discard()

    def get(self) -> Logger:
        with self._lock:
            return self._logger

    def set(self, logger: Logger) -> Logger:
        """Install ``logger`` and return the one it replaced"""
        if not isinstance(logger, Logger):
            raise TypeError(f"expected Logger, got {type(logger).__name__}")
        with self._lock:
            previous, self._logger = self._logger, logger
        return previous


default_registry = LoggerRegistry()


def default() -> Logger:
    """Return the current process-wide default logger"""
    return default_registry.get()


def set_default(logger: Logger) -> Logger:
    return default_registry.set(logger)
