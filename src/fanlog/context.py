"""
Context-scoped logger lookup and attribute helpers
"""

import contextvars
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from .logger import Logger
from .registry import default

_current: contextvars.ContextVar = contextvars.ContextVar("fanlog_logger")


def attach(logger: Logger) -> contextvars.Token:
    """Attach ``logger`` to the current unit of work"""
    return _current.set(logger)


def detach(token: contextvars.Token) -> None:
    _current.reset(token)


@contextmanager
def scoped(logger: Optional[Logger] = None, **kwargs: Any) -> Iterator[Logger]:
    """
    Attach a logger for the duration of a ``with`` block

    Args:
        logger: Logger to attach; defaults to the one already in context
        kwargs: Attributes added to the attached logger

    Yields:
        The attached Logger
    """
    base = logger if logger is not None else from_context()
    derived = base.with_(**kwargs)
    token = attach(derived)
    try:
        yield derived
    finally:
        detach(token)


def from_context(ctx: Optional[contextvars.Context] = None) -> Logger:
    """
    Return the logger attached to ``ctx`` (the current context by default),
    falling back to the process-wide default
    """
    if ctx is None:
        logger = _current.get(None)
    else:
        logger = ctx.get(_current)
    return logger if logger is not None else default()


L = from_context


def with_attrs(*attrs: Any, ctx: Optional[contextvars.Context] = None, **kwargs: Any) -> Logger:
    """Derive a logger from the context logger; the context is left unchanged"""
    return with_default_attrs(from_context(ctx), *attrs, **kwargs)


def with_default_attrs(logger: Logger, *attrs: Any, **kwargs: Any) -> Logger:
    """Derive a logger from ``logger`` by adding attributes left to right"""
    for attr in attrs:
        logger = logger.with_(attr)
    for key, value in kwargs.items():
        logger = logger.with_(**{key: value})
    return logger
