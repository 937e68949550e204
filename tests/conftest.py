"""
Shared fixtures for fanlog tests
"""

import io
import socket

import pytest

from fanlog import LoggerFactory, resolve
from fanlog.registry import default_registry


@pytest.fixture(autouse=True)
def restore_default_logger():
    """Keep the process-wide default untouched across tests"""
    previous = default_registry.get()
    yield
    default_registry.set(previous)


@pytest.fixture
def make_logger():
    """Build loggers writing to an in-memory stream and close them afterwards"""
    built = []

    def _make(*opts, on_error=None):
        stream = io.StringIO()
        logger = LoggerFactory.create_logger(resolve(*opts), stream, on_error)
        built.append(logger)
        return logger, stream

    yield _make

    for logger in built:
        logger.close()


@pytest.fixture
def udp_receiver():
    """A bound UDP socket on loopback acting as the secondary destination"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()
