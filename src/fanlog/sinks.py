"""
Sinks: destinations that accept encoded log records
"""

import logging
import socket
import sys
import threading
from typing import Callable, Optional, Sequence, TextIO, Tuple

from .encoding import Encoder
from .exceptions import SecondarySinkUnavailable
from .record import Record

ErrorObserver = Callable[["Sink", BaseException], None]


class Sink:
    """A destination for records, paired with the encoder that renders them"""

    def __init__(self, encoder: Encoder):
        self.encoder = encoder

    def emit(self, record: Record) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources owned by the sink"""


class StreamSink(Sink):
    """Writes one line per record to a text stream, standard output by default"""

    def __init__(self, encoder: Encoder, stream: Optional[TextIO] = None):
        super().__init__(encoder)
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def emit(self, record: Record) -> None:
        line = self.encoder.encode(record) + "\n"
        with self._lock:
            self.stream.write(line)
            self.stream.flush()

    def __repr__(self) -> str:
        return f"StreamSink({self.encoder.name}, {getattr(self.stream, 'name', self.stream)!r})"


class DatagramSink(Sink):
    """Sends every record as a single datagram over a connected socket"""

    def __init__(self, encoder: Encoder, sock: socket.socket):
        super().__init__(encoder)
        self.sock = sock

    def emit(self, record: Record) -> None:
        self.sock.send(self.encoder.encode(record).encode("utf-8"))

    def close(self) -> None:
        self.sock.close()

    def __repr__(self) -> str:
        return f"DatagramSink({self.encoder.name}, fd={self.sock.fileno()})"


class FanoutSink(Sink):
    """
    Best-effort fan-out over several sinks

    Each record is handed to every member. An error raised by one member
    does not reach the caller and does not stop delivery to the others;
    it is only reported to ``on_error`` when an observer is given.
    """

    def __init__(self, sinks: Sequence[Sink], on_error: Optional[ErrorObserver] = None):
        if len(sinks) < 2:
            raise ValueError("fan-out needs at least two sinks")
        self.sinks: Tuple[Sink, ...] = tuple(sinks)
        self.on_error = on_error

    def emit(self, record: Record) -> None:
        for sink in self.sinks:
            try:
                sink.emit(record)
            except Exception as exc:  # noqa: BLE001 - fan-out members are best-effort
                logging.getLogger(__name__).debug("Dropped record for %r: %s", sink, exc)
                if self.on_error is not None:
                    self.on_error(sink, exc)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()

    def __repr__(self) -> str:
        return f"FanoutSink({', '.join(repr(s) for s in self.sinks)})"


def split_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6-host]:port``) into its parts"""
    host, sep, port = address.rpartition(":")
    if not sep or not port:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"too many colons in address {address!r}")
    try:
        number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 <= number <= 65535:
        raise ValueError(f"invalid port in address {address!r}")
    return host, number


def dial_datagram(address: str) -> socket.socket:
    """
    Open a UDP socket connected to ``address``

    One attempt is made. Any resolution or connect failure is raised as
    SecondarySinkUnavailable.
    """
    try:
        host, port = split_address(address)
        family, socktype, proto, _, sockaddr = socket.getaddrinfo(
            host or None, port, type=socket.SOCK_DGRAM
        )[0]
    except (ValueError, OSError) as exc:
        raise SecondarySinkUnavailable(address, exc) from exc

    sock = socket.socket(family, socktype, proto)
    try:
        sock.connect(sockaddr)
    except OSError as exc:
        sock.close()
        raise SecondarySinkUnavailable(address, exc) from exc
    return sock
