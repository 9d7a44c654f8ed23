"""
Mock network implementations for testing.

MockNetworkBackend hands out in-memory streams preloaded with canned
server bytes, so StreamTransport can be exercised without sockets.
"""

import ssl
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    Reads are served from the initial data; everything written is kept
    in ``written_data``.
    """

    def __init__(self, data: bytes = b"") -> None:
        """
        Args:
            data: Bytes the simulated server sends.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        if self._position >= len(self._data):
            return b""

        if max_bytes is None:
            end = len(self._data)
        else:
            end = min(self._position + max_bytes, len(self._data))
        result = self._data[self._position:end]
        self._position = end
        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """All data written to the stream."""
        return b"".join(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def feed_data(self, data: bytes) -> None:
        """Append bytes for later reads."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Every ``connect_tcp`` call opens a fresh stream fed with the next
    chunk queued for that host and port via ``add_connection_data``.
    """

    def __init__(self) -> None:
        self._pending: Dict[Tuple[str, int], Deque[bytes]] = defaultdict(deque)
        self._connect_errors: Dict[Tuple[str, int], BaseException] = {}
        self._tls_pending: Dict[Tuple[str, int], Deque[bytes]] = defaultdict(deque)
        self._tls_errors: Dict[Tuple[str, int], BaseException] = {}
        self.connections: List[MockNetworkStream] = []

    def add_connection_data(self, host: str, port: int, data: bytes) -> None:
        """Queue server bytes for the next connection to host:port."""
        self._pending[(host, port)].append(data)

    def set_connect_error(self, host: str, port: int, error: BaseException) -> None:
        """Make connections to host:port fail with the given error."""
        self._connect_errors[(host, port)] = error

    def add_tls_data(self, host: str, port: int, data: bytes) -> None:
        """
        Queue bytes readable once the next TLS upgrade for host:port is done.

        Models a proxied https exchange, where the origin server only
        speaks after the CONNECT tunnel has been secured.
        """
        self._tls_pending[(host, port)].append(data)

    def set_tls_error(self, host: str, port: int, error: BaseException) -> None:
        """Make TLS upgrades for host:port fail with the given error."""
        self._tls_errors[(host, port)] = error

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> MockNetworkStream:
        key = (host, port)
        if key in self._connect_errors:
            raise self._connect_errors[key]

        pending = self._pending[key]
        stream = MockNetworkStream(pending.popleft() if pending else b"")
        stream.set_extra_info("peername", key)
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        stream.set_extra_info("timeout", timeout)
        self.connections.append(stream)
        return stream

    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> NetworkStream:
        key = (host, port)
        if key in self._tls_errors:
            raise self._tls_errors[key]

        if isinstance(stream, MockNetworkStream):
            stream.set_extra_info("ssl_object", True)
            stream.set_extra_info("server_hostname", host)
            stream.set_extra_info("ssl_context", ssl_context)
            pending = self._tls_pending[key]
            if pending:
                stream.feed_data(pending.popleft())
        return stream

    def get_connection(self, host: str, port: int) -> Optional[MockNetworkStream]:
        """Last stream opened to host:port, if any."""
        for stream in reversed(self.connections):
            if stream.get_extra_info("peername") == (host, port):
                return stream
        return None

    def reset(self) -> None:
        self._pending.clear()
        self._connect_errors.clear()
        self._tls_pending.clear()
        self._tls_errors.clear()
        self.connections.clear()
