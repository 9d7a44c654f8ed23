"""
HTTP/1.1 connection implementation for http_exchange.

This module implements the HTTP11Connection class that runs a single
HTTP/1.1 request/response exchange over a NetworkStream using h11.
Connections are never reused; every exchange opens a new one.
"""

import logging
from typing import IO, List, NamedTuple, Optional, Sequence, Tuple

import h11

from .exceptions import ConnectionError, ProtocolError
from .network.stream import NetworkStream

logger = logging.getLogger(__name__)

HeaderPairs = Sequence[Tuple[str, str]]


class ResponseHead(NamedTuple):
    """Status line and headers of a received response."""

    status_code: int
    reason: str
    http_version: str
    headers: List[Tuple[str, str]]

    @property
    def status_line(self) -> str:
        return f"HTTP/{self.http_version} {self.status_code} {self.reason}".rstrip()

    def header_lines(self) -> List[str]:
        return [f"{name}: {value}" for name, value in self.headers]


class HTTP11Connection:
    """
    HTTP/1.1 connection driver.

    Example:
        connection = HTTP11Connection(stream)
        await connection.send_request("GET", "/", [("Host", "example.com")])
        head = await connection.receive_response()
        body = await connection.receive_body()
        await connection.close()
    """

    DEFAULT_READ_SIZE = 65536

    def __init__(self, stream: NetworkStream, read_size: Optional[int] = None) -> None:
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._read_size = read_size or self.DEFAULT_READ_SIZE
        self._bytes_sent = 0
        self._bytes_received = 0

    @property
    def stream(self) -> NetworkStream:
        return self._stream

    async def send_request(
        self,
        method: str,
        target: str,
        headers: HeaderPairs,
        body: Optional[bytes] = None,
    ) -> None:
        """
        Send a complete request.

        A body requires a matching Content-Length header.

        Raises:
            ProtocolError: If h11 rejects the request
        """
        try:
            await self._send_event(
                h11.Request(method=method, target=target, headers=list(headers))
            )
            if body:
                await self._send_event(h11.Data(data=body))
            await self._send_event(h11.EndOfMessage())
        except h11.LocalProtocolError as e:
            raise ProtocolError(f"Invalid request: {e}", e) from e

    async def _send_event(self, event: h11.Event) -> None:
        data = self._h11_connection.send(event)
        if data:
            await self._stream.write(data)
            self._bytes_sent += len(data)

    async def receive_response(self) -> ResponseHead:
        """
        Receive the status line and headers of the response.

        Informational (1xx) responses are skipped.

        Raises:
            ProtocolError: If the server closes early or sends garbage
        """
        while True:
            event = await self._next_event()

            if isinstance(event, h11.InformationalResponse):
                logger.debug(f"Skipping informational response {event.status_code}")
                continue

            if isinstance(event, h11.Response):
                return ResponseHead(
                    status_code=event.status_code,
                    reason=event.reason.decode("latin-1"),
                    http_version=event.http_version.decode("ascii"),
                    headers=[
                        (name.decode("latin-1"), value.decode("latin-1"))
                        for name, value in event.headers.raw_items()
                    ],
                )

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")

            raise ProtocolError(f"Unexpected event {type(event).__name__}")

    async def receive_body(self, sink: Optional[IO[bytes]] = None) -> bytes:
        """
        Receive the response body.

        Args:
            sink: Binary file the body is written to instead of being buffered

        Returns:
            The body, or ``b""`` when written to ``sink``
        """
        chunks = []
        while True:
            event = await self._next_event()
            if isinstance(event, h11.Data):
                if sink is not None:
                    sink.write(event.data)
                else:
                    chunks.append(event.data)
            elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                break
        return b"".join(chunks)

    async def open_tunnel(self, host: str, port: int) -> ResponseHead:
        """
        Ask an HTTP proxy for a tunnel to host:port with CONNECT.

        Raises:
            ConnectionError: If the proxy refuses the tunnel
        """
        authority = f"{host}:{port}"
        await self.send_request("CONNECT", authority, [("Host", authority)])
        head = await self.receive_response()
        if not 200 <= head.status_code < 300:
            raise ConnectionError(
                f"Proxy refused tunnel to {authority} with status {head.status_code}"
            )
        return head

    async def _next_event(self) -> h11.Event:
        try:
            while True:
                event = self._h11_connection.next_event()
                if event is not h11.NEED_DATA:
                    return event
                # An empty read means EOF, which h11 expects as b"".
                data = await self._stream.read(self._read_size)
                self._bytes_received += len(data)
                self._h11_connection.receive_data(data)
        except h11.RemoteProtocolError as e:
            raise ProtocolError(str(e), e) from e

    async def close(self) -> None:
        await self._stream.aclose()
        logger.debug(
            f"Connection closed ({self._bytes_sent} bytes sent, "
            f"{self._bytes_received} bytes received)"
        )
