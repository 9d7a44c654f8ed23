"""
Tests for HTTP/1.1 connection implementation.
"""

import io

import pytest

from http_exchange.exceptions import ConnectionError, ProtocolError
from http_exchange.http11 import HTTP11Connection, ResponseHead
from http_exchange.network.mock import MockNetworkStream


def _connection(data: bytes) -> HTTP11Connection:
    return HTTP11Connection(MockNetworkStream(data))


class TestHTTP11Request:
    """Test request serialization."""

    @pytest.mark.asyncio
    async def test_send_request(self) -> None:
        """Test a GET request is written to the stream."""
        connection = _connection(b"")
        await connection.send_request("GET", "/path?q=1", [("Host", "example.com")])
        written = connection.stream.written_data
        assert written.startswith(b"GET /path?q=1 HTTP/1.1\r\n")
        assert b"example.com" in written
        assert written.endswith(b"\r\n\r\n")

    @pytest.mark.asyncio
    async def test_send_request_with_body(self) -> None:
        """Test a body is written after the headers."""
        connection = _connection(b"")
        await connection.send_request(
            "POST",
            "/",
            [("Host", "example.com"), ("Content-Length", "5")],
            b"hello",
        )
        assert connection.stream.written_data.endswith(b"\r\n\r\nhello")

    @pytest.mark.asyncio
    async def test_body_without_length_is_rejected(self) -> None:
        """Test h11 framing errors surface as ProtocolError."""
        connection = _connection(b"")
        with pytest.raises(ProtocolError, match="Invalid request"):
            await connection.send_request("POST", "/", [("Host", "example.com")], b"hello")


class TestHTTP11Response:
    """Test response parsing."""

    @pytest.mark.asyncio
    async def test_receive_response(self) -> None:
        """Test status line, headers and body are parsed."""
        connection = _connection(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )
        await connection.send_request("GET", "/", [("Host", "example.com")])
        head = await connection.receive_response()

        assert isinstance(head, ResponseHead)
        assert head.status_code == 200
        assert head.reason == "OK"
        assert head.http_version == "1.1"
        assert ("Content-Type", "text/plain") in head.headers
        assert head.status_line == "HTTP/1.1 200 OK"
        assert "Content-Length: 5" in head.header_lines()
        assert await connection.receive_body() == b"hello"

    @pytest.mark.asyncio
    async def test_informational_response_is_skipped(self) -> None:
        connection = _connection(
            b"HTTP/1.1 100 Continue\r\n\r\n"
            b"HTTP/1.1 201 Created\r\nContent-Length: 0\r\n\r\n"
        )
        await connection.send_request("GET", "/", [("Host", "example.com")])
        head = await connection.receive_response()
        assert head.status_code == 201

    @pytest.mark.asyncio
    async def test_chunked_body(self) -> None:
        connection = _connection(
            b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
            b"5\r\nhello\r\n6\r\n world\r\n0\r\n\r\n"
        )
        await connection.send_request("GET", "/", [("Host", "example.com")])
        await connection.receive_response()
        assert await connection.receive_body() == b"hello world"

    @pytest.mark.asyncio
    async def test_body_until_close(self) -> None:
        """Test a body without framing is read until EOF."""
        connection = _connection(b"HTTP/1.1 200 OK\r\n\r\nuntil close")
        await connection.send_request("GET", "/", [("Host", "example.com")])
        await connection.receive_response()
        assert await connection.receive_body() == b"until close"

    @pytest.mark.asyncio
    async def test_body_into_sink(self) -> None:
        connection = _connection(b"HTTP/1.1 200 OK\r\nContent-Length: 4\r\n\r\ndata")
        await connection.send_request("GET", "/", [("Host", "example.com")])
        await connection.receive_response()
        sink = io.BytesIO()
        assert await connection.receive_body(sink) == b""
        assert sink.getvalue() == b"data"

    @pytest.mark.asyncio
    async def test_small_reads(self) -> None:
        """Test parsing works when data arrives byte by byte."""
        connection = HTTP11Connection(
            MockNetworkStream(b"HTTP/1.1 204 No Content\r\n\r\n"), read_size=1
        )
        await connection.send_request("GET", "/", [("Host", "example.com")])
        head = await connection.receive_response()
        assert head.status_code == 204

    @pytest.mark.asyncio
    async def test_server_closes_early(self) -> None:
        connection = _connection(b"")
        await connection.send_request("GET", "/", [("Host", "example.com")])
        with pytest.raises(ProtocolError):
            await connection.receive_response()

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        connection = _connection(b"NOT HTTP AT ALL\r\n\r\n")
        await connection.send_request("GET", "/", [("Host", "example.com")])
        with pytest.raises(ProtocolError):
            await connection.receive_response()


class TestHTTP11Tunnel:
    """Test CONNECT tunnelling."""

    @pytest.mark.asyncio
    async def test_open_tunnel(self) -> None:
        connection = _connection(b"HTTP/1.1 200 Connection established\r\n\r\n")
        head = await connection.open_tunnel("example.com", 443)
        assert head.status_code == 200
        assert connection.stream.written_data.startswith(
            b"CONNECT example.com:443 HTTP/1.1\r\n"
        )

    @pytest.mark.asyncio
    async def test_tunnel_refused(self) -> None:
        connection = _connection(
            b"HTTP/1.1 407 Proxy Authentication Required\r\nContent-Length: 0\r\n\r\n"
        )
        with pytest.raises(ConnectionError, match="407"):
            await connection.open_tunnel("example.com", 443)


class TestHTTP11Close:
    """Test closing connections."""

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        connection = _connection(b"")
        await connection.close()
        assert connection.stream.is_closed
