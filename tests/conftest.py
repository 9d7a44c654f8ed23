"""
Pytest configuration for http_exchange tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

from typing import Dict, Optional

import pytest

from http_exchange import Client, MockTransport, StreamTransport
from http_exchange.network import MockNetworkBackend


@pytest.fixture
def mock_transport() -> MockTransport:
    """Create an empty mock transport."""
    return MockTransport()


@pytest.fixture
def client(mock_transport: MockTransport) -> Client:
    """Create a client sending through the mock transport."""
    return Client(base_url="http://test.com", transport=mock_transport)


@pytest.fixture
def network_backend() -> MockNetworkBackend:
    """Create a mock network backend."""
    return MockNetworkBackend()


@pytest.fixture
def stream_client(network_backend: MockNetworkBackend) -> Client:
    """Create a client whose StreamTransport talks to the mock backend."""
    return Client(transport=StreamTransport(backend=network_backend))


@pytest.fixture
def http_response():
    """Build raw HTTP/1.1 response bytes."""
    def _create_response(
        status: int = 200,
        reason: str = "OK",
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
    ) -> bytes:
        lines = [f"HTTP/1.1 {status} {reason}"]
        all_headers = {"Content-Length": str(len(body))}
        all_headers.update(headers or {})
        lines.extend(f"{name}: {value}" for name, value in all_headers.items())
        return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1") + body
    return _create_response
