"""
Network backend components for http_exchange.

This module provides the low-level networking abstractions used by
StreamTransport: streams, backends and their helpers.
"""

from .asyncio_backend import AsyncIONetworkBackend, AsyncIONetworkStream
from .backend import NetworkBackend
from .mock import MockNetworkBackend, MockNetworkStream
from .stream import NetworkStream
from .utils import (
    create_ssl_context,
    format_host_header,
    is_ipv6_address,
    parse_url,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncIONetworkBackend",
    "AsyncIONetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "create_ssl_context",
    "format_host_header",
    "is_ipv6_address",
    "parse_url",
]
