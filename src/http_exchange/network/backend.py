"""
Network backend interface for http_exchange.

A NetworkBackend opens TCP connections and upgrades them to TLS.
StreamTransport only talks to this interface, which lets tests swap
in MockNetworkBackend.
"""

import ssl
from abc import ABC, abstractmethod
from typing import Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """Interface for network backend implementations."""

    @abstractmethod
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Connect to a TCP endpoint.

        Args:
            host: The hostname or IP address to connect to.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for the connection.

        Raises:
            OSError: If the connection fails.
            asyncio.TimeoutError: If the connection times out.
        """
        pass

    @abstractmethod
    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> NetworkStream:
        """
        Upgrade a TCP stream to TLS.

        Args:
            stream: The connected TCP stream to upgrade.
            host: The hostname sent via SNI and used for certificate checks.
            port: The port number (used for logging).
            timeout: Optional timeout in seconds for the TLS handshake.
            ssl_context: Context to use; a verifying default otherwise.

        Raises:
            OSError: If the TLS handshake fails.
            asyncio.TimeoutError: If the handshake times out.
        """
        pass
