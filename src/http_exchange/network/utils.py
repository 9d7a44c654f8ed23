"""
Network utilities for http_exchange.

URL splitting, Host header formatting and SSL context setup shared by
the transports.
"""

import socket
import ssl
from typing import Optional, Tuple
from urllib.parse import urlparse


def create_ssl_context(
    verify_peer: bool = True,
    verify_peer_name: bool = True,
    cafile: Optional[str] = None,
    capath: Optional[str] = None,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    password: Optional[str] = None,
) -> ssl.SSLContext:
    """
    Create an SSL context for client connections.

    Args:
        verify_peer: Whether to verify the server certificate
        verify_peer_name: Whether to verify the certificate matches the host
        cafile: CA bundle file used for verification
        capath: Directory of CA certificates used for verification
        cert_file: Client certificate file
        key_file: Client private key file
        password: Passphrase of the client private key

    Raises:
        ssl.SSLError: If certificates cannot be loaded
    """
    context = ssl.create_default_context(cafile=cafile, capath=capath)

    if not verify_peer:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif not verify_peer_name:
        context.check_hostname = False

    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    if cert_file:
        context.load_cert_chain(cert_file, key_file, password)

    return context


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Parse URL into components.

    Returns:
        Tuple of (scheme, host, port, target); the fragment is dropped

    Raises:
        ValueError: If URL has no host or an invalid port
    """
    parsed = urlparse(url)

    scheme = (parsed.scheme or "http").lower()

    host = parsed.hostname or ""
    if not host:
        raise ValueError(f"No hostname found in URL '{url}'")

    port = parsed.port
    if port is None:
        port = 443 if scheme == "https" else 80

    target = parsed.path or "/"
    if parsed.query:
        target += "?" + parsed.query

    return scheme, host, port, target


def is_ipv6_address(host: str) -> bool:
    try:
        socket.inet_pton(socket.AF_INET6, host)
        return True
    except OSError:
        return False


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format host header for HTTP requests.

    The port is omitted when it is the default one for the scheme.
    """
    if is_ipv6_address(host):
        host = f"[{host}]"
    if (scheme == "https" and port == 443) or (scheme == "http" and port == 80):
        return host
    return f"{host}:{port}"
