"""
Network transport built on NetworkBackend and HTTP11Connection.

StreamTransport opens one connection per exchange (and per redirect
hop), writes the request with h11 and reads the whole response.

Request options are split into two sections before use:

    {"timeout": 5, "followLocation": False, "sslVerifyPeer": False}

becomes

    {"http": {"timeout": 5, "follow_location": False},
     "ssl": {"verify_peer": False}}
"""

import asyncio
import logging
import ssl
import time
from typing import (
    IO,
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
)
from urllib.parse import urljoin

from ..encoding import build_query, camel_to_underscore
from ..exceptions import ConnectionError, ProtocolError, TimeoutError, TransportError
from ..http11 import HTTP11Connection, ResponseHead
from ..network.asyncio_backend import AsyncIONetworkBackend
from ..network.backend import NetworkBackend
from ..network.utils import create_ssl_context, format_host_header, parse_url
from ..response import Response
from .base import Transport

if TYPE_CHECKING:
    from ..request import Request

logger = logging.getLogger(__name__)

HeaderPairs = List[Tuple[str, str]]


class StreamTransport(Transport):
    """
    Default network transport.

    Honoured ``http`` options: ``timeout``, ``proxy``, ``user_agent``,
    ``follow_location``, ``max_redirects``, ``protocol_version`` and
    ``post_fields``. Honoured ``ssl`` options: ``verify_peer``,
    ``verify_peer_name``, ``cafile``, ``capath``, ``local_cert``,
    ``local_pk`` and ``passphrase``.
    """

    DEFAULT_TIMEOUT = 60.0
    DEFAULT_MAX_REDIRECTS = 20
    DEFAULT_USER_AGENT = "http-exchange"
    REDIRECT_CODES = (301, 302, 303, 307, 308)

    def __init__(self, backend: Optional[NetworkBackend] = None) -> None:
        """
        Args:
            backend: Network backend; AsyncIONetworkBackend by default
        """
        self._backend = backend or AsyncIONetworkBackend()

    @property
    def backend(self) -> NetworkBackend:
        return self._backend

    async def send(self, request: "Request") -> Response:
        request.before_send()
        request.prepare()

        url = request.full_url
        method = request.method.upper()
        content = request.content
        header_lines = request.compose_header_lines()

        context = self.compose_context_options(request.options)
        http_options = context.get("http", {})
        ssl_options = context.get("ssl", {})

        headers = self._parse_header_lines(header_lines)
        body = self._compose_body(content, http_options, headers)

        if request.client is not None:
            token = request.client.create_request_log_token(method, url, header_lines, content)
        else:
            token = f"{method} {url}"
        logger.info(token)

        timeout = http_options.get("timeout", self.DEFAULT_TIMEOUT)
        start_time = time.perf_counter()
        try:
            head, response_content = await self._exchange(
                method,
                url,
                headers,
                body,
                http_options,
                ssl_options,
                request.output_file,
            )
        except TransportError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"{method} {url} timed out after {time.perf_counter() - start_time:.3f}s")
            raise TimeoutError(f"Request to {url} timed out", timeout, e) from e
        except (OSError, ValueError, RuntimeError) as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ConnectionError(f"Unable to open URL: {url}: {e}", e) from e

        logger.debug(
            f"{method} {url} -> {head.status_code} ({time.perf_counter() - start_time:.3f}s)"
        )

        response_headers = [head.status_line] + head.header_lines()
        if request.client is not None:
            response = request.client.create_response(response_content, response_headers)
        else:
            response = Response(content=response_content, headers=response_headers)

        request.after_send(response)
        return response

    @staticmethod
    def compose_context_options(options: Mapping[Any, Any]) -> Dict[str, Dict[str, Any]]:
        """
        Split raw request options into ``http`` and ``ssl`` sections.

        ``ssl*`` keys go to the ``ssl`` section with the prefix dropped;
        all keys are converted from camelCase to underscore. Ready-made
        ``http``/``ssl`` mappings are merged into their section.
        """
        context: Dict[str, Dict[str, Any]] = {}
        for key, value in options.items():
            key = str(key)
            if key in ("http", "ssl") and isinstance(value, Mapping):
                context.setdefault(key, {}).update(value)
                continue
            section = "http"
            if key.startswith("ssl"):
                section = "ssl"
                key = key[3:]
            key = camel_to_underscore(key).lstrip("_")
            context.setdefault(section, {})[key] = value
        return context

    @staticmethod
    def _parse_header_lines(lines: List[str]) -> HeaderPairs:
        headers = []
        for line in lines:
            name, sep, value = line.partition(":")
            if sep:
                headers.append((name.strip(), value.strip()))
        return headers

    def _compose_body(
        self,
        content: Any,
        http_options: Mapping[str, Any],
        headers: HeaderPairs,
    ) -> Optional[bytes]:
        if content is None and http_options.get("post_fields") is not None:
            fields = http_options["post_fields"]
            content = fields if isinstance(fields, (str, bytes)) else build_query(fields)
            if not self._has_header(headers, "content-type"):
                headers.append(("Content-Type", "application/x-www-form-urlencoded"))

        if content is None:
            return None
        if isinstance(content, str):
            content = content.encode("utf-8")
        body = bytes(content)

        headers[:] = [(n, v) for n, v in headers if n.lower() != "content-length"]
        headers.append(("Content-Length", str(len(body))))
        return body

    @staticmethod
    def _has_header(headers: HeaderPairs, name: str) -> bool:
        return any(n.lower() == name for n, _ in headers)

    async def _exchange(
        self,
        method: str,
        url: str,
        headers: HeaderPairs,
        body: Optional[bytes],
        http_options: Mapping[str, Any],
        ssl_options: Mapping[str, Any],
        sink: Optional[IO[bytes]],
    ) -> Tuple[ResponseHead, Optional[bytes]]:
        """Run the exchange, following redirects; returns the final hop."""
        follow_location = bool(http_options.get("follow_location", True))
        max_redirects = int(http_options.get("max_redirects", self.DEFAULT_MAX_REDIRECTS))
        timeout = http_options.get("timeout", self.DEFAULT_TIMEOUT)

        protocol_version = str(http_options.get("protocol_version", "1.1"))
        if protocol_version != "1.1":
            logger.warning(f"HTTP/{protocol_version} is not supported, using HTTP/1.1")

        redirects = 0
        while True:
            connection = await self._open_connection(url, http_options, ssl_options, timeout)
            try:
                head = await asyncio.wait_for(
                    self._send_and_receive_head(connection, method, url, headers, body, http_options),
                    timeout=timeout,
                )
                location = self._get_location(head) if follow_location else None
                if location is None:
                    content = await asyncio.wait_for(
                        connection.receive_body(sink), timeout=timeout
                    )
                    return head, (None if sink is not None else content)
                # Redirect bodies are discarded.
                await asyncio.wait_for(connection.receive_body(), timeout=timeout)
            finally:
                await connection.close()

            redirects += 1
            if redirects > max_redirects:
                raise ProtocolError(f"Too many redirects (max {max_redirects})")

            next_url = urljoin(url, location)
            logger.debug(f"Following redirect {head.status_code} to {next_url}")
            if head.status_code == 303 or (
                head.status_code in (301, 302) and method not in ("GET", "HEAD")
            ):
                method = "GET"
                body = None
                headers = [
                    (n, v) for n, v in headers
                    if n.lower() not in ("content-length", "content-type")
                ]
            headers = [(n, v) for n, v in headers if n.lower() != "host"]
            url = next_url

    def _get_location(self, head: ResponseHead) -> Optional[str]:
        if head.status_code not in self.REDIRECT_CODES:
            return None
        for name, value in head.headers:
            if name.lower() == "location":
                return value
        return None

    async def _open_connection(
        self,
        url: str,
        http_options: Mapping[str, Any],
        ssl_options: Mapping[str, Any],
        timeout: Optional[float],
    ) -> HTTP11Connection:
        scheme, host, port, _ = parse_url(url)
        if scheme not in ("http", "https"):
            raise ValueError(f"Unsupported URL scheme '{scheme}'")

        proxy = http_options.get("proxy")
        if proxy:
            _, proxy_host, proxy_port, _ = parse_url(str(proxy))
            stream = await self._backend.connect_tcp(proxy_host, proxy_port, timeout)
        else:
            stream = await self._backend.connect_tcp(host, port, timeout)

        try:
            if scheme == "https":
                if proxy:
                    tunnel = HTTP11Connection(stream)
                    await asyncio.wait_for(tunnel.open_tunnel(host, port), timeout=timeout)
                stream = await self._backend.connect_tls(
                    stream,
                    host,
                    port,
                    timeout=timeout,
                    ssl_context=self._create_ssl_context(ssl_options),
                )
        except BaseException:
            # The caller only closes connections it gets back.
            await stream.aclose()
            raise
        return HTTP11Connection(stream)

    @staticmethod
    def _create_ssl_context(ssl_options: Mapping[str, Any]) -> ssl.SSLContext:
        return create_ssl_context(
            verify_peer=bool(ssl_options.get("verify_peer", True)),
            verify_peer_name=bool(ssl_options.get("verify_peer_name", True)),
            cafile=ssl_options.get("cafile"),
            capath=ssl_options.get("capath"),
            cert_file=ssl_options.get("local_cert"),
            key_file=ssl_options.get("local_pk"),
            password=ssl_options.get("passphrase"),
        )

    async def _send_and_receive_head(
        self,
        connection: HTTP11Connection,
        method: str,
        url: str,
        headers: HeaderPairs,
        body: Optional[bytes],
        http_options: Mapping[str, Any],
    ) -> ResponseHead:
        scheme, host, port, target = parse_url(url)
        if http_options.get("proxy") and scheme == "http":
            # Plain HTTP through a proxy uses the absolute form.
            target = url.split("#", 1)[0]

        headers = list(headers)
        if not self._has_header(headers, "host"):
            headers.insert(0, ("Host", format_host_header(host, port, scheme)))
        if not self._has_header(headers, "user-agent"):
            headers.append(("User-Agent", http_options.get("user_agent") or self.DEFAULT_USER_AGENT))
        if not self._has_header(headers, "connection"):
            headers.append(("Connection", "close"))

        await connection.send_request(method, target, headers, body)
        return await connection.receive_response()
