"""
HTTP response message.

A Response is built by a transport from the raw status line, header
lines and body. Everything else is derived on demand: the status code
from the synthetic ``http-code`` header, the format from headers or
content sniffing, cookies from ``Set-Cookie`` headers and data from
the parser matching the format.
"""

import json
import re
from typing import Any, Optional

from typing_extensions import Self

from .encoding import decode_content
from .exceptions import MissingStatusCodeError
from .http_primitives import (
    FORMAT_JSON,
    FORMAT_URLENCODED,
    FORMAT_XML,
    Cookie,
    CookieCollection,
    HeaderCollection,
)
from .message import STATUS_CODE_HEADER, Message
from .parsers import Parser, create_parser

_URLENCODED_CONTENT = re.compile(r"^[^=&]+=[^=&]+(&[^=&]+=[^=&]+)*$")
_XML_CONTENT = re.compile(r"^\s*<\?xml[^>]+>", re.IGNORECASE)
_HTML_CONTENT = re.compile(r"<!DOCTYPE\s+html|<html[\s>]", re.IGNORECASE)


def detect_format_by_headers(headers: HeaderCollection) -> Optional[str]:
    """
    Detect the format from Content-Type header values.

    The last Content-Type value that names a known format wins.
    """
    for content_type in reversed(headers.get_all("content-type")):
        content_type = content_type.lower()
        if "json" in content_type:
            return FORMAT_JSON
        if "urlencoded" in content_type:
            return FORMAT_URLENCODED
        if "xml" in content_type:
            return FORMAT_XML
    return None


def detect_format_by_content(content: Any) -> Optional[str]:
    """
    Detect the format by sniffing raw content.

    HTML documents are never reported as XML.
    """
    text = decode_content(content)
    if not text:
        return None

    try:
        json.loads(text)
    except ValueError:
        pass
    else:
        return FORMAT_JSON

    if _HTML_CONTENT.search(text):
        return None
    if _XML_CONTENT.match(text):
        return FORMAT_XML
    if _URLENCODED_CONTENT.match(text.strip()):
        return FORMAT_URLENCODED
    return None


def detect_format(headers: HeaderCollection, content: Any) -> Optional[str]:
    """Detect the format; headers take precedence over content sniffing."""
    return detect_format_by_headers(headers) or detect_format_by_content(content)


class Response(Message):
    """HTTP response."""

    def __init__(self, client: Any = None, **config: Any) -> None:
        self._data_parsed = False
        super().__init__(client, **config)

    def _default_format(self) -> Optional[str]:
        return detect_format(self.headers, self._content)

    def _headers_changed(self) -> None:
        self._cookies = None

    @property
    def cookies(self) -> CookieCollection:
        """Cookies sent by the server through ``Set-Cookie`` headers."""
        if self._cookies is None:
            self._cookies = CookieCollection()
            for line in self.headers.get_all("set-cookie"):
                cookie = Cookie.from_set_cookie(line)
                if cookie is not None:
                    self._cookies.add(cookie)
        return self._cookies

    @property
    def status_code(self) -> int:
        """
        Status code of the response.

        Raises:
            MissingStatusCodeError: If no status line was received
        """
        code = self.headers.get(STATUS_CODE_HEADER)
        if code is None:
            raise MissingStatusCodeError()
        return int(code)

    @property
    def is_ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status_code < 300

    def set_content(self, content: Any) -> Self:
        if self._data_parsed:
            self._data = None
            self._data_parsed = False
        return super().set_content(content)

    def set_data(self, data: Any) -> Self:
        self._data_parsed = False
        return super().set_data(data)

    @property
    def data(self) -> Any:
        """
        Structured data, parsed lazily from content.

        When no format can be resolved the raw content is returned.
        """
        if self._data is not None or self._data_parsed:
            return self._data

        content = self._content
        if content is None or len(content) == 0:
            return None

        format = self.format
        if format is None:
            return content

        self._data = self._get_parser(format).parse(self)
        self._data_parsed = True
        return self._data

    @data.setter
    def data(self, value: Any) -> None:
        self.set_data(value)

    def _get_parser(self, format: str) -> Parser:
        if self.client is not None:
            return self.client.get_parser(format)
        return create_parser(format)
