"""
Request formatters.

A formatter turns the structured data of a request into wire content,
setting whatever headers the representation needs. Formatters are
stateless and safe to share between requests.
"""

import json
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from .encoding import RFC1738, RFC3986, build_query, scalar_to_str
from .exceptions import UnrecognizedFormatError
from .http_primitives import (
    FORMAT_CURL,
    FORMAT_JSON,
    FORMAT_RAW_URLENCODED,
    FORMAT_URLENCODED,
    FORMAT_XML,
)

if TYPE_CHECKING:
    from .request import Request


class Formatter(ABC):
    """Interface for request formatters."""

    @abstractmethod
    def format(self, request: "Request") -> "Request":
        """
        Format the given request in place.

        Args:
            request: Request whose data should become content

        Returns:
            The same request instance
        """
        pass


class JsonFormatter(Formatter):
    """Formats request data as JSON."""

    DEFAULT_ENCODE_OPTIONS = {"ensure_ascii": False, "separators": (",", ":")}

    def __init__(self, **encode_options: Any) -> None:
        """
        Args:
            **encode_options: Keyword arguments for ``json.dumps``
        """
        self.encode_options = {**self.DEFAULT_ENCODE_OPTIONS, **encode_options}

    def format(self, request: "Request") -> "Request":
        request.headers.set("Content-Type", "application/json; charset=UTF-8")

        if request.data is not None:
            request.set_content(json.dumps(request.data, **self.encode_options))

        return request


class UrlEncodedFormatter(Formatter):
    """
    Formats request data as ``application/x-www-form-urlencoded``.

    For GET requests the encoded data is appended to the full URL
    instead of becoming the body.
    """

    def __init__(self, encoding_type: str = RFC1738, charset: Optional[str] = "UTF-8") -> None:
        """
        Args:
            encoding_type: RFC1738 (spaces as ``+``) or RFC3986 (``%20``)
            charset: Charset announced in Content-Type, omitted if None
        """
        self.encoding_type = encoding_type
        self.charset = charset

    def format(self, request: "Request") -> "Request":
        content = None
        data = request.data
        if data is not None:
            if not isinstance(data, (Mapping, list, tuple)):
                data = [data]
            content = build_query(data, self.encoding_type)

        if request.method.upper() == "GET":
            if content:
                request.set_full_url(None)
                url = request.full_url
                url += "&" if "?" in url else "?"
                url += content
                request.set_full_url(url)
            return request

        charset = f"; charset={self.charset}" if self.charset else ""
        request.headers.set("Content-Type", "application/x-www-form-urlencoded" + charset)

        if content is not None:
            request.set_content(content)

        if not content and "infile" not in request.options:
            request.headers.set("Content-Length", "0")

        return request


class CurlFormatter(UrlEncodedFormatter):
    """
    Hands form data to the transport instead of building a body.

    GET requests are formatted like ``urlencoded``. For other methods the
    data mapping is passed through the ``postFields`` option and the
    transport encodes it.
    """

    def format(self, request: "Request") -> "Request":
        if request.method.upper() == "GET":
            return super().format(request)

        data = request.data
        if data is not None:
            options = dict(request.options)
            options["postFields"] = data
            request.set_options(options)
        return request


class XmlFormatter(Formatter):
    """Formats request data as an XML document."""

    def __init__(
        self,
        content_type: str = "application/xml",
        version: str = "1.0",
        encoding: str = "UTF-8",
        root_tag: str = "request",
        item_tag: str = "item",
    ) -> None:
        """
        Args:
            content_type: Content-Type announced for the document
            version: XML version of the declaration
            encoding: Document encoding and announced charset
            root_tag: Name of the root element
            item_tag: Element name used for sequence items and integer keys
        """
        self.content_type = content_type
        self.version = version
        self.encoding = encoding
        self.root_tag = root_tag
        self.item_tag = item_tag

    def format(self, request: "Request") -> "Request":
        request.headers.set("Content-Type", f"{self.content_type}; charset={self.encoding}")

        data = request.data
        if data is not None:
            if isinstance(data, ET.Element):
                root = data
            else:
                root = ET.Element(self.root_tag)
                self._build(root, data)
            body = ET.tostring(root, encoding="unicode")
            request.set_content(
                f'<?xml version="{self.version}" encoding="{self.encoding}"?>\n{body}\n'
            )

        return request

    def _build(self, element: ET.Element, data: Any) -> None:
        if isinstance(data, Mapping):
            items = data.items()
        elif isinstance(data, (list, tuple)):
            items = ((self.item_tag, value) for value in data)
        else:
            element.text = scalar_to_str(data)
            return

        for name, value in items:
            tag = self.item_tag if isinstance(name, int) else str(name)
            child = ET.SubElement(element, tag)
            if isinstance(value, ET.Element):
                child.append(value)
            else:
                self._build(child, value)


FormatterFactory = Callable[[], Formatter]

DEFAULT_FORMATTERS: Dict[str, FormatterFactory] = {
    FORMAT_JSON: JsonFormatter,
    FORMAT_URLENCODED: partial(UrlEncodedFormatter, encoding_type=RFC1738),
    FORMAT_RAW_URLENCODED: partial(UrlEncodedFormatter, encoding_type=RFC3986),
    FORMAT_XML: XmlFormatter,
    FORMAT_CURL: CurlFormatter,
}


def create_formatter(format: str) -> Formatter:
    """
    Create the default formatter for a format tag.

    Raises:
        UnrecognizedFormatError: If no default formatter exists
    """
    factory = DEFAULT_FORMATTERS.get(format)
    if factory is None:
        raise UnrecognizedFormatError(format)
    return factory()
