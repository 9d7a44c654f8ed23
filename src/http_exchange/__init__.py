"""
http_exchange - Async HTTP client

Requests and responses carry headers, cookies and content; pluggable
formatters and parsers convert between structured data and JSON,
URL-encoded, XML or multipart bodies, and transports perform the
exchange over h11.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

from .client import Client
from .events import EVENT_AFTER_SEND, EVENT_BEFORE_SEND, RequestEvent
from .exceptions import (
    ConnectionError,
    DataMergeError,
    HTTPClientError,
    MissingStatusCodeError,
    NoResponseAvailableError,
    ProtocolError,
    TimeoutError,
    TransportError,
    UnrecognizedFormatError,
)
from .formatters import (
    CurlFormatter,
    Formatter,
    JsonFormatter,
    UrlEncodedFormatter,
    XmlFormatter,
)
from .http_primitives import Cookie, CookieCollection, HeaderCollection
from .message import Message
from .parsers import JsonParser, Parser, UrlEncodedParser, XmlParser
from .request import Request
from .response import Response
from .transports import MockTransport, StreamTransport, Transport

__all__ = [
    "Client",
    "Message",
    "Request",
    "Response",
    "RequestEvent",
    "EVENT_BEFORE_SEND",
    "EVENT_AFTER_SEND",
    "HeaderCollection",
    "Cookie",
    "CookieCollection",
    "Formatter",
    "JsonFormatter",
    "UrlEncodedFormatter",
    "CurlFormatter",
    "XmlFormatter",
    "Parser",
    "JsonParser",
    "UrlEncodedParser",
    "XmlParser",
    "Transport",
    "StreamTransport",
    "MockTransport",
    "HTTPClientError",
    "UnrecognizedFormatError",
    "DataMergeError",
    "MissingStatusCodeError",
    "NoResponseAvailableError",
    "TransportError",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
]
