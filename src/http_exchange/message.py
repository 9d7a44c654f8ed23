"""
HTTP message base class.

Message holds everything requests and responses have in common:
headers, cookies, the format tag, raw content and structured data.
Content is what travels on the wire; data is its structured form.
Formatters derive content from data, parsers derive data from content.
"""

import re
from typing import (
    TYPE_CHECKING,
    Any,
    Iterable,
    List,
    Mapping,
    Optional,
    Union,
)

from typing_extensions import Self

from .encoding import decode_content
from .exceptions import DataMergeError
from .http_primitives import (
    FORMAT_URLENCODED,
    Cookie,
    CookieCollection,
    HeaderCollection,
)

if TYPE_CHECKING:
    from .client import Client

STATUS_CODE_HEADER = "http-code"

_STATUS_LINE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})\b", re.IGNORECASE)
_CHARSET = re.compile(r"charset\s*=\s*\"?([\w.:-]+)", re.IGNORECASE)

HeadersInput = Union[HeaderCollection, Mapping[Any, Any], Iterable[str], None]
CookiesInput = Union[CookieCollection, Iterable[Union[Cookie, Mapping[str, Any]]], None]


class Message:
    """
    Base HTTP message.

    Content may be ``str`` or ``bytes``; Request additionally uses a dict
    of staged multipart parts. Data is usually a mapping but any value
    the active formatter understands is accepted.
    """

    def __init__(self, client: Optional["Client"] = None, **config: Any) -> None:
        self.client = client
        self._headers: Optional[HeaderCollection] = None
        self._cookies: Optional[CookieCollection] = None
        self._format: Optional[str] = None
        self._content: Any = None
        self._data: Any = None
        self.configure(**config)

    def configure(self, **config: Any) -> Self:
        """Apply attributes through their ``set_*`` methods."""
        for name, value in config.items():
            setter = getattr(self, f"set_{name}", None)
            if not callable(setter):
                raise TypeError(
                    f"{type(self).__name__} has no configurable attribute '{name}'"
                )
            setter(value)
        return self

    # Headers

    @property
    def headers(self) -> HeaderCollection:
        if self._headers is None:
            self._headers = HeaderCollection()
        return self._headers

    def set_headers(self, headers: HeadersInput) -> Self:
        """
        Replace all headers.

        Args:
            headers: Mapping of name to value(s), HeaderCollection, or a
                sequence of raw ``"Name: value"`` lines. A raw status line
                (``HTTP/1.1 200 OK``) is stored as the ``http-code`` header.
        """
        self.headers.remove_all()
        return self.add_headers(headers)

    def add_headers(self, headers: HeadersInput) -> Self:
        """Merge headers into the existing ones, keeping previous values."""
        collection = self.headers
        if headers is None:
            pass
        elif isinstance(headers, HeaderCollection):
            for name, values in headers:
                collection.add(name, values)
        elif isinstance(headers, Mapping):
            for name, value in headers.items():
                if isinstance(name, int):
                    self._add_raw_header(value)
                else:
                    collection.add(name, value)
        elif isinstance(headers, (str, bytes)):
            self._add_raw_header(headers)
        else:
            for line in headers:
                self._add_raw_header(line)

        self._headers_changed()
        return self

    def _add_raw_header(self, line: Union[str, bytes]) -> None:
        if isinstance(line, bytes):
            line = line.decode("latin-1")
        line = line.strip()
        match = _STATUS_LINE.match(line)
        if match:
            self.headers.add(STATUS_CODE_HEADER, match.group(1))
            return
        name, sep, value = line.partition(":")
        if sep and name.strip():
            self.headers.add(name.strip(), value.strip())

    def _headers_changed(self) -> None:
        """Hook for subclasses caching values derived from headers."""

    def has_headers(self) -> bool:
        return self._headers is not None and len(self._headers) > 0

    # Cookies

    @property
    def cookies(self) -> CookieCollection:
        if self._cookies is None:
            self._cookies = CookieCollection()
        return self._cookies

    def set_cookies(self, cookies: CookiesInput) -> Self:
        """Replace all cookies."""
        self.cookies.remove_all()
        return self.add_cookies(cookies)

    def add_cookies(self, cookies: CookiesInput) -> Self:
        """
        Merge cookies by name.

        Descriptors are Cookie instances or mappings such as
        ``{"name": "sid", "value": "1", "domain": "example.com"}``;
        attributes of a later descriptor override same-name ones.
        """
        collection = self.cookies
        for descriptor in cookies or ():
            if isinstance(descriptor, Cookie):
                collection.add(descriptor)
                continue
            existing = collection.get(descriptor.get("name", ""))
            if existing is not None:
                existing.update(descriptor)
            else:
                collection.add(Cookie.from_mapping(descriptor))
        return self

    def has_cookies(self) -> bool:
        return self._cookies is not None and len(self._cookies) > 0

    # Format

    @property
    def format(self) -> Optional[str]:
        if self._format is None:
            return self._default_format()
        return self._format

    @format.setter
    def format(self, value: Optional[str]) -> None:
        self.set_format(value)

    def set_format(self, format: Optional[str]) -> Self:
        self._format = format
        return self

    def _default_format(self) -> Optional[str]:
        return FORMAT_URLENCODED

    # Content and data

    @property
    def content(self) -> Any:
        return self._content

    @content.setter
    def content(self, value: Any) -> None:
        self.set_content(value)

    def set_content(self, content: Any) -> Self:
        self._content = content
        return self

    @property
    def charset(self) -> Optional[str]:
        """Charset declared by the last Content-Type header, if any."""
        for value in reversed(self.headers.get_all("content-type")):
            match = _CHARSET.search(value)
            if match:
                return match.group(1)
        return None

    @property
    def text(self) -> Optional[str]:
        """Content decoded to text using the declared charset."""
        if isinstance(self._content, dict):
            return None
        return decode_content(self._content, self.charset)

    @property
    def data(self) -> Any:
        return self._data

    @data.setter
    def data(self, value: Any) -> None:
        self.set_data(value)

    def set_data(self, data: Any) -> Self:
        self._data = data
        return self

    def add_data(self, data: Mapping[Any, Any]) -> Self:
        """
        Merge a mapping into the existing data.

        Raises:
            DataMergeError: If existing data is set but is not a mapping
        """
        existing = self.data
        if existing is None:
            self._data = dict(data)
        elif not isinstance(existing, Mapping):
            raise DataMergeError()
        else:
            self._data = {**existing, **data}
        return self

    # Rendering

    def compose_header_lines(self) -> List[str]:
        """Compose ``Name: value`` lines, one per header value."""
        lines = []
        for name, values in self.headers:
            name = "-".join(part.capitalize() for part in name.split("-"))
            for value in values:
                lines.append(f"{name}: {value}")
        return lines

    def to_string(self) -> str:
        """Render the message the way it looks on the wire."""
        result = ""
        if self.has_headers():
            result = "\n".join(self.compose_header_lines())

        content = self.text
        if content is not None:
            if result:
                result += "\n\n"
            result += content
        return result

    def __str__(self) -> str:
        return self.to_string()
