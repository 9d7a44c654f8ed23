"""
HTTP primitives for http_exchange.

This module defines the format tags and the collections shared by
requests and responses: a case-insensitive multi-valued header collection
and a cookie collection keyed by cookie name.
"""

from dataclasses import dataclass, field, fields
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)
from urllib.parse import unquote

from typing_extensions import Self


# Format tags
FORMAT_JSON = "json"
FORMAT_URLENCODED = "urlencoded"
FORMAT_RAW_URLENCODED = "raw-urlencoded"
FORMAT_XML = "xml"
FORMAT_CURL = "curl"

HeaderValue = Union[str, bytes, int, float]
HeaderValues = Union[HeaderValue, Iterable[HeaderValue]]


def _to_str(value: HeaderValue) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _to_name(name: Union[str, bytes]) -> str:
    return _to_str(name).strip().lower()


class HeaderCollection:
    """
    Ordered multi-map of HTTP headers.

    Header names are case-insensitive and kept lower-cased; every name
    maps to a list of string values in the order they were added.
    """

    def __init__(self, headers: Optional[Mapping[str, HeaderValues]] = None) -> None:
        self._headers: Dict[str, List[str]] = {}
        if headers:
            for name, values in headers.items():
                self.add(name, values)

    def get(
        self,
        name: Union[str, bytes],
        default: Any = None,
        first: bool = True,
    ) -> Any:
        """
        Get a header value.

        Args:
            name: Header name (case-insensitive)
            default: Value returned when the header is absent
            first: Return only the first value instead of the whole list

        Returns:
            First value, list of values, or ``default``
        """
        values = self._headers.get(_to_name(name))
        if not values:
            return default
        return values[0] if first else list(values)

    def get_all(self, name: Union[str, bytes]) -> List[str]:
        """Get every value of a header, oldest first."""
        return list(self._headers.get(_to_name(name), []))

    def set(self, name: Union[str, bytes], value: HeaderValues) -> Self:
        """Replace all values of a header."""
        self._headers[_to_name(name)] = self._normalize(value)
        return self

    def add(self, name: Union[str, bytes], value: HeaderValues) -> Self:
        """Append value(s) to a header."""
        self._headers.setdefault(_to_name(name), []).extend(self._normalize(value))
        return self

    def set_default(self, name: Union[str, bytes], value: HeaderValues) -> Self:
        """Set a header only when it is not present yet."""
        if not self.has(name):
            self.set(name, value)
        return self

    def has(self, name: Union[str, bytes]) -> bool:
        return bool(self._headers.get(_to_name(name)))

    def remove(self, name: Union[str, bytes]) -> Optional[List[str]]:
        """Remove a header, returning its values if it existed."""
        return self._headers.pop(_to_name(name), None)

    def remove_all(self) -> None:
        self._headers.clear()

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: list(values) for name, values in self._headers.items()}

    @staticmethod
    def _normalize(value: HeaderValues) -> List[str]:
        if isinstance(value, (str, bytes, int, float)):
            return [_to_str(value)]
        return [_to_str(item) for item in value]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (str, bytes)) and self.has(name)

    def __iter__(self) -> Iterator[Tuple[str, List[str]]]:
        return ((name, list(values)) for name, values in self._headers.items())

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"HeaderCollection({self._headers!r})"


@dataclass
class Cookie:
    """
    A single HTTP cookie.

    Attributes that are not modelled explicitly (for example ``priority``
    or ``partitioned``) are preserved in ``attributes``.
    """

    name: str = ""
    value: str = ""
    domain: str = ""
    path: str = "/"
    expires: Optional[str] = None
    http_only: bool = False
    secure: bool = False
    max_age: Optional[int] = None
    same_site: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    _ATTRIBUTE_MAP = {
        "path": "path",
        "domain": "domain",
        "expires": "expires",
        "max-age": "max_age",
        "secure": "secure",
        "httponly": "http_only",
        "samesite": "same_site",
    }

    @classmethod
    def from_set_cookie(cls, line: str) -> Optional["Cookie"]:
        """
        Parse a single ``Set-Cookie`` header value.

        Args:
            line: Raw header value, e.g. ``"sid=abc; path=/; HttpOnly"``

        Returns:
            Parsed cookie, or None when the line carries no name
        """
        parts = [part.strip() for part in line.split(";")]
        if not parts or "=" not in parts[0]:
            return None

        name, _, value = parts[0].partition("=")
        name = name.strip()
        if not name:
            return None
        cookie = cls(name=name, value=unquote(value.strip()))

        for part in parts[1:]:
            if not part:
                continue
            key, sep, attr_value = part.partition("=")
            key = key.strip().lower()
            attr_value = attr_value.strip()
            attribute = cls._ATTRIBUTE_MAP.get(key)
            if attribute is None:
                cookie.attributes[key] = attr_value if sep else True
            elif attribute in ("secure", "http_only"):
                setattr(cookie, attribute, True)
            elif attribute == "max_age":
                try:
                    cookie.max_age = int(attr_value)
                except ValueError:
                    cookie.attributes[key] = attr_value
            else:
                setattr(cookie, attribute, attr_value)

        return cookie

    @classmethod
    def from_mapping(cls, descriptor: Mapping[str, Any]) -> "Cookie":
        """Create a cookie from a ``{name, value, domain, ...}`` mapping."""
        cookie = cls()
        cookie.update(descriptor)
        return cookie

    def update(self, descriptor: Mapping[str, Any]) -> None:
        """Apply attributes from a mapping; unknown keys go to ``attributes``."""
        known = {f.name for f in fields(self)}
        aliases = {"httpOnly": "http_only", "maxAge": "max_age", "sameSite": "same_site"}
        for key, value in descriptor.items():
            key = aliases.get(key, key)
            if key == "attributes":
                self.attributes.update(value)
            elif key in known:
                setattr(self, key, value)
            else:
                self.attributes[key] = value


class CookieCollection:
    """Collection of cookies keyed by name, in insertion order."""

    def __init__(self, cookies: Optional[Iterable[Cookie]] = None) -> None:
        self._cookies: Dict[str, Cookie] = {}
        for cookie in cookies or ():
            self.add(cookie)

    def add(self, cookie: Cookie) -> Self:
        """Add a cookie, replacing a cookie with the same name."""
        self._cookies[cookie.name] = cookie
        return self

    def get(self, name: str, default: Optional[Cookie] = None) -> Optional[Cookie]:
        return self._cookies.get(name, default)

    def has(self, name: str) -> bool:
        return name in self._cookies

    def remove(self, name: str) -> Optional[Cookie]:
        return self._cookies.pop(name, None)

    def remove_all(self) -> None:
        self._cookies.clear()

    def to_dict(self) -> Dict[str, Cookie]:
        return dict(self._cookies)

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies.values()))

    def __len__(self) -> int:
        return len(self._cookies)

    def __repr__(self) -> str:
        return f"CookieCollection({list(self._cookies)!r})"
