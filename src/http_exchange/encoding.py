"""
Encoding helpers shared by messages, formatters and transports.

Query strings are built the way HTML forms submit nested values:
``{"a": {"b": 1}, "c": [1, 2]}`` becomes ``a[b]=1&c[0]=1&c[1]=2``.
"""

import re
from functools import partial
from typing import Any, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import quote, quote_plus

# Spaces as "+", the application/x-www-form-urlencoded media type.
RFC1738 = "rfc1738"
# Spaces as "%20", required by OAuth and OpenID.
RFC3986 = "rfc3986"


def scalar_to_str(value: Any) -> str:
    """Convert a leaf value to its form representation."""
    if value is True:
        return "1"
    if value is False:
        return "0"
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def flatten_form_data(data: Any, base_key: str = "") -> List[Tuple[str, Any]]:
    """
    Flatten nested mappings and sequences into ``parent[child]`` pairs.

    Args:
        data: Mapping, list or tuple to flatten
        base_key: Key prefix of the enclosing level

    Returns:
        List of (name, leaf value) pairs in iteration order
    """
    result: List[Tuple[str, Any]] = []
    for key, value in _iter_items(data):
        name = f"{base_key}[{key}]" if base_key else str(key)
        if isinstance(value, (Mapping, list, tuple)):
            result.extend(flatten_form_data(value, name))
        else:
            result.append((name, value))
    return result


def _iter_items(data: Any) -> Iterator[Tuple[Any, Any]]:
    if isinstance(data, Mapping):
        return iter(data.items())
    if isinstance(data, (list, tuple)):
        return iter(enumerate(data))
    raise TypeError(f"Cannot build form inputs from {type(data).__name__}")


def build_query(data: Any, encoding_type: str = RFC1738) -> str:
    """
    Build a URL-encoded query string from a (possibly nested) mapping.

    ``None`` values are skipped, booleans become ``1``/``0``.

    Args:
        data: Mapping or sequence of values
        encoding_type: RFC1738 (spaces as ``+``) or RFC3986 (``%20``)

    Returns:
        Encoded query string, empty when there is nothing to encode
    """
    if encoding_type == RFC3986:
        encode = partial(quote, safe="-_.~")
    else:
        encode = partial(quote_plus, safe="-_.")

    pairs = []
    for name, value in flatten_form_data(data):
        if value is None:
            continue
        pairs.append(f"{encode(name)}={encode(scalar_to_str(value))}")
    return "&".join(pairs)


def camel_to_underscore(name: str) -> str:
    """Convert ``followLocation`` into ``follow_location``."""
    return re.sub(r"(?<=\w)([A-Z])", r"_\1", name).lower()


def truncate(text: str, length: int, suffix: str = "...") -> str:
    """Truncate text to ``length`` characters, appending ``suffix`` if cut."""
    if len(text) <= length:
        return text
    return text[:length] + suffix


def decode_content(content: Any, charset: Optional[str] = None) -> Optional[str]:
    """Return content as text, decoding bytes with the given charset."""
    if content is None or isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray)):
        try:
            return bytes(content).decode(charset or "utf-8", errors="replace")
        except LookupError:
            return bytes(content).decode("utf-8", errors="replace")
    return str(content)
