"""
Response parsers.

A parser turns the raw content of a response into structured data.
The ``curl`` format only exists on the outbound side and has no parser.
"""

import json
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Callable, Dict
from urllib.parse import parse_qsl

from .exceptions import UnrecognizedFormatError
from .http_primitives import (
    FORMAT_JSON,
    FORMAT_RAW_URLENCODED,
    FORMAT_URLENCODED,
    FORMAT_XML,
)

if TYPE_CHECKING:
    from .response import Response


class Parser(ABC):
    """Interface for response parsers."""

    @abstractmethod
    def parse(self, response: "Response") -> Any:
        """
        Parse the content of the given response.

        Args:
            response: Response holding raw content

        Returns:
            Structured data
        """
        pass


class JsonParser(Parser):
    """Parses JSON content."""

    def __init__(self, as_dict: bool = True) -> None:
        """
        Args:
            as_dict: Decode objects as dicts; SimpleNamespace otherwise
        """
        self.as_dict = as_dict

    def parse(self, response: "Response") -> Any:
        object_hook = None if self.as_dict else (lambda obj: SimpleNamespace(**obj))
        return json.loads(response.text or "", object_hook=object_hook)


class UrlEncodedParser(Parser):
    """Parses ``name1=value1&name2=value2`` content into a flat dict."""

    def parse(self, response: "Response") -> Dict[str, str]:
        return dict(parse_qsl(response.text or "", keep_blank_values=True))


class XmlParser(Parser):
    """
    Parses XML content into nested dicts.

    The root element itself is dropped; its children become keys.
    Repeated child tags turn into lists, attributes are kept under
    ``@attributes`` and leaf elements become their text.
    """

    def parse(self, response: "Response") -> Any:
        content = response.content
        if not isinstance(content, (bytes, bytearray)):
            content = response.text or ""
        root = ET.fromstring(content)
        result = self._convert(root)
        return result if result != "" else {}

    def _convert(self, element: ET.Element) -> Any:
        children = list(element)
        if not children and not element.attrib:
            return (element.text or "").strip()

        result: Dict[str, Any] = {}
        if element.attrib:
            result["@attributes"] = dict(element.attrib)
        for child in children:
            value = self._convert(child)
            if child.tag in result:
                existing = result[child.tag]
                if not isinstance(existing, list):
                    result[child.tag] = [existing]
                result[child.tag].append(value)
            else:
                result[child.tag] = value
        if not children and element.text and element.text.strip():
            result["0"] = element.text.strip()
        return result


ParserFactory = Callable[[], Parser]

DEFAULT_PARSERS: Dict[str, ParserFactory] = {
    FORMAT_JSON: JsonParser,
    FORMAT_URLENCODED: UrlEncodedParser,
    FORMAT_RAW_URLENCODED: UrlEncodedParser,
    FORMAT_XML: XmlParser,
}


def create_parser(format: str) -> Parser:
    """
    Create the default parser for a format tag.

    Raises:
        UnrecognizedFormatError: If no default parser exists
    """
    factory = DEFAULT_PARSERS.get(format)
    if factory is None:
        raise UnrecognizedFormatError(format)
    return factory()
