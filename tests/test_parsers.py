"""
Tests for response parsers, including round trips with formatters.
"""

import pytest

from http_exchange import Request, Response
from http_exchange.exceptions import UnrecognizedFormatError
from http_exchange.formatters import JsonFormatter, UrlEncodedFormatter
from http_exchange.parsers import JsonParser, UrlEncodedParser, XmlParser, create_parser


class TestJsonParser:
    """Test JsonParser."""

    def test_parse(self) -> None:
        response = Response(content='{"name1":"value1","nested":{"a":[1,2]}}')
        assert JsonParser().parse(response) == {"name1": "value1", "nested": {"a": [1, 2]}}

    def test_parse_preserves_order(self) -> None:
        response = Response(content='{"b":1,"a":2}')
        assert list(JsonParser().parse(response)) == ["b", "a"]

    def test_parse_as_objects(self) -> None:
        response = Response(content='{"user":{"name":"x"}}')
        data = JsonParser(as_dict=False).parse(response)
        assert data.user.name == "x"

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError):
            JsonParser().parse(Response(content="{broken"))


class TestUrlEncodedParser:
    """Test UrlEncodedParser."""

    def test_parse(self) -> None:
        response = Response(content="name1=value1&name2=value+2&empty=")
        assert UrlEncodedParser().parse(response) == {
            "name1": "value1",
            "name2": "value 2",
            "empty": "",
        }


class TestXmlParser:
    """Test XmlParser."""

    def test_parse(self) -> None:
        response = Response(
            content=(
                b'<?xml version="1.0" encoding="utf-8"?>'
                b"<main><name1>value1</name1><name2>value2</name2></main>"
            )
        )
        assert XmlParser().parse(response) == {"name1": "value1", "name2": "value2"}

    def test_repeated_tags_and_attributes(self) -> None:
        response = Response(content='<root><item id="1">a</item><item id="2"/></root>')
        assert XmlParser().parse(response) == {
            "item": [
                {"@attributes": {"id": "1"}, "0": "a"},
                {"@attributes": {"id": "2"}},
            ]
        }

    def test_nested(self) -> None:
        response = Response(content="<root><user><name> x </name></user></root>")
        assert XmlParser().parse(response) == {"user": {"name": "x"}}

    def test_empty_root(self) -> None:
        assert XmlParser().parse(Response(content="<root/>")) == {}


class TestParserRegistry:
    """Test the default parser table."""

    def test_curl_has_no_parser(self) -> None:
        with pytest.raises(UnrecognizedFormatError, match="'curl'"):
            create_parser("curl")

    def test_raw_urlencoded_parser(self) -> None:
        assert isinstance(create_parser("raw-urlencoded"), UrlEncodedParser)


class TestRoundTrip:
    """Formatting then parsing returns the original mapping."""

    def test_json(self) -> None:
        data = {"name": "value", "number": 1, "list": [1, "two"], "nested": {"a": None}}
        request = Request(method="POST", data=data)
        JsonFormatter().format(request)
        assert JsonParser().parse(Response(content=request.content)) == data

    def test_urlencoded(self) -> None:
        data = {"name": "value with spaces", "symbols": "a&b=c"}
        request = Request(method="POST", data=data)
        UrlEncodedFormatter().format(request)
        assert UrlEncodedParser().parse(Response(content=request.content)) == data
