"""
Tests for encoding helpers.
"""

import pytest

from http_exchange.encoding import (
    RFC1738,
    RFC3986,
    build_query,
    camel_to_underscore,
    decode_content,
    flatten_form_data,
    scalar_to_str,
    truncate,
)


class TestBuildQuery:
    """Test query string building."""

    def test_flat_mapping(self) -> None:
        assert build_query({"name1": "value1", "name2": "value2"}) == (
            "name1=value1&name2=value2"
        )

    def test_space_encoding_variants(self) -> None:
        data = {"q": "a b"}
        assert build_query(data, RFC1738) == "q=a+b"
        assert build_query(data, RFC3986) == "q=a%20b"

    def test_slashes_are_encoded(self) -> None:
        data = {"path": "a/b~c-d_e.f"}
        assert build_query(data, RFC1738) == "path=a%2Fb~c-d_e.f"
        assert build_query(data, RFC3986) == "path=a%2Fb~c-d_e.f"

    def test_nested_values(self) -> None:
        query = build_query({"a": {"b": 1}, "c": [1, 2]})
        assert query == "a%5Bb%5D=1&c%5B0%5D=1&c%5B1%5D=2"

    def test_none_skipped_and_booleans(self) -> None:
        assert build_query({"a": None, "b": True, "c": False}) == "b=1&c=0"

    def test_empty(self) -> None:
        assert build_query({}) == ""


class TestHelpers:
    """Test small conversion helpers."""

    def test_flatten_form_data(self) -> None:
        assert flatten_form_data({"user": {"name": "x", "tags": ["a"]}}) == [
            ("user[name]", "x"),
            ("user[tags][0]", "a"),
        ]

    def test_flatten_rejects_scalars(self) -> None:
        with pytest.raises(TypeError):
            flatten_form_data("scalar")

    @pytest.mark.parametrize(
        "value,expected",
        [(True, "1"), (False, "0"), (None, ""), (b"x", "x"), (1.5, "1.5")],
    )
    def test_scalar_to_str(self, value: object, expected: str) -> None:
        assert scalar_to_str(value) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("followLocation", "follow_location"),
            ("VerifyPeer", "verify_peer"),
            ("timeout", "timeout"),
            ("local_cert", "local_cert"),
        ],
    )
    def test_camel_to_underscore(self, name: str, expected: str) -> None:
        assert camel_to_underscore(name) == expected

    def test_truncate(self) -> None:
        assert truncate("abcdef", 3) == "abc..."
        assert truncate("abc", 3) == "abc"

    def test_decode_content(self) -> None:
        assert decode_content(None) is None
        assert decode_content("text") == "text"
        assert decode_content("é".encode("latin-1"), "latin-1") == "é"
        assert decode_content(b"abc", "no-such-charset") == "abc"
