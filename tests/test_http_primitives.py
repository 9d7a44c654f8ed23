"""
Tests for header and cookie collections.
"""

from http_exchange.http_primitives import Cookie, CookieCollection, HeaderCollection


class TestHeaderCollection:
    """Test HeaderCollection."""

    def test_names_are_case_insensitive(self) -> None:
        headers = HeaderCollection()
        headers.set("Content-Type", "text/plain")
        assert headers.get("content-type") == "text/plain"
        assert headers.get("CONTENT-TYPE") == "text/plain"
        assert "Content-type" in headers

    def test_add_keeps_previous_values(self) -> None:
        headers = HeaderCollection()
        headers.add("Accept", "text/html")
        headers.add("accept", ["application/json", "*/*"])
        assert headers.get_all("Accept") == ["text/html", "application/json", "*/*"]
        assert headers.get("Accept") == "text/html"
        assert headers.get("Accept", first=False) == [
            "text/html",
            "application/json",
            "*/*",
        ]

    def test_set_replaces_values(self) -> None:
        headers = HeaderCollection({"X-Id": ["1", "2"]})
        headers.set("x-id", 3)
        assert headers.get_all("X-Id") == ["3"]

    def test_set_default(self) -> None:
        headers = HeaderCollection({"Host": "a.com"})
        headers.set_default("Host", "b.com")
        headers.set_default("Accept", "*/*")
        assert headers.get("host") == "a.com"
        assert headers.get("accept") == "*/*"

    def test_missing_header(self) -> None:
        headers = HeaderCollection()
        assert headers.get("X-Missing") is None
        assert headers.get("X-Missing", "default") == "default"
        assert headers.get_all("X-Missing") == []
        assert not headers.has("X-Missing")

    def test_remove(self) -> None:
        headers = HeaderCollection({"A": "1", "B": "2"})
        assert headers.remove("a") == ["1"]
        assert headers.remove("a") is None
        assert len(headers) == 1
        headers.remove_all()
        assert len(headers) == 0

    def test_bytes_names_and_values(self) -> None:
        headers = HeaderCollection()
        headers.add(b"Server", b"nginx")
        assert headers.get("server") == "nginx"

    def test_iteration_and_to_dict(self) -> None:
        headers = HeaderCollection({"A": "1", "B": ["2", "3"]})
        assert list(headers) == [("a", ["1"]), ("b", ["2", "3"])]
        assert headers.to_dict() == {"a": ["1"], "b": ["2", "3"]}


class TestCookie:
    """Test Cookie parsing."""

    def test_from_set_cookie(self) -> None:
        cookie = Cookie.from_set_cookie(
            "sid=abc%20def; Path=/app; Domain=example.com; Max-Age=3600; Secure; HttpOnly"
        )
        assert cookie is not None
        assert cookie.name == "sid"
        assert cookie.value == "abc def"
        assert cookie.path == "/app"
        assert cookie.domain == "example.com"
        assert cookie.max_age == 3600
        assert cookie.secure is True
        assert cookie.http_only is True

    def test_unknown_attributes_are_preserved(self) -> None:
        cookie = Cookie.from_set_cookie("id=1; Priority=High; Partitioned")
        assert cookie is not None
        assert cookie.attributes == {"priority": "High", "partitioned": True}

    def test_invalid_max_age(self) -> None:
        cookie = Cookie.from_set_cookie("id=1; Max-Age=soon")
        assert cookie is not None
        assert cookie.max_age is None
        assert cookie.attributes["max-age"] == "soon"

    def test_expires_and_same_site(self) -> None:
        cookie = Cookie.from_set_cookie(
            "id=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT; SameSite=Lax"
        )
        assert cookie is not None
        assert cookie.expires == "Wed, 21 Oct 2015 07:28:00 GMT"
        assert cookie.same_site == "Lax"

    def test_line_without_name(self) -> None:
        assert Cookie.from_set_cookie("garbage") is None
        assert Cookie.from_set_cookie("=value") is None

    def test_from_mapping_aliases(self) -> None:
        cookie = Cookie.from_mapping(
            {"name": "sid", "value": "1", "httpOnly": True, "maxAge": 10, "comment": "x"}
        )
        assert cookie.http_only is True
        assert cookie.max_age == 10
        assert cookie.attributes == {"comment": "x"}


class TestCookieCollection:
    """Test CookieCollection."""

    def test_add_replaces_same_name(self) -> None:
        cookies = CookieCollection([Cookie(name="a", value="1")])
        cookies.add(Cookie(name="a", value="2"))
        cookies.add(Cookie(name="b", value="3"))
        assert len(cookies) == 2
        assert cookies.get("a").value == "2"
        assert [cookie.name for cookie in cookies] == ["a", "b"]

    def test_remove(self) -> None:
        cookies = CookieCollection([Cookie(name="a"), Cookie(name="b")])
        assert cookies.remove("a").name == "a"
        assert "a" not in cookies
        assert cookies.has("b")
        cookies.remove_all()
        assert len(cookies) == 0
