"""Tests for netstack.http.url -- parsing, base-URL resolution, query encoding."""

from __future__ import annotations

import httpx
import pytest

from netstack.exceptions import InvalidURL
from netstack.http.url import as_url, based_at, parameter_encoded


class TestAsURL:
    def test_parses_absolute(self) -> None:
        url = as_url("https://api.example.com/objects")
        assert url.host == "api.example.com"
        assert url.path == "/objects"

    def test_parses_relative(self) -> None:
        url = as_url("/objects")
        assert url.scheme == ""
        assert url.path == "/objects"

    def test_passes_httpx_url_through(self) -> None:
        original = httpx.URL("https://example.com")
        assert as_url(original) is original

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_rejects_empty_or_non_string(self, value: object) -> None:
        with pytest.raises(InvalidURL) as exc_info:
            as_url(value)  # type: ignore[arg-type]
        assert exc_info.value.input == value

    def test_rejects_unparseable(self) -> None:
        with pytest.raises(InvalidURL):
            as_url("http://example.com:notaport/")


class TestBasedAt:
    def test_single_slash_between_base_and_path(self) -> None:
        url = based_at(httpx.URL("/objects"), httpx.URL("https://api.example.com/"))
        assert str(url) == "https://api.example.com/objects"

    def test_base_without_trailing_slash(self) -> None:
        url = based_at(httpx.URL("objects"), httpx.URL("https://api.example.com"))
        assert str(url) == "https://api.example.com/objects"

    def test_base_path_is_prefixed(self) -> None:
        url = based_at(httpx.URL("/objects"), httpx.URL("https://api.example.com/v1/"))
        assert str(url) == "https://api.example.com/v1/objects"

    def test_keeps_port_and_query(self) -> None:
        url = based_at(httpx.URL("/objects?page=2"), httpx.URL("http://localhost:8080"))
        assert str(url) == "http://localhost:8080/objects?page=2"

    def test_absolute_url_unchanged(self) -> None:
        absolute = httpx.URL("https://other.example.com/x")
        assert based_at(absolute, httpx.URL("https://api.example.com")) is absolute

    def test_no_base_unchanged(self) -> None:
        relative = httpx.URL("/objects")
        assert based_at(relative, None) is relative


class TestParameterEncoded:
    def test_values_are_stringified(self) -> None:
        url = parameter_encoded(httpx.URL("/object"), {"id": 7, "full": True})
        assert url.params["id"] == "7"
        assert url.params["full"] == "True"
        assert url.path == "/object"

    def test_replaces_existing_query(self) -> None:
        url = parameter_encoded(httpx.URL("https://api.example.com/o?old=1"), {"new": "2"})
        assert "old" not in url.params
        assert url.params["new"] == "2"
