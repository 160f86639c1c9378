"""Tests for the request adapter."""

from __future__ import annotations

import uuid

import pytest

from netstack.exceptions import InvalidURL
from netstack.http.adapter import adapt
from netstack.http.request import OutboundRequest


BASE = "https://api.example.com/"


class TestURLResolution:
    def test_relative_path_joins_base(self) -> None:
        adapted = adapt(OutboundRequest.build("GET", "/objects"), BASE)
        assert adapted.url == "https://api.example.com/objects"

    def test_absolute_url_ignores_base(self) -> None:
        adapted = adapt(OutboundRequest.build("GET", "https://other.example.com/x"), BASE)
        assert adapted.url == "https://other.example.com/x"

    def test_relative_without_base_is_invalid(self) -> None:
        with pytest.raises(InvalidURL):
            adapt(OutboundRequest.build("GET", "/objects"))

    def test_original_request_untouched(self) -> None:
        original = OutboundRequest.build("GET", "/objects")
        adapt(original, BASE)
        assert original.url == "/objects"
        assert original.headers == ()


class TestContentType:
    def test_post_defaults_to_json(self) -> None:
        adapted = adapt(OutboundRequest.build("POST", "/object", content=b"{}"), BASE)
        assert adapted.header("Content-Type") == "application/json"

    def test_post_keeps_existing_content_type(self) -> None:
        request = OutboundRequest.build(
            "POST", "/object", headers={"content-type": "text/plain"}, content="hi"
        )
        adapted = adapt(request, BASE)
        assert adapted.header("Content-Type") == "text/plain"

    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    def test_other_methods_get_no_default(self, method: str) -> None:
        adapted = adapt(OutboundRequest.build(method, "/object"), BASE)
        assert adapted.header("Content-Type") is None


class TestRequestId:
    def test_fresh_uuid_per_call(self) -> None:
        request = OutboundRequest.build("GET", "/objects")
        first = adapt(request, BASE).header("X-Request-Id")
        second = adapt(request, BASE).header("X-Request-Id")
        assert first != second
        assert uuid.UUID(first).version == 4

    def test_explicit_request_id(self) -> None:
        adapted = adapt(OutboundRequest.build("GET", "/"), BASE, request_id="abc")
        assert adapted.header("x-request-id") == "abc"

    def test_replaces_previous_request_id(self) -> None:
        request = OutboundRequest.build("GET", "/", headers={"X-Request-Id": "stale"})
        adapted = adapt(request, BASE)
        assert adapted.header("X-Request-Id") != "stale"
        assert sum(1 for k, _ in adapted.headers if k.lower() == "x-request-id") == 1
