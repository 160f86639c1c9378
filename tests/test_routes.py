"""Tests for Route -> OutboundRequest conversion."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

from netstack.exceptions import InvalidURL
from netstack.models import HTTPMethod
from netstack.routes import Route


class GetObjects(Route):
    method = HTTPMethod.GET
    path = "/objects"


class GetObject(Route):
    method = HTTPMethod.GET
    path = "/object"

    def __init__(self, object_id: int) -> None:
        self.object_id = object_id

    def params(self) -> Optional[dict[str, Any]]:
        return {"id": self.object_id}


class CreateObject(Route):
    method = HTTPMethod.POST
    path = "/objects"

    def headers(self) -> Optional[dict[str, str]]:
        return {"X-Request-Id": "abc"}

    def json_body(self) -> Any:
        return {"name": "widget"}


class DeleteAll(Route):
    method = HTTPMethod.DELETE
    path = "/objects"

    def json_body(self) -> Any:
        return None


class Broken(Route):
    path = ""


def test_plain_route() -> None:
    request = GetObjects().as_request()
    assert request.method == "GET"
    assert request.url == "/objects"
    assert request.headers == ()
    assert request.body is None


def test_params_encoded_into_query() -> None:
    request = GetObject(7).as_request()
    url = httpx.URL(request.url)
    assert url.path == "/object"
    assert url.params["id"] == "7"


def test_json_body_and_headers() -> None:
    request = CreateObject().as_request()
    assert request.method == "POST"
    assert json.loads(request.body) == {"name": "widget"}
    assert request.header("content-type") == "application/json"
    assert request.header("x-request-id") == "abc"


def test_explicit_null_body_is_sent() -> None:
    request = DeleteAll().as_request()
    assert request.body == b"null"


def test_invalid_path() -> None:
    with pytest.raises(InvalidURL):
        Broken().as_request()
