"""Regression tests for JSON and URL-encoded body parsing."""
# pylint: disable=duplicate-code

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from portal_api.api.application import create_api_application
from portal_api.api.middleware import BodyParsingMiddleware, parse_json_body, parse_urlencoded_body
from portal_api.api.middleware.body_parsing import MalformedBodyError
from portal_api.config import JSON_BODY_LIMIT_BYTES, URLENCODED_BODY_LIMIT_BYTES, AppSettings
from portal_api.db import DatabaseConnectionInfo
from portal_api.domain import BodyLimits, RateLimitPolicy, RouteGroupRequest, RouteGroupResponse
from portal_api.routes import PortalContext, UnavailableRouteGroupHandler


class _DatabaseStub:
    """Connected database stub."""

    def db_connect(self) -> DatabaseConnectionInfo:
        return DatabaseConnectionInfo(host="mongo.test", database_name="portal")

    def db_get_database(self) -> object:
        return object()

    def db_close(self) -> None:
        return None


class _RecordingHandler:
    """Route group that records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[RouteGroupRequest] = []

    async def route_handle(self, request: RouteGroupRequest) -> RouteGroupResponse:
        self.requests.append(request)
        return RouteGroupResponse(status_code=201, payload={"success": True, "message": "created"})


def _build_client(handler: _RecordingHandler) -> TestClient:
    settings = AppSettings(node_env="test", mongodb_uri="mongodb://mongo.test:27017/portal")
    context = PortalContext(
        settings=settings,
        database=_DatabaseStub(),
        rate_limit_policy=RateLimitPolicy(window_ms=900000, max_requests=100),
    )
    handlers = {
        "auth": UnavailableRouteGroupHandler("auth"),
        "users": handler,
        "events": UnavailableRouteGroupHandler("events"),
        "achievements": UnavailableRouteGroupHandler("achievements"),
    }
    return TestClient(create_api_application(context, handlers))


def test_json_body_is_parsed_before_dispatch() -> None:
    """Hand the parsed JSON object to the route group."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post("/api/users/register", json={"name": "Asha", "year": 3})

    assert response.status_code == 201
    assert handler.requests[0].body == {"name": "Asha", "year": 3}


def test_oversized_json_body_is_rejected_before_dispatch() -> None:
    """Reject a JSON body over 10 MB with 413 without calling the route group."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/register",
        content=b"[" + b"1," * (JSON_BODY_LIMIT_BYTES // 2) + b"1]",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json() == {"success": False, "message": "Request entity too large"}
    assert handler.requests == []


def test_malformed_json_body_is_rejected_before_dispatch() -> None:
    """Reject undecodable JSON with 400 without calling the route group."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/register",
        content=b'{"name": ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Malformed request body"}
    assert handler.requests == []


def test_urlencoded_body_is_parsed_with_nesting() -> None:
    """Hand nested URL-encoded fields to the route group as nested objects."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/profile",
        content=b"name=Asha&address[city]=Madurai&skills[]=python&skills[]=sql",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 201
    assert handler.requests[0].body == {
        "name": "Asha",
        "address": {"city": "Madurai"},
        "skills": ["python", "sql"],
    }


def test_request_without_body_reaches_route_group_with_none() -> None:
    """Pass None as the body when the request carries none."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    client.get("/api/users")

    assert handler.requests[0].body is None


@pytest.mark.parametrize("raw_body", [b"123", b'"text"', b"\xff\xfe", b"{,}"])
def test_parse_json_body_rejects_scalars_and_garbage(raw_body: bytes) -> None:
    """Accept only objects and arrays at the top level."""

    with pytest.raises(MalformedBodyError):
        parse_json_body(raw_body)


def test_parse_urlencoded_body_handles_repeats_and_indexes() -> None:
    """Collect repeated keys into lists and turn index keys into arrays."""

    parsed = parse_urlencoded_body(b"tag=a&tag=b&items[0][name]=x&items[1][name]=y&empty=&note=a+b%21")

    assert parsed == {
        "tag": ["a", "b"],
        "items": [{"name": "x"}, {"name": "y"}],
        "empty": "",
        "note": "a b!",
    }


def test_oversized_urlencoded_body_is_rejected_before_dispatch() -> None:
    """Reject a URL-encoded body over 100 KB with 413 without calling the route group."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/profile",
        content=b"bio=" + b"a" * URLENCODED_BODY_LIMIT_BYTES,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 413
    assert response.json() == {"success": False, "message": "Request entity too large"}
    assert handler.requests == []


def test_streamed_body_without_length_is_rejected_once_over_limit() -> None:
    """Stop reading a chunked body as soon as it crosses the limit."""

    downstream_scopes: list[dict] = []
    sent_messages: list[dict] = []
    chunks = [b'{"bio": "', b"x" * 10, b"x" * 10, b'"}']
    pending_messages = [
        {"type": "http.request", "body": chunk, "more_body": index < len(chunks) - 1}
        for index, chunk in enumerate(chunks)
    ]

    async def _downstream(scope, receive, send) -> None:
        downstream_scopes.append(scope)

    async def _receive() -> dict:
        return pending_messages.pop(0)

    async def _send(message: dict) -> None:
        sent_messages.append(message)

    middleware = BodyParsingMiddleware(_downstream, limits=BodyLimits(json_limit_bytes=16, urlencoded_limit_bytes=16))
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/users/profile",
        "query_string": b"",
        "headers": [(b"content-type", b"application/json")],
    }

    asyncio.run(middleware(scope, _receive, _send))

    assert downstream_scopes == []
    assert sent_messages[0]["status"] == 413
    assert len(pending_messages) == 2


def test_deeply_nested_json_body_is_rejected_as_malformed() -> None:
    """Reject JSON nested beyond the decoder's depth with 400 instead of failing."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/register",
        content=b"[" * 100000 + b"]" * 100000,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Malformed request body"}
    assert handler.requests == []


@pytest.mark.parametrize("raw_body", ["a[²]=1", "a[١]=1", "a[1%0A]=1"])
def test_urlencoded_non_ascii_digit_keys_stay_object_keys(raw_body: str) -> None:
    """Treat only ASCII digit keys as array indexes."""

    handler = _RecordingHandler()
    client = _build_client(handler)

    response = client.post(
        "/api/users/profile",
        content=raw_body.encode("utf-8"),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 201
    assert isinstance(handler.requests[0].body["a"], dict)


def test_parse_urlencoded_body_limits_nesting_depth() -> None:
    """Keep bracket segments past the fifth as one literal key."""

    parsed = parse_urlencoded_body(b"a[b][c][d][e][f][g][h]=i")

    assert parsed == {"a": {"b": {"c": {"d": {"e": {"f": {"[g][h]": "i"}}}}}}}
