"""Request body parsing with size limits.

JSON and URL-encoded bodies are read, size-checked and parsed before any
route runs. The parsed value is stored on the request state as
`parsed_body`; the raw bytes are replayed to downstream handlers.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable
from urllib.parse import parse_qsl

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from portal_api.domain import BodyLimits

JSON_MEDIA_TYPE = "application/json"
URLENCODED_MEDIA_TYPE = "application/x-www-form-urlencoded"
PAYLOAD_TOO_LARGE_MESSAGE = "Request entity too large"
MALFORMED_BODY_MESSAGE = "Malformed request body"

# qs converts index-keyed objects to arrays up to this index
_ARRAY_INDEX_LIMIT = 20
# qs nests at most this many bracket segments; the rest stays one literal key
_NESTING_DEPTH_LIMIT = 5
_INDEX_KEY_PATTERN = re.compile(r"[0-9]+")
_BRACKET_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_BRACKET_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


class MalformedBodyError(ValueError):
    """Raised when a request body cannot be decoded or parsed."""


class PayloadTooLargeError(ValueError):
    """Raised when a request body exceeds the configured limit."""


def parse_json_body(raw_body: bytes) -> Any:
    """Parse a strict JSON body: the top level must be an object or an array.

    Raises:
        MalformedBodyError: Raised for invalid UTF-8, invalid JSON or a scalar top level.
    """

    try:
        parsed = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise MalformedBodyError(str(error)) from error
    except RecursionError as error:
        raise MalformedBodyError("JSON body is nested too deeply") from error
    if not isinstance(parsed, (dict, list)):
        raise MalformedBodyError("JSON body must be an object or an array")
    return parsed


def parse_urlencoded_body(raw_body: bytes) -> dict[str, Any]:
    """Parse a URL-encoded body with bracket nesting.

    `a[b]=1` becomes `{"a": {"b": "1"}}`, `a[]=1&a[]=2` becomes
    `{"a": ["1", "2"]}` and repeated plain keys collect into a list.

    Raises:
        MalformedBodyError: Raised for bodies that are not valid UTF-8.
    """

    try:
        text = raw_body.decode("utf-8")
    except UnicodeDecodeError as error:
        raise MalformedBodyError(str(error)) from error

    parsed: dict[str, Any] = {}
    for raw_key, value in parse_qsl(text, keep_blank_values=True):
        _assign_nested(parsed, _split_key(raw_key), value)
    return {key: _compact_index_objects(item) for key, item in parsed.items()}


def _split_key(raw_key: str) -> list[str]:
    match = _BRACKET_KEY_PATTERN.match(raw_key)
    if match is None:
        return [raw_key]
    segments = _BRACKET_SEGMENT_PATTERN.findall(match.group(2))
    if len(segments) > _NESTING_DEPTH_LIMIT:
        remainder = "".join(f"[{segment}]" for segment in segments[_NESTING_DEPTH_LIMIT:])
        segments = [*segments[:_NESTING_DEPTH_LIMIT], remainder]
    return [match.group(1), *segments]


def _assign_nested(target: dict[str, Any], segments: list[str], value: str) -> None:
    key, rest = segments[0], segments[1:]
    if not rest:
        existing = target.get(key)
        if existing is None:
            target[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, dict):
            existing[str(len(existing))] = value
        else:
            target[key] = [existing, value]
        return

    if rest[0] == "":
        container = target.get(key)
        if container is None or isinstance(container, str):
            container = [] if container is None else [container]
            target[key] = container
        if isinstance(container, list):
            if len(rest) == 1:
                container.append(value)
            else:
                child: dict[str, Any] = {}
                container.append(child)
                _assign_nested(child, rest[1:], value)
            return
        _assign_nested(container, [str(len(container)), *rest[1:]], value)
        return

    child_object = target.get(key)
    if isinstance(child_object, list):
        child_object = {str(index): item for index, item in enumerate(child_object)}
        target[key] = child_object
    elif not isinstance(child_object, dict):
        child_object = {}
        target[key] = child_object
    _assign_nested(child_object, rest, value)


def _compact_index_objects(value: Any) -> Any:
    if isinstance(value, list):
        return [_compact_index_objects(item) for item in value]
    if not isinstance(value, dict):
        return value
    compacted = {key: _compact_index_objects(item) for key, item in value.items()}
    if compacted and all(_INDEX_KEY_PATTERN.fullmatch(key) and int(key) <= _ARRAY_INDEX_LIMIT for key in compacted):
        return [compacted[key] for key in sorted(compacted, key=int)]
    return compacted


class BodyParsingMiddleware:
    """ASGI middleware that parses JSON and URL-encoded request bodies.

    Oversized bodies are rejected with 413 and undecodable ones with 400,
    in both cases before the request reaches routing.
    """

    def __init__(self, app: ASGIApp, limits: BodyLimits):
        self.app = app
        self.limits = limits
        self.logger = logging.getLogger("portal_api.body")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        media_type = headers.get("content-type", "").split(";", 1)[0].strip().lower()
        parser: Callable[[bytes], Any]
        if media_type == JSON_MEDIA_TYPE:
            limit_bytes, parser = self.limits.json_limit_bytes, parse_json_body
        elif media_type == URLENCODED_MEDIA_TYPE:
            limit_bytes, parser = self.limits.urlencoded_limit_bytes, parse_urlencoded_body
        else:
            await self.app(scope, receive, send)
            return

        try:
            raw_body = await self._read_body(headers, receive, limit_bytes)
            parsed_body = parser(raw_body) if raw_body else None
        except PayloadTooLargeError as error:
            self.logger.warning(f"Rejected body on {scope.get('path', '')}: {error}")
            await _send_error(scope, receive, send, 413, PAYLOAD_TOO_LARGE_MESSAGE)
            return
        except MalformedBodyError as error:
            self.logger.warning(f"Rejected body on {scope.get('path', '')}: {error}")
            await _send_error(scope, receive, send, 400, MALFORMED_BODY_MESSAGE)
            return

        scope.setdefault("state", {})["parsed_body"] = parsed_body
        body_replayed = False

        async def replay_receive() -> Message:
            nonlocal body_replayed
            if not body_replayed:
                body_replayed = True
                return {"type": "http.request", "body": raw_body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)

    @staticmethod
    async def _read_body(headers: Headers, receive: Receive, limit_bytes: int) -> bytes:
        declared_length = headers.get("content-length")
        if declared_length is not None:
            try:
                declared_bytes = int(declared_length)
            except ValueError as error:
                raise MalformedBodyError("invalid Content-Length header") from error
            if declared_bytes > limit_bytes:
                raise PayloadTooLargeError(f"declared length {declared_bytes} exceeds {limit_bytes} bytes")

        chunks: list[bytes] = []
        received_bytes = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise MalformedBodyError("client disconnected before sending the body")
            chunk = message.get("body", b"")
            received_bytes += len(chunk)
            if received_bytes > limit_bytes:
                raise PayloadTooLargeError(f"body exceeds {limit_bytes} bytes")
            chunks.append(chunk)
            if not message.get("more_body", False):
                return b"".join(chunks)


async def _send_error(scope: Scope, receive: Receive, send: Send, status_code: int, message: str) -> None:
    response = JSONResponse(status_code=status_code, content={"success": False, "message": message})
    await response(scope, receive, send)
