"""ASGI response sending — maps service results to responses and sends them."""

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from waypost._internal.asgi import Send
from waypost.errors import HTTPError


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response. Chain ``.with_*()`` calls to derive new ones."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def text(self) -> str:
        if isinstance(self.body, str):
            return self.body
        return self.body.decode("utf-8")


def negotiate(value: Any) -> Response:
    """Convert a service's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``None``             -> 204, no body
    3. ``str``              -> 200, text/plain
    4. ``bytes``            -> 200, application/octet-stream
    5. ``dict`` / ``list``  -> 200, application/json
    6. ``(value, int)``     -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case None:
            return Response(status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case Mapping() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (body, int() as status):
            return negotiate(body).with_status(status)
        case _:
            msg = f"Cannot convert {type(value).__name__} to a response"
            raise TypeError(msg)


def error_response(exc: HTTPError) -> Response:
    """Build the plain-text response for an ``HTTPError``: ``403 Forbidden``."""
    body = f"{exc.status} {exc.phrase}".rstrip()
    response = Response(body=body, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers: list[tuple[bytes, bytes]] = []
    if body:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
