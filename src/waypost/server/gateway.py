"""ASGI gateway — serves a Router over HTTP.

The gateway is the router's ``Dispatcher``: the router tells it which
directives (first path segments) it owns, and only those requests are
routed. Everything else falls through to the ``forward`` application,
or gets a 404 when there is none.

Routed requests go one of two ways:

- invoke targets (``orders.api:get``) call ``services[target](params)``
  and send the result
- forward targets (``/orders/pub/view``) rewrite the scope's path and
  query string and delegate to the ``forward`` application

Every routed response carries the elapsed time as an ISO-8601 duration
in the ``X-Response-Duration`` header.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from typing import Any, TypeAlias

from waypost._internal.asgi import ASGIApp, HTTPScope, Receive, Scope, Send
from waypost._internal.invoke import invoke
from waypost._internal.multimap import MultiValueMapping
from waypost.config import RouterConfig
from waypost.errors import HTTPError, NotFound, URISyntaxError
from waypost.routing.route import Dispatch, Route, directive_of
from waypost.routing.router import Router
from waypost.routing.table import RouteTable
from waypost.server.sender import Response, error_response, negotiate, send_response
from waypost.uri.codec import unquote_component

logger = logging.getLogger("waypost.server")

# A service receives the merged request parameters and returns a response value.
Service: TypeAlias = Callable[[MultiValueMapping], Any]


def format_duration(seconds: float) -> str:
    """Format *seconds* as an ISO-8601 duration: ``PT0.001500000S``."""
    return f"PT{seconds:.9f}S"


class Gateway:
    """ASGI application routing requests through a ``Router``.

    Usage::

        gateway = Gateway(
            routes=RouteTable.parse("GET /orders/{id} orders.api:get"),
            services={"orders.api:get": get_order},
        )
        # serve with any ASGI server
    """

    __slots__ = ("_directives", "_lock", "config", "forward", "load_on_startup", "router", "services")

    def __init__(
        self,
        routes: RouteTable | Iterable[Route] | None = None,
        services: Mapping[str, Service] | None = None,
        forward: ASGIApp | None = None,
        config: RouterConfig | None = None,
        *,
        load_on_startup: bool = False,
    ) -> None:
        self.config = config or RouterConfig()
        self.load_on_startup = load_on_startup
        self.services = dict(services or {})
        self.forward = forward
        self._lock = threading.Lock()
        self._directives: frozenset[str] = frozenset()
        self.router = Router(dispatcher=self, config=self.config, routes=routes)

    # -- Dispatcher -----------------------------------------------------------

    def register(self, directive: str, router: Router) -> None:
        with self._lock:
            self._directives = self._directives | {directive}

    def unregister(self, directive: str) -> None:
        with self._lock:
            self._directives = self._directives - {directive}

    @property
    def directives(self) -> frozenset[str]:
        """Directives currently claimed by the router."""
        return self._directives

    # -- ASGI interface -------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        http = HTTPScope.from_scope(scope)
        if directive_of(http.path) not in self._directives:
            if self.forward is not None:
                await self.forward(scope, receive, send)
            else:
                await send_response(error_response(NotFound()), send)
            return

        start = time.perf_counter()
        try:
            dispatch = self.router.resolve(http.method, http.request_target)
            if dispatch.is_invoke:
                response = await self._invoke(dispatch)
            else:
                await self._forward(dispatch, scope, receive, self._timed(send, start))
                return
        except HTTPError as exc:
            logger.debug("Rejected %s %s: %s", http.method, http.path, exc)
            response = error_response(exc)
        except URISyntaxError as exc:
            logger.debug("Malformed request URI %r: %s", http.request_target, exc)
            response = error_response(HTTPError(status=400, detail=str(exc)))
        except Exception:
            logger.exception("Unhandled error routing %s %s", http.method, http.path)
            response = error_response(HTTPError(status=500))

        elapsed = time.perf_counter() - start
        response = response.with_header(self.config.response_duration_header, format_duration(elapsed))
        await send_response(response, send)

    async def _invoke(self, dispatch: Dispatch) -> Response:
        service = self.services.get(dispatch.target)
        if service is None:
            msg = f"No service named {dispatch.target!r}"
            raise NotFound(msg)
        return negotiate(await invoke(service, dispatch.params))

    async def _forward(self, dispatch: Dispatch, scope: Scope, receive: Receive, send: Send) -> None:
        if self.forward is None or dispatch.forward_path is None:
            msg = f"Cannot forward to {dispatch.target!r}"
            raise NotFound(msg)

        forwarded = dict(scope)
        forwarded["path"] = unquote_component(dispatch.forward_path, self.config.content_charset)
        forwarded["raw_path"] = dispatch.forward_path.encode(self.config.uri_charset)
        forwarded["query_string"] = dispatch.query_string.encode(self.config.uri_charset)
        forwarded["headers"] = [
            *scope.get("headers", ()),
            (self.config.request_uri_header.lower().encode("latin-1"), dispatch.request_uri.encode("latin-1")),
        ]
        await self.forward(forwarded, receive, send)

    def _timed(self, send: Send, start: float) -> Send:
        """Wrap *send* so the response start message carries the duration header."""
        header = self.config.response_duration_header.lower().encode("latin-1")

        async def timed_send(message: MutableMapping[str, Any]) -> None:
            if message["type"] == "http.response.start":
                duration = format_duration(time.perf_counter() - start).encode("latin-1")
                message = {**message, "headers": [*message.get("headers", ()), (header, duration)]}
            await send(message)

        return timed_send

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Loads the configured route files at startup when ``load_on_startup``
        is set, and unregisters every directive at shutdown.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    if self.load_on_startup:
                        self.router.refresh()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Gateway startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                try:
                    self.router.clear()
                except Exception:
                    logger.exception("Failed to clear routes at shutdown")
                await send({"type": "lifespan.shutdown.complete"})
                return
