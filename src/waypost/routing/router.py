"""Router — owns the live route table and the directives it claims.

The table is an immutable snapshot held in a single attribute. Readers
(``match``, ``resolve``) take the reference once and never lock; writers
(``reload``, ``refresh``, ``clear``) serialize on a lock, publish the new
table with one assignment, and then reconcile the directives registered
with the host ``Dispatcher``.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from waypost.config import RouterConfig
from waypost.errors import ConfigurationError, DirectiveFailure, Forbidden, HTTPError, PartialReloadFailure
from waypost.routing.route import Dispatch, HTTPMethod, Route, RouteMatch
from waypost.routing.table import RouteTable
from waypost.uri.parser import canonical_path, parse
from waypost.uri.query import QueryParams, merge
from waypost.uri.query import emit as emit_query
from waypost.uri.template import expand

logger = logging.getLogger("waypost.routing")


class Dispatcher(Protocol):
    """The host side of routing: claims directives on the router's behalf."""

    def register(self, directive: str, router: "Router") -> None: ...

    def unregister(self, directive: str) -> None: ...


class Router:
    """Match requests against a hot-reloadable route table.

    Usage::

        router = Router(dispatcher=gateway, config=RouterConfig(config_dir="config"))
        router.refresh()
        router.match("GET", "/orders/42")
        router.resolve("GET", "/orders/42?expand=lines")
    """

    __slots__ = ("_dispatcher", "_lock", "_table", "config")

    def __init__(
        self,
        dispatcher: Dispatcher | None = None,
        config: RouterConfig | None = None,
        routes: RouteTable | Iterable[Route] | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self._dispatcher = dispatcher
        self._lock = threading.Lock()
        self._table = RouteTable(prohibited=self.config.reserved_directives)
        if routes is not None:
            self.reload(routes)

    @property
    def table(self) -> RouteTable:
        """The current route table snapshot."""
        return self._table

    @property
    def directives(self) -> frozenset[str]:
        return self._table.directives

    # -- Reading --------------------------------------------------------------

    def match(self, method: str | HTTPMethod, path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or ``None``.

        Raises ``ConfigurationError`` if *method* is not an HTTP method.
        """
        return self._table.match(method, path)

    def resolve(self, method: str | HTTPMethod, request_uri: str) -> Dispatch:
        """Resolve a request line into a ``Dispatch``.

        Captures are merged over the request's query parameters, with
        captures taking precedence. Forwarding targets may reference
        captures as ``{name}`` placeholders. Routes match the request path
        as sent, so ``%2F`` and ``%25`` stay inside their segment and are
        only decoded in the captured value.

        Raises ``URISyntaxError`` for a malformed *request_uri*,
        ``HTTPError(501)`` for an unknown method, and ``Forbidden`` when no
        route matches.
        """
        try:
            method = HTTPMethod.normalize(method)
        except ConfigurationError as exc:
            raise HTTPError(status=501, detail=str(exc)) from exc

        uri = parse(request_uri, self.config.content_charset)
        path = "/" if uri.opaque else canonical_path(request_uri, self.config.content_charset) or "/"

        found = self._table.match(method, path)
        if found is None:
            logger.debug("No route for %s %s", method, path)
            msg = f"No route matches {method} {path}"
            raise Forbidden(msg)

        merged = merge(uri.query or {}, found.captures)
        query_string = emit_query(merged, encode=True, charset=self.config.content_charset)
        forward_path = None
        if not found.route.is_invoke:
            target = expand(found.route.target, found.captures, encode=True, charset=self.config.content_charset)
            forward_path = "/" + target.removeprefix("/")

        logger.debug("Routed %s %s to %s", method, path, found.route.target)
        return Dispatch(
            route=found.route,
            captures=found.captures,
            params=QueryParams.from_mapping(merged),
            query_string=query_string,
            request_uri=request_uri,
            forward_path=forward_path,
        )

    # -- Writing --------------------------------------------------------------

    def reload(self, routes: RouteTable | Iterable[Route]) -> RouteTable:
        """Install a new route table and reconcile registered directives.

        Directives only in the new table are registered, directives only in
        the old table are unregistered, and unchanged directives are left
        alone. Every call is attempted; if any fail, ``PartialReloadFailure``
        is raised after the new table is in place.

        Returns the previous table.
        """
        if not isinstance(routes, RouteTable):
            routes = RouteTable(routes, self.config.reserved_directives)

        with self._lock:
            previous = self._table
            self._table = routes
            failures = self._reconcile(previous.directives, routes.directives)

        if failures:
            raise PartialReloadFailure(tuple(failures))
        return previous

    def refresh(self) -> RouteTable:
        """Reload the table from the route files named by ``config``.

        Returns the previous table.
        """
        return self.reload(RouteTable.from_config(self.config))

    def clear(self) -> RouteTable:
        """Unregister every directive and install an empty table.

        Returns the previous table.
        """
        return self.reload(RouteTable(prohibited=self.config.reserved_directives))

    def _reconcile(self, old: frozenset[str], new: frozenset[str]) -> list[DirectiveFailure]:
        added = sorted(new - old)
        removed = sorted(old - new)
        if added:
            logger.info("Registering directives: %s", ", ".join(added))
        if removed:
            logger.info("Unregistering directives: %s", ", ".join(removed))
        if self._dispatcher is None:
            return []

        failures: list[DirectiveFailure] = []
        for directive in added:
            try:
                self._dispatcher.register(directive, self)
            except Exception as exc:
                logger.error("Failed to register directive %r", directive, exc_info=exc)
                failures.append(DirectiveFailure(directive, "register", exc))
        for directive in removed:
            try:
                self._dispatcher.unregister(directive)
            except Exception as exc:
                logger.error("Failed to unregister directive %r", directive, exc_info=exc)
                failures.append(DirectiveFailure(directive, "unregister", exc))
        return failures

    def __repr__(self) -> str:
        return f"Router({len(self._table)} routes, directives={sorted(self._table.directives)})"
