"""Route table — an immutable, ordered sequence of routes.

Route files (``http-routes.cnf``) hold one route per line::

    # METHOD  TEMPLATE               TARGET                 [DESCRIPTION]
    GET       /orders/{id}           orders.api:get         Fetch one order
    POST      /orders                orders.api:create
    GET       /docs/{page}           /orders/pub/{page}.html

Methods are case-insensitive. Lines that do not look like a route
(comments, blanks, typos) are ignored. The first segment of the template
is the route's *directive* and must be static text.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, overload

from waypost.config import DEFAULT_PROHIBITED_DIRECTIVES
from waypost.errors import ConfigurationError
from waypost.routing.route import HTTPMethod, Route, RouteMatch

if TYPE_CHECKING:
    from waypost.config import RouterConfig

logger = logging.getLogger("waypost.routing")

ROUTE_PATTERN = re.compile(
    r"^[ \t]*(get|put|post|head|connect|options|delete|trace)"
    r"[ \t]+(/?([^{}\s/]+)(/\S+)?)"
    r"[ \t]+(\S+)"
    r"([ \t]+(.*)[ \t]*)?$",
    re.IGNORECASE | re.MULTILINE,
)


def parse_routes(content: str, source: Path | None = None) -> list[Route]:
    """Parse route definitions from the text of a route file, in file order."""
    routes: list[Route] = []
    for match in ROUTE_PATTERN.finditer(content.replace("\r\n", "\n")):
        description = (match.group(7) or "").strip() or None
        path = match.group(2)
        if not path.startswith("/"):
            path = "/" + path
        routes.append(
            Route(
                method=HTTPMethod.normalize(match.group(1)),
                path=path,
                target=match.group(5),
                description=description,
                source=source,
            )
        )
    return routes


class RouteTable(Sequence[Route]):
    """Immutable ordered route table. First matching route wins.

    Usage::

        table = RouteTable.parse("GET /users/{id} users.api:get")
        match = table.match("GET", "/users/42")
        match.captures    # {"id": "42"}
    """

    __slots__ = ("_routes",)

    def __init__(
        self,
        routes: Iterable[Route] = (),
        prohibited: Iterable[str] = DEFAULT_PROHIBITED_DIRECTIVES,
    ) -> None:
        prohibited = frozenset(prohibited)
        kept: list[Route] = []
        for route in routes:
            directive = route.directive
            if not directive or "{" in directive:
                msg = f"Route {route.path!r} must start with a static directive"
                raise ConfigurationError(msg)
            if directive in prohibited:
                logger.warning(
                    "Skipping route %s %s: directive %r is reserved",
                    route.method,
                    route.path,
                    directive,
                )
                continue
            kept.append(route)
        self._routes: tuple[Route, ...] = tuple(kept)

    @classmethod
    def parse(
        cls,
        content: str,
        source: Path | None = None,
        prohibited: Iterable[str] = DEFAULT_PROHIBITED_DIRECTIVES,
    ) -> "RouteTable":
        """Build a table from the text of a single route file."""
        return cls(parse_routes(content, source), prohibited)

    @classmethod
    def load(
        cls,
        files: Iterable[str | Path],
        prohibited: Iterable[str] = DEFAULT_PROHIBITED_DIRECTIVES,
    ) -> "RouteTable":
        """Build a table from route files, read in the given order.

        Missing files are skipped. Unreadable files are logged and skipped.
        """
        routes: list[Route] = []
        for file in files:
            path = Path(file)
            if not path.is_file():
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Cannot read route file %s: %s", path, exc)
                continue
            routes.extend(parse_routes(content, path))
        return cls(routes, prohibited)

    @classmethod
    def from_config(cls, config: "RouterConfig") -> "RouteTable":
        """Build a table from the route files named by *config*."""
        return cls.load(config.route_files(), config.reserved_directives)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def directives(self) -> frozenset[str]:
        """The set of directives claimed by this table."""
        return frozenset(route.directive for route in self._routes)

    def by_directive(self) -> dict[str, list[Route]]:
        """Group routes by directive, sorted by directive, routes in table order."""
        grouped: dict[str, list[Route]] = {}
        for route in self._routes:
            grouped.setdefault(route.directive, []).append(route)
        return dict(sorted(grouped.items()))

    def match(self, method: str | HTTPMethod, path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or ``None``.

        Raises ``ConfigurationError`` if *method* is not an HTTP method.
        """
        method = HTTPMethod.normalize(method)
        for route in self._routes:
            captures = route.match(method, path)
            if captures is not None:
                return RouteMatch(route=route, captures=captures)
        return None

    @overload
    def __getitem__(self, index: int) -> Route: ...

    @overload
    def __getitem__(self, index: slice) -> "tuple[Route, ...]": ...

    def __getitem__(self, index: int | slice) -> "Route | tuple[Route, ...]":
        return self._routes[index]

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RouteTable) and other._routes == self._routes

    def __hash__(self) -> int:
        return hash(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({len(self._routes)} routes)"
