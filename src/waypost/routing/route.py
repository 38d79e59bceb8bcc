"""Route, RouteMatch, and Dispatch frozen dataclasses."""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from waypost.errors import ConfigurationError
from waypost.routing.params import PathTemplate
from waypost.uri.query import QueryParams

# ``folder.subfolder:service`` names an invocable service rather than a path.
SERVICE_PATTERN = re.compile(r"^(([^\s./:]+)(\.[^\s./:]+)*)(:([^\s./:]+))$")


class HTTPMethod(StrEnum):
    """The HTTP methods a route may be bound to."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    HEAD = "HEAD"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    DELETE = "DELETE"
    TRACE = "TRACE"

    @classmethod
    def normalize(cls, method: "str | HTTPMethod") -> "HTTPMethod":
        """Return the member for *method*, ignoring case and surrounding whitespace.

        Raises ``ConfigurationError`` for anything that is not a known method.
        """
        if isinstance(method, HTTPMethod):
            return method
        try:
            return cls(method.strip().upper())
        except ValueError:
            msg = f"Unknown HTTP method: {method!r}"
            raise ConfigurationError(msg) from None


def directive_of(path: str) -> str:
    """Return the first segment of a route path: ``/orders/{id}`` -> ``orders``."""
    path = path.strip()
    if path.startswith("/"):
        path = path[1:]
    return path.partition("/")[0]


@dataclass(frozen=True, slots=True)
class Route:
    """A single routing entry: ``METHOD /template target``.

    ``target`` is either an invocable service name (``orders.api:get``)
    or a path the request is forwarded to (``/orders/pub/view.dsp``).
    Two routes are equal when method, path, and target are equal.
    """

    method: HTTPMethod
    path: str
    target: str
    description: str | None = field(default=None, compare=False)
    source: Path | None = field(default=None, compare=False)
    template: PathTemplate = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HTTPMethod.normalize(self.method))
        object.__setattr__(self, "template", PathTemplate(self.path))

    @property
    def directive(self) -> str:
        """The first path segment, registered with the host dispatcher."""
        return directive_of(self.path)

    @property
    def is_invoke(self) -> bool:
        """True when ``target`` names a service to invoke."""
        return SERVICE_PATTERN.match(self.target) is not None

    def match(self, method: "str | HTTPMethod", path: str) -> dict[str, str] | None:
        """Return the captures for *path* if this route matches, else ``None``."""
        if HTTPMethod.normalize(method) is not self.method:
            return None
        return self.template.match(path)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of this route."""
        output: dict[str, Any] = {
            "method": self.method.lower(),
            "path": self.path,
            "target": self.target,
        }
        if self.description is not None:
            output["description"] = self.description
        if self.source is not None:
            output["source"] = str(self.source)
        return output


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    captures: dict[str, str]


@dataclass(frozen=True, slots=True)
class Dispatch:
    """A request resolved against the route table, ready to hand off.

    ``params`` holds the captures merged over the request's query
    parameters (captures win). ``query_string`` is ``params`` re-encoded.
    ``forward_path`` is set for forwarding targets only.
    """

    route: Route
    captures: dict[str, str]
    params: QueryParams
    query_string: str
    request_uri: str
    forward_path: str | None = None

    @property
    def target(self) -> str:
        return self.route.target

    @property
    def is_invoke(self) -> bool:
        return self.route.is_invoke
