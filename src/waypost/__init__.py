"""Waypost — a URI codec and a hot-reloadable HTTP route table.

Parse and emit URIs::

    from waypost import normalize, parse

    uri = parse("http://Example.com:80/a/b?x=1&x=2")
    uri.query["x"]                        # ("1", "2")
    normalize("HTTP://Example.com:80/")   # "http://example.com/"

Route requests::

    from waypost import Router, RouteTable

    router = Router(routes=RouteTable.parse("GET /orders/{id} orders.api:get"))
    router.match("GET", "/orders/42").captures   # {"id": "42"}

Serve them over ASGI (``pip install waypost[server]`` for ``waypost serve``)::

    from waypost import Gateway

    gateway = Gateway(routes=..., services={"orders.api:get": get_order})
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "URI",
    "ConfigurationError",
    "Dispatch",
    "Forbidden",
    "Gateway",
    "HTTPError",
    "HTTPMethod",
    "NotFound",
    "PartialReloadFailure",
    "QueryParams",
    "RegistryAuthority",
    "Route",
    "RouteMatch",
    "RouteTable",
    "Router",
    "RouterConfig",
    "ServerAuthority",
    "URISyntaxError",
    "WaypostError",
    "decode",
    "emit",
    "encode",
    "normalize",
    "parse",
    "substitute",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypost`` fast while providing a clean top-level API.
    """
    if name in ("URI", "RegistryAuthority", "ServerAuthority"):
        from waypost.uri import document as _document

        return getattr(_document, name)

    if name in ("emit", "normalize", "parse"):
        from waypost.uri import parser as _parser

        return getattr(_parser, name)

    if name in ("decode", "encode"):
        from waypost.uri import codec as _codec

        return getattr(_codec, name)

    if name == "substitute":
        from waypost.uri.template import substitute

        return substitute

    if name == "QueryParams":
        from waypost.uri.query import QueryParams

        return QueryParams

    if name in ("Dispatch", "HTTPMethod", "Route", "RouteMatch"):
        from waypost.routing import route as _route

        return getattr(_route, name)

    if name == "RouteTable":
        from waypost.routing.table import RouteTable

        return RouteTable

    if name == "Router":
        from waypost.routing.router import Router

        return Router

    if name == "RouterConfig":
        from waypost.config import RouterConfig

        return RouterConfig

    if name == "Gateway":
        from waypost.server.gateway import Gateway

        return Gateway

    if name in (
        "ConfigurationError",
        "Forbidden",
        "HTTPError",
        "NotFound",
        "PartialReloadFailure",
        "URISyntaxError",
        "WaypostError",
    ):
        from waypost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
