"""Routing — ordered route tables with first-match-wins lookup.

Tables are immutable snapshots. A ``Router`` swaps them atomically on
reload and keeps the host dispatcher's directives in step.
"""

from waypost.routing.params import PathTemplate
from waypost.routing.route import Dispatch, HTTPMethod, Route, RouteMatch
from waypost.routing.router import Dispatcher, Router
from waypost.routing.table import RouteTable, parse_routes

__all__ = [
    "Dispatch",
    "Dispatcher",
    "HTTPMethod",
    "PathTemplate",
    "Route",
    "RouteMatch",
    "RouteTable",
    "Router",
    "parse_routes",
]
