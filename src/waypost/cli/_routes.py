"""``waypost routes`` and ``waypost match`` — inspect route files.

Loads one or more ``http-routes.cnf`` files in the given order and
either lists the resulting table or resolves a single request against it.
"""

import argparse
import json
import sys
from pathlib import Path

from waypost.errors import HTTPError, URISyntaxError
from waypost.routing.router import Router
from waypost.routing.table import RouteTable


def _load(files: list[str]) -> RouteTable:
    missing = [file for file in files if not Path(file).is_file()]
    if missing:
        print(f"Error: route file not found: {', '.join(missing)}", file=sys.stderr)
        raise SystemExit(1)
    return RouteTable.load(files)


def run_routes(args: argparse.Namespace) -> None:
    """List the routes loaded from ``args.files``.

    Prints a table of METHOD, PATH, and TARGET, with the description
    in parentheses when the route has one.
    """
    table = _load(args.files)
    if not table:
        print("No routes defined.")
        return

    rows: list[tuple[str, str, str]] = []
    for route in table:
        target = route.target
        if route.description:
            target = f"{target} ({route.description})"
        rows.append((str(route.method), route.path, target))

    # Column widths
    max_method = max(max(len(r[0]) for r in rows), 6)  # "METHOD" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "TARGET"))
    sep_len = max_method + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, target in rows:
        print(fmt.format(method, path, target))


def run_match(args: argparse.Namespace) -> None:
    """Resolve ``args.method args.uri`` against ``args.files`` and print it as JSON.

    Exits with status 1 when no route matches or the URI is malformed.
    """
    router = Router(routes=_load(args.files))
    try:
        dispatch = router.resolve(args.method, args.uri)
    except (HTTPError, URISyntaxError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    output = {
        "route": dispatch.route.to_dict(),
        "invoke": dispatch.is_invoke,
        "captures": dispatch.captures,
        "params": dispatch.params.to_dict(),
        "query_string": dispatch.query_string,
    }
    if dispatch.forward_path is not None:
        output["forward_path"] = dispatch.forward_path
    print(json.dumps(output, indent=2, ensure_ascii=False))
