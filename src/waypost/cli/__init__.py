"""Waypost CLI — URI inspection, route table tools, and the gateway server.

Entry point registered as ``waypost`` in ``pyproject.toml``::

    [project.scripts]
    waypost = "waypost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypost`` command."""
    parser = argparse.ArgumentParser(
        prog="waypost",
        description="Waypost — URI codec and HTTP route table.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypost parse ----------------------------------------------------
    parse_parser = subparsers.add_parser("parse", help="Parse a URI and print it as JSON")
    parse_parser.add_argument("uri", help="URI to parse")
    parse_parser.add_argument("--charset", default=None, help="Charset for percent-decoding")

    # -- waypost normalize ------------------------------------------------
    normalize_parser = subparsers.add_parser("normalize", help="Print URIs in normalized form")
    normalize_parser.add_argument("uris", nargs="+", help="URIs to normalize")
    normalize_parser.add_argument("--charset", default=None, help="Charset for percent-coding")

    # -- waypost routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes defined in route files")
    routes_parser.add_argument("files", nargs="+", help="Route files, loaded in order")

    # -- waypost match ----------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Resolve a request against route files")
    match_parser.add_argument("files", nargs="+", help="Route files, loaded in order")
    match_parser.add_argument("--method", "-X", default="GET", help="HTTP method (default: GET)")
    match_parser.add_argument("--uri", required=True, help="Request URI, e.g. /orders/42?expand=1")

    # -- waypost serve ----------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve routes through the ASGI gateway")
    serve_parser.add_argument("files", nargs="*", help="Extra route files, loaded after config dirs")
    serve_parser.add_argument("--config-dir", default=None, help="Server-wide config directory")
    serve_parser.add_argument(
        "--package-dir",
        action="append",
        default=[],
        help="Package config directory (repeatable)",
    )
    serve_parser.add_argument("--services", default=None, help="Import string (e.g. myapp:services)")
    serve_parser.add_argument("--forward", default=None, help="Import string of the ASGI app to forward to")
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "parse":
        from waypost.cli._uri import run_parse

        run_parse(args)
    elif args.command == "normalize":
        from waypost.cli._uri import run_normalize

        run_normalize(args)
    elif args.command == "routes":
        from waypost.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from waypost.cli._routes import run_match

        run_match(args)
    elif args.command == "serve":
        from waypost.cli._serve import run_serve

        run_serve(args)
