"""``waypost serve`` — run the gateway under pounce.

Routes come from the given files and/or the configured route
directories. Services and the forwarding application are resolved from
import strings.
"""

import argparse
import importlib.util
import logging
import sys
from dataclasses import replace
from pathlib import Path

from waypost.cli._resolve import resolve_app, resolve_services
from waypost.config import RouterConfig
from waypost.routing.table import RouteTable
from waypost.server.gateway import Gateway


def build_gateway(args: argparse.Namespace) -> Gateway:
    """Build a ``Gateway`` from parsed ``serve`` arguments."""
    config = RouterConfig()
    if args.config_dir is not None:
        config = replace(config, config_dir=Path(args.config_dir))
    if args.package_dir:
        config = replace(config, package_config_dirs=tuple(Path(d) for d in args.package_dir))
    if args.host is not None:
        config = replace(config, host=args.host)
    if args.port is not None:
        config = replace(config, port=args.port)

    try:
        services = resolve_services(args.services) if args.services else {}
        forward = resolve_app(args.forward) if args.forward else None
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    files = [*config.route_files(), *(Path(f) for f in args.files)]
    return Gateway(
        routes=RouteTable.load(files, config.reserved_directives),
        services=services,
        forward=forward,
        config=config,
    )


def run_serve(args: argparse.Namespace) -> None:
    """Start a pounce server for the gateway built from ``args``."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    gateway = build_gateway(args)

    if importlib.util.find_spec("pounce") is None:
        print("Error: 'waypost serve' requires pounce: pip install waypost[server]", file=sys.stderr)
        raise SystemExit(1)

    from waypost.server.dev import run_server

    run_server(gateway, host=gateway.config.host, port=gateway.config.port)
