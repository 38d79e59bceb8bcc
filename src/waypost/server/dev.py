"""Serve a gateway with pounce.

``waypost serve`` builds a live ``Gateway`` from the command line, so the
server is handed the ASGI callable itself rather than an import string.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from waypost.server.gateway import Gateway

logger = logging.getLogger("waypost.server")


def run_server(gateway: "Gateway", host: str, port: int, *, workers: int = 1) -> None:
    """Run *gateway* under a pounce server until interrupted.

    The route table lives in the gateway's process, so more than one
    worker only makes sense when every worker loads the same route files.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    logger.info(
        "Serving %d routes (%s) on http://%s:%d",
        len(gateway.router.table),
        ", ".join(sorted(gateway.directives)) or "no directives",
        host,
        port,
    )
    config = ServerConfig(host=host, port=port, workers=workers)
    Server(config, gateway).run()
