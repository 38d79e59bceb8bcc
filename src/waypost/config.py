"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_PROHIBITED_DIRECTIVES: frozenset[str] = frozenset(
    {"invoke", "soap", "web", "wm-message", "ws"}
)


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(config_dir=Path("config"), port=5555)
    """

    # Route files
    route_file_name: str = "http-routes.cnf"
    config_dir: str | Path | None = None  # Server-wide routes, loaded first
    package_config_dirs: tuple[str | Path, ...] = ()  # Loaded after, in sorted order

    # Directives that may never be claimed by a route
    prohibited_directives: frozenset[str] = DEFAULT_PROHIBITED_DIRECTIVES
    invoke_directive: str = "invoke"  # The host's own invoke path, always reserved

    # Character sets
    uri_charset: str = "ascii"  # Raw URI text on the wire
    content_charset: str = "utf-8"  # Decoded path, query, and body content

    # Gateway headers
    response_duration_header: str = "X-Response-Duration"
    request_uri_header: str = "X-Waypost-Request-URI"

    # Server (``waypost serve``)
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def reserved_directives(self) -> frozenset[str]:
        """Directives no route may claim: the prohibited set plus the invoke directive."""
        return self.prohibited_directives | {self.invoke_directive}

    def route_files(self) -> list[Path]:
        """Return candidate route files in load order.

        The server-wide file comes first, followed by one file per package
        configuration directory sorted by directory name so the order is
        predictable.
        """
        files: list[Path] = []
        if self.config_dir is not None:
            files.append(Path(self.config_dir) / self.route_file_name)
        for directory in sorted((Path(d) for d in self.package_config_dirs), key=lambda p: p.name):
            files.append(directory / self.route_file_name)
        return files
