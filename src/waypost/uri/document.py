"""URI document — the structured, immutable form of a URI.

``URI`` and its authority variants are frozen dataclasses. Use
``URI.replace(...)`` (``dataclasses.replace``) to derive a modified copy.
"""

import dataclasses
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from waypost.errors import URISyntaxError

SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

QueryValue: TypeAlias = str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RegistryAuthority:
    """An authority with no identifiable host, kept as an opaque name."""

    registry: str

    def replace(self, **changes: Any) -> "RegistryAuthority":
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        return self.registry


@dataclass(frozen=True, slots=True)
class ServerAuthority:
    """A server-based authority: ``user:password@host:port``.

    ``port`` is ``None`` when the source did not specify one.
    """

    host: str
    port: int | None = None
    user: str | None = None
    password: str | None = None

    def __post_init__(self) -> None:
        if self.port is not None and not 0 <= self.port <= 65535:
            raise URISyntaxError(str(self.port), "Port out of range")

    def replace(self, **changes: Any) -> "ServerAuthority":
        return dataclasses.replace(self, **changes)


Authority: TypeAlias = ServerAuthority | RegistryAuthority


def freeze_query(query: Mapping[str, Any]) -> Mapping[str, QueryValue]:
    """Copy *query* into a read-only mapping with list values as tuples."""
    frozen: dict[str, QueryValue] = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, str):
            frozen[key] = value
        elif isinstance(value, Sequence):
            frozen[key] = tuple(str(v) for v in value)
        else:
            frozen[key] = str(value)
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class URI:
    """A parsed URI.

    Hierarchical URIs use ``authority``, ``path``/``path_absolute``/``file``,
    ``query``, and ``fragment``. Opaque URIs (``mailto:a@b.com``) carry the
    decoded scheme-specific part in ``body`` instead of authority and path.

    ``path`` holds the directory segments; ``file`` is the last segment when
    the path does not end with ``/``. ``path=None`` means there is no path
    at all, while ``path=()`` with ``path_absolute=True`` is the root ``/``.

    Usage::

        uri = parse("http://example.com:8080/a/b.html?q=1")
        uri.authority.port   # 8080
        uri.path             # ("a",)
        uri.file             # "b.html"
        uri.replace(fragment="top")
    """

    scheme: str | None = None
    body: str | None = None
    authority: Authority | None = None
    path: tuple[str, ...] | None = None
    path_absolute: bool = True
    file: str | None = None
    query: Mapping[str, QueryValue] | None = field(default=None, hash=False)
    fragment: str | None = None

    def __post_init__(self) -> None:
        if self.scheme is not None:
            if not SCHEME_PATTERN.fullmatch(self.scheme):
                raise URISyntaxError(self.scheme, "Illegal character in scheme name")
            object.__setattr__(self, "scheme", self.scheme.lower())
        if self.path is not None and not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if self.query is not None and not isinstance(self.query, MappingProxyType):
            object.__setattr__(self, "query", freeze_query(self.query))

        if self.body is not None:
            if self.scheme is None:
                raise URISyntaxError(self.body, "Opaque URI requires a scheme")
            if self.authority is not None or self.path is not None or self.file is not None:
                raise URISyntaxError(self.body, "Opaque URI cannot have an authority or path")

    @property
    def opaque(self) -> bool:
        """True when the URI has a scheme-specific body instead of authority and path."""
        return self.body is not None

    @property
    def absolute(self) -> bool:
        """True when the URI has a scheme."""
        return self.scheme is not None

    @property
    def host(self) -> str | None:
        if isinstance(self.authority, ServerAuthority):
            return self.authority.host
        return None

    @property
    def port(self) -> int | None:
        if isinstance(self.authority, ServerAuthority):
            return self.authority.port
        return None

    def replace(self, **changes: Any) -> "URI":
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Return the components that are present as a JSON-friendly dict."""
        output: dict[str, Any] = {}
        if self.scheme is not None:
            output["scheme"] = self.scheme
        if self.body is not None:
            output["body"] = self.body
        if isinstance(self.authority, ServerAuthority):
            output["authority"] = {
                key: value
                for key, value in (
                    ("user", self.authority.user),
                    ("password", self.authority.password),
                    ("host", self.authority.host),
                    ("port", self.authority.port),
                )
                if value is not None
            }
        elif self.authority is not None:
            output["authority"] = {"registry": self.authority.registry}
        if self.path is not None or self.file is not None:
            output["path"] = list(self.path or ())
            output["path_absolute"] = self.path_absolute
        if self.file is not None:
            output["file"] = self.file
        if self.query is not None:
            output["query"] = {k: v if isinstance(v, str) else list(v) for k, v in self.query.items()}
        if self.fragment is not None:
            output["fragment"] = self.fragment
        output["opaque"] = self.opaque
        output["absolute"] = self.absolute
        return output

    def __str__(self) -> str:
        from waypost.uri.parser import emit

        return emit(self)
