"""Request parameter protocol — what a service receives from the gateway.

Services are called with the captures merged over the query string. They
should depend on this protocol rather than on ``QueryParams`` so they can
be exercised with any multi-valued mapping in tests.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """Read-only string parameters where a key may repeat.

    Indexing and ``get`` give the first value; ``get_list`` gives all of
    them in request order. ``get_int`` and ``get_bool`` coerce the first
    value and fall back to *default*.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
    def get_int(self, key: str, default: int | None = None) -> int | None: ...
    def get_bool(self, key: str, default: bool | None = None) -> bool | None: ...
