"""Waypost exception hierarchy.

Shared across the URI codec, route table, router, and gateway so every
module raises and catches the same types.
"""

from dataclasses import dataclass
from http import HTTPStatus


class WaypostError(Exception):
    """Base for all waypost-specific errors."""


class URISyntaxError(WaypostError, ValueError):
    """Raised when a string is not a valid URI, or a document cannot be emitted.

    Carries the offending *input*, a human readable *reason*, and the
    character *index* where the problem was detected (when known).
    """

    def __init__(self, input: str, reason: str, index: int | None = None) -> None:  # noqa: A002
        self.input = input
        self.reason = reason
        self.index = index
        super().__init__(input, reason, index)

    def __str__(self) -> str:
        if self.index is None:
            return f"{self.reason}: {self.input!r}"
        return f"{self.reason} at index {self.index}: {self.input!r}"


class ConfigurationError(WaypostError, ValueError):
    """Raised when a route definition or router configuration is invalid.

    Typically raised while a route table is being built from configuration.
    """


@dataclass(frozen=True, slots=True)
class DirectiveFailure:
    """A single failed register/unregister call made during a reload."""

    directive: str
    action: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.action} {self.directive!r}: {self.error}"


class PartialReloadFailure(WaypostError):  # noqa: N818
    """One or more directive (un)registrations failed during a reload.

    The new route table is installed regardless; every registration was
    attempted and each failure is listed in ``failures``.
    """

    def __init__(self, failures: tuple[DirectiveFailure, ...]) -> None:
        self.failures = failures
        lines = "; ".join(str(failure) for failure in failures)
        super().__init__(f"{len(failures)} directive(s) failed during reload: {lines}")


@dataclass(slots=True, eq=False)
class HTTPError(WaypostError):
    """An error that maps directly to an HTTP status code.

    Raised by ``Router.resolve`` and the gateway. The gateway catches these
    and sends the status with its standard reason phrase.

    Not frozen: the interpreter sets ``__traceback__`` and ``__context__``
    on the instance while it propagates.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def phrase(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class Forbidden(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """403 — a registered directive was requested but no route matched."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — the requested directive is not registered, or the target is unknown."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
