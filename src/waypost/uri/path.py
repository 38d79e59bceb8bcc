"""URI path segmentation.

``split`` breaks a path into segments on ``/`` but never inside a
``%name%`` substitution token, so a variable whose name contains a
slash (``%order/id%``) survives as part of a single segment.
"""

from collections.abc import Iterable

from waypost.uri.template import VARIABLE_PATTERN

DELIMITER = "/"


def split(path: str) -> list[str]:
    """Split a path into its segments.

    One leading and one trailing delimiter are ignored. Consecutive
    delimiters yield empty segments. Substitution tokens are opaque::

        "/a/b/c"          -> ["a", "b", "c"]
        "a//b/"           -> ["a", "", "b"]
        "/x%a/b%y/z"      -> ["x%a/b%y", "z"]
        "/"               -> []
        "//"              -> [""]
    """
    inner = path
    if inner.startswith(DELIMITER):
        inner = inner[1:]
    if inner.endswith(DELIMITER):
        inner = inner[:-1]
    if not inner:
        # "//" still delimits a single empty segment.
        return [""] if len(path) > 1 else []

    segments: list[str] = []
    index = 0
    for match in VARIABLE_PATTERN.finditer(inner):
        _split_span(inner[index : match.start()], segments)
        _append(match.group(), segments)
        index = match.end()
    _split_span(inner[index:], segments)
    return segments


def join(segments: Iterable[str]) -> str:
    """Join segments with a single delimiter. No escaping is performed."""
    return DELIMITER.join(segments)


def _append(text: str, segments: list[str]) -> None:
    """Extend the last segment with *text*, starting the first if needed."""
    if segments:
        segments[-1] += text
    else:
        segments.append(text)


def _split_span(span: str, segments: list[str]) -> None:
    """Split a token-free span, continuing the current last segment."""
    head, *rest = span.split(DELIMITER)
    _append(head, segments)
    segments.extend(rest)
