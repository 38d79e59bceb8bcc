"""Percent-encoding and decoding of URI text.

``encode``/``decode`` are form-style: every character outside the
unreserved set is escaped, space is always written as ``%20`` (never
``+``), and ``decode`` reads ``+`` as a space. ``quote_component`` and
``unquote_component`` are the strict per-component variants the URI
emitter and parser use.

Malformed escapes and undecodable byte sequences raise ``URISyntaxError``.
"""

import re
from collections.abc import Iterable
from urllib.parse import quote, unquote

from waypost.errors import URISyntaxError

# Charset for raw URI text on the wire.
URI_CHARSET = "ascii"
# Charset for decoded component content (path, query, body).
DEFAULT_CHARSET = "utf-8"

UNRESERVED = "-._~"
SUB_DELIMS = "!$&'()*+,;="

# Characters ``encode`` leaves alone in addition to letters, digits, and "-._~".
_FORM_SAFE = "*"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _charset(charset: str | None) -> str:
    return charset or DEFAULT_CHARSET


def check_escapes(value: str) -> None:
    """Raise ``URISyntaxError`` if *value* has a ``%`` not followed by two hex digits."""
    match = _BAD_ESCAPE.search(value)
    if match is not None:
        raise URISyntaxError(value, "Malformed escape pair", match.start())


def quote_component(value: str, safe: str, charset: str | None = None) -> str:
    """Percent-encode *value*, leaving letters, digits, ``-._~`` and *safe* as-is.

    ``%`` is always escaped, so the result decodes back to *value* exactly.
    """
    try:
        return quote(value, safe=safe.replace("%", ""), encoding=_charset(charset), errors="strict")
    except UnicodeEncodeError as exc:
        raise URISyntaxError(value, f"Cannot encode with charset {_charset(charset)!r}", exc.start) from exc


def unquote_component(value: str, charset: str | None = None) -> str:
    """Strictly percent-decode *value*; ``+`` is left as a literal plus."""
    if "%" not in value:
        return value
    check_escapes(value)
    try:
        return unquote(value, encoding=_charset(charset), errors="strict")
    except UnicodeDecodeError as exc:
        raise URISyntaxError(value, f"Cannot decode with charset {_charset(charset)!r}") from exc


def encode(value: str, charset: str | None = None) -> str:
    """URI encode a string; space becomes ``%20``.

    >>> encode("a b&c")
    'a%20b%26c'
    """
    return quote_component(value, _FORM_SAFE, charset)


def decode(value: str, charset: str | None = None) -> str:
    """URI decode a string; ``+`` is read as a space.

    >>> decode("a+b%26c")
    'a b&c'
    """
    return unquote_component(value.replace("+", " "), charset)


def encode_all(values: Iterable[str], charset: str | None = None) -> list[str]:
    """URI encode each string in *values*, returning a new list."""
    return [encode(value, charset) for value in values]


def decode_all(values: Iterable[str], charset: str | None = None) -> list[str]:
    """URI decode each string in *values*, returning a new list."""
    return [decode(value, charset) for value in values]
