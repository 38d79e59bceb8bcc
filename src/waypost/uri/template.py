"""Variable substitution inside URI strings.

Two token forms are recognised:

- ``{name}`` placeholders, expanded in the raw URI string before parsing
  (braces are not legal URI characters, so they can never survive a parse).
- ``%name%`` variables, substituted in each decoded component of a parsed
  URI (written ``%25name%25`` in the raw string).

Names may be qualified with ``/`` to reach into nested mappings:
``{order/id}`` resolves ``scope["order"]["id"]``. Tokens whose name does
not resolve are left untouched.
"""

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from waypost.uri import codec

if TYPE_CHECKING:
    from waypost.uri.document import URI

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")
VARIABLE_PATTERN = re.compile(r"%([^%]+)%")

_MISSING = object()


def resolve(name: str, scope: Mapping[str, Any]) -> Any:
    """Look up a possibly ``/``-qualified *name* in *scope*.

    An exact key wins over a qualified walk, so ``{"a/b": 1}`` resolves
    ``a/b`` directly. Returns ``None`` when the name does not resolve.
    """
    if name in scope:
        return scope[name]
    value: Any = scope
    for part in name.split("/"):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part, _MISSING)
        if value is _MISSING:
            return None
    return value


def expand(template: str, scope: Mapping[str, Any], *, encode: bool = False, charset: str | None = None) -> str:
    """Replace ``{name}`` placeholders in *template* with values from *scope*.

    With ``encode=True`` substituted values are percent-encoded, and so are
    the braces of unresolved placeholders, so the result is always a
    parseable URI string.
    """

    def _replace(match: re.Match[str]) -> str:
        value = resolve(match.group(1), scope)
        if value is None:
            return codec.encode(match.group(), charset) if encode else match.group()
        text = str(value)
        return codec.encode(text, charset) if encode else text

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def substitute_variables(text: str, scope: Mapping[str, Any]) -> str:
    """Replace ``%name%`` variables in *text* with values from *scope*."""

    def _replace(match: re.Match[str]) -> str:
        value = resolve(match.group(1), scope)
        return match.group() if value is None else str(value)

    return VARIABLE_PATTERN.sub(_replace, text)


def substitute_document(uri: "URI", scope: Mapping[str, Any]) -> "URI":
    """Substitute ``%name%`` variables in every string component of *uri*."""
    from waypost.uri.document import ServerAuthority

    def sub(value: str | None) -> str | None:
        return None if value is None else substitute_variables(value, scope)

    authority = uri.authority
    if isinstance(authority, ServerAuthority):
        authority = authority.replace(
            host=substitute_variables(authority.host, scope),
            user=sub(authority.user),
            password=sub(authority.password),
        )
    elif authority is not None:
        authority = authority.replace(registry=substitute_variables(authority.registry, scope))

    query = None
    if uri.query is not None:
        query = {}
        for key, value in uri.query.items():
            if isinstance(value, str):
                query[substitute_variables(key, scope)] = substitute_variables(value, scope)
            else:
                query[substitute_variables(key, scope)] = [substitute_variables(v, scope) for v in value]

    return uri.replace(
        scheme=sub(uri.scheme),
        body=sub(uri.body),
        authority=authority,
        path=None if uri.path is None else tuple(substitute_variables(s, scope) for s in uri.path),
        file=sub(uri.file),
        query=query,
        fragment=sub(uri.fragment),
    )


def substitute(uri: str, scope: Mapping[str, Any], charset: str | None = None) -> str:
    """Perform variable substitution on the components of a URI string.

    ``{name}`` placeholders are expanded first (values encoded), then the
    result is parsed, ``%name%`` variables are substituted component by
    component, and the document is emitted again::

        >>> substitute("sap+idoc:sap_r3{a}", {"a": "1"})
        'sap+idoc:sap_r31'
    """
    from waypost.uri.parser import emit, parse

    document = parse(expand(uri, scope, encode=True, charset=charset), charset=charset)
    return emit(substitute_document(document, scope), charset=charset)
