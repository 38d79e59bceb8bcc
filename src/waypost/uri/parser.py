"""URI structural codec — string ⇄ ``URI`` document.

``parse`` decomposes a URI string following the RFC 3986 generic syntax;
``emit`` serializes a document back into a URI string; ``normalize`` is
``emit(parse(raw))`` and is idempotent.

Normalization performed by ``emit``:

- scheme and host are written in lowercase
- a port equal to the scheme's default port is dropped
- every component is re-escaped with a canonical set of safe characters
- Windows UNC file URIs (``file:////server/share``) are written in their
  server-based form (``file://server/share``)

Dot segments (``/./``, ``/../``) are preserved.
"""

import re

from waypost.errors import URISyntaxError
from waypost.uri import ports
from waypost.uri import path as paths
from waypost.uri.codec import SUB_DELIMS, check_escapes, quote_component, unquote_component
from waypost.uri.document import SCHEME_PATTERN, Authority, RegistryAuthority, ServerAuthority, URI
from waypost.uri.query import emit as emit_query
from waypost.uri.query import parse as parse_query
from waypost.uri.template import VARIABLE_PATTERN

# RFC 3986, appendix B.
_URI_PATTERN = re.compile(r"(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?", re.DOTALL)

_ILLEGAL = re.compile(r"[\x00-\x20\"<>\\^`{|}\x7f]")
_USERINFO = re.compile(r"(?:[A-Za-z0-9\-._~!$&'()*+,;=:]|%[0-9A-Fa-f]{2})*")
_REG_NAME = re.compile(r"(?:[A-Za-z0-9\-._~!$&'()*+,;=]|%[0-9A-Fa-f]{2})*")
_IP_LITERAL = re.compile(r"\[(?:[0-9A-Fa-f:.]+|v[0-9A-Fa-f]+\.[A-Za-z0-9\-._~!$&'()*+,;=:]+)\]")
_PORT = re.compile(r"[0-9]+")

_UNC_PREFIX = "file:////"
_FILE_SCHEME = "file"

_SEGMENT_SAFE = SUB_DELIMS + ":@"
_BODY_SAFE = SUB_DELIMS + ":@/"
_FRAGMENT_SAFE = SUB_DELIMS + ":@/?"
_USER_SAFE = SUB_DELIMS
_PASSWORD_SAFE = SUB_DELIMS + ":"
_HOST_SAFE = SUB_DELIMS


def parse(raw: str, charset: str | None = None) -> URI:
    """Parse a URI string into a ``URI`` document.

    Raises ``URISyntaxError`` if *raw* is not a valid URI.

    Examples::

        parse("mailto:a@b.com").body               -> "a@b.com"
        parse("http://h:8080/p/f?a=1").port        -> 8080
        parse("/a/b").path, parse("/a/b").file     -> ("a",), "b"
    """
    # Treat Windows UNC file URIs as server-based rather than path-based.
    if raw[: len(_UNC_PREFIX)].lower() == _UNC_PREFIX:
        raw = "file://" + raw[len(_UNC_PREFIX) :]

    illegal = _ILLEGAL.search(raw)
    if illegal is not None:
        raise URISyntaxError(raw, "Illegal character", illegal.start())
    check_escapes(raw)

    match = _URI_PATTERN.fullmatch(raw)
    if match is None:  # pragma: no cover
        raise URISyntaxError(raw, "Malformed URI")
    scheme, authority, path, query, fragment = match.groups()

    if scheme is not None and not SCHEME_PATTERN.fullmatch(scheme):
        raise URISyntaxError(raw, "Illegal character in scheme name", 0)
    for name, part in (("path", path), ("query", query), ("fragment", fragment)):
        if part and ("[" in part or "]" in part):
            raise URISyntaxError(raw, f"Illegal character in {name}", raw.find("[" if "[" in part else "]"))
    if fragment is not None and "#" in fragment:
        raise URISyntaxError(raw, "Illegal character in fragment", match.start(5) + fragment.index("#"))

    decoded_fragment = None if fragment is None else unquote_component(fragment, charset)
    decoded_query = parse_query(query, decode=True, charset=charset) if query else None

    if scheme is not None and authority is None and not path.startswith(paths.DELIMITER):
        if not path and not query:
            raise URISyntaxError(raw, "Expected scheme-specific part", len(scheme) + 1)
        return URI(
            scheme=scheme,
            body=unquote_component(path, charset),
            query=decoded_query,
            fragment=decoded_fragment,
        )

    segments: tuple[str, ...] | None = None
    file = None
    absolute_path = False
    if path:
        decoded_path = unquote_component(path, charset)
        parts = paths.split(decoded_path)
        if not decoded_path.endswith(paths.DELIMITER):
            file = parts.pop()
        segments = tuple(parts)
        absolute_path = decoded_path.startswith(paths.DELIMITER)

    return URI(
        scheme=scheme,
        authority=None if authority is None else _parse_authority(authority, raw, charset),
        path=segments,
        path_absolute=absolute_path,
        file=file,
        query=decoded_query,
        fragment=decoded_fragment,
    )


def _parse_authority(text: str, raw: str, charset: str | None) -> Authority:
    """Decompose an authority into server-based or registry-based form."""
    userinfo, at, hostport = text.rpartition("@")
    user = password = None
    if at:
        if not _USERINFO.fullmatch(userinfo):
            return _registry(text, raw)
        name, colon, secret = userinfo.partition(":")
        user = unquote_component(name, charset)
        password = unquote_component(secret, charset) if colon else None

    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0 or not _IP_LITERAL.fullmatch(hostport[: end + 1]):
            raise URISyntaxError(raw, "Malformed IPv6 address", raw.find("["))
        host = hostport[: end + 1]
        rest = hostport[end + 1 :]
        if rest and not rest.startswith(":"):
            raise URISyntaxError(raw, "Illegal character in authority", raw.find(rest))
        port_text = rest[1:]
    else:
        host, colon, port_text = hostport.rpartition(":")
        if not colon:
            host, port_text = hostport, ""
        if not _REG_NAME.fullmatch(host):
            return _registry(text, raw)
        host = unquote_component(host, charset)

    if port_text and not port_text.isascii():
        raise URISyntaxError(raw, "Illegal character in port", raw.find(port_text))
    if port_text and not _PORT.fullmatch(port_text):
        return _registry(text, raw)
    if len(port_text.lstrip("0")) > 5:
        raise URISyntaxError(raw, "Port out of range", raw.find(port_text))
    port = int(port_text) if port_text else None
    if port is not None and port > 65535:
        raise URISyntaxError(raw, "Port out of range", raw.find(port_text))

    return ServerAuthority(host=host, port=port, user=user, password=password)


def _registry(text: str, raw: str) -> RegistryAuthority:
    if "[" in text or "]" in text:
        raise URISyntaxError(raw, "Illegal character in authority", raw.find("["))
    return RegistryAuthority(registry=text)


def emit(uri: URI, charset: str | None = None) -> str:
    """Serialize a ``URI`` document into a URI string.

    Raises ``URISyntaxError`` if the document cannot be written as a valid URI.
    """
    output = f"{uri.scheme}:" if uri.scheme is not None else ""

    if uri.opaque:
        body = quote_component(uri.body or "", _BODY_SAFE, charset)
        if not body and not uri.query:
            raise URISyntaxError(str(uri.scheme), "Expected scheme-specific part")
        if body.startswith(paths.DELIMITER):
            body = "%2F" + body[1:]
        output += body
    else:
        if uri.authority is not None:
            output += "//" + _emit_authority(uri.authority, uri.scheme, charset)
        path = _emit_path(uri, charset)
        if uri.authority is None and uri.scheme is not None:
            if uri.scheme == _FILE_SCHEME and path.startswith(paths.DELIMITER):
                # Server-less file URIs keep the empty authority: file:///a/b
                output += "//"
            elif path and not path.startswith(paths.DELIMITER):
                raise URISyntaxError(path, "Relative path in absolute URI")
            elif not path and not uri.query:
                raise URISyntaxError(str(uri.scheme), "Expected scheme-specific part")
        if uri.authority is None and path.startswith("//") and uri.scheme != _FILE_SCHEME:
            raise URISyntaxError(path, "Path cannot begin with '//' without an authority")
        output += path

    if uri.query:
        query = emit_query(uri.query, encode=True, charset=charset)
        if query:
            output += "?" + query
    if uri.fragment is not None:
        output += "#" + quote_component(uri.fragment, _FRAGMENT_SAFE, charset)
    return output


def _emit_authority(authority: Authority, scheme: str | None, charset: str | None) -> str:
    if isinstance(authority, RegistryAuthority):
        if any(c in authority.registry for c in "/?#[]"):
            raise URISyntaxError(authority.registry, "Illegal character in authority")
        return authority.registry

    output = ""
    if authority.user:
        output = quote_component(authority.user, _USER_SAFE, charset)
        if authority.password:
            output += ":" + quote_component(authority.password, _PASSWORD_SAFE, charset)
        output += "@"

    host = authority.host.lower()
    if host.startswith("["):
        if not _IP_LITERAL.fullmatch(host):
            raise URISyntaxError(authority.host, "Malformed IPv6 address")
        output += host
    else:
        output += quote_component(host, _HOST_SAFE, charset)

    if authority.port is not None and not ports.is_default(scheme, authority.port):
        output += f":{authority.port}"
    return output


def _emit_path(uri: URI, charset: str | None) -> str:
    if uri.path is None and uri.file is None:
        return ""

    pieces = list(uri.path or ())
    if uri.file is not None:
        pieces.append(uri.file)

    rooted = uri.path_absolute or uri.authority is not None
    encoded = [_emit_segment(piece, charset) for piece in pieces]
    if encoded and not rooted and uri.scheme is None:
        # A colon in the first relative segment would read as a scheme.
        encoded[0] = encoded[0].replace(":", "%3A")

    output = paths.DELIMITER if rooted else ""
    output += paths.join(encoded)
    if uri.file is None and encoded:
        output += paths.DELIMITER
    return output


def _emit_segment(segment: str, charset: str | None) -> str:
    # A delimiter inside a %name% token belongs to the token, not the path.
    output = ""
    index = 0
    for match in VARIABLE_PATTERN.finditer(segment):
        output += quote_component(segment[index : match.start()], _SEGMENT_SAFE, charset)
        output += quote_component(match.group(), _SEGMENT_SAFE + paths.DELIMITER, charset)
        index = match.end()
    return output + quote_component(segment[index:], _SEGMENT_SAFE, charset)


def canonical_path(raw: str, charset: str | None = None) -> str:
    """Return the path of *raw* with each segment re-escaped in canonical form.

    Segments are split before decoding, so an escaped delimiter stays inside
    its segment and a literal ``%`` never reads as a substitution token::

        canonical_path("http://h/docs/a%2fb?x=1")    -> "/docs/a%2Fb"
        canonical_path("/a/50%25/%7Eb")              -> "/a/50%25/~b"

    *raw* is expected to have passed ``parse`` already.
    """
    match = _URI_PATTERN.fullmatch(raw)
    path = match.group(3) if match is not None else ""
    return paths.DELIMITER.join(
        quote_component(unquote_component(segment, charset), _SEGMENT_SAFE, charset)
        for segment in path.split(paths.DELIMITER)
    )


def normalize(raw: str, charset: str | None = None) -> str:
    """Normalize a URI string: ``emit(parse(raw))``.

    >>> normalize("HTTP://Example.COM:80/a/b?x=1+2")
    'http://example.com/a/b?x=1%202'
    """
    return emit(parse(raw, charset), charset)


def normalize_document(uri: URI, charset: str | None = None) -> URI:
    """Normalize a document by emitting and re-parsing it."""
    return parse(emit(uri, charset), charset)
