"""URI codec — parse URI strings into immutable documents and emit them back.

Pure functions throughout: safe to call from any thread without locking.
"""

from waypost.uri.codec import decode, encode
from waypost.uri.document import URI, RegistryAuthority, ServerAuthority
from waypost.uri.parser import emit, normalize, parse
from waypost.uri.template import expand, substitute

__all__ = [
    "URI",
    "RegistryAuthority",
    "ServerAuthority",
    "decode",
    "emit",
    "encode",
    "expand",
    "normalize",
    "parse",
    "substitute",
]
