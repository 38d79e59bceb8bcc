"""Default port registry.

Maps a URI scheme to its well-known (IANA registered) port. Built once at
import time and read-only thereafter.
"""

from collections.abc import Mapping
from types import MappingProxyType

DEFAULT_PORTS: Mapping[str, int] = MappingProxyType(
    {
        "ftp": 21,
        "ssh": 22,
        "sftp": 22,
        "telnet": 23,
        "smtp": 25,
        "gopher": 70,
        "http": 80,
        "ws": 80,
        "pop": 110,
        "nntp": 119,
        "news": 119,
        "imap": 143,
        "snmp": 161,
        "ldap": 389,
        "https": 443,
        "wss": 443,
        "rtsp": 554,
        "ipp": 631,
        "nntps": 563,
        "ldaps": 636,
        "imaps": 993,
        "pop3s": 995,
        "sip": 5060,
        "sips": 5061,
        "xmpp": 5222,
        "amqp": 5672,
        "amqps": 5671,
        "redis": 6379,
        "mqtt": 1883,
        "mqtts": 8883,
        "postgresql": 5432,
        "mysql": 3306,
        "mongodb": 27017,
    }
)


def lookup(scheme: str | None) -> int | None:
    """Return the well-known port for *scheme*, or ``None`` if unregistered."""
    if not scheme:
        return None
    return DEFAULT_PORTS.get(scheme.lower())


def is_default(scheme: str | None, port: int | None) -> bool:
    """Whether *port* is the default port for *scheme*."""
    if port is None:
        return False
    return lookup(scheme) == port
