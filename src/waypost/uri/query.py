"""Query string codec.

``parse`` turns ``a=1&b=2&a=3`` into an ordered mapping where repeated
keys collapse into lists (``{"a": ["1", "3"], "b": "2"}``); ``emit`` is
the inverse. ``QueryParams`` is an immutable, multi-valued read view for
request handling.

A key written with a ``[]`` suffix (``a[]=1``) always parses as a list,
which is how ``emit`` writes single-element lists so they round-trip.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, TypeAlias

from waypost.uri import codec

PAIR_SEPARATOR = "&"
KEY_VALUE_SEPARATOR = "="
ARRAY_SUFFIX = "[]"

QueryMapping: TypeAlias = dict[str, str | list[str]]


def parse(raw: str, decode: bool = True, charset: str | None = None) -> QueryMapping:
    """Parse a query string.

    A pair without ``=`` has an empty value; empty pairs are skipped. When
    *decode* is true keys and values are URI decoded (``+`` reads as space).
    """
    output: QueryMapping = {}
    for pair in raw.split(PAIR_SEPARATOR):
        if not pair:
            continue
        name, _, value = pair.partition(KEY_VALUE_SEPARATOR)
        if decode:
            name = codec.decode(name, charset)
            value = codec.decode(value, charset)

        forced = name.endswith(ARRAY_SUFFIX)
        if forced:
            name = name[: -len(ARRAY_SUFFIX)]

        existing = output.get(name)
        if existing is None:
            output[name] = [value] if forced else value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            output[name] = [existing, value]
    return output


def emit(query: Mapping[str, Any], encode: bool = True, charset: str | None = None) -> str:
    """Emit a query string from *query*, in insertion order.

    List and tuple values produce one pair per element. ``None`` values are
    skipped, and so is an empty list, which has no query string form. When
    *encode* is true keys and values are URI encoded with space written as
    ``%20``.
    """
    pairs: list[str] = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, str) or not isinstance(value, Iterable):
            pairs.append(_pair(key, str(value), encode, charset))
            continue
        values = [str(v) for v in value if v is not None]
        name = key + ARRAY_SUFFIX if len(values) == 1 else key
        pairs.extend(_pair(name, v, encode, charset) for v in values)
    return PAIR_SEPARATOR.join(pairs)


def _pair(name: str, value: str, encode: bool, charset: str | None) -> str:
    if encode:
        name = codec.encode(name, charset)
        value = codec.encode(value, charset)
    return name + KEY_VALUE_SEPARATOR + value


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> QueryMapping:
    """Merge two query mappings; keys in *override* replace those in *base*.

    Keys keep the position of their first appearance in *base*.
    """
    merged: QueryMapping = {}
    for source in (base, override):
        for key, value in source.items():
            merged[key] = value if isinstance(value, str) else list(value)
    return merged


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _data: Parsed query string as field name -> list of values.
        _raw: Raw query string.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, list[str]]
    _raw: str

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: str | bytes = "", charset: str | None = None) -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_data", _lists(parse(query_string, decode=True, charset=charset)))

    @classmethod
    def from_mapping(cls, query: Mapping[str, Any]) -> "QueryParams":
        """Build parameters from an already decoded mapping."""
        params = cls.__new__(cls)
        object.__setattr__(params, "_raw", emit(query))
        object.__setattr__(params, "_data", _lists(query))
        return params

    def __setattr__(self, name: str, value: object) -> None:
        msg = "QueryParams is immutable"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    @property
    def query_string(self) -> str:
        """The encoded query string these parameters were built from."""
        return self._raw

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """Return value as bool (``true``/``1``/``yes``/``on`` → True)."""
        value = self.get(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def to_dict(self) -> QueryMapping:
        """Return the parameters in ``parse`` form: single values as strings."""
        return {key: values[0] if len(values) == 1 else list(values) for key, values in self._data.items()}


def _lists(query: Mapping[str, Any]) -> dict[str, list[str]]:
    data: dict[str, list[str]] = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, str):
            data[key] = [value]
        elif isinstance(value, Iterable):
            data[key] = [str(v) for v in value]
        else:
            data[key] = [str(value)]
    return data
