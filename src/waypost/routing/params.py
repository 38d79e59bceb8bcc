"""Path templates — ``/users/{id}`` compiled into a matcher.

Placeholder forms:

- ``{name}``            captures any run of non-slash characters, possibly empty
- ``{name:int}``        uses a named converter from ``CONVERTERS``
- ``{name:[a-z]+}``     any other text after ``:`` is a regular expression
- ``{name=value}``      assigns the constant *value* to *name*; a non-empty
                        capture is recorded under the raw placeholder text

Placeholder names and constants are percent-decoded, so ``{a%20}``
captures into the key ``"a "``. Empty captures are omitted from the result.
"""

import re
from dataclasses import dataclass

from waypost.errors import ConfigurationError
from waypost.uri.codec import unquote_component
from waypost.uri.template import PLACEHOLDER_PATTERN

DEFAULT_PATTERN = r"[^/]*"

# Named converters usable as ``{name:converter}``.
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A parsed ``{...}`` placeholder in a path template."""

    text: str
    name: str
    pattern: str = DEFAULT_PATTERN
    constant: str | None = None


def parse_placeholder(text: str) -> Placeholder:
    """Parse the text between the braces of a placeholder.

    Examples::

        "id"                 -> Placeholder("id", "id")
        "id:int"             -> Placeholder("id:int", "id", r"\\d+")
        "c=foo.bar%3Abaz"    -> Placeholder(..., "c", constant="foo.bar:baz")
    """
    name, equals, constant = text.partition("=")
    if equals and name and ":" not in name:
        return Placeholder(
            text=text,
            name=unquote_component(name),
            constant=unquote_component(constant),
        )
    name, colon, pattern = text.partition(":")
    if not colon:
        return Placeholder(text=text, name=unquote_component(text))
    return Placeholder(
        text=text,
        name=unquote_component(name),
        pattern=CONVERTERS.get(pattern, pattern),
    )


class PathTemplate:
    """A compiled path template.

    Usage::

        template = PathTemplate("/users/{id}")
        template.match("/users/42")     # {"id": "42"}
        template.match("/orders/42")    # None
    """

    __slots__ = ("_regex", "placeholders", "template")

    def __init__(self, template: str) -> None:
        self.template = template
        placeholders: list[Placeholder] = []
        pattern = ""
        index = 0
        for match in PLACEHOLDER_PATTERN.finditer(template):
            placeholder = parse_placeholder(match.group(1))
            pattern += re.escape(template[index : match.start()])
            pattern += f"(?P<_{len(placeholders)}>{placeholder.pattern})"
            placeholders.append(placeholder)
            index = match.end()
        pattern += re.escape(template[index:])

        try:
            self._regex = re.compile(pattern)
        except re.error as exc:
            msg = f"Invalid pattern in route template {template!r}: {exc}"
            raise ConfigurationError(msg) from exc
        self.placeholders = tuple(placeholders)

    @property
    def names(self) -> tuple[str, ...]:
        """Decoded placeholder names in template order."""
        return tuple(p.name for p in self.placeholders)

    def matches(self, path: str) -> bool:
        return self._regex.fullmatch(path) is not None

    def match(self, path: str) -> dict[str, str] | None:
        """Match *path* against the template, returning decoded captures or ``None``."""
        found = self._regex.fullmatch(path)
        if found is None:
            return None

        captures: dict[str, str] = {}
        for i, placeholder in enumerate(self.placeholders):
            value = found.group(f"_{i}")
            if placeholder.constant is not None:
                captures[placeholder.name] = placeholder.constant
                if value:
                    captures[placeholder.text] = unquote_component(value)
            elif value:
                captures[placeholder.name] = unquote_component(value)
        return captures

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PathTemplate) and other.template == self.template

    def __hash__(self) -> int:
        return hash(self.template)

    def __repr__(self) -> str:
        return f"PathTemplate({self.template!r})"

    def __str__(self) -> str:
        return self.template
