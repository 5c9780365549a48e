"""Ordered header multimap."""

from typing import Iterator, Optional

from httpengine.domain.errors import InvalidHeaderValue

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def canonical_name(name: str) -> str:
    """Return the MIME canonical form of a header name.

    ``content-length`` becomes ``Content-Length``. Names containing
    characters outside the token alphabet are returned unchanged.
    """
    if not name or any(char not in _TOKEN_CHARS for char in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


class Headers:
    """Header names mapped to every value received, in arrival order.

    Names are stored and looked up exactly as given; the parser is
    responsible for canonicalizing them before they are added. Values must
    be single-line ISO-8859-1 text so that ``render()`` is always writable.
    """

    def __init__(self, initial: Optional[dict[str, list[str]]] = None) -> None:
        self._values: dict[str, list[str]] = {}
        self._received: dict[str, int] = {}
        for name, values in (initial or {}).items():
            for value in values:
                self.add(name, value)

    def add(self, name: str, value: str) -> None:
        if "\r" in value or "\n" in value:
            raise InvalidHeaderValue(f"line break in value of {name}: {value!r}")
        try:
            name.encode("iso-8859-1")
            value.encode("iso-8859-1")
        except UnicodeEncodeError as exc:
            raise InvalidHeaderValue(f"non ISO-8859-1 header {name!r}: {value!r}") from exc
        self._values.setdefault(name, []).append(value)

    def mark_received(self) -> None:
        """Record the current values as the ones that arrived on the wire."""
        self._received = {name: len(values) for name, values in self._values.items()}

    def added(self) -> Iterator[tuple[str, str]]:
        """Yield the pairs added since ``mark_received()``, in insertion order."""
        for name in self._values:
            for value in self.get_all(name)[self._received.get(name, 0):]:
                yield name, value

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value stored for ``name``."""
        values = self._values.get(name)
        if not values:
            return default
        return values[0]

    def get_all(self, name: str) -> list[str]:
        return list(self._values.get(name, ()))

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield every ``(name, value)`` pair, one per value."""
        for name, values in self._values.items():
            for value in values:
                yield name, value

    def render(self) -> str:
        """Serialize as ``Name: value\\r\\n`` lines."""
        return "".join(f"{name}: {value}\r\n" for name, value in self.items())

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"
