"""
Tools for working with HTTP form data.

URLEncoded holds the ordered (name, value) pairs of an
application/x-www-form-urlencoded body or a query string. Field names can
be plain strings or hierarchical keys:

    >>> root = DotKey()
    >>> address = root["address"]
    >>> str(address["zip"])
    "address.zip"
    >>> str(BracketKey()["address"]["zip"])
    "address[zip]"

URLEncoded exposes ``get``/``fetch``/``fetch_all``, which is what the
field and fetch validation steps use when they're handed form data.
"""

from typing import Any, Callable, Hashable, Iterable, Iterator
from urllib.parse import parse_qsl

import structlog

from .config import get_settings

logger = structlog.get_logger(__name__)


class _Key:
    """Base for hierarchical field names; ``key[name]`` returns a child."""

    def __init__(self, name: str | None = None):
        self._name = name

    def child_name(self, name: str) -> str:
        raise NotImplementedError

    def __getitem__(self, name: Hashable) -> "_Key":
        return type(self)(self.child_name(str(name)))

    def __str__(self) -> str:
        return self._name or ""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._name == other._name  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class DotKey(_Key):
    """Nested names separated by dots: ``users.0.name``."""

    def child_name(self, name: str) -> str:
        return f"{self._name}.{name}" if self._name else name


class BracketKey(_Key):
    """Nested names in brackets: ``users[0][name]``."""

    def child_name(self, name: str) -> str:
        return f"{self._name}[{name}]" if self._name else name


class URLEncoded:
    """
    A parsed URL-encoded form (application/x-www-form-urlencoded).

    Names may repeat; ``get`` returns the first value while ``fetch_all``
    returns all of them in order.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()):
        self._pairs: tuple[tuple[str, str], ...] = tuple(pairs)

    @classmethod
    def parse(
        cls,
        data: str | bytes,
        max_fields: int | None = None,
        encoding: str | None = None,
    ) -> "URLEncoded":
        """
        Parse a query string or URL-encoded body.

        Args:
            data: Raw query string / body
            max_fields: Maximum number of pairs (default from settings)
            encoding: Charset used for bytes and percent-escapes (default from
                settings); undecodable bytes become U+FFFD

        Raises:
            ValueError: If the data holds more than ``max_fields`` pairs
        """
        settings = get_settings()
        encoding = encoding or settings.FORM_DATA_ENCODING
        if isinstance(data, bytes):
            # Same policy as percent-escapes, which parse_qsl replaces.
            data = data.decode(encoding, errors="replace")
        pairs = parse_qsl(
            data,
            keep_blank_values=True,
            encoding=encoding,
            max_num_fields=max_fields or settings.FORM_DATA_MAX_FIELDS,
        )
        logger.debug("Form data parsed", pair_count=len(pairs))
        return cls(pairs)

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        return self._pairs

    def each_for(self, name: Any) -> Iterator[str]:
        """Yield every value for ``name`` (a string or key object)."""
        full_name = str(name)
        for key, value in self._pairs:
            if key == full_name:
                yield value

    def get(self, name: Any, default: Any = None) -> Any:
        """First value for ``name``, or ``default``."""
        return next(self.each_for(name), default)

    def fetch(self, name: Any, default: Callable[[], Any] | None = None) -> Any:
        """
        First value for ``name``.

        Raises:
            KeyError: If the name is absent and no ``default`` callable is given
        """
        for value in self.each_for(name):
            return value
        if default is not None:
            return default()
        raise KeyError(f"name not found: {name}")

    def fetch_all(self, name: Any) -> list[str]:
        return list(self.each_for(name))

    def names(self) -> list[str]:
        """Distinct field names, in order of first appearance."""
        return list(dict.fromkeys(key for key, _ in self._pairs))

    def __getitem__(self, name: Any) -> str | None:
        return self.get(name)

    def __contains__(self, name: Any) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, URLEncoded) and self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"URLEncoded({list(self._pairs)!r})"
