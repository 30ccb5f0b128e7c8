"""
Predicates used by match, optional and halt.

Every predicate implements ``matches(value) -> bool`` and renders itself
for the default "must match ..." message. ``as_predicate`` turns plain
Python objects (ranges, compiled patterns, classes, callables, literals)
into the matching predicate.
"""

import re
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Predicate(Protocol):
    """Anything with a ``matches(value) -> bool`` method."""

    def matches(self, value: Any) -> bool:
        ...


class Range:
    """
    Containment in ``low..high`` (or ``low...high`` when exclusive).

    Values which can't be compared with the bounds never match.
    """

    def __init__(self, low: Any, high: Any, exclusive: bool = False):
        self.low = low
        self.high = high
        self.exclusive = exclusive

    def matches(self, value: Any) -> bool:
        try:
            if self.exclusive:
                return self.low <= value < self.high
            return self.low <= value <= self.high
        except TypeError:
            return False

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Range)
            and (self.low, self.high, self.exclusive) == (other.low, other.high, other.exclusive)
        )

    def __hash__(self) -> int:
        return hash((Range, self.low, self.high, self.exclusive))

    def __str__(self) -> str:
        dots = "..." if self.exclusive else ".."
        return f"{self.low}{dots}{self.high}"

    def __repr__(self) -> str:
        return f"Range({self.low!r}, {self.high!r}, exclusive={self.exclusive})"


class Pattern:
    """Regular expression search. Only strings can match."""

    def __init__(self, pattern: "str | re.Pattern[str]"):
        self.regex = re.compile(pattern)

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and self.regex.search(value) is not None

    def __str__(self) -> str:
        return f"/{self.regex.pattern}/"

    def __repr__(self) -> str:
        return f"Pattern({self.regex.pattern!r})"


class TypeTag:
    """isinstance check against one class (or a tuple of classes)."""

    def __init__(self, cls: "type | tuple[type, ...]"):
        self.cls = cls

    def matches(self, value: Any) -> bool:
        return isinstance(value, self.cls)

    def __str__(self) -> str:
        if isinstance(self.cls, tuple):
            return " or ".join(c.__name__ for c in self.cls)
        return self.cls.__name__

    def __repr__(self) -> str:
        return f"TypeTag({self})"


class Closure:
    """Arbitrary callable; its return value is used as a boolean."""

    def __init__(self, fn: Callable[[Any], Any]):
        self.fn = fn

    def matches(self, value: Any) -> bool:
        return bool(self.fn(value))

    def __str__(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))

    def __repr__(self) -> str:
        return f"Closure({self})"


class Literal:
    """Equality with a fixed value."""

    def __init__(self, value: Any):
        self.value = value

    def matches(self, value: Any) -> bool:
        return value == self.value

    def __str__(self) -> str:
        return repr(self.value)

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


def as_predicate(obj: Any) -> Predicate:
    """
    Coerce a plain object into a Predicate.

    Args:
        obj: A Predicate, ``range`` (step 1 only; becomes an inclusive
            Range of its members), compiled regex, class,
            tuple of classes, callable, or literal value

    Returns:
        The corresponding predicate

    Examples:
        >>> as_predicate(range(1, 21)).matches(20)
        True
        >>> str(as_predicate(re.compile("@")))
        "/@/"
    """
    if isinstance(obj, Predicate) and not isinstance(obj, type):
        return obj
    if isinstance(obj, range) and obj.step == 1:
        return Range(obj.start, obj.stop - 1)
    if isinstance(obj, re.Pattern):
        return Pattern(obj)
    if isinstance(obj, type) or (
        isinstance(obj, tuple) and obj and all(isinstance(c, type) for c in obj)
    ):
        return TypeTag(obj)
    if callable(obj):
        return Closure(obj)
    return Literal(obj)
