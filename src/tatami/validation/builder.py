"""
Factory functions for building schemas.

Import the module (or the functions you need) and compose:

    >>> from tatami.validation import builder as v
    >>> User = v.form(
    ...     name=v.field("name") | v.trim() | v.required(),
    ...     email=v.field("email") | v.trim() | v.optional() | v.match(re.compile("@")),
    ...     karma=v.field("karma") | v.trim() | v.optional() | v.integer() | v.match(range(1, 1001)),
    ... )
    >>> User.validate({"name": " Magnus ", "karma": "100"}).value
    {"name": "Magnus", "email": None, "karma": 100}

Keyword arguments not consumed by a factory are stored in the step's
``props`` (``message`` overrides the error message).
"""

from functools import reduce
from typing import Any, Callable, Mapping

from .exceptions import ConfigurationError
from .schema import ForEach, Form, Merge, Schema, Sequence, Unhalt
from .steps import (
    Boolean,
    Fetch,
    Field,
    Halt,
    Match,
    Number,
    Optional,
    Required,
    Transform,
    Trim,
    Validate,
)


def field(key: Any, **props: Any) -> Field:
    """Read ``key`` from the value (None when absent)."""
    return Field(key, **props)


def fetch(key: Any, default: Callable[[], Any] | None = None, **props: Any) -> Fetch:
    """Read ``key`` from the value; "must be present" unless ``default`` is given."""
    return Fetch(key, default=default, **props)


def trim(**props: Any) -> Trim:
    return Trim(**props)


def required(**props: Any) -> Required:
    return Required(**props)


def optional(predicate: Any = None, **props: Any) -> Optional:
    """Halt on None (or when ``predicate`` matches) without an error."""
    return Optional(predicate, **props)


def halt(predicate: Any, **props: Any) -> Halt:
    return Halt(predicate, **props)


def number(**props: Any) -> Number:
    """
    Parse a string as a number.

    See Number for ``ignore``, ``decimal_separator``, ``scale`` and
    ``convert``.
    """
    return Number(**props)


def integer(**props: Any) -> Number:
    props.setdefault("message", "must be an integer")
    return Number(convert="integer", **props)


def float(**props: Any) -> Number:
    return Number(convert="float", **props)


def boolean(**props: Any) -> Boolean:
    return Boolean(**props)


def match(predicate: Any, **props: Any) -> Match:
    """
    Fail unless ``predicate`` matches the value.

    Examples:
        >>> match(range(1, 21))      # within 1..20
        >>> match(str)               # is a string
        >>> match(re.compile("@"))   # contains "@"
    """
    return Match(predicate, **props)


def validate(fn: Callable[[Any], Any], **props: Any) -> Validate:
    """Fail unless ``fn(value)`` is truthy."""
    return Validate(fn, **props)


def transform(handler: Callable[[Any], Any], **props: Any) -> Transform:
    """Replace the value with ``handler(value)`` (``Fail()`` records an error)."""
    return Transform(handler, **props)


def form(fields: Mapping[str, Schema] | None = None, /, **kwargs: Schema) -> Form:
    """
    Build a dict by applying each field schema to the same input.

    Fields can be given as a mapping, as keyword arguments, or both.

    Raises:
        ConfigurationError: If a field is declared twice
    """
    return Form(_collect_fields(fields, kwargs))


def partial_form(fields: Mapping[str, Schema] | None = None, /, **kwargs: Schema) -> Form:
    """Like form, but fields whose fetch found no key are left out."""
    return Form(_collect_fields(fields, kwargs), partial=True)


def _collect_fields(fields: Mapping[str, Schema] | None, kwargs: dict[str, Schema]) -> dict[str, Schema]:
    collected = dict(fields or {})
    for name, schema in kwargs.items():
        if name in collected:
            raise ConfigurationError(f"field {name!r} declared twice", option="fields", value=name)
        collected[name] = schema
    return collected


def for_each(schema: Schema, **props: Any) -> ForEach:
    """Apply ``schema`` to every element; "must be a list" for anything else."""
    return ForEach(schema, **props)


def sequence(*schemas: Schema) -> Schema:
    """Chain schemas left to right (same as ``a | b | c``)."""
    if not schemas:
        raise ConfigurationError("sequence requires at least one schema", option="schemas")
    return reduce(Sequence, schemas)


def merge(*schemas: Schema) -> Schema:
    """Merge the dict outputs of several schemas (same as ``a & b & c``)."""
    if not schemas:
        raise ConfigurationError("merge requires at least one schema", option="schemas")
    return reduce(Merge, schemas)


def unhalt(schema: Schema) -> Unhalt:
    return Unhalt(schema)
