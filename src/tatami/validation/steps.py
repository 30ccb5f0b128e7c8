"""
Primitive validation/transformation steps.

A Step does the actual work on a value (as opposed to combinators, which
only arrange other schemas). Every step carries a read-only ``props``
mapping with at least ``type`` and ``message``; extra keyword arguments
given to a step are stored there too, so callers can attach their own
metadata and read it back from ``Error.step.props``.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, localcontext
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .predicates import Predicate, as_predicate
from .result import Result
from .schema import Schema

logger = structlog.get_logger(__name__)


class Step(Schema):
    """
    A single validation/transformation step.

    The generic Step wraps a processor ``fn(step, result)``; the built-in
    steps below override ``process`` instead.

    Example:
        >>> even = Step(
        ...     lambda step, result: result.value % 2 == 0 or result.halt().add_error(step),
        ...     message="must be even",
        ... )
    """

    default_type = "step"
    default_message = "must be valid"

    def __init__(
        self,
        processor: Callable[["Step", Result], None] | None = None,
        *,
        message: str | None = None,
        type: str | None = None,
        **props: Any,
    ):
        self._processor = processor
        self.props: Mapping[str, Any] = MappingProxyType({
            **props,
            "type": type or self.default_type,
            "message": message or self.default_message,
        })

    @property
    def message(self) -> str:
        return self.props["message"]

    @property
    def type(self) -> str:
        return self.props["type"]

    def fail(self, result: Result) -> None:
        """Halt the result and record this step as the cause."""
        result.halt()
        result.add_error(self)

    def process(self, result: Result) -> None:
        if self._processor is None:
            raise NotImplementedError(f"{type(self).__name__} has no processor")
        self._processor(self, result)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type}>"


_MISSING = object()


class Field(Step):
    """
    Reads ``key`` from the value, yielding None when it's absent.

    Mappings and objects with ``get`` (e.g. form data) are read with
    ``get``; anything else with ``value[key]``. Values which can't be
    indexed by ``key`` (a string or list given a field name) also yield
    None.
    """

    default_type = "field"

    def __init__(self, key: Any, **props: Any):
        super().__init__(key=key, **props)
        self.key = key

    def process(self, result: Result) -> None:
        result.value = self._lookup(result.value)

    def _lookup(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, Mapping):
            return value.get(self.key)
        getter = getattr(value, "get", None)
        if callable(getter):
            return getter(self.key)
        try:
            return value[self.key]
        except (KeyError, IndexError, TypeError):
            return None


class Fetch(Step):
    """
    Reads ``key`` from the value, failing when it's absent.

    Objects with a ``fetch`` method (form data) are asked directly and a
    KeyError means absent. When ``default`` is given it is called to
    produce the value instead of failing; otherwise the result is halted,
    marked as missing and "must be present" is recorded.
    """

    default_type = "fetch"
    default_message = "must be present"

    def __init__(self, key: Any, default: Callable[[], Any] | None = None, **props: Any):
        if default is not None and not callable(default):
            raise ConfigurationError("fetch default must be callable", option="default", value=default)
        super().__init__(key=key, **props)
        self.key = key
        self.default = default

    def process(self, result: Result) -> None:
        value = self._fetch(result.value)
        if value is _MISSING:
            if self.default is not None:
                result.value = self.default()
                return
            result.value = None
            result.missing = True
            self.fail(result)
            return
        result.value = value

    def _fetch(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return value[self.key] if self.key in value else _MISSING
        fetcher = getattr(value, "fetch", None)
        if callable(fetcher):
            try:
                return fetcher(self.key)
            except KeyError:
                return _MISSING
        try:
            return value[self.key]
        except (KeyError, IndexError, TypeError):
            return _MISSING


class Trim(Step):
    """Strips surrounding whitespace from strings; blank strings become None."""

    default_type = "trim"

    def process(self, result: Result) -> None:
        value = result.value
        if isinstance(value, str):
            value = value.strip() or None
        result.value = value


class Required(Step):
    default_type = "required"
    default_message = "is required"

    def process(self, result: Result) -> None:
        if result.value is None:
            self.fail(result)


class Optional(Step):
    """
    Halts (without an error) on None, or when ``predicate`` matches.

    The value is reset to None when halting.
    """

    default_type = "optional"

    def __init__(self, predicate: Any = None, **props: Any):
        self.predicate: Predicate | None = (
            as_predicate(predicate) if predicate is not None else None
        )
        super().__init__(predicate=self.predicate, **props)

    def process(self, result: Result) -> None:
        if self.predicate is None:
            should_halt = result.value is None
        else:
            should_halt = self.predicate.matches(result.value)
        if should_halt:
            result.value = None
            result.halt()


class Halt(Step):
    """Halts (without an error, keeping the value) when ``predicate`` matches."""

    default_type = "halt"

    def __init__(self, predicate: Any, **props: Any):
        self.predicate = as_predicate(predicate)
        super().__init__(predicate=self.predicate, **props)

    def process(self, result: Result) -> None:
        if self.predicate.matches(result.value):
            result.halt()


class Boolean(Step):
    """None and False become False, everything else (even "") True."""

    default_type = "boolean"

    def process(self, result: Result) -> None:
        result.value = not (result.value is None or result.value is False)


class Match(Step):
    """Fails with "must match <predicate>" unless the predicate matches."""

    default_type = "match"

    def __init__(self, predicate: Any, **props: Any):
        self.predicate = as_predicate(predicate)
        props.setdefault("message", f"must match {self.predicate}")
        super().__init__(predicate=self.predicate, **props)

    def process(self, result: Result) -> None:
        if not self.predicate.matches(result.value):
            self.fail(result)


class Validate(Step):
    """Fails unless ``fn(value)`` is truthy."""

    default_type = "validate"

    def __init__(self, fn: Callable[[Any], Any], **props: Any):
        if not callable(fn):
            raise ConfigurationError("validate requires a callable", option="fn", value=fn)
        super().__init__(fn=fn, **props)
        self.fn = fn

    def process(self, result: Result) -> None:
        if not self.fn(result.value):
            self.fail(result)


@dataclass(frozen=True)
class Ok:
    """Successful transform outcome."""

    value: Any


@dataclass(frozen=True)
class Fail:
    """
    Failed transform outcome; the transform step records its error.

    A ``reason`` replaces the step's message for this one error.
    """

    reason: str | None = None


class Transform(Step):
    """
    Replaces the value with ``handler(value)``.

    The handler may return ``Fail()`` to record an error (and halt), or
    ``Ok(value)`` to return a value which would otherwise be ambiguous.
    Any other return value is used as-is.
    """

    default_type = "transform"

    def __init__(self, handler: Callable[[Any], Any], **props: Any):
        if not callable(handler):
            raise ConfigurationError("transform requires a callable", option="handler", value=handler)
        super().__init__(handler=handler, **props)
        self.handler = handler

    def process(self, result: Result) -> None:
        outcome = self.handler(result.value)
        if isinstance(outcome, Fail):
            self._failing_step(outcome).fail(result)
        elif isinstance(outcome, Ok):
            result.value = outcome.value
        else:
            result.value = outcome

    def _failing_step(self, outcome: Fail) -> Step:
        if outcome.reason is None:
            return self
        return Step(**{**self.props, "message": outcome.reason})


ConvertMode = Literal["integer", "round", "floor", "ceil", "float", "decimal", "rational"]

# No exponent: parsing stays linear in the input length.
NUMBER_PATTERN = re.compile(r"[+-]?\d+(?:\.\d+)?")


class NumberOptions(BaseModel):
    """
    Parsing options for Number.

    Attributes:
        ignore: Characters to strip (every character of a string, or every
            match of a compiled pattern)
        decimal_separator: Separator rewritten to "." before parsing
        scale: Factor applied to the exact value, e.g. 100 for cents
        convert: How the exact value becomes the output value
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    ignore: str | re.Pattern = " "
    decimal_separator: str | None = PydanticField(default=None, min_length=1)
    scale: Any = None
    convert: ConvertMode = "integer"

    @field_validator("scale")
    @classmethod
    def _scale_as_fraction(cls, value: Any) -> Fraction | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, Fraction, Decimal)):
            raise ValueError("scale must be an int, Fraction or Decimal")
        return Fraction(value)


def _round_half_away_from_zero(num: Fraction) -> int:
    rounded = math.floor(abs(num) + Fraction(1, 2))
    return rounded if num >= 0 else -rounded


class Number(Step):
    """
    Parses a string into a number.

    The input must be a string. Ignored characters are removed, the
    decimal separator is normalized, and the text is parsed as an exact
    fraction which is then scaled and converted:

    - integer: int, failing when there is a fractional part
    - round / floor / ceil: int (round goes half away from zero)
    - float: float, failing when the value is too large for one
    - decimal: decimal.Decimal
    - rational: fractions.Fraction

    Examples:
        >>> Number().validate_or_raise("1 000")
        1000
        >>> Number(ignore=" $,", scale=100).validate_or_raise("$100.33")
        10033
        >>> Number(decimal_separator=",", ignore=" .", convert="float").validate_or_raise("1.000,50")
        1000.5

    Raises:
        ConfigurationError: On unknown ``convert`` or an ``ignore`` which is
            neither a string nor a compiled pattern
    """

    default_type = "number"
    default_message = "must be a number"

    def __init__(
        self,
        ignore: "str | re.Pattern[str]" = " ",
        decimal_separator: str | None = None,
        scale: Any = None,
        convert: str = "integer",
        **props: Any,
    ):
        try:
            self.options = NumberOptions(
                ignore=ignore,
                decimal_separator=decimal_separator,
                scale=scale,
                convert=convert,
            )
        except PydanticValidationError as e:
            error = e.errors()[0]
            option = ".".join(str(loc) for loc in error["loc"]) or None
            raise ConfigurationError(
                f"Invalid number option: {error['msg']}",
                option=option,
                value=error.get("input"),
            ) from e

        super().__init__(
            ignore=self.options.ignore,
            decimal_separator=self.options.decimal_separator,
            scale=self.options.scale,
            convert=self.options.convert,
            **props,
        )
        self._ignore_regex = self._compile_ignore(self.options.ignore)

    @staticmethod
    def _compile_ignore(ignore: "str | re.Pattern[str]") -> re.Pattern | None:
        if isinstance(ignore, re.Pattern):
            return ignore
        if not ignore:
            return None
        return re.compile(f"[{re.escape(ignore)}]")

    def process(self, result: Result) -> None:
        value = result.value
        if not isinstance(value, str):
            self.fail(result)
            return

        text = self._ignore_regex.sub("", value) if self._ignore_regex else value
        if self.options.decimal_separator:
            text = text.replace(self.options.decimal_separator, ".", 1)

        if not NUMBER_PATTERN.fullmatch(text):
            self.fail(result)
            return
        num = Fraction(text)

        if self.options.scale is not None:
            num *= self.options.scale

        converted = self._convert(num, text)
        if converted is _MISSING:
            self.fail(result)
            return
        result.value = converted

    def _convert(self, num: Fraction, text: str) -> Any:
        convert = self.options.convert
        if convert == "integer":
            return num.numerator if num.denominator == 1 else _MISSING
        if convert == "round":
            return _round_half_away_from_zero(num)
        if convert == "floor":
            return math.floor(num)
        if convert == "ceil":
            return math.ceil(num)
        if convert == "float":
            try:
                return float(num)
            except OverflowError:
                return _MISSING
        if convert == "decimal":
            with localcontext() as ctx:
                ctx.prec = max(ctx.prec, len(text) + 2)
                return Decimal(num.numerator) / Decimal(num.denominator)
        return num
