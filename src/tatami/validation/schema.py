"""
Schema base class and combinators.

A schema is a pipeline: an untrusted value comes in and, as it travels
through the steps, it can be transformed, halted, or produce errors.
Combinators build larger schemas from smaller ones:

- Sequence (``a | b``): apply ``b`` only if ``a`` did not halt
- Merge (``a & b``): apply both to the same input and merge the dicts
- Unhalt (``a.unhalt()``): keep validating after ``a`` halted
- ForEach: apply a schema to every element of a list
- Form: apply named schemas to the same input and build a dict
"""

from types import MappingProxyType
from typing import Any, Iterable, Mapping

import structlog

from .exceptions import ConfigurationError, ValidationError
from .result import Result

logger = structlog.get_logger(__name__)


class Schema:
    """
    Base class for all schemas.

    Subclasses implement ``process``, which mutates the given Result in
    place. Schemas are never mutated after construction, so one instance
    can be shared between threads and reused for every request.
    """

    def process(self, result: Result) -> None:
        raise NotImplementedError

    def validate(self, value: Any) -> Result:
        """
        Validate an untrusted value.

        Never raises for invalid input; inspect ``result.success`` instead.
        """
        result = Result(value)
        self.process(result)
        return result

    def validate_or_raise(self, value: Any) -> Any:
        """
        Validate an untrusted value and return the output value.

        Raises:
            ValidationError: If any error was recorded (the Result is kept
                on the exception)
        """
        result = self.validate(value)
        if result.error:
            logger.debug(
                "Validation failed",
                schema=type(self).__name__,
                error_count=len(result.errors),
            )
            raise ValidationError(result)
        return result.value

    def then(self, other: "Schema") -> "Sequence":
        return Sequence(self, other)

    def merge(self, other: "Schema") -> "Merge":
        return Merge(self, other)

    def unhalt(self) -> "Unhalt":
        return Unhalt(self)

    def __or__(self, other: "Schema") -> "Sequence":
        return self.then(other)

    def __and__(self, other: "Schema") -> "Merge":
        return self.merge(other)


def _ensure_schema(obj: Any, role: str) -> "Schema":
    if not isinstance(obj, Schema):
        raise ConfigurationError(
            f"{role} must be a Schema, got {type(obj).__name__}",
            option=role,
            value=obj,
        )
    return obj


class Sequence(Schema):
    """Applies ``left`` and then, unless halted, ``right``."""

    def __init__(self, left: Schema, right: Schema):
        self.left = _ensure_schema(left, "left")
        self.right = _ensure_schema(right, "right")

    def process(self, result: Result) -> None:
        self.left.process(result)
        if result.halted:
            return
        self.right.process(result)

    def __repr__(self) -> str:
        return f"({self.left!r} | {self.right!r})"


class Unhalt(Schema):
    """
    Applies the child and then clears the halted flag.

    Errors are kept, which makes it possible to report several problems
    with the same value:

        >>> schema = match(range(1, 21)).unhalt() | validate(is_even)
        >>> len(schema.validate(55).errors)
        2
    """

    def __init__(self, child: Schema):
        self.child = _ensure_schema(child, "child")

    def process(self, result: Result) -> None:
        self.child.process(result)
        result.unhalt()

    def __repr__(self) -> str:
        return f"{self.child!r}.unhalt()"


class Merge(Schema):
    """
    Applies both schemas to the same input and merges their dict outputs.

    Both sides always run. A side that halted contributes its errors but
    not its value, and the merged result halts if either side halted.
    """

    def __init__(self, left: Schema, right: Schema):
        self.left = _ensure_schema(left, "left")
        self.right = _ensure_schema(right, "right")

    def process(self, result: Result) -> None:
        left_result = result.copy()
        right_result = result.copy()

        self.left.process(left_result)
        self.right.process(right_result)

        result.add_errors_from(left_result)
        result.add_errors_from(right_result)

        value: dict[Any, Any] = {}
        if not left_result.halted:
            value.update(left_result.value)
        if not right_result.halted:
            value.update(right_result.value)
        result.value = value

        if left_result.halted or right_result.halted:
            result.halt()

    def __repr__(self) -> str:
        return f"({self.left!r} & {self.right!r})"


class ForEach(Schema):
    """
    Applies an element schema to every item of a list.

    The input must be a non-string iterable (a list, tuple, ...); anything
    else, None included, fails with "must be a list" and halts. The output
    is a list with each element's final value (the raw element when it
    failed before being transformed). Errors are nested under the element
    index; any halted element halts the whole list.
    """

    def __init__(self, element_schema: Schema, **props: Any):
        from .steps import Step

        self.element_schema = _ensure_schema(element_schema, "element_schema")
        props.setdefault("message", "must be a list")
        self.step = Step(type="for_each", **props)

    def process(self, result: Result) -> None:
        elements = result.value
        if not _is_list_like(elements):
            self.step.fail(result)
            return

        element_results = []
        for idx, element in enumerate(elements):
            element_result = result.nested(idx)
            element_result.value = element
            self.element_schema.process(element_result)
            element_results.append(element_result)

        for idx, element_result in enumerate(element_results):
            result.add_nested(idx, element_result)

        result.value = [element_result.value for element_result in element_results]

    def __repr__(self) -> str:
        return f"for_each({self.element_schema!r})"


def _is_list_like(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


class Form(Schema):
    """
    Applies named field schemas to the same input and builds a dict.

    Every field appears in the output, including failed ones (holding the
    value reached before the failure). With ``partial=True`` a field whose
    fetch found no key is left out entirely: no value, no error, no halt.
    """

    def __init__(self, fields: Mapping[str, Schema], partial: bool = False):
        if not isinstance(fields, Mapping):
            raise ConfigurationError(
                f"form fields must be a mapping, got {type(fields).__name__}",
                option="fields",
                value=fields,
            )
        for name, schema in fields.items():
            _ensure_schema(schema, f"field {name!r}")
        self.fields: Mapping[str, Schema] = MappingProxyType(dict(fields))
        self.partial = partial
        logger.debug("Form schema built", fields=list(self.fields), partial=partial)

    def process(self, result: Result) -> None:
        field_results = []
        for name, schema in self.fields.items():
            field_result = result.nested(name)
            schema.process(field_result)
            field_results.append((name, field_result))

        values: dict[str, Any] = {}
        for name, field_result in field_results:
            if self.partial and field_result.missing:
                continue
            values[name] = field_result.value
            result.add_nested(name, field_result)

        result.value = values

    def __repr__(self) -> str:
        prefix = "partial_form" if self.partial else "form"
        return f"{prefix}({dict(self.fields)!r})"
