"""
Composable validation of untrusted input.

- result.py: Result, ErrorTree and Error (nested, path-addressed errors)
- predicates.py: Range, Pattern, TypeTag, Closure, Literal for match/optional/halt
- steps.py: primitive steps (field, fetch, trim, required, number, ...)
- schema.py: Schema base and combinators (sequence, merge, unhalt, for_each, form)
- builder.py: factory functions to build schemas
- exceptions.py: ValidationError, ConfigurationError, NestedErrorConflict

Validation failures are returned as data (Result); only programmer
mistakes and validate_or_raise raise exceptions.
"""

from . import builder
from .exceptions import (
    ConfigurationError,
    NestedErrorConflict,
    TatamiError,
    ValidationError,
)
from .predicates import Closure, Literal, Pattern, Predicate, Range, TypeTag, as_predicate
from .result import Error, ErrorTree, Result
from .schema import ForEach, Form, Merge, Schema, Sequence, Unhalt
from .steps import (
    Boolean,
    Fail,
    Fetch,
    Field,
    Halt,
    Match,
    Number,
    NumberOptions,
    Ok,
    Optional,
    Required,
    Step,
    Transform,
    Trim,
    Validate,
)

__all__ = [
    "builder",
    # Results
    "Result",
    "ErrorTree",
    "Error",
    # Schemas
    "Schema",
    "Sequence",
    "Merge",
    "Unhalt",
    "ForEach",
    "Form",
    # Steps
    "Step",
    "Field",
    "Fetch",
    "Trim",
    "Required",
    "Optional",
    "Halt",
    "Number",
    "NumberOptions",
    "Boolean",
    "Match",
    "Validate",
    "Transform",
    "Ok",
    "Fail",
    # Predicates
    "Predicate",
    "Range",
    "Pattern",
    "TypeTag",
    "Closure",
    "Literal",
    "as_predicate",
    # Exceptions
    "TatamiError",
    "ConfigurationError",
    "NestedErrorConflict",
    "ValidationError",
]
