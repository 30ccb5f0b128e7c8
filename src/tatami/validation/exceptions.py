"""
Exceptions raised by the validation core.

Validation failures are never raised while a schema runs: they are data,
collected in a Result. Exceptions are reserved for:
- programmer mistakes while building schemas (ConfigurationError)
- two error trees claiming the same nested key (NestedErrorConflict)
- callers asking for a value from a failed validation (ValidationError)
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tatami.validation.result import ErrorTree, Result


class TatamiError(Exception):
    """
    Base exception for all errors raised by tatami.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TatamiError):
    """
    A schema (or helper) was built with invalid options.

    Raised synchronously from constructors and builder functions, e.g. for
    an unknown number conversion or a form declared without a mapping.
    """

    def __init__(self, message: str, option: str | None = None, value: Any | None = None):
        details = {}
        if option:
            details["option"] = option
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)


class NestedErrorConflict(TatamiError):
    """
    Errors were nested twice under the same key.

    This normally means a field was declared twice, e.g. two merged forms
    both validating "email".
    """

    def __init__(self, key: Any):
        super().__init__(f"Errors already nested under key {key!r}", {"key": repr(key)})
        self.key = key


class ValidationError(TatamiError):
    """
    Raised by Schema.validate_or_raise when the result contains errors.

    The full Result is kept on the exception for programmatic inspection.
    """

    def __init__(self, result: "Result"):
        self.result = result
        messages = result.error_messages()
        super().__init__(
            f"Validation failed with {len(messages)} error(s)",
            {"errors": messages[:20]},
        )

    @property
    def errors(self) -> "ErrorTree":
        """Shortcut for ``result.errors``."""
        return self.result.errors

    @property
    def messages(self) -> list[str]:
        """Shortcut for ``result.error_messages()``."""
        return self.result.error_messages()
