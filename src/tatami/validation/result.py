"""
Result and error model for the validation core.

A Result carries the in-flight value through a schema together with its
halted state and an ErrorTree. Nested scopes (form fields, list elements)
run in child results with their own tree, which is then nested into the
parent under the field name or element index.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Hashable, Iterator

from .exceptions import NestedErrorConflict

if TYPE_CHECKING:
    from .steps import Step


def format_path(path: tuple[Hashable, ...]) -> str:
    """
    Render a path as dot-joined segments.

    Examples:
        >>> format_path(("users", 0, "email"))
        "users.0.email"
    """
    return ".".join(str(segment) for segment in path)


@dataclass(frozen=True)
class Error:
    """
    One failed step, located by its path from the validation root.

    Attributes:
        path: Field names / list indices leading to the failure
        step: The step which failed (message and props are read from it)
    """

    path: tuple[Hashable, ...]
    step: "Step"

    @property
    def message(self) -> str:
        return self.step.message

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{format_path(self.path)}: {self.message}"


class ErrorTree:
    """
    Errors at one level of a validated structure, plus nested subtrees.

    ``tree[key]`` looks up the subtree for a field name or list index.
    Iterating yields flat Error records (depth-first, insertion order) with
    paths relative to this tree, and ``len(tree)`` counts all of them.
    """

    __slots__ = ("_steps", "_nested")

    def __init__(self) -> None:
        self._steps: list["Step"] = []
        self._nested: dict[Hashable, ErrorTree] = {}

    @property
    def steps(self) -> tuple["Step", ...]:
        """Steps that failed directly at this level."""
        return tuple(self._steps)

    def keys(self) -> list[Hashable]:
        """Keys that have nested errors."""
        return list(self._nested)

    def add(self, step: "Step") -> None:
        self._steps.append(step)

    def add_nested(self, key: Hashable, tree: "ErrorTree") -> None:
        """
        Nest another tree under ``key``.

        Empty trees are ignored so that only keys with errors exist.

        Raises:
            NestedErrorConflict: If ``key`` already holds errors
        """
        if not tree:
            return
        if key in self._nested:
            raise NestedErrorConflict(key)
        self._nested[key] = tree

    def merge(self, other: "ErrorTree") -> None:
        """
        Merge another tree into this one.

        Errors at the top level are concatenated; nested keys follow the
        add_nested conflict rule.
        """
        self._steps.extend(other._steps)
        for key, tree in other._nested.items():
            self.add_nested(key, tree)

    def flatten(self, prefix: tuple[Hashable, ...] = ()) -> Iterator[Error]:
        for step in self._steps:
            yield Error(prefix, step)
        for key, tree in self._nested.items():
            yield from tree.flatten(prefix + (key,))

    def messages(self) -> list[str]:
        """Human-readable ``"path.to.field: message"`` strings."""
        return [str(error) for error in self.flatten()]

    def __getitem__(self, key: Hashable) -> "ErrorTree":
        return self._nested[key]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._nested

    def __iter__(self) -> Iterator[Error]:
        return self.flatten()

    def __len__(self) -> int:
        return len(self._steps) + sum(len(tree) for tree in self._nested.values())

    def __repr__(self) -> str:
        return f"ErrorTree({self.messages()!r})"


class Result:
    """
    Outcome of running a value through a schema.

    A result with zero errors is a success (``valid``), otherwise an
    ``error``. Independently of that it may be ``halted``: optional halts
    on None without producing an error, while required halts with one.

    Attributes:
        value: Current value, replaced by each transforming step
        errors: ErrorTree with everything that failed
        path: Location of this result relative to the validation root
        missing: Set by fetch when its key was absent
    """

    def __init__(self, value: Any = None):
        self.value = value
        self.errors = ErrorTree()
        self.path: tuple[Hashable, ...] = ()
        self.missing = False
        self._halted = False

    @property
    def error(self) -> bool:
        """True if the result contains any errors."""
        return len(self.errors) > 0

    @property
    def success(self) -> bool:
        """True if the result contains zero errors."""
        return not self.error

    valid = success

    @property
    def halted(self) -> bool:
        return self._halted

    def halt(self) -> "Result":
        self._halted = True
        return self

    def unhalt(self) -> "Result":
        self._halted = False
        return self

    def add_error(self, step: "Step") -> "Result":
        self.errors.add(step)
        return self

    def add_nested(self, key: Hashable, child: "Result") -> "Result":
        """
        Nest the errors of a child result under ``key``.

        Halting always propagates: if the child halted, so does this result.
        """
        self.errors.add_nested(key, child.errors)
        if child.halted:
            self.halt()
        return self

    def add_errors_from(self, other: "Result") -> "Result":
        self.errors.merge(other.errors)
        return self

    def copy(self) -> "Result":
        """
        Copy value, halted state and path into a new result.

        The copy starts with an empty error tree so that errors produced in
        one branch never leak into another.
        """
        clone = Result(self.value)
        clone.path = self.path
        clone._halted = self._halted
        return clone

    def nested(self, key: Hashable) -> "Result":
        """Copy this result and descend into ``key``."""
        child = self.copy()
        child.path = self.path + (key,)
        return child

    def error_messages(self) -> list[str]:
        return self.errors.messages()

    def __repr__(self) -> str:
        return (
            f"Result(value={self.value!r}, halted={self._halted}, "
            f"errors={self.errors.messages()!r})"
        )
