"""
Form objects: stateful entries bound to form-data keys.

Entries read their state from a form-data accessor (``from_input``),
serialize it back to (name, value) pairs (``serialize``), and validate it
into a Result (``validate``, memoized). A Group combines named entries
and validates them with a schema built from ``entry(name)`` steps:

    class User(Group):
        fields = {"name": Text, "skills": TextList, "is_good": Flag}
        schema = v.form(
            name=entry("name") | v.trim() | v.required(),
            skills=entry("skills") | v.for_each(v.trim() | v.required()),
        )

    user = User(DotKey())
    user.from_input(URLEncoded.parse("name=%20Bob&skills=Go&skills=Judo"))
    user.validate().value  # {"name": "Bob", "skills": ["Go", "Judo"]}
"""

from typing import Any, ClassVar, Iterator, Mapping

import structlog

from .form_data import DotKey
from .validation.exceptions import ConfigurationError
from .validation.result import ErrorTree, Result
from .validation.schema import Schema
from .validation.steps import Step

logger = structlog.get_logger(__name__)


class Entry:
    """
    Base class for all entries.

    Subclasses implement ``from_input``, ``serialize`` and ``_validate``.
    """

    def __init__(self, key: Any = None):
        self._key = key if key is not None else DotKey()
        self._result: Result | None = None
        self.setup()

    def setup(self) -> None:
        pass

    @property
    def key(self) -> Any:
        return self._key

    def from_input(self, data: Any) -> None:
        raise NotImplementedError

    def serialize(self) -> Iterator[tuple[str, str]]:
        raise NotImplementedError

    def _validate(self) -> Result:
        raise NotImplementedError

    def validate(self) -> Result:
        """Validate the entry once; later calls return the same Result."""
        if self._result is None:
            self._result = self._validate()
        return self._result

    @property
    def result(self) -> Result | None:
        """The Result of ``validate``, or None if not validated yet."""
        return self._result

    @property
    def error(self) -> bool:
        return self._result is not None and self._result.error

    @property
    def errors(self) -> ErrorTree:
        return self._result.errors if self._result is not None else ErrorTree()


class Text(Entry):
    """A single text value."""

    def setup(self) -> None:
        self.value: str | None = None

    def from_input(self, data: Any) -> None:
        self.value = data.get(self.key)

    def serialize(self) -> Iterator[tuple[str, str]]:
        if self.value is not None:
            yield str(self.key), self.value

    def _validate(self) -> Result:
        return Result(self.value)


class TextList(Entry):
    """All values given for one name."""

    def setup(self) -> None:
        self.values: list[str] = []

    def from_input(self, data: Any) -> None:
        self.values = data.fetch_all(self.key)

    def serialize(self) -> Iterator[tuple[str, str]]:
        for value in self.values:
            yield str(self.key), value

    def _validate(self) -> Result:
        return Result(list(self.values))

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class Flag(Entry):
    """
    A checkbox: None until read, then True for "1" and False otherwise.

    Serialized as "1"/"0"; an unread flag serializes to nothing.
    """

    def setup(self) -> None:
        self.checked: bool | None = None

    def from_input(self, data: Any) -> None:
        value = data.get(self.key)
        if value is not None:
            self.checked = value == "1"

    def serialize(self) -> Iterator[tuple[str, str]]:
        if self.checked is True:
            yield str(self.key), "1"
        elif self.checked is False:
            yield str(self.key), "0"

    def _validate(self) -> Result:
        return Result(self.checked)


class List(Entry):
    """
    A list of entries of one class, addressed by id.

    The ids are the values of the list's own name (``users=0&users=1``)
    and each element lives under ``key[id]`` (``users.0.name``). Use
    ``List.of(User)`` to get the list class for an element class.
    """

    element_class: ClassVar[type[Entry] | None] = None
    _subclass_cache: ClassVar[dict[type[Entry], type["List"]]] = {}

    @classmethod
    def of(cls, element_class: type[Entry]) -> type["List"]:
        cache = List._subclass_cache
        if element_class not in cache:
            cache[element_class] = type(
                f"ListOf{element_class.__name__}",
                (cls,),
                {"element_class": element_class},
            )
        return cache[element_class]

    def setup(self) -> None:
        if self.element_class is None:
            raise ConfigurationError(
                "List has no element class; use List.of(EntryClass)",
                option="element_class",
            )
        self._entries: dict[str, Entry] = {}

    def from_input(self, data: Any) -> None:
        for entry_id in data.each_for(self.key):
            self.add(entry_id).from_input(data)

    def serialize(self) -> Iterator[tuple[str, str]]:
        for entry_id, entry in self._entries.items():
            yield str(self.key), entry_id
            yield from entry.serialize()

    def _validate(self) -> Result:
        value: list[Any] = []
        result = Result(value)
        for idx, entry in enumerate(self):
            element_result = entry.validate()
            value.append(element_result.value)
            result.add_nested(idx, element_result)
        return result

    def add(self, entry_id: str | None = None) -> Entry:
        """Add a new element (ids default to the next index)."""
        if entry_id is None:
            entry_id = str(len(self._entries))
        entry = self.element_class(self.key[entry_id])
        self._entries[entry_id] = entry
        return entry

    def each_with_id(self) -> Iterator[tuple[Entry, str, str]]:
        for entry_id, entry in self._entries.items():
            yield entry, str(self.key), entry_id

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


class Group(Entry):
    """
    A fixed set of named entries, validated with ``schema``.

    Subclasses declare ``fields`` (name -> entry class) and ``schema``.
    Each field becomes an attribute holding its entry.
    """

    # Re-export common entries
    Text = Text
    TextList = TextList
    Flag = Flag
    List = List

    fields: ClassVar[Mapping[str, type[Entry]]]
    schema: ClassVar[Schema | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        fields = cls.__dict__.get("fields")
        if fields is None:
            return

        for base in cls.__mro__[1:]:
            if "fields" in vars(base):
                raise ConfigurationError(
                    f"{cls.__name__}: fields already declared by {base.__name__}",
                    option="fields",
                )

        for name in fields:
            if any(name in vars(klass) for klass in cls.__mro__):
                raise ConfigurationError(
                    f"{cls.__name__}: cannot declare field {name!r} because it clashes with an attribute",
                    option="fields",
                    value=name,
                )

        logger.debug("Form group declared", group=cls.__name__, fields=list(fields))

    def setup(self) -> None:
        fields = getattr(type(self), "fields", None)
        if fields is None:
            raise ConfigurationError(f"{type(self).__name__} declares no fields", option="fields")

        self._entries: list[Entry] = []
        for name, entry_class in fields.items():
            entry = entry_class(self.key[name])
            setattr(self, name, entry)
            self._entries.append(entry)

    def from_input(self, data: Any) -> None:
        for entry in self._entries:
            entry.from_input(data)

    def serialize(self) -> Iterator[tuple[str, str]]:
        for entry in self._entries:
            yield from entry.serialize()

    def _validate(self) -> Result:
        schema = type(self).schema
        if schema is None:
            raise ConfigurationError(f"{type(self).__name__} declares no schema", option="schema")
        return schema.validate(self)


class EntryStep(Step):
    """
    Validates the named entry of the group being validated.

    The entry's value, errors and halted state are adopted by the current
    result.
    """

    default_type = "entry"

    def __init__(self, name: str, **props: Any):
        super().__init__(name=name, **props)
        self.name = name

    def process(self, result: Result) -> None:
        entry_result = getattr(result.value, self.name).validate()
        result.value = entry_result.value
        result.add_errors_from(entry_result)
        if entry_result.halted:
            result.halt()


def entry(name: str, **props: Any) -> EntryStep:
    return EntryStep(name, **props)
