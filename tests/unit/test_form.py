"""
Unit tests for form entries and groups.
"""

import pytest

from tatami.form import EntryStep, Flag, Group, List, Text, TextList, entry
from tatami.form_data import DotKey, URLEncoded
from tatami.validation import builder as v
from tatami.validation.exceptions import ConfigurationError


class User(Group):
    fields = {
        "name": Text,
        "skills": TextList,
        "is_good": Flag,
    }
    schema = v.form(
        name=entry("name") | v.trim() | v.required(),
        skills=entry("skills") | v.for_each(v.trim() | v.required()),
    )


class Multi(Group):
    fields = {
        "users": List.of(User),
        "send_email": Flag,
    }
    schema = v.form(
        users=entry("users"),
        send_email=entry("send_email"),
    )


def serialize(entry_obj):
    return list(entry_obj.serialize())


class TestGroup:
    """Test suite for Group."""

    def setup_method(self):
        """Setup test fixtures."""
        self.root = DotKey()

    def test_basic_group(self):
        user = User(self.root)
        user.from_input(URLEncoded.parse("name=%20Bob&skills=Programming%20&skills=Skating"))

        assert user.name.value == " Bob"
        assert list(user.skills) == ["Programming ", "Skating"]
        assert user.is_good.checked is None

        result = user.validate()
        assert result.valid
        assert result.value == {"name": "Bob", "skills": ["Programming", "Skating"]}

    def test_errors_are_nested_by_field(self):
        user = User(self.root)
        user.from_input(URLEncoded.parse("name=%20&skills=Go&skills="))

        result = user.validate()

        assert user.error
        assert result.error_messages() == ["name: is required", "skills.1: is required"]
        assert user.errors["skills"][1].steps[0].type == "required"

    def test_validate_is_memoized(self):
        user = User(self.root)
        user.from_input(URLEncoded.parse("name=Bob"))

        assert user.validate() is user.validate()

    def test_entries_are_attributes(self):
        user = User(self.root["user"])

        assert isinstance(user.name, Text)
        assert str(user.name.key) == "user.name"

    def test_default_key_is_root(self):
        assert str(User().name.key) == "name"

    def test_requires_fields(self):
        class Empty(Group):
            pass

        with pytest.raises(ConfigurationError):
            Empty(self.root)

    def test_requires_schema(self):
        class NoSchema(Group):
            fields = {"name": Text}

        group = NoSchema(self.root)
        with pytest.raises(ConfigurationError):
            group.validate()

    def test_doesnt_allow_defining_fields_twice(self):
        with pytest.raises(ConfigurationError):
            class Admin(User):
                fields = {"role": Text}

    def test_doesnt_allow_overriding_attributes(self):
        with pytest.raises(ConfigurationError):
            class Broken(Group):
                fields = {"validate": Text}

    def test_subclass_without_fields_inherits_them(self):
        class Member(User):
            pass

        member = Member(self.root)
        member.from_input(URLEncoded.parse("name=Bob"))

        assert member.validate().value == {"name": "Bob", "skills": []}

    def test_re_exports(self):
        assert Group.Text is Text
        assert Group.List is List


class TestMulti:
    """Test suite for lists of groups."""

    def setup_method(self):
        """Setup test fixtures."""
        self.root = DotKey()

    def test_multi(self):
        multi = Multi(self.root)
        multi.from_input(URLEncoded.parse("users=0&users.0.name=Bob&users.1.name=Alice&send_email=1"))

        assert multi.result is None
        assert not multi.error

        result = multi.validate()
        assert result.valid
        assert multi.result is result
        assert not multi.error

        value = result.value
        assert len(value["users"]) == 1
        assert value["users"][0]["name"] == "Bob"
        assert value["send_email"] is True

    def test_element_errors_are_nested(self):
        multi = Multi(self.root)
        multi.from_input(URLEncoded.parse("users=0&users=1&users.0.name=Bob"))

        result = multi.validate()

        assert result.error_messages() == ["users.1.name: is required"]

    def test_serialize(self):
        multi = Multi(self.root)

        user = multi.users.add()
        user.name.value = "Bob"
        user.is_good.checked = True

        assert serialize(multi) == [
            ("users", "0"),
            ("users.0.name", "Bob"),
            ("users.0.is_good", "1"),
        ]

    def test_serialize_round_trips_through_form_data(self):
        multi = Multi(self.root)
        multi.from_input(URLEncoded.parse("users=7&users.7.name=Bob&send_email=0"))

        assert URLEncoded(multi.serialize()) == URLEncoded([
            ("users", "7"),
            ("users.7.name", "Bob"),
            ("send_email", "0"),
        ])


class TestEntries:
    """Test suite for Text, TextList, Flag and List."""

    def setup_method(self):
        """Setup test fixtures."""
        self.root = DotKey()

    def test_text(self):
        text = Text(self.root["a"])
        assert serialize(text) == []

        text.from_input(URLEncoded.parse("a=1&a=2"))
        assert text.value == "1"
        assert serialize(text) == [("a", "1")]
        assert text.validate().value == "1"

    def test_serialize_flag(self):
        flag = Flag(self.root["a"])
        assert serialize(flag) == []

        flag.checked = True
        assert serialize(flag) == [("a", "1")]

        flag.checked = False
        assert serialize(flag) == [("a", "0")]

    def test_flag_from_input(self):
        flag = Flag(self.root["a"])

        flag.from_input(URLEncoded.parse("b=1"))
        assert flag.checked is None

        flag.from_input(URLEncoded.parse("a=on"))
        assert flag.checked is False

        flag.from_input(URLEncoded.parse("a=1"))
        assert flag.checked is True

    def test_serialize_text_list(self):
        text_list = TextList(self.root["a"])
        assert serialize(text_list) == []

        text_list.values.append("1")
        assert serialize(text_list) == [("a", "1")]

        text_list.values.append("1")
        assert serialize(text_list) == [("a", "1"), ("a", "1")]
        assert len(text_list) == 2

    def test_list_with_id(self):
        users = List.of(User)(self.root["users"])
        user = users.add()

        rows = list(users.each_with_id())

        assert len(rows) == 1
        assert rows[0] == (user, "users", "0")

    def test_list_add_with_explicit_id(self):
        users = List.of(User)(self.root["users"])
        user = users.add("abc")

        assert str(user.name.key) == "users.abc.name"
        assert list(users) == [user]

    def test_list_of_is_cached(self):
        assert List.of(User) is List.of(User)
        assert List.of(User).__name__ == "ListOfUser"
        assert List.of(Text) is not List.of(User)

    def test_list_requires_element_class(self):
        with pytest.raises(ConfigurationError):
            List(self.root["users"])

    def test_list_of_text(self):
        tags = List.of(Text)(self.root["tags"])
        tags.from_input(URLEncoded.parse("tags=a&tags=b&tags.a=Go&tags.b=Judo"))

        assert tags.validate().value == ["Go", "Judo"]

    def test_unvalidated_entry_has_no_errors(self):
        text = Text(self.root["a"])

        assert text.result is None
        assert not text.error
        assert len(text.errors) == 0


class TestEntryStep:
    """Test suite for the entry step."""

    def test_factory(self):
        step = entry("name")

        assert isinstance(step, EntryStep)
        assert step.type == "entry"
        assert step.props["name"] == "name"
