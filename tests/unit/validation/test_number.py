"""
Unit tests for number parsing.
"""

import re
import time
from decimal import Decimal
from fractions import Fraction

import pytest

from tatami.validation import builder as v
from tatami.validation.exceptions import ConfigurationError
from tatami.validation.steps import Number


class TestNumberParsing:
    """Test suite for Number with default options."""

    @pytest.mark.parametrize("text,expected", [
        ("1234", 1234),
        ("12 34", 1234),
        ("-15", -15),
        ("+7", 7),
        ("122.0", 122),
    ])
    def test_parses_integers(self, text, expected):
        assert Number().validate_or_raise(text) == expected

    @pytest.mark.parametrize("text", ["$123", "abc", "1.2.3", "", "1,5", "122.5", "1e5", "1E-3"])
    def test_rejects(self, text):
        result = Number().validate(text)

        assert result.halted
        assert result.error_messages() == ["must be a number"]

    def test_non_string_input_fails(self):
        assert Number().validate(12).error
        assert Number().validate(None).error

    def test_custom_ignore(self):
        assert Number(ignore=" $").validate_or_raise("$ 1 234") == 1234

    def test_ignore_pattern(self):
        number = Number(ignore=re.compile(r"[^\d.]"))
        assert number.validate_or_raise("USD 1,234") == 1234

    def test_empty_ignore_keeps_spaces(self):
        assert Number(ignore="").validate("1 234").error

    def test_decimal_separator(self):
        number = Number(decimal_separator=",", convert="rational")
        assert number.validate_or_raise("1,5") == Fraction(3, 2)

    def test_decimal_separator_with_thousands(self):
        number = Number(decimal_separator=",", ignore=" .", convert="float")
        assert number.validate_or_raise("1.000,50") == 1000.5


class TestNumberConversion:
    """Test suite for the convert modes."""

    @pytest.mark.parametrize("convert,text,expected", [
        ("floor", "122.5", 122),
        ("ceil", "122.2", 123),
        ("round", "122.5", 123),
        ("round", "122.4", 122),
        ("round", "-122.5", -123),
        ("floor", "-0.5", -1),
        ("float", "4.5", 4.5),
        ("rational", "0.25", Fraction(1, 4)),
    ])
    def test_convert(self, convert, text, expected):
        assert Number(convert=convert).validate_or_raise(text) == expected

    def test_decimal(self):
        value = Number(convert="decimal").validate_or_raise("4.5")

        assert isinstance(value, Decimal)
        assert value == Decimal("4.5")

    def test_round_returns_int(self):
        assert isinstance(Number(convert="round").validate_or_raise("2.5"), int)


class TestNumberScale:
    """Test suite for scaling (e.g. cents)."""

    def test_scale(self):
        number = Number(ignore=" $", scale=100)
        assert number.validate_or_raise("$ 1 234.10") == 123410

    def test_scale_leaves_fraction_for_integer(self):
        assert Number(scale=100).validate("1 234.105").error

    @pytest.mark.parametrize("convert,text,expected", [
        ("round", "1 234.105", 123411),
        ("floor", "1 234.105", 123410),
        ("ceil", "1 234.101", 123411),
    ])
    def test_scale_then_convert(self, convert, text, expected):
        assert Number(scale=100, convert=convert).validate_or_raise(text) == expected

    def test_decimal_scale(self):
        number = Number(scale=Decimal("0.5"), convert="rational")
        assert number.validate_or_raise("3") == Fraction(3, 2)


class TestNumberOptions:
    """Test suite for option validation."""

    def test_unknown_convert(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Number(convert="octal")

        assert exc_info.value.details["option"] == "convert"

    def test_invalid_scale(self):
        with pytest.raises(ConfigurationError):
            Number(scale="100")

    def test_bool_scale(self):
        with pytest.raises(ConfigurationError):
            Number(scale=True)

    def test_invalid_ignore(self):
        with pytest.raises(ConfigurationError):
            Number(ignore=5)

    def test_empty_decimal_separator(self):
        with pytest.raises(ConfigurationError):
            Number(decimal_separator="")

    def test_options_in_props(self):
        number = Number(scale=100, convert="round")

        assert number.props["convert"] == "round"
        assert number.props["scale"] == Fraction(100)
        assert number.type == "number"


class TestIntegerAndFloatBuilders:
    """Test suite for the integer/float shortcuts."""

    def test_integer_message(self):
        result = v.integer().validate("2b2")
        assert result.error_messages() == ["must be an integer"]

    def test_integer_rejects_fraction(self):
        assert v.integer().validate("1.5").error

    def test_integer_custom_message(self):
        result = v.integer(message="whole numbers only").validate("x")
        assert result.error_messages() == ["whole numbers only"]

    def test_float(self):
        assert v.float().validate_or_raise("0.5") == 0.5
        assert v.float().validate("x").error_messages() == ["must be a number"]


@pytest.mark.parametrize("text", ["0", "-3", "12.50", "+0.125", "1000000000000000000000.1"])
def test_rational_is_exact(text):
    value = Number(convert="rational").validate_or_raise(text)
    assert value == Fraction(text)


class TestNumberUntrustedInput:
    """Test suite for hostile but well-formed input."""

    def test_float_overflow_fails(self):
        result = v.float().validate("1" * 400)

        assert result.halted
        assert result.error_messages() == ["must be a number"]

    def test_long_integer_is_exact(self):
        assert v.integer().validate_or_raise("9" * 400) == int("9" * 400)

    @pytest.mark.parametrize("text", ["1e9999999", "9E+99999999"])
    def test_exponent_is_rejected_without_evaluating(self, text):
        started = time.monotonic()
        result = Number(convert="rational").validate(text)

        assert result.error_messages() == ["must be a number"]
        assert time.monotonic() - started < 1
