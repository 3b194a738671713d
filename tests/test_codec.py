"""
Tests for key and value codecs

Run with: python -m pytest tests/test_codec.py -v
"""

import time
import pytest
from kvpool.cache.codec import (
    INT64_MAX,
    INT64_MIN,
    ValueType,
    cast_value,
    is_numeric,
    normalize_value,
    sanitize_key,
)


class TestSanitizeKey:
    """Test sanitize_key()."""

    def test_truncates_to_64(self):
        """Test long keys are capped at 64 characters."""
        src = str(int(time.time())) * 24
        assert len(sanitize_key(src)) == 64

    def test_strips_invalid_characters(self):
        """Test characters outside [A-Za-z0-9_.] are removed."""
        assert sanitize_key("this_is_245_~//_a_key_with_öäå") == "this_is_245__a_key_with_"

    def test_keeps_valid_characters(self):
        """Test allowed characters pass through."""
        assert sanitize_key("Key.with_dots.123") == "Key.with_dots.123"

    def test_truncates_after_stripping(self):
        """Test truncation applies to the cleaned key."""
        assert sanitize_key("-" * 10 + "a" * 70) == "a" * 64

    def test_all_invalid(self):
        """Test a key made of invalid characters becomes empty."""
        assert sanitize_key("::--//") == ""


class TestNormalizeValue:
    """Test normalize_value()."""

    @pytest.mark.parametrize("raw,expected", [
        (True, True),
        (False, False),
        ("false", False),
        ("true", True),
        ("0", "0"),
        ("value", "value"),
        (12, 12),
    ])
    def test_normalization(self, raw, expected):
        """Test boolean literal coercion and pass-through."""
        result = normalize_value(raw)
        assert result == expected
        assert type(result) is type(expected)

    def test_clamps_integers(self):
        """Test integers are clamped to Int64."""
        assert normalize_value(2 ** 70) == INT64_MAX
        assert normalize_value(-(2 ** 70)) == INT64_MIN
        assert normalize_value(10 ** 5000) == INT64_MAX


class TestCastValue:
    """Test cast_value()."""

    def test_string_default(self):
        """Test the default cast keeps text."""
        assert cast_value("hello world") == "hello world"

    def test_int(self):
        """Test integer casts."""
        assert cast_value("1024", ValueType.INT) == 1024
        assert cast_value("-7", ValueType.INT) == -7

    def test_int_best_effort(self):
        """Test failed integer casts don't raise."""
        assert cast_value("12abc", ValueType.INT) == 12
        assert cast_value("abc", ValueType.INT) == 0

    def test_int_clamped(self):
        """Test oversized integers are clamped."""
        assert cast_value("9" * 30, ValueType.INT) == INT64_MAX

    def test_int_too_long_for_int(self):
        """Test digit runs past the int() conversion limit are clamped."""
        assert cast_value("9" * 5000, ValueType.INT) == INT64_MAX
        assert cast_value("-" + "9" * 5000, ValueType.INT) == INT64_MIN
        assert cast_value("0" * 5000 + "42", ValueType.INT) == 42

    def test_int_too_long_best_effort(self):
        """Test a long leading digit run with trailing junk is clamped."""
        assert cast_value("9" * 5000 + "abc", ValueType.INT) == INT64_MAX

    @pytest.mark.parametrize("raw,expected", [
        ("1", True),
        ("yes", True),
        ("0", False),
        ("", False),
        ("false", True),
        (" 0", True),
    ])
    def test_bool(self, raw, expected):
        """Test boolean casts."""
        assert cast_value(raw, ValueType.BOOL) is expected

    def test_from_tag(self):
        """Test only lower-case tags select a cast."""
        assert ValueType.from_tag("i") is ValueType.INT
        assert ValueType.from_tag("I") is ValueType.STRING
        assert ValueType.from_tag("B") is ValueType.STRING
        assert ValueType.from_tag("b") is ValueType.BOOL
        with pytest.raises(ValueError):
            ValueType.from_tag("x")


class TestIsNumeric:
    """Test is_numeric()."""

    @pytest.mark.parametrize("value", [5, "5", "-3", "2.5", "1e3", " 7 "])
    def test_numeric(self, value):
        assert is_numeric(value) is True

    @pytest.mark.parametrize("value", [True, False, "abc", "", "nan", "inf", "1,000"])
    def test_not_numeric(self, value):
        assert is_numeric(value) is False
