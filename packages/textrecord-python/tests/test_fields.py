"""Tests for field extraction, casting and rendering."""

import math
import re
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from textrecord import (
    DelimitedArrayField,
    DelimitedField,
    FixedField,
    cast_value,
    extract_field,
    render_field,
)
from textrecord.primitives import stringify_value


class TestExtract:
    """Test raw extraction per field kind."""

    def test_fixed(self):
        assert extract_field(FixedField(name="x", start=2, length=3), "ab cd ef") == "cd"

    def test_fixed_out_of_range(self):
        assert extract_field(FixedField(name="x", start=10, length=5), "short") == ""
        assert extract_field(FixedField(name="x", start=3, length=10), "abcdef") == "def"

    def test_delimited(self):
        field = DelimitedField(name="x", index=1)
        assert extract_field(field, "a| b |c", "|") == "b"

    def test_delimited_missing_index(self):
        assert extract_field(DelimitedField(name="x", index=5), "a|b", "|") == ""

    def test_delimited_without_delimiter(self):
        assert extract_field(DelimitedField(name="x", index=0), " whole line ", None) == "whole line"

    def test_delimited_array(self):
        assert extract_field(DelimitedArrayField(name="x"), "X [a] [b] [c]") == ["a", "b", "c"]

    def test_delimited_array_without_group(self):
        field = DelimitedArrayField(name="x", capture_regex=re.compile(r"\d+"))
        assert extract_field(field, "a1 b22 c333") == ["1", "22", "333"]


class TestCast:
    """Test cast_value directly."""

    def test_number(self):
        assert cast_value("0042", "number") == 42
        assert cast_value("+0042", "number") == 42
        assert cast_value("3.25", "number") == 3.25

    def test_number_empty_is_nan(self):
        assert math.isnan(cast_value("", "number"))

    @pytest.mark.parametrize("raw", ["1_000", "inf", "-Infinity", "nan", "\u0661\u0662", "12abc", "1e"])
    def test_number_rejects_non_decimal_text(self, raw):
        assert math.isnan(cast_value(raw, "number"))

    def test_number_exponent(self):
        assert cast_value("1.5e3", "number") == 1500.0
        assert cast_value(".5", "number") == 0.5

    def test_boolean_case_insensitive(self):
        assert cast_value("True", "boolean") is True
        assert cast_value("Yes", "boolean") is True
        assert cast_value("y", "boolean") is False

    def test_date_with_time(self):
        assert cast_value("2024-03-01T10:30:00", "date") == datetime(2024, 3, 1, 10, 30)

    def test_date_parser_receives_format(self):
        seen = []

        def parser(raw, fmt):
            seen.append((raw, fmt))
            return date(2000, 1, 1)

        assert cast_value("x", "date", "%Y", parser) == date(2000, 1, 1)
        assert seen == [("x", "%Y")]

    def test_json_scalar(self):
        assert cast_value("12", "json") == 12
        assert cast_value("null", "json") is None

    def test_json_nested_too_deep_stays_raw(self):
        raw = "[" * 100000
        assert cast_value(raw, "json") == raw

    def test_identity(self):
        assert cast_value(" raw ", "string") == " raw "
        assert cast_value("raw", None) == "raw"


class TestRender:
    """Test rendering of fields into line segments."""

    def test_left_pad(self):
        field = FixedField(name="n", length=5, pad_char="0", pad_direction="left")
        assert render_field(field, {"n": "7"}) == "00007"

    def test_truncate(self):
        field = FixedField(name="n", length=5, pad_char="0", pad_direction="left")
        assert render_field(field, {"n": "123456"}) == "12345"

    def test_right_pad_default(self):
        assert render_field(FixedField(name="s", length=4), {"s": "ab"}) == "ab  "

    def test_missing_and_none(self):
        field = FixedField(name="s", length=3)
        assert render_field(field, {}) == "   "
        assert render_field(field, {"s": None}) == "   "

    def test_numbers_and_booleans(self):
        field = FixedField(name="v", length=6)
        assert render_field(field, {"v": 12.0}) == "12    "
        assert render_field(field, {"v": 1.5}) == "1.5   "
        assert render_field(field, {"v": True}) == "true  "

    def test_literal(self):
        field = FixedField(name="ignored", length=4, source="literal", literal_value="HDR")
        assert render_field(field, {"ignored": "x"}) == "HDR "

    def test_literal_is_opaque(self):
        field = FixedField(name="x", source="literal", literal_value="{{ $now }}", variable_length=True)
        assert render_field(field, {}) == "{{ $now }}"

    def test_variable_length(self):
        field = FixedField(name="v", length=2, variable_length=True, prefix="<", suffix=">;")
        assert render_field(field, {"v": "long value"}) == "<long value>;"

    def test_no_length_renders_unchanged(self):
        assert render_field(FixedField(name="v"), {"v": "as is"}) == "as is"

    def test_non_mapping_source(self):
        assert render_field(FixedField(name="v", length=3), "scalar") == "   "

    def test_multi_char_pad(self):
        field = FixedField(name="v", length=6, pad_char="ab", pad_direction="left")
        assert render_field(field, {"v": "x"}) == "ababax"

    @pytest.mark.parametrize("length", [1, 3, 8])
    @pytest.mark.parametrize("value", ["", "x", "abcdefghijkl", 12345, None])
    @pytest.mark.parametrize("direction", ["left", "right"])
    def test_fixed_width_always_exact(self, length, value, direction):
        field = FixedField(name="v", length=length, pad_char="*", pad_direction=direction)
        assert len(render_field(field, {"v": value})) == length


class TestStringify:
    """Test conversion of source values to text."""

    def test_special_floats(self):
        assert stringify_value(float("nan")) == ""
        assert stringify_value(-0.0) == "0"

    def test_dates(self):
        assert stringify_value(date(2024, 3, 1)) == "2024-03-01"

    def test_containers(self):
        assert stringify_value({"a": [1, 2]}) == '{"a":[1,2]}'
