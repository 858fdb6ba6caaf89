"""Primitive value casting and rendering for textrecord."""

import json
import math
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .string_utils import NUMBER_PATTERN, strip_leading_zeros

if TYPE_CHECKING:
    from .types import DateParser, JsonValue, OutputType

TRUTHY_VALUES = frozenset({"true", "1", "yes"})


def cast_value(
    raw: str,
    output_type: "OutputType | str | None" = "string",
    date_format: str | None = None,
    date_parser: "DateParser | None" = None,
) -> Any:
    """
    Cast an extracted string to its declared output type.

    Casting never raises: values that cannot be converted come back as
    the raw string (date, json) or as NaN (number).

    Args:
        raw: The trimmed text extracted from the line.
        output_type: One of string, number, boolean, date, json.
        date_format: Declared date format, handed to ``date_parser``.
        date_parser: Replacement for the generic date parse.

    Returns:
        The typed value.
    """
    if output_type == "number":
        return _parse_number(raw)

    if output_type == "boolean":
        return raw.strip().lower() in TRUTHY_VALUES

    if output_type == "date":
        return _parse_date(raw, date_format, date_parser)

    if output_type == "json":
        try:
            return json.loads(raw)
        except (ValueError, RecursionError):
            return raw

    return raw


def _parse_number(raw: str) -> int | float:
    """Parse a zero-padded numeric string. Non-numeric text gives NaN."""
    token = strip_leading_zeros(raw)
    if not NUMBER_PATTERN.match(token):
        return math.nan

    try:
        return int(token)
    except ValueError:
        pass

    return float(token)


def _parse_date(raw: str, date_format: str | None, date_parser: "DateParser | None") -> Any:
    """Parse a date with the caller's parser, or the generic ISO parser."""
    if not raw:
        return raw
    try:
        if date_parser is not None:
            return date_parser(raw, date_format)
        return datetime.fromisoformat(raw)
    except (ValueError, TypeError, OverflowError):
        return raw


def stringify_value(value: "JsonValue | Any") -> str:
    """
    Render a source value as line text.

    Args:
        value: A value from the source tree.

    Returns:
        The text form; None renders as an empty string.
    """
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _format_number(value)

    if isinstance(value, str):
        return value

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)

    return str(value)


def _format_number(value: int | float) -> str:
    """Format a number the way it is written in a record."""
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return ""
        # Normalize -0 to 0
        if value == 0.0:
            return "0"
        s = repr(value)
        # Remove unnecessary .0 for whole numbers
        if s.endswith(".0") and "e" not in s.lower():
            return s[:-2]
        return s

    return str(value)
