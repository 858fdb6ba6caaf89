"""Per-field extraction (decode) and rendering (encode)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .primitives import cast_value, stringify_value
from .string_utils import fit_width, split_by_delimiter
from .types import (
    DateParser,
    DelimitedArrayField,
    DelimitedField,
    FieldSpec,
    FixedField,
)


def extract_field(field: FieldSpec, line: str, delimiter: str | None = None) -> str | list[str]:
    """
    Extract the raw text of a field from a line.

    Extraction never fails: positions past the end of the line give the
    available tail or an empty string, a missing delimited index gives an
    empty string and a capture regex without matches gives an empty list.

    Args:
        field: The field to extract.
        line: The record line.
        delimiter: The record's delimiter, used by delimited fields.

    Returns:
        The trimmed text, or a list of trimmed captures for delimitedArray.
    """
    if isinstance(field, DelimitedArrayField):
        captures = []
        for match in field.capture_regex.finditer(line):
            text = match.group(1) if field.capture_regex.groups else match.group(0)
            captures.append((text or "").strip())
        return captures

    if isinstance(field, DelimitedField):
        parts = split_by_delimiter(line, delimiter)
        if 0 <= field.index < len(parts):
            return parts[field.index].strip()
        return ""

    if isinstance(field, FixedField):
        start = max(field.start, 0)
        if field.length is None:
            return line[start:].strip()
        return line[start : start + max(field.length, 0)].strip()

    raise TypeError(f"Cannot extract field of type {type(field).__name__}")


def decode_field(
    field: FieldSpec,
    line: str,
    delimiter: str | None = None,
    date_parser: DateParser | None = None,
) -> Any:
    """Extract a field and cast it, element-wise for arrays."""
    raw = extract_field(field, line, delimiter)
    if isinstance(raw, list):
        return [
            cast_value(item, field.output_type, field.date_format, date_parser) for item in raw
        ]
    return cast_value(raw, field.output_type, field.date_format, date_parser)


def render_field(field: FieldSpec, source: Any) -> str:
    """
    Render a field as a line segment.

    Args:
        field: The field to render.
        source: The object the record is built from. Anything that is not
            a mapping renders every value field as empty.

    Returns:
        ``prefix + value + suffix`` for variable-length fields, otherwise
        the value truncated or padded to exactly ``field.length``.
    """
    if field.source == "literal":
        text = field.literal_value
    elif isinstance(source, Mapping):
        text = stringify_value(source.get(field.name))
    else:
        text = ""

    if field.variable_length:
        return f"{field.prefix}{text}{field.suffix}"

    if field.length is None:
        return text

    return fit_width(text, field.length, field.pad_char, field.pad_direction)
