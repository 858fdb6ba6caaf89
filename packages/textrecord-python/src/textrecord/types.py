"""Type definitions for the textrecord codec."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

OutputType = Literal["string", "number", "boolean", "date", "json"]
PadDirection = Literal["left", "right"]
ValueSource = Literal["value", "literal"]

DateParser = Callable[[str, str | None], Any]

# Key under which decoded values carry their record type
RECORD_TYPE_KEY = "__recordType"

# Used when a delimitedArray field declares no capture regex
DEFAULT_CAPTURE_PATTERN = r"\[(.*?)\]"


@dataclass(frozen=True)
class FieldSpec:
    """One column of a record line."""

    name: str
    """Key the value is stored under (decode) or read from (encode)."""

    output_type: OutputType = "string"
    """Cast applied after extraction."""

    date_format: str | None = None
    """Accepted for date fields; the generic parser ignores it."""

    length: int | None = None
    """Rendered width. None renders the value unchanged."""

    pad_char: str = " "
    pad_direction: PadDirection = "right"

    source: ValueSource = "value"
    """Whether encode reads the source object or emits literal_value."""

    literal_value: str = ""
    variable_length: bool = False
    """Render prefix + value + suffix with no padding or truncation."""

    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class FixedField(FieldSpec):
    """Characters ``[start, start + length)`` of the line."""

    start: int = 0


@dataclass(frozen=True)
class DelimitedField(FieldSpec):
    """The element at ``index`` after splitting by the record delimiter."""

    index: int = 0


@dataclass(frozen=True)
class DelimitedArrayField(FieldSpec):
    """Every capture of ``capture_regex`` across the line."""

    capture_regex: re.Pattern[str] = field(
        default_factory=lambda: re.compile(DEFAULT_CAPTURE_PATTERN)
    )


@dataclass(frozen=True)
class ChildLink:
    """Nests another record type immediately after a parent record."""

    child_record_type: str
    count_field: str | None = None
    """Parent field holding the number of child blocks (decode)."""

    children_field: str | None = None
    """Parent key holding the child array."""


@dataclass(frozen=True)
class RecordSchema:
    """One record type: how its lines are recognised, laid out and nested."""

    record_type: str
    matcher: re.Pattern[str] | None = None
    delimiter: str | None = None
    json_path: str | None = None
    fields: tuple[FieldSpec, ...] = ()
    child_links: tuple[ChildLink, ...] = ()


@dataclass
class DecodeOptions:
    """Options for decoding."""

    aggregate: bool = False
    """Group records by record type instead of returning a flat list."""

    date_parser: DateParser | None = None
    """Replaces the generic ISO date parse. Called as ``parser(raw, date_format)``."""


@dataclass
class EncodeOptions:
    """Options for encoding."""

    line_separator: str = "\n"
    """Inserted between output lines."""
