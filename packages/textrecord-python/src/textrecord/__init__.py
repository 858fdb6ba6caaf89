"""
textrecord - schema-driven codec for fixed-width and delimited text records

Converts line-oriented text (fixed-width columns, delimited fields, nested
child records announced by counts) to JSON-like Python values and back,
driven entirely by user-supplied record definitions.

Usage:
    import textrecord

    schema = [
        {
            "recordType": "H",
            "matcher": "^H",
            "jsonPath": "headers",
            "fields": [{"name": "id", "start": 1, "length": 3}],
        }
    ]

    # Decode text to records
    records = textrecord.decode(schema, "H001")
    # [{"id": "001", "__recordType": "H"}]

    # Encode records to text
    text = textrecord.encode(schema, {"headers": [{"id": "001"}]})

    # With options
    from textrecord import DecodeOptions, EncodeOptions

    grouped = textrecord.decode(schema, text, DecodeOptions(aggregate=True))
    crlf = textrecord.encode(schema, data, EncodeOptions(line_separator="\\r\\n"))
"""

__version__ = "0.3.0"

import logging

from .decode import decode, decode_lines
from .encode import encode, encode_lines, encode_record, resolve_path
from .errors import SchemaError
from .fields import extract_field, render_field
from .matcher import classify
from .primitives import cast_value
from .schema import SchemaRegistry, build_registry, compile_matcher, load_schema
from .types import (
    RECORD_TYPE_KEY,
    ChildLink,
    DecodeOptions,
    DelimitedArrayField,
    DelimitedField,
    EncodeOptions,
    FieldSpec,
    FixedField,
    JsonValue,
    RecordSchema,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "encode_lines",
    "decode",
    "decode_lines",
    # Building blocks
    "build_registry",
    "load_schema",
    "compile_matcher",
    "classify",
    "extract_field",
    "cast_value",
    "render_field",
    "encode_record",
    "resolve_path",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    # Types
    "SchemaRegistry",
    "RecordSchema",
    "FieldSpec",
    "FixedField",
    "DelimitedField",
    "DelimitedArrayField",
    "ChildLink",
    "JsonValue",
    "RECORD_TYPE_KEY",
    # Errors
    "SchemaError",
]
