"""textrecord decoder implementation."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .fields import decode_field
from .matcher import classify
from .schema import RawDefinitions, SchemaRegistry, build_registry
from .string_utils import parse_count, split_lines
from .types import RECORD_TYPE_KEY, DecodeOptions, JsonObject, RecordSchema

logger = logging.getLogger(__name__)


def decode(
    schema: RawDefinitions | SchemaRegistry,
    text: str,
    options: DecodeOptions | None = None,
) -> list[JsonObject] | dict[str, list[JsonObject]]:
    """
    Decode record text to Python values.

    Args:
        schema: Raw record definitions, or a registry built from them.
        text: The whole text document.
        options: Decoding options.

    Returns:
        In flat mode, the decoded records in input order, each tagged with
        its record type under ``__recordType``. In aggregate mode, one dict
        mapping every record type to the list of its (untagged) records.

    Raises:
        SchemaError: If the record definitions are empty or invalid.
    """
    return decode_lines(schema, split_lines(text), options)


def decode_lines(
    schema: RawDefinitions | SchemaRegistry,
    lines: Iterable[str],
    options: DecodeOptions | None = None,
) -> list[JsonObject] | dict[str, list[JsonObject]]:
    """
    Decode records from pre-split lines.

    Blank lines are skipped. Lines are otherwise used as given, so a
    caller splitting its own input should not strip them.

    Args:
        schema: Raw record definitions, or a registry built from them.
        lines: Iterable of line strings.
        options: Decoding options.

    Returns:
        See :func:`decode`.
    """
    opts = options or DecodeOptions()
    registry = build_registry(schema)
    cursor = _Cursor([line for line in lines if line.strip()], registry, opts)
    records = _decode_root(cursor)

    if opts.aggregate:
        return _aggregate(records, registry)
    return records


class _Cursor:
    """Cursor over the non-blank input lines."""

    def __init__(self, lines: list[str], registry: SchemaRegistry, options: DecodeOptions):
        self.lines = lines
        self.registry = registry
        self.options = options
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.lines)

    def peek(self) -> str | None:
        """Look at current line without advancing."""
        if self.at_end():
            return None
        return self.lines[self.pos]

    def advance(self) -> str | None:
        """Get current line and advance position."""
        line = self.peek()
        if line is not None:
            self.pos += 1
        return line


def _decode_root(cursor: _Cursor) -> list[JsonObject]:
    """Scan the input, decoding a block at every line a matcher recognises."""
    results: list[JsonObject] = []
    schemas = cursor.registry.schemas

    while not cursor.at_end():
        line = cursor.peek()
        schema = classify(line, schemas)
        if schema is None:
            logger.debug("Line %d matches no record type, skipping", cursor.pos + 1)
            cursor.advance()
            continue

        _decode_block(cursor, schema, results, emit=True)

    return results


class _Frame:
    """A decoded record whose child links are still being filled."""

    __slots__ = ("value", "schema", "link_index", "child_schema", "children", "count", "attach")

    def __init__(self, value: JsonObject, schema: RecordSchema):
        self.value = value
        self.schema = schema
        self.link_index = -1
        self.child_schema: RecordSchema | None = None
        self.children: list[JsonObject] = []
        self.count = 0
        self.attach = False

    def open_next_link(self, registry: SchemaRegistry) -> bool:
        """Move to the next link with a known child type. False when none is left."""
        links = self.schema.child_links
        while self.link_index + 1 < len(links):
            self.link_index += 1
            link = links[self.link_index]
            child_schema = registry.get(link.child_record_type)
            if child_schema is None:
                logger.debug(
                    "%s: unknown child record type %r, skipping link",
                    self.schema.record_type,
                    link.child_record_type,
                )
                continue

            self.child_schema = child_schema
            self.children = []
            self.count = parse_count(self.value.get(link.count_field)) if link.count_field else 0
            self.attach = link.children_field is not None
            return True
        return False

    def close_link(self) -> None:
        link = self.schema.child_links[self.link_index]
        if len(self.children) < self.count:
            logger.debug(
                "%s: expected %d %s records, input ended after %d",
                self.schema.record_type,
                self.count,
                link.child_record_type,
                len(self.children),
            )
        if self.attach:
            self.value[link.children_field] = self.children


def _decode_block(
    cursor: _Cursor, schema: RecordSchema, results: list[JsonObject], emit: bool
) -> JsonObject:
    """
    Decode one record and the child blocks its counts announce.

    The record is read from the current line. Then, for each child link,
    the number of child blocks is read from the record's own count field
    and that many blocks are decoded from the following lines with the
    child's schema, without classifying them. Decoding stops early at the
    end of the input.

    Nesting is walked with an explicit stack of frames, so self-referencing
    record types may nest as deep as the input goes.

    Args:
        cursor: Positioned on the record's line; left after its last child.
        schema: The record's schema.
        results: Top-level output, receiving every record not attached to
            a parent.
        emit: Whether this record itself goes to ``results``.

    Returns:
        The decoded record.
    """
    root = _decode_record(cursor, schema, results, emit)
    stack = [_Frame(root, schema)]

    while stack:
        frame = stack[-1]
        if frame.link_index >= 0:
            if len(frame.children) < frame.count and not cursor.at_end():
                child = _decode_record(
                    cursor, frame.child_schema, results, emit=not frame.attach
                )
                frame.children.append(child)
                stack.append(_Frame(child, frame.child_schema))
                continue
            frame.close_link()

        if not frame.open_next_link(cursor.registry):
            stack.pop()

    return root


def _decode_record(
    cursor: _Cursor, schema: RecordSchema, results: list[JsonObject], emit: bool
) -> JsonObject:
    """Decode the fields of the current line and tag the value."""
    line = cursor.advance()
    value: JsonObject = {}
    for field in schema.fields:
        value[field.name] = decode_field(
            field, line, schema.delimiter, cursor.options.date_parser
        )
    value[RECORD_TYPE_KEY] = schema.record_type

    if emit:
        results.append(value)
    return value


def _aggregate(records: list[JsonObject], registry: SchemaRegistry) -> dict[str, list[JsonObject]]:
    """Group records by record type, dropping the record type tag."""
    grouped: dict[str, list[JsonObject]] = {record_type: [] for record_type in registry}
    for record in records:
        record_type = record.get(RECORD_TYPE_KEY)
        grouped.setdefault(record_type, []).append(_strip_tags(record))
    return grouped


def _strip_tags(record: JsonObject) -> JsonObject:
    """Copy a record and its attached children without the record type tag."""
    root: JsonObject = {}
    stack: list[tuple[Any, Any]] = [(record, root)]

    while stack:
        source, target = stack.pop()
        if isinstance(source, dict):
            for k, v in source.items():
                if k == RECORD_TYPE_KEY:
                    continue
                if isinstance(v, list):
                    target[k] = []
                    stack.append((v, target[k]))
                else:
                    target[k] = v
        else:
            for item in source:
                if isinstance(item, dict) and RECORD_TYPE_KEY in item:
                    copy: JsonObject = {}
                    target.append(copy)
                    stack.append((item, copy))
                else:
                    target.append(item)

    return root
