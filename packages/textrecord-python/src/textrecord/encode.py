"""textrecord encoder implementation."""

import logging
from collections.abc import Generator, Mapping
from typing import Any

from .fields import render_field
from .schema import RawDefinitions, SchemaRegistry, build_registry
from .types import EncodeOptions, RecordSchema

logger = logging.getLogger(__name__)

# Marks a path that does not resolve
_MISSING = object()


def encode(
    schema: RawDefinitions | SchemaRegistry,
    value: Any,
    options: EncodeOptions | None = None,
) -> str:
    """
    Encode a Python value to record text.

    Args:
        schema: Raw record definitions, or a registry built from them.
        value: The source tree (usually a dict).
        options: Encoding options.

    Returns:
        The record lines joined by ``options.line_separator``.

    Raises:
        SchemaError: If the record definitions are empty or invalid.
    """
    opts = options or EncodeOptions()
    lines = list(encode_lines(schema, value))
    return opts.line_separator.join(lines)


def encode_lines(
    schema: RawDefinitions | SchemaRegistry, value: Any
) -> Generator[str, None, None]:
    """
    Encode a Python value to record text, yielding lines.

    Every record type with a ``jsonPath`` is a root: the path is looked up
    in ``value`` and each object found there becomes a record, followed by
    its children. Roots are written in declaration order.

    Args:
        schema: Raw record definitions, or a registry built from them.
        value: The source tree.

    Yields:
        Record lines.
    """
    registry = build_registry(schema)

    for root in registry.schemas:
        if not root.json_path:
            continue

        found = resolve_path(value, root.json_path)
        if isinstance(found, list):
            for obj in found:
                yield from encode_record(registry, root, obj)
        elif isinstance(found, Mapping):
            yield from encode_record(registry, root, found)
        else:
            logger.debug("%s: nothing to encode at %r", root.record_type, root.json_path)


def encode_record(
    registry: SchemaRegistry, schema: RecordSchema, obj: Any
) -> Generator[str, None, None]:
    """
    Encode one object as a record line followed by its child records.

    Args:
        registry: Lookup for child record types.
        schema: The record's schema.
        obj: The source object.

    Yields:
        The record's line, then the lines of each child in array order.
    """
    # Depth-first, parent before children; pending siblings wait on the stack
    stack: list[tuple[RecordSchema, Any]] = [(schema, obj)]

    while stack:
        schema, obj = stack.pop()
        yield "".join(render_field(field, obj) for field in schema.fields)
        stack.extend(reversed(_child_records(registry, schema, obj)))


def _child_records(
    registry: SchemaRegistry, schema: RecordSchema, obj: Any
) -> list[tuple[RecordSchema, Any]]:
    """List an object's children with their schemas, link by link."""
    if not isinstance(obj, Mapping):
        return []

    pending: list[tuple[RecordSchema, Any]] = []
    for link in schema.child_links:
        if not link.children_field:
            continue
        children = obj.get(link.children_field)
        if not isinstance(children, list):
            continue

        child_schema = registry.get(link.child_record_type)
        if child_schema is None:
            logger.debug(
                "%s: unknown child record type %r, skipping link",
                schema.record_type,
                link.child_record_type,
            )
            continue

        pending.extend((child_schema, child) for child in children)
    return pending


def resolve_path(value: Any, path: str) -> Any:
    """
    Look up a dot-separated key path.

    Integer segments index into lists.

    Args:
        value: The tree to search.
        path: Keys joined by dots, e.g. ``"order.lines"``.

    Returns:
        The value at the path, or None when any segment is missing.
    """
    current = value
    for segment in path.split("."):
        current = _step(current, segment)
        if current is _MISSING:
            return None
    return current


def _step(value: Any, segment: str) -> Any:
    """Follow one path segment."""
    if isinstance(value, Mapping):
        return value.get(segment, _MISSING)
    if isinstance(value, list) and segment.lstrip("-").isdigit():
        index = int(segment)
        if -len(value) <= index < len(value):
            return value[index]
    return _MISSING
