"""Record definition normalization and the record-type registry."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .errors import SchemaError
from .types import (
    DEFAULT_CAPTURE_PATTERN,
    ChildLink,
    DelimitedArrayField,
    DelimitedField,
    FieldSpec,
    FixedField,
    RecordSchema,
)

logger = logging.getLogger(__name__)

OUTPUT_TYPES = frozenset({"string", "number", "boolean", "date", "json"})
LITERAL_SOURCES = frozenset({"literal", "fixed", "fixedvalue"})

RawDefinitions = Iterable[Mapping[str, Any]]


class SchemaRegistry(Mapping[str, RecordSchema]):
    """Read-only record-type lookup that keeps declaration order."""

    def __init__(self, schemas: Iterable[RecordSchema]):
        by_type: dict[str, RecordSchema] = {}
        for schema in schemas:
            if schema.record_type in by_type:
                raise SchemaError(f"Duplicate record type: {schema.record_type!r}")
            by_type[schema.record_type] = schema
        if not by_type:
            raise SchemaError("At least one record definition is required")
        self._schemas = MappingProxyType(by_type)

    def __getitem__(self, record_type: str) -> RecordSchema:
        return self._schemas[record_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"SchemaRegistry({list(self._schemas)!r})"

    @property
    def schemas(self) -> tuple[RecordSchema, ...]:
        """All schemas in declaration order."""
        return tuple(self._schemas.values())


def build_registry(raw_defs: RawDefinitions | SchemaRegistry | None) -> SchemaRegistry:
    """
    Build the record-type registry from raw record definitions.

    Args:
        raw_defs: Record definitions as loaded from configuration (a list of
            dicts with camelCase keys). An existing registry is returned
            unchanged.

    Returns:
        The registry, keyed by record type in declaration order.

    Raises:
        SchemaError: If no definitions are given, a record type is missing
            or duplicated, or a field attribute is invalid.
    """
    if isinstance(raw_defs, SchemaRegistry):
        return raw_defs

    if raw_defs is None or isinstance(raw_defs, (str, bytes, Mapping)):
        raise SchemaError("Record definitions must be a non-empty list")

    definitions = list(raw_defs)
    if not definitions:
        raise SchemaError("At least one record definition is required")

    return SchemaRegistry(_build_record(raw, i) for i, raw in enumerate(definitions, start=1))


def load_schema(path: str | Path) -> list[dict[str, Any]]:
    """
    Load raw record definitions from a JSON file.

    The file holds either the list of definitions or an object with a
    ``records`` list.

    Raises:
        SchemaError: If the file is not valid JSON or holds no list.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise SchemaError(f"{path}: invalid JSON: {exc}") from exc

    if isinstance(data, Mapping):
        data = data.get("records")
    if not isinstance(data, list):
        raise SchemaError(f"{path}: expected a list of record definitions")
    return data


def compile_matcher(pattern: str | None) -> re.Pattern[str] | None:
    """
    Compile a record matcher.

    The text is tried as a regular expression first. Text that does not
    compile is matched literally at the start of the line.

    Args:
        pattern: The matcher text. None means the record type is never
            selected by line classification; an empty pattern matches
            every line.

    Returns:
        The compiled pattern, or None.
    """
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error:
        logger.debug("Matcher %r is not a valid pattern, matching it literally", pattern)
        return re.compile("^" + re.escape(pattern))


def _build_record(raw: Any, position: int) -> RecordSchema:
    """Normalize one raw record definition."""
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Record definition #{position} must be an object")

    record_type = raw.get("recordType")
    if not isinstance(record_type, str) or not record_type:
        raise SchemaError(f"Record definition #{position} has no recordType")

    fields = tuple(
        _build_field(f, record_type) for f in _collection(raw.get("fields"), "field")
    )

    links_raw = raw.get("childLinks", raw.get("childDefinitions", raw.get("children")))
    child_links = tuple(_build_child_link(c, record_type) for c in _collection(links_raw, "child"))

    matcher = raw.get("matcher")
    return RecordSchema(
        record_type=record_type,
        matcher=compile_matcher(None if matcher is None else str(matcher)),
        delimiter=raw.get("delimiter") or None,
        json_path=raw.get("jsonPath") or None,
        fields=fields,
        child_links=child_links,
    )


def _collection(value: Any, item_key: str) -> list[Any]:
    """Accept a plain list or the ``{item_key: [...]}`` collection shape."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        value = value.get(item_key) or []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise SchemaError(f"Expected a list, got {type(value).__name__}")
    return list(value)


def _build_field(raw: Any, record_type: str) -> FieldSpec:
    """Normalize one raw field definition into its FieldSpec variant."""
    if not isinstance(raw, Mapping):
        raise SchemaError(f"{record_type}: field definitions must be objects")

    name = raw.get("name", raw.get("jsonKey"))
    if not isinstance(name, str):
        name = "" if name is None else str(name)

    literal = raw.get("literalValue", raw.get("fixedValue"))
    source_raw = raw.get("valueSource", raw.get("source"))
    if source_raw is None:
        source = "literal" if literal is not None else "value"
    else:
        source = "literal" if str(source_raw).lower() in LITERAL_SOURCES else "value"

    output_type = str(raw.get("outputType") or "string").lower()
    if output_type not in OUTPUT_TYPES:
        output_type = "string"

    pad_direction = str(raw.get("padDirection", raw.get("padDir")) or "right").lower()

    common: dict[str, Any] = {
        "name": name,
        "output_type": output_type,
        "date_format": raw.get("dateFormat") or None,
        "length": _as_int(raw.get("length"), "length", record_type, name),
        "pad_char": str(raw.get("padChar") or " "),
        "pad_direction": "left" if pad_direction == "left" else "right",
        "source": source,
        "literal_value": "" if literal is None else str(literal),
        "variable_length": bool(raw.get("variableLength", False)),
        "prefix": str(raw.get("prefix") or ""),
        "suffix": str(raw.get("suffix") or ""),
    }

    kind = raw.get("type")
    if kind == "delimited":
        index = _as_int(raw.get("delimiterIndex", raw.get("index")), "index", record_type, name)
        return DelimitedField(index=index or 0, **common)

    if kind == "delimitedArray":
        pattern = raw.get("captureRegex", raw.get("regex")) or DEFAULT_CAPTURE_PATTERN
        try:
            compiled = re.compile(pattern)
        except re.error as exc:
            raise SchemaError(f"{record_type}.{name}: invalid captureRegex: {exc}") from exc
        return DelimitedArrayField(capture_regex=compiled, **common)

    start = _as_int(raw.get("start"), "start", record_type, name)
    return FixedField(start=start or 0, **common)


def _build_child_link(raw: Any, record_type: str) -> ChildLink:
    """Normalize one raw child link."""
    if not isinstance(raw, Mapping):
        raise SchemaError(f"{record_type}: child links must be objects")

    child_type = raw.get("childRecordType")
    if not isinstance(child_type, str) or not child_type:
        raise SchemaError(f"{record_type}: child link has no childRecordType")

    return ChildLink(
        child_record_type=child_type,
        count_field=raw.get("countField") or None,
        children_field=raw.get("childrenFieldName") or None,
    )


def _as_int(value: Any, key: str, record_type: str, field_name: str) -> int | None:
    """Read an optional integer attribute."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SchemaError(f"{record_type}.{field_name}: {key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise SchemaError(f"{record_type}.{field_name}: {key} must be an integer, got {value!r}")
