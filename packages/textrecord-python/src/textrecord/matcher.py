"""Line classification against record matchers."""

from __future__ import annotations

from collections.abc import Iterable

from .types import RecordSchema


def classify(line: str, schemas: Iterable[RecordSchema]) -> RecordSchema | None:
    """
    Find the record type a line belongs to.

    Matchers are tried in declaration order and the first one found
    anywhere in the line wins. Patterns are unanchored unless the schema
    author anchored them.

    Args:
        line: The line to classify.
        schemas: Candidate schemas, in declaration order.

    Returns:
        The first matching schema, or None.
    """
    for schema in schemas:
        if schema.matcher is not None and schema.matcher.search(line):
            return schema
    return None
