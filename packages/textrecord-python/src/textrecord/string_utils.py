"""String utilities for textrecord encoding/decoding."""

import math
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import PadDirection

BYTE_ORDER_MARK = "\ufeff"

# Line breaks accepted in decode input
LINE_BREAK_PATTERN = re.compile(r"\r?\n")

# Optional sign followed by zeros that precede another digit
LEADING_ZEROS_PATTERN = re.compile(r"^([+-]?)0+(?=\d)")

# Leading integer of a repetition count (parseInt semantics)
COUNT_PATTERN = re.compile(r"^\s*([+-]?\d+)", re.ASCII)

# Plain decimal or exponent notation, ASCII digits only
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\Z", re.ASCII)


def split_lines(text: str) -> list[str]:
    """
    Split decode input into its non-blank lines.

    A leading byte order mark is removed and whitespace-only lines are
    dropped. The remaining lines are returned untrimmed, since fixed-width
    positions are measured from the first character.

    Args:
        text: The whole input document.

    Returns:
        The non-blank lines in order.
    """
    if text.startswith(BYTE_ORDER_MARK):
        text = text[len(BYTE_ORDER_MARK) :]
    return [line for line in LINE_BREAK_PATTERN.split(text) if line.strip()]


def split_by_delimiter(line: str, delimiter: str | None) -> list[str]:
    """
    Split a line by the record delimiter.

    Without a delimiter the whole line is the only element.
    """
    if not delimiter:
        return [line]
    return line.split(delimiter)


def strip_leading_zeros(value: str) -> str:
    """Remove zero padding from a numeric string, keeping a lone ``0``."""
    return LEADING_ZEROS_PATTERN.sub(r"\1", value.strip())


def parse_count(value: object) -> int:
    """
    Read a repetition count from a decoded field value.

    Mirrors integer parsing of the leading digits: ``"3"``, ``" 03 "`` and
    ``"3 items"`` all read as 3. Anything that does not start with an
    integer, and any negative number, reads as 0.

    Args:
        value: The decoded field value (string, number or anything else).

    Returns:
        A count >= 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return max(int(value), 0)
    if isinstance(value, str):
        match = COUNT_PATTERN.match(value)
        if match:
            return max(int(match.group(1)), 0)
    return 0


def fit_width(
    value: str, length: int, pad_char: str = " ", direction: "PadDirection" = "right"
) -> str:
    """
    Truncate or pad a value to exactly ``length`` characters.

    Args:
        value: The rendered value.
        length: The target width.
        pad_char: Fill character. Longer fill strings are repeated and cut.
        direction: ``left`` prepends the fill, ``right`` appends it.

    Returns:
        A string of exactly ``length`` characters.
    """
    if length <= 0:
        return ""
    if len(value) >= length:
        return value[:length]

    deficit = length - len(value)
    fill = (pad_char or " ") * deficit
    fill = fill[:deficit]
    if direction == "left":
        return fill + value
    return value + fill
