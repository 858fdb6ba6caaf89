"""Command-line interface for textrecord.

    textrecord decode --schema defs.json [--aggregate] [INPUT]
    textrecord encode --schema defs.json [--line-separator SEP] [INPUT]

INPUT defaults to stdin. Decode prints JSON, encode reads JSON and prints
the record text.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys

from .decode import decode
from .encode import encode
from .errors import SchemaError
from .schema import build_registry, load_schema
from .types import DecodeOptions, EncodeOptions

SEPARATOR_ESCAPES = {"\\n": "\n", "\\r": "\r", "\\t": "\t", "\\\\": "\\"}
SEPARATOR_ESCAPE_PATTERN = re.compile(r"\\[nrt\\]")


def _unescape_separator(text: str) -> str:
    """Expand \\n, \\r, \\t and \\\\ in a separator given on the command line."""
    return SEPARATOR_ESCAPE_PATTERN.sub(lambda m: SEPARATOR_ESCAPES[m.group(0)], text)


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="textrecord", description="Convert between record text and JSON."
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log skipped lines and links")
    sub = p.add_subparsers(dest="command", required=True)

    dec = sub.add_parser("decode", help="Record text to JSON")
    dec.add_argument("path", nargs="?", default="-", help="Input file path or '-' for stdin")
    dec.add_argument("--schema", required=True, help="JSON file with record definitions")
    dec.add_argument(
        "--aggregate", action="store_true", help="Group records by record type"
    )

    enc = sub.add_parser("encode", help="JSON to record text")
    enc.add_argument("path", nargs="?", default="-", help="Input file path or '-' for stdin")
    enc.add_argument("--schema", required=True, help="JSON file with record definitions")
    enc.add_argument(
        "--line-separator",
        default="\\n",
        help="Separator between lines, backslash escapes allowed (default: \\n)",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        registry = build_registry(load_schema(args.schema))
        if args.command == "decode":
            result = decode(
                registry, _read_input(args.path), DecodeOptions(aggregate=args.aggregate)
            )
            out = json.dumps(result, indent=2, ensure_ascii=False, default=str)
        else:
            data = json.loads(_read_input(args.path))
            separator = _unescape_separator(args.line_separator)
            out = encode(registry, data, EncodeOptions(line_separator=separator))
    except (SchemaError, OSError, ValueError) as ex:
        # ValueError covers malformed JSON input
        sys.stderr.write(f"error: {ex}\n")
        return 2

    sys.stdout.write(out + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
