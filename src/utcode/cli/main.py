"""Main CLI entry point for utcode."""

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from .. import __version__
from ..cli.analyze import analyze_file
from ..codec.decoder import decode
from ..codec.encoder import encode
from ..config import CodecConfig
from ..exceptions import UtcodeError
from ..utils.log import setup_logging

logger = logging.getLogger(__name__)


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _write_output(data: bytes, destination: Optional[str]) -> None:
    if destination is None or destination == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        Path(destination).write_bytes(data)


def _json_default(value: Any) -> Any:
    # Non-UTF-8 payloads decode to bytes
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the utcode CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="utcode: self-describing value codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  utcode --encode value.json -o value.ut   Encode JSON as a utcode document
  utcode --decode value.ut                 Print a utcode document as JSON
  utcode --analyze records.py              Show wire keys of record classes
  utcode --version                         Show version
        """,
    )

    command = parser.add_mutually_exclusive_group()
    command.add_argument(
        "--encode",
        metavar="FILE",
        type=str,
        help="Encode a JSON document ('-' for stdin)",
    )
    command.add_argument(
        "--decode",
        metavar="FILE",
        type=str,
        help="Decode a utcode document to JSON ('-' for stdin)",
    )
    command.add_argument(
        "--analyze",
        metavar="FILE",
        type=str,
        help="Analyze record classes and show their wire schema",
    )

    parser.add_argument("-o", "--output", metavar="FILE", help="Write output to FILE")
    parser.add_argument(
        "--collapse-floats",
        action="store_true",
        help="Encode whole-valued floats with the integer tag",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"utcode {__version__}",
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    config = CodecConfig(collapse_integral_floats=args.collapse_floats)

    if args.encode:
        try:
            value = json.loads(_read_input(args.encode))
            _write_output(encode(value, config=config), args.output)
            return 0
        except (OSError, ValueError, UtcodeError) as e:
            print(f"Error encoding {args.encode}: {e}", file=sys.stderr)
            return 1

    if args.decode:
        try:
            value = decode(_read_input(args.decode), config=config)
            text = json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)
            _write_output(text.encode("utf-8") + b"\n", args.output)
            return 0
        except (OSError, UtcodeError) as e:
            print(f"Error decoding {args.decode}: {e}", file=sys.stderr)
            return 1

    if args.analyze:
        file_path = Path(args.analyze)
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

        try:
            analyze_file(file_path)
            return 0
        except Exception as e:
            logger.debug("Analysis of %s failed", file_path, exc_info=True)
            print(f"Error analyzing file: {e}", file=sys.stderr)
            return 1

    # If no command specified, show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
