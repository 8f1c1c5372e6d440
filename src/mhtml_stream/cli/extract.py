"""
Command-line interface for extracting MHTML archives.

Prints the headers of every part and optionally writes each part that has a
Content-Location into an output directory.

Usage:
    # Print headers of all parts
    python -m mhtml_stream.cli.extract page.mhtml

    # Extract component files
    python -m mhtml_stream.cli.extract page.mhtml --output extracted/

    # One JSON object per part
    python -m mhtml_stream.cli.extract page.mhtml --format jsonl
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, TextIO

import structlog

from mhtml_stream.config import settings
from mhtml_stream.errors import MhtmlParseError
from mhtml_stream.logging_config import setup_logging
from mhtml_stream.parsing import MhtmlPart, configured_overrides, iter_file_chunks, parse_mhtml
from mhtml_stream.storage import output_path_for, write_output

logger = structlog.get_logger(__name__)


def print_part(part: MhtmlPart, out: TextIO, output_format: str = "text") -> None:
    """
    Print the headers of a part.

    Args:
        part: Parsed part
        out: Text stream to print to
        output_format: "text" for ``key : value`` lines, "jsonl" for one JSON object
    """
    if output_format == "jsonl":
        record = {
            "headers": [[key, value] for key, value in part.headers.entries_all()],
            "size_bytes": len(part.content),
        }
        print(json.dumps(record, ensure_ascii=False), file=out)
    else:
        for key, value in part.headers:
            print(key, ":", value, file=out)


def extract_file(
    mhtml_path: Path,
    output_dir: Optional[Path] = None,
    output_format: str = "text",
    binary_as_8bit: bool = False,
    out: Optional[TextIO] = None,
) -> List[Path]:
    """
    Stream an MHTML file through the parser, printing and saving its parts.

    Args:
        mhtml_path: Archive to parse
        output_dir: Directory for parts with a Content-Location (None to skip)
        output_format: Header output format
        binary_as_8bit: Treat "binary" parts like 8bit instead of failing
        out: Text stream for header output

    Returns:
        Paths of the written files

    Raises:
        MhtmlParseError: If the archive is malformed
    """
    out = out or sys.stdout
    overrides = configured_overrides(
        binary_as_8bit or settings.binary_as_8bit, settings.qp_newline
    )
    written = []
    for index, part in enumerate(parse_mhtml(iter_file_chunks(mhtml_path), overrides)):
        print_part(part, out, output_format)
        location = part.content_location
        if location and output_dir is not None:
            path = write_output(output_path_for(output_dir, location), part.content)
            written.append(path)
            logger.debug("part_written", index=index, path=str(path), size_bytes=len(part.content))

    logger.info("extraction_completed", path=str(mhtml_path), files_written=len(written))
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mhtml_stream",
        description="Parse an MHTML archive and extract its component files",
    )
    parser.add_argument("mhtml", type=str, help="The MHTML file to parse")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output directory for parts with a Content-Location",
    )
    parser.add_argument(
        "--format",
        "-f",
        type=str,
        choices=["text", "jsonl"],
        default="text",
        help="Header output format (default: text)",
    )
    parser.add_argument(
        "--binary-as-8bit",
        action="store_true",
        help="Decode binary Content-Transfer-Encoding line by line like 8bit",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    mhtml_path = Path(args.mhtml)
    if not mhtml_path.is_file():
        print(f"Error: File not found: {mhtml_path}", file=sys.stderr)
        return 1

    try:
        extract_file(
            mhtml_path,
            output_dir=Path(args.output) if args.output else None,
            output_format=args.format,
            binary_as_8bit=args.binary_as_8bit,
        )
    except MhtmlParseError as e:
        logger.error("extraction_failed", path=str(mhtml_path), error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("[done]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
