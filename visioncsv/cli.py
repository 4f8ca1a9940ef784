"""Command-line interface for the CSV ingestion preview.

Usage (examples):
    python -m visioncsv.cli path/to/file.csv
    python -m visioncsv.cli path/to/file.csv --delimiter semicolon --no-header
    python -m visioncsv.cli path/to/file.csv --prompt
    python -m visioncsv.cli path/to/file.csv --json --output result.json

The CLI prints a concise human-readable summary by default; use --json for full payload.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .config import ENCODING_CODECS, IngestionConfiguration, load_config
from .pipeline import CsvSource, IngestionResult
from .session import IngestionSession, IngestionStatus

_PREVIEW_ROWS = 5


def _summarize(result: IngestionResult) -> str:
    payload: Dict[str, Any] = result.to_payload()
    dataset = payload["dataset"]
    cols = dataset["column_names"]
    preview_cols = cols[:8]
    more = "" if len(cols) <= 8 else f" (+{len(cols)-8} more)"
    lines = [
        f"Delimiter: {result.delimiter!r}  Lines: {dataset['lines_total']}",
        f"Rows: {dataset['rows']}  Columns: {dataset['columns']}",
        f"Columns: {', '.join(preview_cols)}{more}",
    ]
    if result.rows:
        frame = result.dataset.to_frame().head(_PREVIEW_ROWS)
        lines.append(frame.to_string(index=False))
    return "\n".join(lines)


def _build_config(args: argparse.Namespace) -> IngestionConfiguration:
    base = load_config()
    return IngestionConfiguration.from_values(
        delimiter=args.delimiter if args.delimiter is not None else base.delimiter,
        has_header=base.has_header and not args.no_header,
        encoding=args.encoding if args.encoding is not None else base.encoding,
        skip_empty_lines=base.skip_empty_lines and not args.keep_empty_lines,
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preview a CSV file and build the analysis prompt for it."
    )
    parser.add_argument("file", help="Path to input .csv file")
    parser.add_argument(
        "--delimiter",
        help="auto, comma, semicolon, tab, pipe or the literal character (default: auto)",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Treat the first line as data and generate Column_<n> headers.",
    )
    parser.add_argument(
        "--encoding",
        choices=list(ENCODING_CODECS),
        help="Text encoding of the file (default: UTF-8)",
    )
    parser.add_argument(
        "--keep-empty-lines",
        action="store_true",
        help="Keep blank lines instead of skipping them.",
    )
    parser.add_argument(
        "--prompt",
        action="store_true",
        help="Print the analysis prompt built from the first lines of the file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print full JSON payload to stdout (in addition to summary)",
    )
    parser.add_argument(
        "--output",
        help="Optional path to write full JSON payload (pretty-printed)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("VISIONCSV_LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    try:
        logging.basicConfig(
            level=str(args.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    except ValueError as exc:
        # only reachable through a bad VISIONCSV_LOG_LEVEL default
        raise SystemExit(f"Invalid log level: {exc}")

    path = Path(args.file)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")

    try:
        config = _build_config(args)
    except ValueError as exc:
        raise SystemExit(str(exc))

    session = IngestionSession(config)
    state = asyncio.run(session.select_file(CsvSource.from_path(path)))
    if state.status is not IngestionStatus.PARSED or state.result is None:
        print(f"ERROR: {state.message}", file=sys.stderr)
        return 2

    result = state.result
    print(_summarize(result))

    if args.prompt:
        print("\n=== Analysis Prompt ===")
        print(result.prompt)

    payload = result.to_payload()
    if args.json:
        print("\n=== JSON Payload ===")
        print(json.dumps(payload, indent=2, ensure_ascii=False))

    if args.output:
        out_path = Path(args.output)
        out_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        print(f"\nSaved JSON payload to {out_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
