from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

import pandas as pd

from .config import AUTO, IngestionConfiguration, load_config
from .errors import InvalidExtension, UnreadableFile
from .parsing_utils import (
    PREVIEW_ROW_LIMIT,
    detect_delimiter,
    project_rows,
    resolve_headers,
    split_lines,
)

logger = logging.getLogger(__name__)

SAMPLE_LINE_LIMIT = 25

ANALYSIS_PROMPT_TEMPLATE = (
    "Analyze this raw CSV data:\n\n{sample}\n\n"
    "Task: Identify the data type, calculate percentage breakdowns of "
    "categorical columns, and provide a summary."
)

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CsvSource:
    """A named byte-bearing file resource (on disk or in memory)."""

    name: str
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: str | Path) -> "CsvSource":
        p = Path(path)
        return cls(name=p.name, path=p)

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise OSError(f"{self.name}: no content or path to read from")
        return self.path.read_bytes()


@dataclass(frozen=True)
class ParsedDataset:
    """Header list plus at most ``PREVIEW_ROW_LIMIT`` header-aligned rows.

    Rows are stored positionally so duplicate header names survive.
    """

    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]

    def records(self) -> List[List[Tuple[str, str]]]:
        return [list(zip(self.headers, row)) for row in self.rows]

    def as_dicts(self) -> List[Dict[str, str]]:
        # Later duplicate headers overwrite earlier ones.
        return [dict(zip(self.headers, row)) for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.rows), columns=list(self.headers), dtype=object)


@dataclass(frozen=True)
class IngestionResult:
    dataset: ParsedDataset
    delimiter: str
    lines_total: int
    sample_text: str

    @property
    def headers(self) -> Tuple[str, ...]:
        return self.dataset.headers

    @property
    def rows(self) -> Tuple[Tuple[str, ...], ...]:
        return self.dataset.rows

    @property
    def prompt(self) -> str:
        return build_analysis_prompt(self.sample_text)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "dataset": {
                "rows": len(self.dataset.rows),
                "columns": len(self.dataset.headers),
                "column_names": list(self.dataset.headers),
                "lines_total": self.lines_total,
            },
            "delimiter": self.delimiter,
            "rows": self.dataset.as_dicts(),
            "sample_text": self.sample_text,
            "prompt": self.prompt,
        }


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def ensure_csv_name(name: str) -> str:
    ext = Path(name).suffix.lower()
    if ext != ".csv":
        raise InvalidExtension(f"Unsupported file type: {ext or name!r}")
    return name


def decode_source(source: CsvSource, config: IngestionConfiguration) -> str:
    """Read the whole source and decode it with the configured encoding."""
    try:
        raw = source.read_bytes()
        return raw.decode(config.codec)
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableFile(f"{source.name}: {exc}") from exc


def build_sample_text(lines: Sequence[str], limit: int = SAMPLE_LINE_LIMIT) -> str:
    return "\n".join(lines[:limit])


def build_analysis_prompt(sample_text: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(sample=sample_text)


def run_ingestion_pipeline(
    text: str, config: IngestionConfiguration
) -> IngestionResult:
    """split -> detect delimiter -> resolve headers -> project rows -> sample.

    Raises EmptyInput when no lines remain after filtering. The returned
    result is complete; nothing is produced on failure.
    """
    lines = split_lines(text, skip_empty_lines=config.skip_empty_lines)

    delimiter = config.delimiter
    if delimiter == AUTO:
        delimiter = detect_delimiter(lines)

    headers, data_lines = resolve_headers(lines, delimiter, config.has_header)
    rows = project_rows(data_lines, delimiter, headers, limit=PREVIEW_ROW_LIMIT)
    logger.debug(
        "parsed %d columns, %d preview rows from %d lines",
        len(headers),
        len(rows),
        len(lines),
    )

    return IngestionResult(
        dataset=ParsedDataset(headers=tuple(headers), rows=rows),
        delimiter=delimiter,
        lines_total=len(lines),
        sample_text=build_sample_text(lines),
    )


def run_processing_pipeline(
    file_path: str | Path, *, config: Optional[IngestionConfiguration] = None
) -> IngestionResult:
    """Synchronous one-shot ingestion of a CSV file on disk.

    Parameters
    ----------
    file_path : str or Path
        Path to a ``.csv`` file.
    config : IngestionConfiguration, optional
        Defaults to ``load_config()``.
    """
    cfg = config or load_config()
    source = CsvSource.from_path(file_path)
    ensure_csv_name(source.name)
    text = decode_source(source, cfg)
    return run_ingestion_pipeline(text, cfg)


__all__ = [
    "SAMPLE_LINE_LIMIT",
    "ANALYSIS_PROMPT_TEMPLATE",
    "CsvSource",
    "ParsedDataset",
    "IngestionResult",
    "ensure_csv_name",
    "decode_source",
    "build_sample_text",
    "build_analysis_prompt",
    "run_ingestion_pipeline",
    "run_processing_pipeline",
]
