"""Line-level CSV parsing utilities used by the ingestion pipeline.

The pieces, in the order the pipeline calls them:
  - Line splitting / blank filtering (split_lines)
  - Delimiter inference (detect_delimiter)
  - Header resolution (resolve_headers)
  - Tolerant row projection (project_rows)

Tokenization is a plain split on the delimiter. Quoted fields containing the
delimiter are NOT kept together: '"Smith, John",30' yields three tokens.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple
import logging
import re

import numpy as np

from .config import DELIMITER_CHOICES
from .errors import EmptyInput

logger = logging.getLogger(__name__)

PREVIEW_ROW_LIMIT = 50
DETECTION_SAMPLE_LINES = 10
DEFAULT_DELIMITER = ","

_LINE_BREAK_PATTERN = re.compile(r"\r\n|\n")


# -----------------------------
# Line splitting
# -----------------------------


def split_lines(text: str, skip_empty_lines: bool = True) -> List[str]:
    lines = _LINE_BREAK_PATTERN.split(text)
    if skip_empty_lines:
        lines = [ln for ln in lines if ln.strip() != ""]
    if not lines:
        raise EmptyInput("no lines left after blank-line filtering")
    return lines


# -----------------------------
# Tokenization
# -----------------------------


def strip_enclosing_quotes(token: str) -> str:
    if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
        return token[1:-1]
    return token


def tokenize(line: str, delimiter: str) -> List[str]:
    return line.split(delimiter)


def clean_tokens(line: str, delimiter: str) -> List[str]:
    return [strip_enclosing_quotes(t.strip()) for t in tokenize(line, delimiter)]


# -----------------------------
# Delimiter detection
# -----------------------------


def detect_delimiter(lines: Sequence[str]) -> str:
    """Pick the candidate with the highest mean occurrences per line.

    Only the first ``DETECTION_SAMPLE_LINES`` non-blank lines are sampled.
    Candidates are tried in fixed order (comma, semicolon, tab, pipe) and a
    later candidate must score strictly higher to win, so exact ties keep
    the earlier one. Column-count consistency is not checked.
    """
    sample = [ln for ln in lines if ln.strip()][:DETECTION_SAMPLE_LINES]
    if not sample:
        return DEFAULT_DELIMITER

    best = DEFAULT_DELIMITER
    best_mean = 0.0
    for delim in DELIMITER_CHOICES.values():
        mean = float(np.mean([ln.count(delim) for ln in sample]))
        if mean > best_mean:
            best_mean = mean
            best = delim
    logger.debug("delimiter detection: chose %r (mean %.2f)", best, best_mean)
    return best


# -----------------------------
# Header resolution / rows
# -----------------------------


def resolve_headers(
    lines: Sequence[str], delimiter: str, has_header: bool
) -> Tuple[List[str], List[str]]:
    """Return ``(headers, data_lines)``.

    With a header row the first line is consumed; otherwise synthetic
    ``Column_<n>`` names are generated from the first line's token count and
    every line stays data.
    """
    first = lines[0]
    if has_header:
        return clean_tokens(first, delimiter), list(lines[1:])
    count = len(tokenize(first, delimiter))
    headers = [f"Column_{i+1}" for i in range(count)]
    return headers, list(lines)


def project_row(line: str, delimiter: str, width: int) -> Tuple[str, ...]:
    values = clean_tokens(line, delimiter)[:width]
    values.extend([""] * (width - len(values)))
    return tuple(values)


def project_rows(
    data_lines: Sequence[str],
    delimiter: str,
    headers: Sequence[str],
    limit: int = PREVIEW_ROW_LIMIT,
) -> Tuple[Tuple[str, ...], ...]:
    width = len(headers)
    return tuple(project_row(ln, delimiter, width) for ln in data_lines[:limit])


__all__ = [
    "PREVIEW_ROW_LIMIT",
    "DETECTION_SAMPLE_LINES",
    "split_lines",
    "strip_enclosing_quotes",
    "tokenize",
    "clean_tokens",
    "detect_delimiter",
    "resolve_headers",
    "project_row",
    "project_rows",
]
