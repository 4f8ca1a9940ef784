"""Ingestion configuration.

- ``IngestionConfiguration`` is an immutable value; edits produce a new value.
- ``load_config`` reads defaults from the environment and a ``.env`` file
  without failing on import.

Environment variables:
    VISIONCSV_DELIMITER         auto | comma | semicolon | tab | pipe | , | ; | | (default auto)
    VISIONCSV_HAS_HEADER        bool (default true)
    VISIONCSV_ENCODING          UTF-8 | ISO-8859-1 | ASCII (default UTF-8)
    VISIONCSV_SKIP_EMPTY_LINES  bool (default true)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional, Union

from dotenv import load_dotenv

AUTO = "auto"

# Candidate order doubles as the tie-break priority of delimiter detection.
DELIMITER_CHOICES: Dict[str, str] = {
    "comma": ",",
    "semicolon": ";",
    "tab": "\t",
    "pipe": "|",
}

# Display name -> Python codec. UTF-8 uses the BOM-aware codec.
ENCODING_CODECS: Dict[str, str] = {
    "UTF-8": "utf-8-sig",
    "ISO-8859-1": "latin-1",
    "ASCII": "ascii",
}

_ENCODING_ALIASES = {
    "utf8": "UTF-8",
    "utf-8": "UTF-8",
    "iso-8859-1": "ISO-8859-1",
    "iso8859-1": "ISO-8859-1",
    "latin-1": "ISO-8859-1",
    "latin1": "ISO-8859-1",
    "ascii": "ASCII",
    "us-ascii": "ASCII",
}


def normalize_delimiter(value: str) -> str:
    """Map a user-facing delimiter spelling to its canonical form.

    Accepts ``auto``, a candidate name (``comma``...), the literal character,
    or the two-character escape ``\\t`` that form fields submit for tab.
    """
    if value is None:
        raise ValueError("delimiter must not be None")
    if value in DELIMITER_CHOICES.values() or value == AUTO:
        return value
    key = value.strip().lower()
    if key == AUTO:
        return AUTO
    if key in DELIMITER_CHOICES:
        return DELIMITER_CHOICES[key]
    if value == "\\t":
        return "\t"
    stripped = value.strip()
    if stripped in DELIMITER_CHOICES.values():
        return stripped
    raise ValueError(f"Unsupported delimiter: {value!r}")


def normalize_encoding(value: str) -> str:
    if value in ENCODING_CODECS:
        return value
    key = (value or "").strip().lower()
    if key in _ENCODING_ALIASES:
        return _ENCODING_ALIASES[key]
    raise ValueError(f"Unsupported encoding: {value!r}")


_TRUE_WORDS = ("1", "true", "yes", "y", "on")
_FALSE_WORDS = ("0", "false", "no", "n", "off")


def normalize_flag(value: Union[bool, str]) -> bool:
    """Accept a real bool or a yes/no style string; anything else is rejected."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _TRUE_WORDS:
            return True
        if key in _FALSE_WORDS:
            return False
    raise ValueError(f"Expected a boolean flag, got {value!r}")


@dataclass(frozen=True)
class IngestionConfiguration:
    delimiter: str = AUTO
    has_header: bool = True
    encoding: str = "UTF-8"
    skip_empty_lines: bool = True

    def __post_init__(self) -> None:
        if self.delimiter != AUTO and self.delimiter not in DELIMITER_CHOICES.values():
            raise ValueError(
                f"delimiter must be 'auto' or one of {list(DELIMITER_CHOICES.values())!r}, "
                f"got {self.delimiter!r}"
            )
        if self.encoding not in ENCODING_CODECS:
            raise ValueError(
                f"encoding must be one of {list(ENCODING_CODECS)!r}, got {self.encoding!r}"
            )

    @property
    def codec(self) -> str:
        return ENCODING_CODECS[self.encoding]

    @classmethod
    def from_values(
        cls,
        *,
        delimiter: str = AUTO,
        has_header: Union[bool, str] = True,
        encoding: str = "UTF-8",
        skip_empty_lines: Union[bool, str] = True,
    ) -> "IngestionConfiguration":
        """Build a configuration from loosely spelled user input."""
        return cls(
            delimiter=normalize_delimiter(delimiter),
            has_header=normalize_flag(has_header),
            encoding=normalize_encoding(encoding),
            skip_empty_lines=normalize_flag(skip_empty_lines),
        )


def _getenv_str(name: str, default: str) -> str:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return val


def _getenv_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return normalize_flag(val)
    except ValueError:
        return default


_CONFIG_SINGLETON: Optional[IngestionConfiguration] = None


def load_config(reload: bool = False) -> IngestionConfiguration:
    """
    Load the default configuration from environment and .env (once).
    Use reload=True to force re-reading.
    """
    global _CONFIG_SINGLETON
    if _CONFIG_SINGLETON is not None and not reload:
        return _CONFIG_SINGLETON

    # Do not override already-set env vars.
    load_dotenv(override=False)

    cfg = IngestionConfiguration.from_values(
        delimiter=_getenv_str("VISIONCSV_DELIMITER", AUTO),
        has_header=_getenv_bool("VISIONCSV_HAS_HEADER", True),
        encoding=_getenv_str("VISIONCSV_ENCODING", "UTF-8"),
        skip_empty_lines=_getenv_bool("VISIONCSV_SKIP_EMPTY_LINES", True),
    )
    _CONFIG_SINGLETON = cfg
    return cfg


__all__ = [
    "AUTO",
    "DELIMITER_CHOICES",
    "ENCODING_CODECS",
    "IngestionConfiguration",
    "normalize_delimiter",
    "normalize_encoding",
    "normalize_flag",
    "load_config",
]
