"""Failure taxonomy for CSV ingestion.

Every failure carries a single human-readable ``user_message`` suitable for
display; the underlying cause (if any) is chained via ``__cause__``.
"""

from __future__ import annotations

from typing import Optional


class IngestionError(Exception):
    """Base class for terminal ingestion failures."""

    user_message = "Something went wrong while processing the file."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.user_message)
        self.detail = detail


class InvalidExtension(IngestionError):
    user_message = "Please drop a valid .csv file."


class UnreadableFile(IngestionError):
    user_message = "Failed to read the file."


class EmptyInput(IngestionError):
    user_message = "The uploaded CSV file appears to be empty."


class AnalysisFailure(IngestionError):
    user_message = (
        "Failed to generate analysis. Please check your API key and try again."
    )


__all__ = [
    "IngestionError",
    "InvalidExtension",
    "UnreadableFile",
    "EmptyInput",
    "AnalysisFailure",
]
