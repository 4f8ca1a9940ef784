"""CSV ingestion package: delimiter/header inference, bounded preview and analysis sample.

Public entry points:
    run_processing_pipeline(file_path, *, config=None) -> IngestionResult
    run_ingestion_pipeline(text, config) -> IngestionResult
    IngestionSession(config=None)  # staged configuration + async file state

Limits:
    preview rows  -> 50 records after the header
    sample window -> first 25 lines forwarded to the analysis prompt
"""

from .config import IngestionConfiguration, load_config  # noqa: F401
from .errors import (  # noqa: F401
    AnalysisFailure,
    EmptyInput,
    IngestionError,
    InvalidExtension,
    UnreadableFile,
)
from .pipeline import (  # noqa: F401
    CsvSource,
    IngestionResult,
    ParsedDataset,
    run_ingestion_pipeline,
    run_processing_pipeline,
)
from .session import IngestionSession, IngestionState, IngestionStatus  # noqa: F401

__all__ = [
    "IngestionConfiguration",
    "load_config",
    "IngestionError",
    "InvalidExtension",
    "UnreadableFile",
    "EmptyInput",
    "AnalysisFailure",
    "CsvSource",
    "ParsedDataset",
    "IngestionResult",
    "run_ingestion_pipeline",
    "run_processing_pipeline",
    "IngestionSession",
    "IngestionState",
    "IngestionStatus",
]
