"""
Boundary to the external natural-language analysis service.

The package ships no network client; callers supply any object with an
``analyze(prompt) -> result`` method (e.g. a wrapper around an LLM SDK).
Whatever the client raises is surfaced as AnalysisFailure.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .errors import AnalysisFailure

logger = logging.getLogger(__name__)


class AnalysisClient(Protocol):
    def analyze(self, prompt: str) -> Any:
        ...


def request_analysis(client: AnalysisClient, prompt: str) -> Any:
    """Hand the prompt to the client unchanged and return its result."""
    try:
        return client.analyze(prompt)
    except Exception as exc:
        logger.warning("analysis client failed: %s", exc)
        raise AnalysisFailure(str(exc)) from exc


__all__ = ["AnalysisClient", "request_analysis"]
