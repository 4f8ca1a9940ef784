"""Interactive ingestion session: active/staged configuration plus file state.

One ``IngestionSession`` owns:
  - the active ``IngestionConfiguration`` and at most one staged copy
    (begin_edit / stage / commit / cancel);
  - a single ``IngestionState`` value moving through
    idle -> file_selected -> {parsed | failed}.

Decoding is the only await point. Every run takes a new generation number and
cancels the previous pending decode; a result that completes for an older
generation is discarded so it can never overwrite newer state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from .analysis import AnalysisClient, request_analysis
from .config import IngestionConfiguration, load_config
from .errors import AnalysisFailure, IngestionError, InvalidExtension
from .pipeline import (
    CsvSource,
    IngestionResult,
    ParsedDataset,
    decode_source,
    ensure_csv_name,
    run_ingestion_pipeline,
)

logger = logging.getLogger(__name__)

Reader = Callable[[CsvSource, IngestionConfiguration], Awaitable[str]]


async def read_source(source: CsvSource, config: IngestionConfiguration) -> str:
    """Default reader: decode in a worker thread so the event loop stays free."""
    return await asyncio.to_thread(decode_source, source, config)


class IngestionStatus(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PARSED = "parsed"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionState:
    status: IngestionStatus = IngestionStatus.IDLE
    source: Optional[CsvSource] = None
    result: Optional[IngestionResult] = None
    error: Optional[IngestionError] = None
    generation: int = 0

    @property
    def dataset(self) -> Optional[ParsedDataset]:
        return self.result.dataset if self.result is not None else None

    @property
    def message(self) -> Optional[str]:
        return self.error.user_message if self.error is not None else None


class IngestionSession:
    def __init__(
        self,
        config: Optional[IngestionConfiguration] = None,
        *,
        reader: Reader = read_source,
    ):
        self._config = config or load_config()
        self._staged: Optional[IngestionConfiguration] = None
        self._state = IngestionState()
        self._generation = 0
        self._pending: Optional[asyncio.Future] = None
        self._reader = reader

    @property
    def config(self) -> IngestionConfiguration:
        return self._config

    @property
    def staged(self) -> Optional[IngestionConfiguration]:
        return self._staged

    @property
    def state(self) -> IngestionState:
        return self._state

    # -- configuration editing -------------------------------------------

    def begin_edit(self) -> IngestionConfiguration:
        self._staged = replace(self._config)
        return self._staged

    def stage(self, **changes: Any) -> IngestionConfiguration:
        """Replace the staged configuration with a modified copy.

        Values go through the same normalization as user input, so
        ``stage(delimiter="tab")`` works.
        """
        if self._staged is None:
            raise RuntimeError("no edit in progress; call begin_edit() first")
        values = asdict(self._staged)
        values.update(changes)
        self._staged = IngestionConfiguration.from_values(**values)
        return self._staged

    def cancel(self) -> None:
        self._staged = None

    async def commit(self) -> IngestionState:
        if self._staged is None:
            raise RuntimeError("nothing staged; call begin_edit() first")
        self._config, self._staged = self._staged, None
        logger.info("configuration committed: %s", self._config)
        source = self._state.source
        if source is None:
            return self._state
        return await self._run(source, self._config, new_source=False)

    # -- file lifecycle --------------------------------------------------

    async def select_file(
        self, source: Union[CsvSource, str, Path]
    ) -> IngestionState:
        if not isinstance(source, CsvSource):
            source = CsvSource.from_path(source)
        try:
            ensure_csv_name(source.name)
        except InvalidExtension as exc:
            logger.warning("rejected %s: %s", source.name, exc)
            # a decode still in flight must not overwrite the rejection
            generation = self._supersede()
            self._state = replace(
                self._state,
                status=IngestionStatus.FAILED,
                error=exc,
                generation=generation,
            )
            return self._state
        return await self._run(source, self._config, new_source=True)

    def reset(self) -> IngestionState:
        generation = self._supersede()
        self._state = IngestionState(generation=generation)
        logger.info("session reset")
        return self._state

    def analyze(self, client: AnalysisClient) -> Any:
        """Send the current sample prompt to ``client``.

        On failure the state moves to failed (dataset kept) and the
        AnalysisFailure is re-raised to the caller.
        """
        result = self._state.result
        if self._state.status is not IngestionStatus.PARSED or result is None:
            raise RuntimeError("no parsed dataset to analyze")
        try:
            return request_analysis(client, result.prompt)
        except AnalysisFailure as exc:
            self._state = replace(
                self._state, status=IngestionStatus.FAILED, error=exc
            )
            raise

    # -- internals -------------------------------------------------------

    def _supersede(self) -> int:
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        return self._generation

    def _fail(self, exc: IngestionError, generation: int) -> IngestionState:
        logger.warning("ingestion failed: %s", exc)
        self._state = replace(
            self._state,
            status=IngestionStatus.FAILED,
            error=exc,
            generation=generation,
        )
        return self._state

    async def _run(
        self,
        source: CsvSource,
        config: IngestionConfiguration,
        *,
        new_source: bool,
    ) -> IngestionState:
        generation = self._supersede()
        previous = self._state
        if new_source:
            self._state = IngestionState(
                status=IngestionStatus.FILE_SELECTED,
                source=source,
                generation=generation,
            )
            logger.info("file selected: %s", source.name)

        task = asyncio.ensure_future(self._reader(source, config))
        self._pending = task
        try:
            text = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("decode for generation %d cancelled", generation)
                return self._state
            # caller cancelled this run: the attempt never happened
            self._state = replace(previous, generation=generation)
            raise
        except IngestionError as exc:
            if generation != self._generation:
                return self._state
            return self._fail(exc, generation)
        finally:
            if self._pending is task:
                self._pending = None

        if generation != self._generation:
            logger.debug("discarding stale result for generation %d", generation)
            return self._state

        try:
            result = run_ingestion_pipeline(text, config)
        except IngestionError as exc:
            return self._fail(exc, generation)

        self._state = IngestionState(
            status=IngestionStatus.PARSED,
            source=source,
            result=result,
            generation=generation,
        )
        logger.info(
            "parsed %s: %d columns, %d rows",
            source.name,
            len(result.headers),
            len(result.rows),
        )
        return self._state


__all__ = [
    "Reader",
    "read_source",
    "IngestionStatus",
    "IngestionState",
    "IngestionSession",
]
