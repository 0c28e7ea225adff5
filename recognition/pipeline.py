"""Turns fingerprint outcomes into enriched, recorded match results."""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Optional, Union

from enrichment.service import EnrichmentService
from history.manager import HistoryStore
from shared.errors import PersistenceError
from shared.models import EnrichmentQuery, MatchResult

from .outcomes import Matched, NoMatch, RecognitionOutcome, describe_no_match

logger = logging.getLogger(__name__)

HISTORY_WRITE_FAILED = "Match found, but it could not be saved to your history."


@dataclass(frozen=True)
class MatchReport:
    """What the caller shows: the result (if any) and an optional status line."""
    result: Optional[MatchResult]
    status: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.result is not None


class MatchPipeline:
    """
    Handles one fingerprint outcome at a time.

    On a match the song is enriched, recorded in history and returned; the
    caller always gets the result even if enrichment finds nothing or the
    history write fails.
    """

    def __init__(self, enrichment: EnrichmentService, history: HistoryStore):
        self._enrichment = enrichment
        self._history = history
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="recognition"
        )

    def handle(self, outcome: RecognitionOutcome) -> MatchReport:
        if isinstance(outcome, NoMatch):
            status = describe_no_match(outcome)
            logger.info(f"No match: {status}")
            return MatchReport(result=None, status=status)
        if not isinstance(outcome, Matched):
            raise TypeError(f"Unsupported recognition outcome: {outcome!r}")

        query = EnrichmentQuery.create(outcome.title, outcome.artist)
        logger.debug(f"Matched '{query.title}' by '{query.artist}', querying for media source")
        provenance = self._enrichment.enrich(query)

        result = MatchResult.create(
            title=outcome.title,
            artist=outcome.artist,
            artwork_url=outcome.artwork_url,
            purchase_url=outcome.purchase_url,
            provenance=provenance,
        )

        status = None
        try:
            self._history.save(result)
        except PersistenceError as e:
            logger.error(f"Failed to save '{result.title}' to history: {e}")
            status = HISTORY_WRITE_FAILED

        logger.info(f"Match found: {result.title} by {result.artist} ({result.source})")
        return MatchReport(result=result, status=status)

    def submit(
        self,
        outcome: Union[RecognitionOutcome, "concurrent.futures.Future[RecognitionOutcome]"],
    ) -> "concurrent.futures.Future[MatchReport]":
        """
        Handle an outcome off the calling thread.

        Accepts either an outcome or a future that will resolve to one, so a
        fingerprinting engine can hand over its pending result directly.
        """
        if isinstance(outcome, concurrent.futures.Future):
            return self._executor.submit(lambda: self.handle(outcome.result()))
        return self._executor.submit(self.handle, outcome)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "MatchPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
