"""Orchestrates metadata sources into a single provenance answer."""

import concurrent.futures
import logging
from enum import Enum
from typing import List, Optional, Sequence

from shared.constants import DEFAULT_SOURCE, DEFAULT_ENRICHMENT_WORKERS
from shared.lookup_client import LookupClient
from shared.models import EnrichmentQuery

from .providers.base import MetadataSource

logger = logging.getLogger(__name__)


class EnrichmentPolicy(Enum):
    """How the configured sources are consulted."""
    SEQUENTIAL = "sequential"  # in order, next one only after a miss
    SINGLE = "single"          # exactly one source
    RACE = "race"              # all at once, first answer wins


def display_source(provenance: Optional[str]) -> str:
    """What to show for a match: the provenance, or the fingerprinting service."""
    return provenance or DEFAULT_SOURCE


class EnrichmentService:
    """
    Resolves a query to one provenance string (or None) across sources.

    Sources never raise by contract, but every call is still guarded here so
    a misbehaving source only ever counts as "no answer".
    """

    def __init__(
        self,
        sources: Sequence[MetadataSource],
        policy: EnrichmentPolicy = EnrichmentPolicy.SEQUENTIAL,
        max_workers: int = DEFAULT_ENRICHMENT_WORKERS,
        owned_client: Optional[LookupClient] = None,
    ):
        if policy is EnrichmentPolicy.SINGLE and len(sources) != 1:
            raise ValueError(f"single policy needs exactly one source, got {len(sources)}")
        self._sources: List[MetadataSource] = list(sources)
        self._policy = policy
        self._owned_client = owned_client
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="enrichment"
        )

    @property
    def policy(self) -> EnrichmentPolicy:
        return self._policy

    @property
    def sources(self) -> List[MetadataSource]:
        return list(self._sources)

    def enrich(self, query: EnrichmentQuery) -> Optional[str]:
        """Run one enrichment pass. Returns None when no source matched."""
        if query.is_empty:
            return None
        logger.debug(f"Enriching '{query.text}' with policy={self._policy.value}")
        if self._policy is EnrichmentPolicy.RACE:
            provenance = self._race(query)
        else:
            provenance = self._sequential(query)
        if provenance:
            logger.info(f"Provenance for '{query.title}': {provenance}")
        else:
            logger.info(f"No provenance found for '{query.title}'")
        return provenance

    def enrich_async(self, query: EnrichmentQuery) -> "concurrent.futures.Future[Optional[str]]":
        """Run enrich() off the calling thread."""
        return self._executor.submit(self.enrich, query)

    def close(self) -> None:
        """Stop the worker pool and close the lookup client this service owns."""
        self._executor.shutdown(wait=False)
        if self._owned_client is not None:
            self._owned_client.close()

    def __enter__(self) -> "EnrichmentService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ask(self, source: MetadataSource, query: EnrichmentQuery) -> Optional[str]:
        if not source.is_available:
            logger.debug(f"Skipping unavailable source {source.name}")
            return None
        try:
            answer = source.lookup(query)
        except Exception as e:
            logger.warning(f"Source {source.name} raised during lookup: {e}")
            return None
        if isinstance(answer, str) and answer.strip():
            return answer.strip()
        return None

    def _sequential(self, query: EnrichmentQuery) -> Optional[str]:
        for source in self._sources:
            answer = self._ask(source, query)
            if answer:
                logger.debug(f"Source {source.name} answered: {answer}")
                return answer
        return None

    def _race(self, query: EnrichmentQuery) -> Optional[str]:
        # A dedicated pool so a race started from enrich_async cannot starve
        # waiting on its own executor.
        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, len(self._sources)), thread_name_prefix="enrichment-race"
        )
        try:
            futures = {pool.submit(self._ask, s, query): s for s in self._sources}
            for future in concurrent.futures.as_completed(futures):
                answer = future.result()
                if answer:
                    logger.debug(f"Source {futures[future].name} won the race: {answer}")
                    return answer
            return None
        finally:
            pool.shutdown(wait=False)
