"""TMDb movie/TV provenance source using the multi-search endpoint."""

import logging
from typing import Optional

from shared.constants import TMDB_API_BASE
from shared.errors import LookupClientError
from shared.lookup_client import LookupClient
from shared.models import EnrichmentQuery

from .base import MetadataSource

logger = logging.getLogger(__name__)


class TmdbThemeSource(MetadataSource):
    """
    Searches TMDb by title and reports the first hit as "<Type>: <name>".

    Requires TMDB_API_KEY.
    """

    name = "tmdb"

    def __init__(self, client: LookupClient, api_key: Optional[str] = None, base_url: str = TMDB_API_BASE):
        self._client = client
        self._api_key = (api_key or "").strip()
        self._base_url = base_url.rstrip("/")

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    def lookup(self, query: EnrichmentQuery) -> Optional[str]:
        if not self._api_key or query.is_empty:
            return None
        try:
            data = self._client.fetch_json(
                f"{self._base_url}/search/multi",
                params={"api_key": self._api_key, "query": query.title},
            )
        except LookupClientError as e:
            logger.warning(f"TMDb lookup failed for '{query.title}': {e}")
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return None
        logger.debug(f"TMDb returned {len(results)} result(s) for '{query.title}'")
        if not results or not isinstance(results[0], dict):
            return None

        match = results[0]
        display_name = match.get("name") or match.get("title")
        media_type = match.get("media_type")
        if not isinstance(display_name, str) or not display_name.strip():
            logger.debug("TMDb match found, but no name/title")
            return None
        if not isinstance(media_type, str) or not media_type.strip():
            return None

        logger.debug(f"TMDb match: {display_name} - {media_type}")
        return f"{media_type.strip().title()}: {display_name.strip()}"
