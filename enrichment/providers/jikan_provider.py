"""Jikan (MyAnimeList) anime opening-theme provenance source."""

import logging
from typing import Any, Dict, List, Optional

from shared.constants import JIKAN_API_BASE, DEFAULT_JIKAN_MAX_CANDIDATES
from shared.errors import LookupClientError
from shared.lookup_client import LookupClient
from shared.models import EnrichmentQuery

from .base import MetadataSource

logger = logging.getLogger(__name__)


def opening_matches(opening: str, title: str, artist: str) -> bool:
    """
    Loose match: the opening credit contains the title or the artist.

    Substring rather than equality, so short or common titles can produce
    false positives. An empty needle never matches.
    """
    haystack = opening.lower()
    for needle in (title, artist):
        needle = (needle or "").strip().lower()
        if needle and needle in haystack:
            return True
    return False


class JikanThemeSource(MetadataSource):
    """
    Searches anime by free text and checks each candidate's opening themes.

    No API key needed. Reports "Anime Opening: <work title>" for the first
    candidate whose openings mention the query title or artist.
    """

    name = "jikan"

    def __init__(
        self,
        client: LookupClient,
        base_url: str = JIKAN_API_BASE,
        max_candidates: int = DEFAULT_JIKAN_MAX_CANDIDATES,
        fetch_missing_themes: bool = True,
    ):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._max_candidates = max(1, max_candidates)
        self._fetch_missing_themes = fetch_missing_themes

    @property
    def is_available(self) -> bool:
        return True

    def lookup(self, query: EnrichmentQuery) -> Optional[str]:
        if query.is_empty:
            return None
        try:
            data = self._client.fetch_json(
                f"{self._base_url}/anime",
                params={"q": query.text, "sfw": "true"},
            )
        except LookupClientError as e:
            logger.warning(f"Jikan search failed for '{query.text}': {e}")
            return None

        candidates = data.get("data") if isinstance(data, dict) else None
        if not isinstance(candidates, list):
            return None

        for anime in candidates[:self._max_candidates]:
            if not isinstance(anime, dict):
                continue
            work_title = anime.get("title")
            if not isinstance(work_title, str) or not work_title.strip():
                continue
            openings = self._openings_for(anime)
            logger.debug(f"Jikan candidate '{work_title}' openings: {openings}")
            for opening in openings:
                if opening_matches(opening, query.title, query.artist):
                    return f"Anime Opening: {work_title.strip()}"
        return None

    def _openings_for(self, anime: Dict[str, Any]) -> List[str]:
        """Opening credits from the inline theme block, or from the themes endpoint."""
        theme = anime.get("theme")
        if isinstance(theme, dict):
            return self._strings(theme.get("openings"))

        mal_id = anime.get("mal_id")
        if not self._fetch_missing_themes or not isinstance(mal_id, int):
            return []
        try:
            data = self._client.fetch_json(f"{self._base_url}/anime/{mal_id}/themes")
        except LookupClientError as e:
            logger.debug(f"Jikan themes unavailable for {mal_id}: {e}")
            return []
        themes = data.get("data") if isinstance(data, dict) else None
        if not isinstance(themes, dict):
            return []
        return self._strings(themes.get("openings"))

    @staticmethod
    def _strings(value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [v for v in value if isinstance(v, str)]
