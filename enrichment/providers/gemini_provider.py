"""Gemini generative-text provenance source."""

import json
import logging
import re
from typing import Any, Optional

from shared.constants import GEMINI_API_BASE, DEFAULT_GEMINI_MODEL
from shared.errors import LookupClientError
from shared.lookup_client import LookupClient
from shared.models import EnrichmentQuery

from .base import MetadataSource

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    'Is the song "{title}"{by_artist} known as the theme song, opening or ending '
    "of a movie, TV show, anime or video game? "
    "Answer strictly with a single JSON object and nothing else, in the form "
    '{{"sourceTitle": string or null, "sourceType": string or null}}, where '
    'sourceTitle is the name of the work and sourceType is one of "Movie", '
    '"TV Show", "Anime" or "Video Game". Use null for both fields if you are '
    "not sure."
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_prompt(query: EnrichmentQuery) -> str:
    by_artist = f' by "{query.artist}"' if query.artist else ""
    return PROMPT_TEMPLATE.format(title=query.title, by_artist=by_artist)


def extract_text(payload: Any) -> Optional[str]:
    """Pull candidates[0].content.parts[0].text out of a generateContent response."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


def parse_answer(text: str) -> Optional[str]:
    """Turn the model's JSON answer into "<sourceTitle> (<sourceType>)", or None."""
    text = text.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        answer = json.loads(text)
    except ValueError:
        logger.debug(f"Gemini answer is not JSON: {text[:80]!r}")
        return None
    if not isinstance(answer, dict):
        return None
    source_title = answer.get("sourceTitle")
    source_type = answer.get("sourceType")
    if not isinstance(source_title, str) or not isinstance(source_type, str):
        return None
    if not source_title.strip() or not source_type.strip():
        return None
    return f"{source_title.strip()} ({source_type.strip()})"


class GeminiThemeSource(MetadataSource):
    """Asks a Gemini model whether the song is a known theme. Requires GEMINI_API_KEY."""

    name = "gemini"

    def __init__(
        self,
        client: LookupClient,
        api_key: Optional[str] = None,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
    ):
        self._client = client
        self._api_key = (api_key or "").strip()
        self._model = model
        self._base_url = base_url.rstrip("/")

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    def lookup(self, query: EnrichmentQuery) -> Optional[str]:
        if not self._api_key or query.is_empty:
            return None
        body = {"contents": [{"parts": [{"text": build_prompt(query)}]}]}
        try:
            payload = self._client.fetch_json(
                f"{self._base_url}/models/{self._model}:generateContent",
                method="POST",
                body=body,
                params={"key": self._api_key},
            )
        except LookupClientError as e:
            logger.warning(f"Gemini lookup failed for '{query.title}': {e}")
            return None

        text = extract_text(payload)
        if text is None:
            return None
        return parse_answer(text)
