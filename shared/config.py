import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from shared.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_ENRICHMENT_POLICY,
    DEFAULT_ENRICHMENT_SOURCES,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_JIKAN_MAX_CANDIDATES,
    DEFAULT_LOOKUP_TIMEOUT,
)

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _split_names(raw: str) -> List[str]:
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


@dataclass
class AppConfig:
    """
    Runtime settings, read from the environment (and a .env file if present).

    API keys are optional: a source without its key reports itself as
    unavailable and is skipped.
    """
    tmdb_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    enrichment_policy: str = DEFAULT_ENRICHMENT_POLICY
    enrichment_sources: List[str] = field(
        default_factory=lambda: _split_names(DEFAULT_ENRICHMENT_SOURCES)
    )
    jikan_max_candidates: int = DEFAULT_JIKAN_MAX_CANDIDATES
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR).expanduser())
    history_backend: str = "json"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            tmdb_api_key=os.getenv("TMDB_API_KEY") or None,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            lookup_timeout=_env_float("LOOKUP_TIMEOUT", DEFAULT_LOOKUP_TIMEOUT),
            enrichment_policy=os.getenv("ENRICHMENT_POLICY", DEFAULT_ENRICHMENT_POLICY).strip().lower(),
            enrichment_sources=_split_names(os.getenv("ENRICHMENT_SOURCES", DEFAULT_ENRICHMENT_SOURCES)),
            jikan_max_candidates=_env_int("JIKAN_MAX_CANDIDATES", DEFAULT_JIKAN_MAX_CANDIDATES),
            data_dir=Path(os.getenv("TRACKLORE_DATA_DIR", DEFAULT_DATA_DIR)).expanduser(),
            history_backend=os.getenv("HISTORY_BACKEND", "json").strip().lower(),
        )
