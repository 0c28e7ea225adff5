"""
Factory for creating metadata sources and the enrichment service.

Maps configured source names onto adapter instances.
"""

from typing import Dict, List, Optional

from shared.config import AppConfig
from shared.lookup_client import LookupClient

from .providers import MetadataSource, TmdbThemeSource, JikanThemeSource, GeminiThemeSource
from .service import EnrichmentService, EnrichmentPolicy

SOURCE_NAMES = {
    "tmdb": "TMDb (movies & TV)",
    "jikan": "Jikan (anime openings)",
    "gemini": "Gemini (generative text)",
}


def create_source(name: str, config: AppConfig, client: LookupClient) -> MetadataSource:
    """
    Create one metadata source.

    Raises:
        ValueError: If the source name is not supported
    """
    name = name.strip().lower()
    if name == "tmdb":
        return TmdbThemeSource(client, api_key=config.tmdb_api_key)
    elif name == "jikan":
        return JikanThemeSource(client, max_candidates=config.jikan_max_candidates)
    elif name == "gemini":
        return GeminiThemeSource(client, api_key=config.gemini_api_key, model=config.gemini_model)
    else:
        raise ValueError(f"Unknown metadata source: {name}")


def build_sources(
    config: AppConfig,
    client: LookupClient,
    names: Optional[List[str]] = None,
) -> List[MetadataSource]:
    """Create sources in the configured (priority) order."""
    names = names if names is not None else config.enrichment_sources
    if not names:
        raise ValueError("At least one metadata source must be configured")
    return [create_source(n, config, client) for n in names]


def parse_policy(value: str) -> EnrichmentPolicy:
    try:
        return EnrichmentPolicy((value or "").strip().lower())
    except ValueError:
        raise ValueError(f"Unknown enrichment policy: {value}") from None


def build_enrichment_service(
    config: AppConfig,
    client: Optional[LookupClient] = None,
    policy: Optional[str] = None,
    names: Optional[List[str]] = None,
) -> EnrichmentService:
    """
    Wire a LookupClient, the configured sources and the policy together.

    A client created here is owned by the returned service and closed with it.
    """
    owned = None
    if client is None:
        client = owned = LookupClient(timeout=config.lookup_timeout)
    try:
        sources = build_sources(config, client, names)
        return EnrichmentService(
            sources, parse_policy(policy or config.enrichment_policy), owned_client=owned
        )
    except ValueError:
        if owned is not None:
            owned.close()
        raise


def describe_sources() -> Dict[str, str]:
    """Human-readable names of supported sources."""
    return dict(SOURCE_NAMES)
