"""Provenance enrichment: metadata sources (TMDb, Jikan, Gemini) + orchestration."""

from .service import EnrichmentService, EnrichmentPolicy, display_source
from .providers.base import MetadataSource

__all__ = ["EnrichmentService", "EnrichmentPolicy", "display_source", "MetadataSource"]
