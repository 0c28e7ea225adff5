"""
Data models for song matches and enrichment queries.

A MatchResult is created once per successful fingerprint match and never
mutated afterwards; it is what the history store persists.
"""

from dataclasses import dataclass, asdict, field, fields
from datetime import datetime, timezone
from typing import Dict, Optional, Any
import uuid

from shared.constants import UNKNOWN_TITLE, UNKNOWN_ARTIST, DEFAULT_SOURCE


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


@dataclass(frozen=True)
class EnrichmentQuery:
    """A (title, artist) pair of free text. Artist may be empty."""
    title: str
    artist: str = ""

    @classmethod
    def create(cls, title: Optional[str], artist: Optional[str] = None) -> 'EnrichmentQuery':
        """Build a query with surrounding whitespace trimmed."""
        return cls(title=_clean(title), artist=_clean(artist))

    @property
    def is_empty(self) -> bool:
        return not self.title

    @property
    def text(self) -> str:
        """Title and artist joined as a single free-text search string."""
        return f"{self.title} {self.artist}".strip()


@dataclass(frozen=True)
class MatchResult:
    """
    A fingerprint match, optionally enriched with provenance.

    Attributes:
        id: Unique identifier (UUID4), generated at creation
        title: Song title, never empty
        artist: Artist name, never empty
        artwork_url: Optional artwork locator
        purchase_url: Optional store/purchase locator
        provenance: Where the song is known to be used ("Anime Opening: X"),
            absent when no enrichment source matched
        matched_at: ISO-8601 UTC timestamp of creation
    """
    title: str
    artist: str
    artwork_url: Optional[str] = None
    purchase_url: Optional[str] = None
    provenance: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    matched_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __post_init__(self):
        for name in ("title", "artist", "id", "matched_at"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"MatchResult.{name} must be a string")
        for name in ("artwork_url", "purchase_url", "provenance"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"MatchResult.{name} must be a string or None")
        if not self.title or not self.title.strip():
            raise ValueError("MatchResult.title must not be empty")
        if not self.artist or not self.artist.strip():
            raise ValueError("MatchResult.artist must not be empty")
        if self.provenance is not None and not self.provenance.strip():
            raise ValueError("MatchResult.provenance must be non-empty when present")
        if not self.id:
            raise ValueError("MatchResult.id must not be empty")

    @classmethod
    def create(
        cls,
        title: Optional[str],
        artist: Optional[str],
        artwork_url: Optional[str] = None,
        purchase_url: Optional[str] = None,
        provenance: Optional[str] = None,
    ) -> 'MatchResult':
        """
        Create a new result from raw match fields.

        Missing or blank title/artist are replaced by placeholders, and a
        blank provenance is treated as absent.
        """
        return cls(
            title=_clean(title) or UNKNOWN_TITLE,
            artist=_clean(artist) or UNKNOWN_ARTIST,
            artwork_url=artwork_url or None,
            purchase_url=purchase_url or None,
            provenance=_clean(provenance) or None,
        )

    @property
    def source(self) -> str:
        """Display provenance, falling back to the fingerprinting service."""
        return self.provenance or DEFAULT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchResult':
        """Create MatchResult from dictionary, filtering unknown keys."""
        field_names = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}
        return cls(**filtered_data)
