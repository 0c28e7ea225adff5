"""Abstract metadata source interface."""

from abc import ABC, abstractmethod
from typing import Optional

from shared.models import EnrichmentQuery


class MetadataSource(ABC):
    """Interface for provenance sources (TMDb, Jikan, Gemini, etc.)."""

    name: str = "source"

    @abstractmethod
    def lookup(self, query: EnrichmentQuery) -> Optional[str]:
        """
        Return a human-readable provenance string for the query, or None.

        Implementations never raise: an unreachable source, an error status
        or an unexpected payload all mean "no answer".
        """
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the source is configured and usable."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
