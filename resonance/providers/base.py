"""Abstract base class for upstream catalog providers."""

from abc import ABC, abstractmethod
from typing import Optional

from resonance.models import CatalogRecord, CatalogSearchResult, MediaKind

MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 200


def clamp_limit(limit: int) -> int:
    """Clamp a search limit to the range the upstream accepts."""
    return min(max(int(limit), MIN_SEARCH_LIMIT), MAX_SEARCH_LIMIT)


class CatalogProvider(ABC):
    """Gateway to an upstream music catalog.

    Implementations are the failure boundary for upstream misbehaviour:
    neither operation may raise. Network errors, bad status codes and
    malformed payloads all come back as an empty result.
    """

    provider_name = ""

    @abstractmethod
    def search(self, kind: MediaKind, query: str, limit: int) -> CatalogSearchResult:
        """Search the catalog for records of the given kind.

        Args:
            kind: Kind of record to search for
            query: Search term, passed through verbatim
            limit: Maximum number of results, clamped to [1, 200]

        Returns:
            Matching records and the upstream result count
        """
        pass

    @abstractmethod
    def lookup(self, catalog_id: str) -> Optional[CatalogRecord]:
        """Look up a single record by catalog id, or None if unavailable."""
        pass

    def close(self) -> None:
        """Release any held resources."""
