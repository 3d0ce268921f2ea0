"""iTunes Search/Lookup API provider for Resonance."""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from resonance.models import CatalogRecord, CatalogSearchResult, MediaKind
from resonance.providers.base import CatalogProvider, clamp_limit
from resonance.utils.ids import safe_catalog_id

logger = logging.getLogger("resonance.providers.itunes")

DEFAULT_BASE_URL = "https://itunes.apple.com"
MEDIA_MUSIC = "music"


class ITunesProvider(CatalogProvider):
    """Catalog provider backed by the public iTunes Search API.

    See https://performance-partners.apple.com/search-api
    """

    provider_name = "itunes"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        country: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize the provider.

        Args:
            base_url: Base URL of the catalog API (no trailing slash needed)
            timeout: Per-request timeout in seconds
            country: Optional storefront code passed as ``country``
            headers: HTTP headers for every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.country = country
        self.headers = headers or {"Accept": "application/json"}

    def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """GET an API endpoint and return the decoded JSON body.

        Returns:
            JSON object as dictionary, or None on any failure
        """
        url = f"{self.base_url}/{endpoint}"
        if self.country:
            params = {**params, "country": self.country}

        try:
            response = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"iTunes {endpoint} request failed: {e}")
            return None

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"iTunes {endpoint} returned a malformed body: {e}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"iTunes {endpoint} returned unexpected JSON type: {type(payload).__name__}")
            return None
        return payload

    def _parse_results(self, endpoint: str, payload: Dict[str, Any]) -> CatalogSearchResult:
        """Turn a ``{resultCount, results}`` body into a search result."""
        raw_results = payload.get("results")
        if raw_results is None:
            raw_results = []
        if not isinstance(raw_results, list):
            logger.warning(f"iTunes {endpoint} body has non-list results")
            return CatalogSearchResult.empty()

        records: List[CatalogRecord] = []
        for item in raw_results:
            if not isinstance(item, dict):
                logger.debug(f"Skipping non-object iTunes result: {item!r}")
                continue
            try:
                records.append(CatalogRecord.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping malformed iTunes result: {e}")

        total_count = payload.get("resultCount")
        if not isinstance(total_count, int) or isinstance(total_count, bool):
            total_count = len(records)

        return CatalogSearchResult(records=records, total_count=total_count)

    def search(self, kind: MediaKind, query: str, limit: int = 20) -> CatalogSearchResult:
        """Search the iTunes catalog for albums, songs or artists."""
        params = {
            "term": query,
            "media": MEDIA_MUSIC,
            "entity": kind.search_entity,
            "limit": clamp_limit(limit),
        }
        logger.debug(f"Searching iTunes for '{query}' with entity={params['entity']}, limit={params['limit']}")

        payload = self._make_request("search", params)
        if payload is None:
            return CatalogSearchResult.empty()

        result = self._parse_results("search", payload)
        logger.debug(f"iTunes search returned {len(result)} result(s) for query: {query}")
        return result

    def lookup(self, catalog_id: str) -> Optional[CatalogRecord]:
        """Look up a single album, track or artist by iTunes id."""
        itunes_id = safe_catalog_id(catalog_id)
        if itunes_id is None:
            logger.warning(f"Invalid iTunes id format: {catalog_id!r}")
            return None

        logger.debug(f"Looking up iTunes content by ID: {itunes_id}")
        payload = self._make_request("lookup", {"id": itunes_id})
        if payload is None:
            return None

        result = self._parse_results("lookup", payload)
        if not result.records:
            logger.debug(f"No results found for iTunes ID: {itunes_id}")
            return None

        # Lookups may carry related records; prefer the one that owns the id
        for record in result.records:
            if record.catalog_id == itunes_id:
                return record
        return result.records[0]
