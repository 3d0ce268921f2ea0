"""Catalog cache and resolution service.

Collections (searches and the discovery feed) are cached eagerly: every
record the upstream returns is written to the store before the response is
built. Single records are cached lazily, on the first lookup that misses
the store.
"""

from __future__ import annotations

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence

from resonance.config import DEFAULT_DISCOVERY_KEYWORDS
from resonance.core.mapper import EntityMapper
from resonance.core.store import CatalogStore
from resonance.errors import ConfigError, InvalidCatalogIdError
from resonance.models import (
    CatalogRecord,
    CatalogSearchResult,
    Media,
    MediaKind,
    MediaResponse,
    SearchResponse,
)
from resonance.providers.base import CatalogProvider
from resonance.utils.ids import parse_catalog_id

logger = logging.getLogger("resonance.catalog")

DEFAULT_SEARCH_LIMIT = 20
DEFAULT_VIRTUAL_TOTAL = 200
DEFAULT_MAX_BATCH_SIZE = 50
FEED_KEYWORD_COUNT = 2


class CatalogService:
    """Eager and lazy caching of upstream catalog records."""

    def __init__(
        self,
        provider: CatalogProvider,
        store: CatalogStore,
        mapper: Optional[EntityMapper] = None,
        rng: Optional[random.Random] = None,
        keywords: Optional[Sequence[str]] = None,
        virtual_total_elements: int = DEFAULT_VIRTUAL_TOTAL,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        """Initialize the service.

        Args:
            provider: Upstream catalog gateway
            store: Shared catalog store
            mapper: Record/entity/response mapper
            rng: Random generator for feeds; must be safe to share between
                threads (defaults to ``random.SystemRandom``)
            keywords: Discovery feed keyword corpus (at least two entries)
            virtual_total_elements: Synthetic ``totalElements`` for feeds
            search_limit: Result limit for searches
            max_batch_size: Cap on tracks fetched per feed keyword
        """
        self.provider = provider
        self.store = store
        self.mapper = mapper or EntityMapper()
        self.rng = rng or random.SystemRandom()
        if keywords is None:
            keywords = DEFAULT_DISCOVERY_KEYWORDS
        self.keywords = list(dict.fromkeys(keywords))
        if len(self.keywords) < FEED_KEYWORD_COUNT:
            raise ConfigError(f"Discovery feed needs at least {FEED_KEYWORD_COUNT} distinct keywords")
        if virtual_total_elements < 0:
            raise ConfigError("virtual_total_elements must be non-negative")
        self.virtual_total_elements = virtual_total_elements
        self.search_limit = search_limit
        self.max_batch_size = max_batch_size

    # ------------------------------------------------------------------
    # Upstream access
    # ------------------------------------------------------------------

    def _provider_search(self, kind: MediaKind, query: str, limit: int) -> CatalogSearchResult:
        """Search upstream, degrading any provider failure to an empty result."""
        try:
            result = self.provider.search(kind, query, limit)
        except Exception as e:
            logger.warning(f"Catalog search for '{query}' ({kind.value}) failed: {e}")
            return CatalogSearchResult.empty()
        return result if result is not None else CatalogSearchResult.empty()

    def _provider_lookup(self, catalog_id: str) -> Optional[CatalogRecord]:
        """Look up upstream, degrading any provider failure to absence."""
        try:
            return self.provider.lookup(catalog_id)
        except Exception as e:
            logger.warning(f"Catalog lookup for {catalog_id} failed: {e}")
            return None

    # ------------------------------------------------------------------
    # Eager path
    # ------------------------------------------------------------------

    def _sync_records(self, kind: MediaKind, records: Iterable[CatalogRecord]) -> List[Media]:
        """Persist the not-yet-cached records of a batch and return the batch.

        Records of another kind, or without an id for their kind, are
        dropped; duplicate ids keep their first record. The returned list
        is re-read from the store, in store order, so rows written by
        concurrent requests are reflected too.
        """
        batch: Dict[str, CatalogRecord] = {}
        for record in records:
            if record.kind is not kind:
                continue
            catalog_id = record.catalog_id
            if catalog_id is None:
                continue
            batch.setdefault(catalog_id, record)

        if not batch:
            return []

        ids = list(batch)
        existing_ids = {media.id for media in self.store.find_all_by_ids_in(ids)}

        new_entities = []
        for catalog_id, record in batch.items():
            if catalog_id in existing_ids:
                continue
            entity = self.mapper.to_entity(record)
            if entity is not None:
                new_entities.append(entity)

        if new_entities:
            self.store.save_all(new_entities)
            logger.info(f"Cached {len(new_entities)} new {kind.label.lower()} record(s)")
        logger.debug(f"Batch of {len(ids)} {kind.label.lower()}(s): {len(existing_ids)} already cached")

        synced = []
        for media in self.store.find_all_by_ids_in(ids):
            if media.kind is kind:
                synced.append(media)
            else:
                logger.debug(f"Skipping {media.id}: cached as {media.kind.value}, not {kind.value}")
        return synced

    def search(self, kind: MediaKind, query: str) -> SearchResponse:
        """Search upstream and return the cached results as a single page."""
        logger.debug(f"Searching {kind.label.lower()}s with query: {query}")
        result = self._provider_search(kind, query, self.search_limit)
        media = self._sync_records(kind, result.records)
        return SearchResponse.single_page(self.mapper.to_responses(media))

    def search_albums(self, query: str) -> SearchResponse:
        return self.search(MediaKind.ALBUM, query)

    def search_artists(self, query: str) -> SearchResponse:
        return self.search(MediaKind.ARTIST, query)

    def search_tracks(self, query: str) -> SearchResponse:
        return self.search(MediaKind.TRACK, query)

    # ------------------------------------------------------------------
    # Discovery feed
    # ------------------------------------------------------------------

    def _empty_feed(self, page: int) -> SearchResponse:
        return SearchResponse(content=[], page=page, size=0, total_elements=0, total_pages=0)

    def pick_keywords(self) -> List[str]:
        """Draw distinct feed keywords without replacement."""
        return self.rng.sample(self.keywords, FEED_KEYWORD_COUNT)

    def feed(self, page: int = 0, size: int = 20) -> SearchResponse:
        """Return a shuffled page of preview-bearing tracks.

        Every call draws new keywords, so pages are not stable; the totals
        are a virtual count that lets clients keep paging.

        Raises:
            ValueError: if page is negative or size is not positive
        """
        if page < 0:
            raise ValueError(f"page must be >= 0, got {page}")
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")

        keywords = self.pick_keywords()
        batch_size = min(size * 2, self.max_batch_size)
        logger.debug(f"Generating discovery feed with keywords {keywords}, page: {page}, size: {size}")

        with ThreadPoolExecutor(max_workers=len(keywords)) as executor:
            results = list(
                executor.map(
                    lambda keyword: self._provider_search(MediaKind.TRACK, keyword, batch_size),
                    keywords,
                )
            )

        records = [record for result in results for record in result.records]
        if not records:
            logger.warning(f"No upstream results for discovery keywords: {keywords}")
            return self._empty_feed(page)

        tracks = self._sync_records(MediaKind.TRACK, records)
        responses = [response for response in self.mapper.to_responses(tracks) if response.preview_url]
        if not responses:
            logger.warning(f"No playable tracks for discovery keywords: {keywords}")
            return self._empty_feed(page)

        self.rng.shuffle(responses)
        content = responses[:size]

        total_elements = self.virtual_total_elements
        total_pages = math.ceil(total_elements / size)
        logger.debug(f"Discovery feed: {len(responses)} tracks available, returning {len(content)}")

        return SearchResponse(
            content=content,
            page=page,
            size=len(content),
            total_elements=total_elements,
            total_pages=total_pages,
        )

    discovery_feed = feed

    # ------------------------------------------------------------------
    # Lazy path
    # ------------------------------------------------------------------

    def _resolve_entity(self, media_id: str, kind: Optional[MediaKind] = None) -> Optional[Media]:
        """Return the cached entity for an id, fetching it upstream on a miss.

        With ``kind`` set, records of any other kind resolve to None and
        are not written.
        """
        try:
            catalog_id = parse_catalog_id(media_id)
        except InvalidCatalogIdError as e:
            logger.warning(str(e))
            return None

        cached = self.store.find_by_id(catalog_id)
        if cached is not None:
            if kind is not None and cached.kind is not kind:
                logger.debug(f"{catalog_id} is cached as {cached.kind.value}, not {kind.value}")
                return None
            logger.debug(f"Catalog hit: {catalog_id}")
            return cached

        record = self._provider_lookup(catalog_id)
        if record is None:
            logger.debug(f"No upstream record for {catalog_id}")
            return None

        if kind is not None and record.kind is not kind:
            logger.debug(f"Upstream record {catalog_id} is a {record.wrapper_type}, not {kind.value}")
            return None

        entity = self.mapper.to_entity(record)
        if entity is None:
            logger.debug(f"Upstream record for {catalog_id} could not be mapped")
            return None
        if entity.id != catalog_id:
            logger.warning(f"Upstream lookup for {catalog_id} returned record {entity.id}")
            return None

        # A concurrent resolver may have inserted first; the store's row wins
        saved = self.store.save(entity)
        if kind is not None and saved.kind is not kind:
            return None
        logger.info(f"Cached {saved.kind.label.lower()} {saved.id} on first lookup")
        return saved

    def resolve(self, media_id: str) -> Optional[MediaResponse]:
        """Resolve any kind of record by id."""
        media = self._resolve_entity(media_id)
        return self.mapper.to_response(media) if media is not None else None

    def resolve_kind(self, kind: MediaKind, media_id: str) -> Optional[MediaResponse]:
        """Resolve a record by id, or None if it is not of ``kind``."""
        media = self._resolve_entity(media_id, kind)
        return self.mapper.to_response(media) if media is not None else None

    def get_album(self, media_id: str) -> Optional[MediaResponse]:
        return self.resolve_kind(MediaKind.ALBUM, media_id)

    def get_artist(self, media_id: str) -> Optional[MediaResponse]:
        return self.resolve_kind(MediaKind.ARTIST, media_id)

    def get_track(self, media_id: str) -> Optional[MediaResponse]:
        return self.resolve_kind(MediaKind.TRACK, media_id)

    def get_or_create(self, media_id: str) -> Optional[Media]:
        """Persisted entity for an id, for callers that need the row itself."""
        return self._resolve_entity(media_id)

    # ------------------------------------------------------------------
    # Rating aggregates
    # ------------------------------------------------------------------

    def record_rating(self, media_id: str, rating: float) -> Optional[MediaResponse]:
        """Fold a new 0-10 rating into a record's aggregates.

        The record is resolved first, so rating media that has never been
        browsed still caches it.

        Raises:
            ValueError: if the rating is outside 0-10
        """
        if not 0.0 <= rating <= 10.0:
            raise ValueError(f"rating must be within 0-10, got {rating}")

        media = self._resolve_entity(media_id)
        if media is None:
            return None

        updated = self.store.add_rating(media.id, rating)
        if updated is None:
            return None
        logger.debug(f"Rating stats for {updated.id}: {updated.average_rating} over {updated.rating_count}")
        return self.mapper.to_response(updated)
