"""Main Resonance application class."""

import logging
import random
from pathlib import Path
from typing import Optional

from resonance.config import ResonanceConfig
from resonance.core.catalog import CatalogService
from resonance.core.store import CatalogStore, SQLiteCatalogStore
from resonance.models import Media, MediaResponse, SearchResponse
from resonance.providers.base import CatalogProvider
from resonance.providers.itunes import ITunesProvider

logger = logging.getLogger("resonance")


class Resonance:
    """Catalog core wired to its provider and store.

    This is the surface the HTTP edge and the library layer talk to.
    """

    def __init__(
        self,
        config_path: Optional[str | Path] = None,
        config: Optional[ResonanceConfig] = None,
        provider: Optional[CatalogProvider] = None,
        store: Optional[CatalogStore] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize Resonance.

        Args:
            config_path: Path to resonance.yaml; defaults apply when omitted
            config: Ready-made configuration, takes precedence over the path
            provider: Upstream provider (defaults to the iTunes provider)
            store: Catalog store (defaults to SQLite at ``store.db_path``)
            rng: Feed random generator (defaults to ``random.SystemRandom``)
        """
        if config is not None:
            self.config = config
        elif config_path is not None:
            self.config = ResonanceConfig.from_file(config_path)
        else:
            self.config = ResonanceConfig()

        upstream = self.config.upstream
        self.provider = provider or ITunesProvider(
            base_url=upstream.base_url,
            timeout=upstream.timeout,
            country=upstream.country,
        )
        self.store = store or SQLiteCatalogStore(
            self.config.store.db_path,
            timeout=self.config.store.timeout,
        )

        feed = self.config.feed
        self.catalog = CatalogService(
            self.provider,
            self.store,
            rng=rng,
            keywords=feed.keywords,
            virtual_total_elements=feed.virtual_total_elements,
            search_limit=upstream.default_limit,
            max_batch_size=feed.max_batch_size,
        )
        logger.debug(f"Resonance ready (provider: {self.provider.provider_name or type(self.provider).__name__})")

    def search_albums(self, query: str) -> SearchResponse:
        return self.catalog.search_albums(query)

    def search_artists(self, query: str) -> SearchResponse:
        return self.catalog.search_artists(query)

    def search_tracks(self, query: str) -> SearchResponse:
        return self.catalog.search_tracks(query)

    def get_album(self, media_id: str) -> Optional[MediaResponse]:
        return self.catalog.get_album(media_id)

    def get_artist(self, media_id: str) -> Optional[MediaResponse]:
        return self.catalog.get_artist(media_id)

    def get_track(self, media_id: str) -> Optional[MediaResponse]:
        return self.catalog.get_track(media_id)

    def resolve(self, media_id: str) -> Optional[MediaResponse]:
        """Resolve an id of any kind, detecting the kind from upstream."""
        return self.catalog.resolve(media_id)

    def discovery_feed(self, page: int = 0, size: int = 20) -> SearchResponse:
        return self.catalog.feed(page, size)

    def get_or_create(self, media_id: str) -> Optional[Media]:
        return self.catalog.get_or_create(media_id)

    def record_rating(self, media_id: str, rating: float) -> Optional[MediaResponse]:
        return self.catalog.record_rating(media_id, rating)

    def close(self) -> None:
        """Release provider and store resources."""
        self.provider.close()
        self.store.close()

    def __enter__(self) -> "Resonance":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
