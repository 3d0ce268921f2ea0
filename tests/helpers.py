"""Shared fixtures for the Resonance test suite."""

import os
import tempfile
import threading
import time
from typing import Any, Dict, List, Optional

from resonance.core.store import SQLiteCatalogStore
from resonance.models import CatalogRecord, CatalogSearchResult, MediaKind
from resonance.providers.base import CatalogProvider


def album_record(collection_id, name="Homework", artist="Daft Punk", **extra) -> Dict[str, Any]:
    record = {
        "wrapperType": "collection",
        "collectionType": "Album",
        "collectionId": collection_id,
        "artistId": 5468295,
        "collectionName": name,
        "artistName": artist,
        "artworkUrl100": f"https://is1.mzstatic.com/{collection_id}/100x100bb.jpg",
        "artworkUrl60": f"https://is1.mzstatic.com/{collection_id}/60x60bb.jpg",
        "collectionViewUrl": f"https://music.apple.com/album/{collection_id}",
        "releaseDate": "1997-01-17T08:00:00Z",
        "primaryGenreName": "Electronic",
        "copyright": "℗ 1997 Daft Life Ltd.",
        "trackCount": 16,
    }
    record.update(extra)
    return record


def track_record(track_id, name="Around the World", artist="Daft Punk", preview=True, **extra) -> Dict[str, Any]:
    record = {
        "wrapperType": "track",
        "kind": "song",
        "trackId": track_id,
        "collectionId": 1,
        "artistId": 5468295,
        "trackName": name,
        "collectionName": "Homework",
        "artistName": artist,
        "artworkUrl100": f"https://is1.mzstatic.com/{track_id}/100x100bb.jpg",
        "artworkUrl60": f"https://is1.mzstatic.com/{track_id}/60x60bb.jpg",
        "trackViewUrl": f"https://music.apple.com/album/homework/1?i={track_id}",
        "releaseDate": "1997-01-17T08:00:00Z",
        "primaryGenreName": "Electronic",
        "trackTimeMillis": 429533,
        "trackNumber": 7,
    }
    if preview:
        record["previewUrl"] = f"https://audio-ssl.itunes.apple.com/{track_id}.m4a"
    record.update(extra)
    return record


def artist_record(artist_id, name="Daft Punk", **extra) -> Dict[str, Any]:
    record = {
        "wrapperType": "artist",
        "artistType": "Artist",
        "artistId": artist_id,
        "artistName": name,
        "artistLinkUrl": f"https://music.apple.com/artist/{artist_id}",
        "primaryGenreName": "Electronic",
    }
    record.update(extra)
    return record


class StubProvider(CatalogProvider):
    """In-memory CatalogProvider that records how it was called."""

    provider_name = "stub"

    def __init__(
        self,
        search_results: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        lookup_results: Optional[Dict[str, Dict[str, Any]]] = None,
        fail: bool = False,
        failing_queries: Optional[List[str]] = None,
        lookup_delay: float = 0.0,
    ):
        self.search_results = search_results or {}
        self.lookup_results = lookup_results or {}
        self.fail = fail
        self.failing_queries = set(failing_queries or [])
        self.lookup_delay = lookup_delay
        self.search_calls: List[tuple] = []
        self.lookup_calls: List[str] = []
        self._lock = threading.Lock()

    def search(self, kind: MediaKind, query: str, limit: int) -> CatalogSearchResult:
        with self._lock:
            self.search_calls.append((kind, query, limit))
        if self.fail or query in self.failing_queries:
            raise RuntimeError("upstream unavailable")
        raw = self.search_results.get(query, [])
        records = [CatalogRecord.model_validate(item) for item in raw]
        return CatalogSearchResult(records=records, total_count=len(records))

    def lookup(self, catalog_id: str) -> Optional[CatalogRecord]:
        with self._lock:
            self.lookup_calls.append(catalog_id)
        if self.lookup_delay:
            time.sleep(self.lookup_delay)
        if self.fail:
            raise RuntimeError("upstream unavailable")
        raw = self.lookup_results.get(catalog_id)
        return CatalogRecord.model_validate(raw) if raw is not None else None


class TempStoreMixin:
    """Gives each test a SQLite catalog store in a private directory."""

    def setUp(self):
        super().setUp()
        self.tempdir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tempdir.name, "catalog.db")
        self.store = SQLiteCatalogStore(self.db_path)

    def tearDown(self):
        self.store.close()
        self.tempdir.cleanup()
        super().tearDown()
