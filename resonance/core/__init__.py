"""Catalog cache and resolution core."""

from resonance.core.catalog import CatalogService
from resonance.core.mapper import EntityMapper, upgrade_artwork_url
from resonance.core.store import CatalogStore, SQLiteCatalogStore

__all__ = [
    "CatalogService",
    "CatalogStore",
    "EntityMapper",
    "SQLiteCatalogStore",
    "upgrade_artwork_url",
]
