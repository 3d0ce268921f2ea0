"""Upstream catalog providers for Resonance."""

from resonance.providers.base import CatalogProvider, clamp_limit
from resonance.providers.itunes import ITunesProvider

__all__ = [
    "CatalogProvider",
    "ITunesProvider",
    "clamp_limit",
]
