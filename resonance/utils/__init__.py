"""Utility functions for Resonance."""

from resonance.utils.ids import (
    is_catalog_id,
    parse_catalog_id,
    safe_catalog_id,
)

__all__ = [
    "is_catalog_id",
    "parse_catalog_id",
    "safe_catalog_id",
]
