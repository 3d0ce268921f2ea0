"""Resonance - music catalog cache and discovery core."""

__version__ = "0.1.0"

from resonance.app import Resonance
from resonance.config import ResonanceConfig
from resonance.models import MediaKind, MediaResponse, SearchResponse

__all__ = ["Resonance", "ResonanceConfig", "MediaKind", "MediaResponse", "SearchResponse"]
