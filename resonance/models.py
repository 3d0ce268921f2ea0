"""Data models for Resonance."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class MediaKind(str, Enum):
    """Variant of a cached media record."""

    ALBUM = "ALBUM"
    TRACK = "TRACK"
    ARTIST = "ARTIST"

    @property
    def wrapper_type(self) -> str:
        """Upstream ``wrapperType`` value for this kind."""
        return _WRAPPER_TYPES[self]

    @property
    def search_entity(self) -> str:
        """Upstream ``entity`` search parameter for this kind."""
        return _SEARCH_ENTITIES[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_wrapper_type(cls, wrapper_type: Optional[str]) -> Optional["MediaKind"]:
        """Map an upstream ``wrapperType`` to a kind, or None if unknown."""
        for kind, value in _WRAPPER_TYPES.items():
            if value == wrapper_type:
                return kind
        return None


_WRAPPER_TYPES = {
    MediaKind.ALBUM: "collection",
    MediaKind.TRACK: "track",
    MediaKind.ARTIST: "artist",
}

_SEARCH_ENTITIES = {
    MediaKind.ALBUM: "album",
    MediaKind.TRACK: "song",
    MediaKind.ARTIST: "musicArtist",
}


class Media(BaseModel):
    """Shared header of every cached catalog record."""

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)
    kind: MediaKind
    image_url: Optional[str] = None
    release_date: Optional[str] = None  # upstream format, never parsed
    external_url: Optional[str] = None
    description: Optional[str] = None
    genre: Optional[str] = None

    # Rating aggregates, maintained by the library layer
    average_rating: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    rating_count: int = Field(default=0, ge=0)

    # Assigned by the store on first insert
    cached_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_rating_aggregates(self) -> "Media":
        if self.rating_count == 0 and self.average_rating is not None:
            raise ValueError("average_rating must be unset while rating_count is 0")
        if self.rating_count > 0 and self.average_rating is None:
            raise ValueError("average_rating is required once rating_count > 0")
        return self

    def __str__(self) -> str:
        return f"{self.kind.label} {self.id}: {self.artist_name} - {self.title}"


class Album(Media):
    """Album (upstream ``collection``)."""

    kind: Literal[MediaKind.ALBUM] = MediaKind.ALBUM
    label: Optional[str] = None


class Track(Media):
    """Single song; ``preview_url`` is a 30 second clip."""

    kind: Literal[MediaKind.TRACK] = MediaKind.TRACK
    duration_ms: Optional[int] = None
    track_number: Optional[int] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None


class Artist(Media):
    kind: Literal[MediaKind.ARTIST] = MediaKind.ARTIST


MediaEntity = Union[Album, Track, Artist]

ENTITY_TYPES: Dict[MediaKind, Type[Media]] = {
    MediaKind.ALBUM: Album,
    MediaKind.TRACK: Track,
    MediaKind.ARTIST: Artist,
}


class CatalogRecord(BaseModel):
    """One result record as returned by the upstream catalog.

    The upstream uses a single flat shape for albums, tracks and artists;
    ``kind`` and ``catalog_id`` discriminate it so callers never need to
    look at fields outside the subset that belongs to the record's kind.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    wrapper_type: Optional[str] = None
    collection_id: Optional[int] = None
    track_id: Optional[int] = None
    artist_id: Optional[int] = None
    collection_name: Optional[str] = None
    track_name: Optional[str] = None
    artist_name: Optional[str] = None
    artwork_url100: Optional[str] = Field(default=None, alias="artworkUrl100")
    artwork_url60: Optional[str] = Field(default=None, alias="artworkUrl60")
    release_date: Optional[str] = None
    collection_view_url: Optional[str] = None
    artist_link_url: Optional[str] = None
    track_view_url: Optional[str] = None
    primary_genre_name: Optional[str] = None
    copyright: Optional[str] = None
    track_time_millis: Optional[int] = None
    track_number: Optional[int] = None
    preview_url: Optional[str] = None

    @property
    def kind(self) -> Optional[MediaKind]:
        return MediaKind.from_wrapper_type(self.wrapper_type)

    @property
    def catalog_id(self) -> Optional[str]:
        """Kind-appropriate id as a string, or None if absent."""
        kind = self.kind
        if kind is MediaKind.ALBUM:
            raw = self.collection_id
        elif kind is MediaKind.TRACK:
            raw = self.track_id
        elif kind is MediaKind.ARTIST:
            raw = self.artist_id
        else:
            return None
        return str(raw) if raw is not None else None


class CatalogSearchResult(BaseModel):
    """Records returned by one upstream call plus the reported total."""

    records: List[CatalogRecord] = Field(default_factory=list)
    total_count: int = 0

    @classmethod
    def empty(cls) -> "CatalogSearchResult":
        return cls(records=[], total_count=0)

    def __len__(self) -> int:
        return len(self.records)


class MediaResponse(BaseModel):
    """Outward-facing media record (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    artist_name: str
    image_url: Optional[str] = None
    release_date: Optional[str] = None
    kind: MediaKind
    external_url: Optional[str] = None
    average_rating: Optional[float] = None
    rating_count: int = 0
    description: Optional[str] = None
    genre: Optional[str] = None
    preview_url: Optional[str] = None


class SearchResponse(BaseModel):
    """A page of media records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: List[MediaResponse] = Field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0

    @classmethod
    def single_page(cls, content: List[MediaResponse]) -> "SearchResponse":
        """Wrap a complete result list as page 0 of 1."""
        return cls(
            content=content,
            page=0,
            size=len(content),
            total_elements=len(content),
            total_pages=1,
        )

    def to_dict(self) -> Dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
