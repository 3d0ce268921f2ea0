"""Mapping between upstream catalog records, cached entities and responses."""

import logging
from typing import Iterable, List, Optional

from resonance.models import (
    Album,
    Artist,
    CatalogRecord,
    Media,
    MediaKind,
    MediaResponse,
    Track,
)

logger = logging.getLogger("resonance.mapper")

ARTWORK_SIZE_SMALL = "100x100bb"
ARTWORK_SIZE_LARGE = "600x600bb"
UNKNOWN_ARTIST = "Unknown Artist"


def upgrade_artwork_url(artwork_url: Optional[str]) -> Optional[str]:
    """Swap the 100x100 artwork variant for the 600x600 one.

    Blank input becomes None; URLs without the small-size token pass
    through untouched.
    """
    if artwork_url is None or not artwork_url.strip():
        return None
    return artwork_url.replace(ARTWORK_SIZE_SMALL, ARTWORK_SIZE_LARGE)


def _or_default(value: Optional[str], default: str) -> str:
    if value is None or not value.strip():
        return default
    return value


class EntityMapper:
    """Stateless conversions used by the catalog service."""

    def to_entity(self, record: Optional[CatalogRecord]) -> Optional[Media]:
        """Build the entity variant matching the record's ``wrapperType``.

        Returns None for unknown wrapper types and for records missing the
        id of their own kind.
        """
        if record is None:
            return None

        kind = record.kind
        if kind is MediaKind.ALBUM:
            return self.to_album(record)
        if kind is MediaKind.TRACK:
            return self.to_track(record)
        if kind is MediaKind.ARTIST:
            return self.to_artist(record)

        logger.debug(f"Unknown wrapper type: {record.wrapper_type}")
        return None

    def to_album(self, record: CatalogRecord) -> Optional[Album]:
        if record.collection_id is None:
            return None

        return Album(
            id=str(record.collection_id),
            title=_or_default(record.collection_name, "Unknown Album"),
            artist_name=_or_default(record.artist_name, UNKNOWN_ARTIST),
            image_url=upgrade_artwork_url(record.artwork_url100),
            release_date=record.release_date,
            external_url=record.collection_view_url,
            genre=record.primary_genre_name,
            label=record.copyright,
        )

    def to_track(self, record: CatalogRecord) -> Optional[Track]:
        if record.track_id is None:
            return None

        return Track(
            id=str(record.track_id),
            title=_or_default(record.track_name, "Unknown Track"),
            artist_name=_or_default(record.artist_name, UNKNOWN_ARTIST),
            image_url=upgrade_artwork_url(record.artwork_url100),
            thumbnail_url=record.artwork_url60,
            release_date=record.release_date,
            external_url=record.track_view_url,
            genre=record.primary_genre_name,
            duration_ms=record.track_time_millis,
            track_number=record.track_number,
            preview_url=record.preview_url,
        )

    def to_artist(self, record: CatalogRecord) -> Optional[Artist]:
        if record.artist_id is None:
            return None

        name = _or_default(record.artist_name, UNKNOWN_ARTIST)
        # The upstream never ships artist artwork
        return Artist(
            id=str(record.artist_id),
            title=name,
            artist_name=name,
            image_url=None,
            external_url=record.artist_link_url,
            genre=record.primary_genre_name,
        )

    def to_response(self, media: Media) -> MediaResponse:
        """Convert a cached entity to its response shape.

        The kind always comes from the stored variant.
        """
        fields = {
            "id": media.id,
            "title": media.title,
            "artist_name": media.artist_name,
            "image_url": media.image_url,
            "release_date": media.release_date,
            "kind": media.kind,
            "external_url": media.external_url,
            "average_rating": media.average_rating,
            "rating_count": media.rating_count,
            "description": media.description,
            "genre": media.genre,
        }

        if media.kind is MediaKind.TRACK:
            fields["preview_url"] = media.preview_url
        elif media.kind is MediaKind.ARTIST:
            fields["release_date"] = None
        return MediaResponse(**fields)

    def to_responses(self, media: Iterable[Media]) -> List[MediaResponse]:
        return [self.to_response(item) for item in media]
