"""Unit tests for Resonance data models."""

import unittest

from pydantic import ValidationError

from resonance.models import (
    Album,
    Artist,
    CatalogRecord,
    MediaKind,
    MediaResponse,
    SearchResponse,
    Track,
)
from tests.helpers import album_record, artist_record, track_record


class TestMediaKind(unittest.TestCase):
    def test_wrapper_type_round_trip(self):
        for kind in MediaKind:
            self.assertIs(MediaKind.from_wrapper_type(kind.wrapper_type), kind)

    def test_unknown_wrapper_type(self):
        self.assertIsNone(MediaKind.from_wrapper_type("audiobook"))
        self.assertIsNone(MediaKind.from_wrapper_type(None))

    def test_search_entities(self):
        self.assertEqual(MediaKind.ALBUM.search_entity, "album")
        self.assertEqual(MediaKind.TRACK.search_entity, "song")
        self.assertEqual(MediaKind.ARTIST.search_entity, "musicArtist")


class TestCatalogRecord(unittest.TestCase):
    def test_reads_camel_case_fields(self):
        record = CatalogRecord.model_validate(track_record(10))
        self.assertEqual(record.wrapper_type, "track")
        self.assertEqual(record.track_id, 10)
        self.assertEqual(record.track_time_millis, 429533)
        self.assertTrue(record.artwork_url100.endswith("100x100bb.jpg"))
        self.assertTrue(record.artwork_url60.endswith("60x60bb.jpg"))

    def test_catalog_id_uses_kind_specific_field(self):
        # A track also carries collectionId and artistId
        self.assertEqual(CatalogRecord.model_validate(track_record(10)).catalog_id, "10")
        self.assertEqual(CatalogRecord.model_validate(album_record(1)).catalog_id, "1")
        self.assertEqual(CatalogRecord.model_validate(artist_record(7)).catalog_id, "7")

    def test_catalog_id_missing(self):
        record = CatalogRecord.model_validate({"wrapperType": "collection", "collectionName": "x"})
        self.assertIsNone(record.catalog_id)
        self.assertIsNone(CatalogRecord.model_validate({"trackId": 3}).catalog_id)

    def test_ignores_unknown_fields(self):
        record = CatalogRecord.model_validate(album_record(1, collectionPrice=9.99, country="USA"))
        self.assertEqual(record.kind, MediaKind.ALBUM)


class TestMediaEntities(unittest.TestCase):
    def test_variants_pin_their_kind(self):
        self.assertEqual(Album(id="1", title="a", artist_name="b").kind, MediaKind.ALBUM)
        self.assertEqual(Track(id="1", title="a", artist_name="b").kind, MediaKind.TRACK)
        self.assertEqual(Artist(id="1", title="a", artist_name="b").kind, MediaKind.ARTIST)

    def test_rejects_wrong_kind(self):
        with self.assertRaises(ValidationError):
            Album(id="1", title="a", artist_name="b", kind=MediaKind.TRACK)

    def test_rating_defaults(self):
        album = Album(id="1", title="a", artist_name="b")
        self.assertEqual(album.rating_count, 0)
        self.assertIsNone(album.average_rating)
        self.assertIsNone(album.cached_at)

    def test_average_requires_ratings(self):
        with self.assertRaises(ValidationError):
            Album(id="1", title="a", artist_name="b", average_rating=5.0, rating_count=0)
        with self.assertRaises(ValidationError):
            Album(id="1", title="a", artist_name="b", rating_count=2)

    def test_rating_bounds(self):
        with self.assertRaises(ValidationError):
            Album(id="1", title="a", artist_name="b", average_rating=11.0, rating_count=1)
        with self.assertRaises(ValidationError):
            Album(id="1", title="a", artist_name="b", rating_count=-1)

    def test_title_must_not_be_empty(self):
        with self.assertRaises(ValidationError):
            Track(id="1", title="", artist_name="b")


class TestResponses(unittest.TestCase):
    def test_single_page(self):
        item = MediaResponse(id="1", title="Homework", artist_name="Daft Punk", kind=MediaKind.ALBUM)
        page = SearchResponse.single_page([item])
        self.assertEqual((page.page, page.size, page.total_elements, page.total_pages), (0, 1, 1, 1))

    def test_empty_single_page(self):
        page = SearchResponse.single_page([])
        self.assertEqual(
            page.to_dict(),
            {"content": [], "page": 0, "size": 0, "totalElements": 0, "totalPages": 1},
        )

    def test_media_response_serialises_camel_case(self):
        item = MediaResponse(
            id="1",
            title="Homework",
            artist_name="Daft Punk",
            image_url="a/600x600bb.jpg",
            kind=MediaKind.ALBUM,
        )
        data = item.model_dump(mode="json", by_alias=True)
        self.assertEqual(data["artistName"], "Daft Punk")
        self.assertEqual(data["imageUrl"], "a/600x600bb.jpg")
        self.assertEqual(data["kind"], "ALBUM")
        self.assertEqual(data["ratingCount"], 0)
        self.assertIsNone(data["previewUrl"])


if __name__ == "__main__":
    unittest.main()
