"""Tests for the Resonance facade wiring."""

import os
import random
import tempfile
import unittest
from pathlib import Path

from resonance import Resonance, ResonanceConfig
from resonance.config import FeedConfig, StoreConfig
from resonance.core.store import SQLiteCatalogStore
from resonance.providers.itunes import ITunesProvider
from tests.helpers import StubProvider, album_record, track_record


class TestResonance(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tempdir.name, "catalog.db")
        self.config = ResonanceConfig(
            feed=FeedConfig(keywords=["alpha", "beta"], virtual_total_elements=30),
            store=StoreConfig(db_path=self.db_path),
        )

    def tearDown(self):
        self.tempdir.cleanup()

    def test_default_wiring(self):
        resonance = Resonance(config=self.config)
        self.assertIsInstance(resonance.provider, ITunesProvider)
        self.assertIsInstance(resonance.store, SQLiteCatalogStore)
        self.assertEqual(resonance.store.db_path, self.db_path)
        self.assertEqual(resonance.catalog.keywords, ["alpha", "beta"])
        self.assertIsInstance(resonance.catalog.rng, random.SystemRandom)
        resonance.close()

    def test_loads_config_path(self):
        config_path = Path(self.tempdir.name) / "resonance.yaml"
        self.config.save(config_path)

        with Resonance(config_path) as resonance:
            self.assertEqual(resonance.config.feed.virtual_total_elements, 30)
            self.assertEqual(resonance.store.db_path, self.db_path)

    def test_delegates_to_catalog(self):
        provider = StubProvider(
            search_results={
                "Homework": [album_record(1)],
                "alpha": [track_record(10)],
                "beta": [track_record(11)],
            },
            lookup_results={"20": track_record(20)},
        )
        with Resonance(config=self.config, provider=provider, rng=random.Random(7)) as resonance:
            self.assertEqual([item.id for item in resonance.search_albums("Homework").content], ["1"])
            self.assertEqual(resonance.get_album("1").title, "Homework")
            self.assertEqual(resonance.get_track("20").id, "20")
            self.assertIsNone(resonance.get_artist("1"))

            feed = resonance.discovery_feed(0, 5)
            self.assertEqual(sorted(item.id for item in feed.content), ["10", "11"])
            self.assertEqual(feed.total_elements, 30)
            self.assertEqual(feed.total_pages, 6)

            rated = resonance.record_rating("1", 9)
            self.assertEqual(rated.rating_count, 1)
            self.assertEqual(resonance.get_or_create("1").average_rating, 9.0)


if __name__ == "__main__":
    unittest.main()
