import unittest
from datetime import datetime, timedelta, timezone

from deck_api.db import NewAsset, PostgresDbClient
from deck_api.errors import BackendError


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")

    def tearDown(self):
        self.db.engine.dispose()

    def _asset(self, deck_id: str, path: str, created_at: datetime) -> NewAsset:
        return NewAsset(
            deck_id=deck_id,
            title=path,
            storage_path=path,
            public_url=f"https://cdn.test/{path}",
            created_at=created_at,
        )

    def test_create_and_list_decks(self):
        deck = self.db.create_deck("Pitch")
        self.assertTrue(deck.id)
        self.assertEqual(deck.title, "Pitch")
        listed = self.db.list_decks()
        self.assertEqual([d.id for d in listed], [deck.id])

    def test_update_deck(self):
        deck = self.db.create_deck("Old")
        updated = self.db.update_deck(deck.id, "New")
        self.assertEqual(updated.id, deck.id)
        self.assertEqual(updated.title, "New")
        self.assertEqual(self.db.list_decks()[0].title, "New")

    def test_update_missing_deck_returns_none(self):
        self.assertIsNone(self.db.update_deck("missing", "X"))

    def test_assets_ordered_oldest_first(self):
        deck = self.db.create_deck("Deck")
        now = datetime.now(timezone.utc)
        self.db.insert_assets([self._asset(deck.id, "late", now)])
        self.db.insert_assets([self._asset(deck.id, "early", now - timedelta(minutes=5))])
        listed = self.db.list_assets(deck.id)
        self.assertEqual([a.storage_path for a in listed], ["early", "late"])

    def test_lookup_and_delete_asset(self):
        deck = self.db.create_deck("Deck")
        [asset] = self.db.insert_assets(
            [self._asset(deck.id, "p1", datetime.now(timezone.utc))]
        )
        self.assertEqual(self.db.get_asset_storage_path(asset.id), "p1")
        self.db.delete_asset(asset.id)
        self.assertIsNone(self.db.get_asset_storage_path(asset.id))
        self.assertEqual(self.db.list_assets(deck.id), [])

    def test_delete_deck_cascades(self):
        deck = self.db.create_deck("Deck")
        other = self.db.create_deck("Other")
        now = datetime.now(timezone.utc)
        self.db.insert_assets(
            [self._asset(deck.id, "p1", now), self._asset(other.id, "p2", now)]
        )
        self.db.delete_deck(deck.id)
        self.assertEqual([d.id for d in self.db.list_decks()], [other.id])
        self.assertEqual(self.db.list_assets(deck.id), [])
        self.assertEqual(len(self.db.list_assets(other.id)), 1)

    def test_unknown_deck_reference_raises_backend_error(self):
        with self.assertRaises(BackendError) as ctx:
            self.db.insert_assets(
                [self._asset("missing", "p1", datetime.now(timezone.utc))]
            )
        self.assertIn("FOREIGN KEY", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
