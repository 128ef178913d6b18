import unittest
from unittest.mock import MagicMock

from deck_api.asset_deletion import delete_asset
from deck_api.errors import BackendError


class AssetDeletionTests(unittest.TestCase):
    def setUp(self):
        self.db = MagicMock()
        self.storage = MagicMock()

    def test_removes_object_then_row(self):
        calls = MagicMock()
        calls.attach_mock(self.db.delete_asset, "delete_asset")
        calls.attach_mock(self.storage.remove, "remove")
        self.db.get_asset_storage_path.return_value = "decks/1/a.png"

        outcome = delete_asset(self.db, self.storage, "a1")

        self.assertEqual(outcome.storage_path, "decks/1/a.png")
        self.assertTrue(outcome.object_removed)
        self.assertEqual(
            [c[0] for c in calls.mock_calls], ["remove", "delete_asset"]
        )
        self.storage.remove.assert_called_once_with(["decks/1/a.png"])
        self.db.delete_asset.assert_called_once_with("a1")

    def test_lookup_miss_skips_storage(self):
        self.db.get_asset_storage_path.return_value = None
        outcome = delete_asset(self.db, self.storage, "a1")
        self.assertIsNone(outcome.storage_path)
        self.assertFalse(outcome.object_removed)
        self.storage.remove.assert_not_called()
        self.db.delete_asset.assert_called_once_with("a1")

    def test_lookup_error_is_treated_as_miss(self):
        self.db.get_asset_storage_path.side_effect = BackendError("timeout")
        with self.assertLogs("deck_api.asset_deletion", level="WARNING"):
            outcome = delete_asset(self.db, self.storage, "a1")
        self.assertFalse(outcome.object_removed)
        self.storage.remove.assert_not_called()
        self.db.delete_asset.assert_called_once_with("a1")

    def test_storage_error_does_not_stop_row_delete(self):
        self.db.get_asset_storage_path.return_value = "a.png"
        self.storage.remove.side_effect = BackendError("denied")
        with self.assertLogs("deck_api.asset_deletion", level="WARNING"):
            outcome = delete_asset(self.db, self.storage, "a1")
        self.assertFalse(outcome.object_removed)
        self.db.delete_asset.assert_called_once_with("a1")

    def test_row_error_after_object_removed_is_logged_and_raised(self):
        self.db.get_asset_storage_path.return_value = "a.png"
        self.db.delete_asset.side_effect = BackendError("row locked")
        with self.assertLogs("deck_api.asset_deletion", level="WARNING") as logs:
            with self.assertRaises(BackendError):
                delete_asset(self.db, self.storage, "a1")
        self.assertTrue(any("survives" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
