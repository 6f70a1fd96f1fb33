import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from confluence.config import CONFLUENCE_KEYS, load_confluence_settings
from notion.config import DATABASE_ID_KEY, load_notion_settings
from shared.config import clean_value, mask_secret, resolve_setting
from shared.settings_store import SettingsStore


class TestSettingsResolution(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = SettingsStore(str(Path(self.tmp.name) / "settings.json"))

    def tearDown(self):
        self.tmp.cleanup()

    def test_environment_wins_over_store(self):
        self.store.update("notionSync.apiKey", "from-store")
        with patch.dict(os.environ, {"NOTION_API_KEY": "from-env"}, clear=True):
            self.assertEqual(load_notion_settings(self.store).api_key, "from-env")

    def test_store_used_when_environment_missing(self):
        self.store.update("confluenceSync.spaceKey", "DOCS")
        with patch.dict(os.environ, {}, clear=True):
            settings = load_confluence_settings(self.store)
        self.assertEqual(settings.space_key, "DOCS")
        self.assertIsNone(settings.base_url)
        self.assertFalse(settings.has_credentials)

    def test_blank_environment_falls_through(self):
        self.store.update(DATABASE_ID_KEY, "abc")
        with patch.dict(os.environ, {"NOTION_DATABASE_ID": "  "}, clear=True):
            self.assertEqual(load_notion_settings(self.store).database_id, "abc")

    def test_default(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_setting("X_UNSET", "x.unset", self.store, "fallback"), "fallback")
            self.assertEqual(load_notion_settings(self.store).title_property, "Name")

    def test_clean_value_strips_quotes(self):
        self.assertEqual(clean_value(' "abc" '), "abc")
        self.assertEqual(clean_value("'abc'"), "abc")
        self.assertIsNone(clean_value("''"))
        self.assertIsNone(clean_value(None))

    def test_mask_secret(self):
        self.assertEqual(mask_secret(None), "(not set)")
        self.assertEqual(mask_secret("short"), "****")
        self.assertEqual(mask_secret("secret_1234567890"), "secr...7890")


class TestSettingsStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "settings.json"
        self.store = SettingsStore(str(self.path))

    def tearDown(self):
        self.tmp.cleanup()

    def test_update_and_remove(self):
        self.store.update("notionSync.apiKey", "k")
        self.assertEqual(SettingsStore(str(self.path)).get("notionSync.apiKey"), "k")

        self.store.update("notionSync.apiKey", None)
        self.assertIsNone(self.store.get("notionSync.apiKey"))

    def test_clear(self):
        self.store.update(DATABASE_ID_KEY, "db")
        self.store.update("confluenceSync.baseUrl", "https://acme.atlassian.net")
        self.store.update("notionSync.apiKey", "k")

        removed = self.store.clear((DATABASE_ID_KEY,) + CONFLUENCE_KEYS)

        self.assertEqual(removed, 2)
        self.assertEqual(self.store.items(), {"notionSync.apiKey": "k"})

    def test_corrupt_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json")
        self.assertEqual(self.store.items(), {})


if __name__ == "__main__":
    unittest.main()
