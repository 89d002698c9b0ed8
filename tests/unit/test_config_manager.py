"""
Unit tests for settings validation and persistence.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from vaultdedup.core.settings import DedupSettings
from vaultdedup.utils.config_manager import load_settings, save_settings


class TestDedupSettings(unittest.TestCase):
    def test_defaults(self):
        settings = DedupSettings().validate()
        self.assertEqual(settings.perceptual_threshold, 0.85)
        self.assertEqual(settings.name_threshold, 0.8)
        self.assertEqual(settings.grid_size, 8)
        self.assertEqual(settings.clustering, "greedy")
        self.assertEqual(settings.default_strategy, "newest")

    def test_invalid_values(self):
        invalid = [
            {"perceptual_threshold": -0.1},
            {"name_threshold": "high"},
            {"grid_size": 1},
            {"grid_size": 8.0},
            {"clustering": "kmeans"},
            {"max_workers": 0},
            {"max_workers": True},
            {"default_strategy": "random"},
        ]
        for overrides in invalid:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    DedupSettings(**overrides).validate()


class TestConfigPersistence(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.path = self.tmp_dir / "settings.json"

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def _write(self, text):
        self.path.write_text(text, encoding="utf-8")

    def test_save_and_load(self):
        settings = DedupSettings(perceptual_threshold=0.9, clustering="connected", max_workers=4)
        save_settings(settings, self.path)

        with open(self.path, encoding="utf-8") as f:
            saved = json.load(f)
        self.assertEqual(saved["clustering"], "connected")
        self.assertEqual(load_settings(self.path), settings)

    def test_save_rejects_invalid(self):
        with self.assertRaises(ValueError):
            save_settings(DedupSettings(grid_size=100), self.path)
        self.assertFalse(self.path.exists())

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_settings(self.tmp_dir / "absent.json"), DedupSettings())

    def test_partial_file_keeps_defaults(self):
        self._write(json.dumps({"name_threshold": 0.7}))
        settings = load_settings(self.path)
        self.assertEqual(settings.name_threshold, 0.7)
        self.assertEqual(settings.perceptual_threshold, 0.85)

    def test_unknown_keys_are_ignored(self):
        self._write(json.dumps({"grid_size": 16, "theme": "dark"}))
        with self.assertLogs("vaultdedup.utils.config_manager", level="WARNING") as logs:
            settings = load_settings(self.path)
        self.assertEqual(settings.grid_size, 16)
        self.assertTrue(any("theme" in line for line in logs.output))

    def test_corrupt_file_gives_defaults(self):
        self._write("{not json")
        with self.assertLogs("vaultdedup.utils.config_manager", level="ERROR"):
            self.assertEqual(load_settings(self.path), DedupSettings())

    def test_non_object_gives_defaults(self):
        self._write("[1, 2]")
        with self.assertLogs("vaultdedup.utils.config_manager", level="ERROR"):
            self.assertEqual(load_settings(self.path), DedupSettings())

    def test_invalid_values_give_defaults(self):
        self._write(json.dumps({"perceptual_threshold": 3, "grid_size": 16}))
        with self.assertLogs("vaultdedup.utils.config_manager", level="ERROR"):
            self.assertEqual(load_settings(self.path), DedupSettings())


if __name__ == '__main__':
    unittest.main()
