#!/usr/bin/env python3
"""
Configuration Tests
===================

Defaults, environment overrides and validation of ScrapeOptions.

Run:
    python -m unittest medicine_archive.tests.test_config
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from medicine_archive.config import DEFAULT_WORD_LIST, ScrapeOptions


class TestScrapeOptions(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.env_file = str(Path(self.tmp.name) / "missing.env")

    def test_defaults(self):
        options = ScrapeOptions()
        self.assertEqual(options.concurrency, 3)
        self.assertEqual(options.delay_ms, 1000)
        self.assertEqual(options.delay_seconds, 1.0)
        self.assertEqual(options.output_path, "nhs-medicines.json")
        self.assertEqual(options.index_url, "https://www.nhs.uk/medicines/")
        self.assertEqual(options.word_list_path, str(DEFAULT_WORD_LIST))
        self.assertIsNone(options.processing_cap)

    def test_processing_cap(self):
        self.assertEqual(ScrapeOptions(test_mode=True).processing_cap, 10)
        self.assertEqual(ScrapeOptions(limit=25).processing_cap, 25)
        self.assertEqual(ScrapeOptions(limit=3, test_mode=True).processing_cap, 3)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ScrapeOptions(concurrency=0)
        with self.assertRaises(ValueError):
            ScrapeOptions(delay_ms=-1)
        with self.assertRaises(ValueError):
            ScrapeOptions(limit=-5)

    def test_environment_overrides_defaults(self):
        env = {
            "MEDICINE_ARCHIVE_CONCURRENCY": "5",
            "MEDICINE_ARCHIVE_DELAY_MS": "250",
            "MEDICINE_ARCHIVE_TEST_MODE": "true",
            "MEDICINE_ARCHIVE_HEADLESS": "0",
            "MEDICINE_ARCHIVE_OUTPUT_PATH": "data/out.json",
        }
        with mock.patch.dict(os.environ, env):
            options = ScrapeOptions.from_env(env_file=self.env_file)

        self.assertEqual(options.concurrency, 5)
        self.assertEqual(options.delay_ms, 250)
        self.assertTrue(options.test_mode)
        self.assertFalse(options.headless)
        self.assertEqual(options.output_path, "data/out.json")

    def test_overrides_win_over_environment(self):
        with mock.patch.dict(os.environ, {"MEDICINE_ARCHIVE_CONCURRENCY": "5"}):
            options = ScrapeOptions.from_env(env_file=self.env_file, concurrency=2, limit=None)

        self.assertEqual(options.concurrency, 2)
        self.assertEqual(options.limit, 0)

    def test_env_file_is_loaded(self):
        env_file = Path(self.tmp.name) / ".env"
        env_file.write_text("MEDICINE_ARCHIVE_LIMIT=7\n", encoding="utf-8")

        with mock.patch.dict(os.environ, {}):
            options = ScrapeOptions.from_env(env_file=str(env_file))

        self.assertEqual(options.limit, 7)
        self.assertEqual(options.processing_cap, 7)

    def test_to_dict(self):
        data = ScrapeOptions(limit=4).to_dict()
        self.assertEqual(data["limit"], 4)
        self.assertEqual(data["concurrency"], 3)


if __name__ == "__main__":
    unittest.main()
