import unittest
from unittest.mock import patch
import json
import logging
import os
import sys
import tempfile

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from icongen.config import Config
from icongen.logger import LogSetup


class TestConfig(unittest.TestCase):

    def setUp(self):
        Config.reset()

    def tearDown(self):
        Config.reset()

    def test_json_file_overrides_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "icongen.json")
            with open(path, "w") as f:
                json.dump({"ICONGEN_CATALOG_AUTHOR": "com.example.app"}, f)
            with patch.dict(os.environ, {"ICONGEN_CATALOG_AUTHOR": "from-env"}):
                config = Config(path)
                self.assertEqual(config.get("ICONGEN_CATALOG_AUTHOR"), "com.example.app")

    def test_environment_then_defaults(self):
        with patch.dict(os.environ, {"ICONGEN_WORKERS": "3"}):
            config = Config("/nonexistent/icongen.json")
            self.assertEqual(config.get("ICONGEN_WORKERS"), "3")
        self.assertEqual(config.get("ICONGEN_IOS_COLOR"), os.environ.get("ICONGEN_IOS_COLOR", "#ffffff"))
        self.assertEqual(config.get("UNKNOWN_KEY", "fallback"), "fallback")

    def test_singleton(self):
        self.assertIs(Config("/nonexistent/a.json"), Config("/nonexistent/b.json"))


class TestLogSetup(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in self.root.handlers[:]:
            self.root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root.addHandler(handler)
        self.root.setLevel(self.saved_level)

    def test_console_only_by_default(self):
        _, log_file = LogSetup("debug").setup_logging()
        self.assertIsNone(log_file)
        self.assertEqual(len(self.root.handlers), 1)
        self.assertEqual(self.root.handlers[0].level, logging.DEBUG)
        self.assertEqual(logging.getLogger("PIL").level, logging.WARNING)

    def test_unknown_level_falls_back_to_info(self):
        LogSetup("loud").setup_logging()
        self.assertEqual(self.root.handlers[0].level, logging.INFO)

    def test_file_logging_archives_previous_runs(self):
        with tempfile.TemporaryDirectory() as tmp:
            old = os.path.join(tmp, "run_20000101_000000.log")
            with open(old, "w") as f:
                f.write("old run\n")
            _, log_file = LogSetup("INFO", tmp).setup_logging()
            logging.getLogger("icongen.test").info("hello")
            for handler in self.root.handlers[:]:
                handler.flush()
            self.assertTrue(os.path.exists(os.path.join(tmp, "archive", "run_20000101_000000.log")))
            self.assertFalse(os.path.exists(old))
            with open(log_file, encoding="utf-8") as f:
                self.assertIn("hello", f.read())
            for handler in self.root.handlers[:]:
                self.root.removeHandler(handler)
                handler.close()


if __name__ == '__main__':
    unittest.main()
