from __future__ import annotations

import io
import logging
import os
import unittest
from unittest import mock

from sheet_ledger import logging_setup


class LevelTests(unittest.TestCase):
    def test_environment_level(self):
        with mock.patch.dict(os.environ, {"SHEET_LEDGER_LOG_LEVEL": "info"}):
            self.assertEqual(logging_setup.level_from_env(), logging.INFO)
        with mock.patch.dict(os.environ, {"SHEET_LEDGER_LOG_LEVEL": "15"}):
            self.assertEqual(logging_setup.level_from_env(), 15)
        with mock.patch.dict(os.environ, {"SHEET_LEDGER_LOG_LEVEL": "chatty"}):
            self.assertEqual(logging_setup.level_from_env(), logging.WARNING)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(logging_setup.level_from_env(), logging.WARNING)

    def test_flags_beat_the_environment(self):
        with mock.patch.dict(os.environ, {"SHEET_LEDGER_LOG_LEVEL": "INFO"}):
            self.assertEqual(logging_setup.level_for_flags(verbose=True), logging.DEBUG)
            self.assertEqual(logging_setup.level_for_flags(quiet=True), logging.ERROR)
            self.assertEqual(logging_setup.level_for_flags(), logging.INFO)


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("sheet_ledger")
        self.saved = (list(self.logger.handlers), self.logger.level, self.logger.propagate)
        handler = mock.patch.object(logging_setup, "_handler", None)
        handler.start()
        self.addCleanup(handler.stop)
        self.addCleanup(self.restore)

    def restore(self):
        handlers, level, propagate = self.saved
        self.logger.handlers = handlers
        self.logger.setLevel(level)
        self.logger.propagate = propagate

    def test_later_call_replaces_the_handler(self):
        first, second = io.StringIO(), io.StringIO()
        logging_setup.configure_logging(logging.INFO, stream=first)
        logging_setup.configure_logging(logging.WARNING, stream=second)

        engine = logging.getLogger("sheet_ledger.engine")
        engine.info("hidden")
        engine.warning("no sheets selected")

        self.assertEqual(first.getvalue(), "")
        self.assertEqual(second.getvalue(), "WARNING: no sheets selected\n")
        self.assertFalse(any(isinstance(h, logging.NullHandler) for h in self.logger.handlers))
        self.assertFalse(self.logger.propagate)

    def test_debug_lines_name_their_module(self):
        stream = io.StringIO()
        logging_setup.configure_logging(logging.DEBUG, stream=stream)
        logging.getLogger("sheet_ledger.loader").debug("sniffed %s", "comma")
        self.assertIn("sheet_ledger.loader DEBUG sniffed comma", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
