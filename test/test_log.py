"""Tests for per-command logger setup."""

from __future__ import annotations

import logging
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NdlSearch.config.runtime import RuntimeConfig
from NdlSearch.utils.log import configure_logging, log


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        self._reset()

    @staticmethod
    def _reset() -> None:
        for handler in log.handlers:
            handler.close()
        log.handlers = []
        logging.getLogger("urllib3").setLevel(logging.NOTSET)

    def test_console_only_by_default(self) -> None:
        path = configure_logging(RuntimeConfig(level="WARNING"), action="search")

        self.assertIsNone(path)
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(log.handlers[0].level, logging.WARNING)
        self.assertFalse(log.propagate)

    def test_file_log_captures_debug(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = configure_logging(RuntimeConfig(to_file=True, dir=tmp), action="explain")
            log.debug("request detail")
            for handler in log.handlers:
                handler.flush()

            assert path is not None
            self.assertEqual(path.parent, Path(tmp))
            self.assertTrue(path.name.startswith("explain-"))
            self.assertIn("request detail", path.read_text(encoding="utf-8"))
            self._reset()

    def test_transport_logger_quiet_unless_debug(self) -> None:
        configure_logging(RuntimeConfig(level="INFO"), action="search")
        self.assertEqual(logging.getLogger("urllib3").level, logging.WARNING)

        configure_logging(RuntimeConfig(level="DEBUG"), action="search")
        self.assertEqual(logging.getLogger("urllib3").level, logging.DEBUG)

    def test_reconfigure_replaces_handlers(self) -> None:
        configure_logging(RuntimeConfig(), action="search")
        configure_logging(RuntimeConfig(), action="validate")
        self.assertEqual(len(log.handlers), 1)


if __name__ == "__main__":
    unittest.main()
