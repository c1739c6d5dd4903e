"""Log level resolution and the rotating file handler."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from jjdag import logging_setup


class ResolveLogLevelTests(unittest.TestCase):
    def test_cli_wins_over_environment_and_config(self) -> None:
        with mock.patch.dict("os.environ", {"JJDAG_LOG": "error"}):
            self.assertEqual(logging_setup.resolve_log_level("DEBUG", "INFO"), logging.DEBUG)
            self.assertEqual(logging_setup.resolve_log_level(None, "INFO"), logging.ERROR)

    def test_invalid_values_fall_through_to_default(self) -> None:
        with mock.patch.dict("os.environ", {"JJDAG_LOG": "loud"}):
            self.assertEqual(logging_setup.resolve_log_level(None, "info"), logging.INFO)
            self.assertEqual(logging_setup.resolve_log_level(None, None), logging.WARNING)


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("jjdag")
        saved = (list(self.logger.handlers), self.logger.level, self.logger.propagate)

        def restore() -> None:
            for handler in list(self.logger.handlers):
                if handler not in saved[0]:
                    self.logger.removeHandler(handler)
                    handler.close()
            self.logger.setLevel(saved[1])
            self.logger.propagate = saved[2]

        self.addCleanup(restore)

    def test_records_go_to_the_log_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "jjdag.log"

            self.assertEqual(logging_setup.setup_logging(logging.INFO, path), path)
            logging.getLogger("jjdag.runtime.model").info("queue drained")
            for handler in self.logger.handlers:
                handler.flush()

            self.assertIn("INFO jjdag.runtime.model: queue drained", path.read_text(encoding="utf-8"))
            for handler in list(self.logger.handlers):
                self.logger.removeHandler(handler)
                handler.close()

    def test_repeated_setup_replaces_its_handler(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "jjdag.log"
            logging_setup.setup_logging(logging.INFO, path)
            logging_setup.setup_logging(logging.DEBUG, path)

            owned = [h for h in self.logger.handlers if getattr(h, "_jjdag_handler", False)]
            self.assertEqual(len(owned), 1)
            self.assertEqual(self.logger.level, logging.DEBUG)
            for handler in owned:
                self.logger.removeHandler(handler)
                handler.close()

    def test_unwritable_directory_disables_file_logging(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")

            self.assertIsNone(logging_setup.setup_logging(logging.INFO, blocker / "jjdag.log"))


if __name__ == "__main__":
    unittest.main()
