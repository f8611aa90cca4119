import logging
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from pathlib import Path

from courseregistry.log import LOGGER_NAME, setup_logging


class TestLogging(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger(LOGGER_NAME)
        self._saved = list(self.logger.handlers)
        for h in self._saved:
            self.logger.removeHandler(h)

    def tearDown(self) -> None:
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()
        for h in self._saved:
            self.logger.addHandler(h)

    def test_setup_is_idempotent(self) -> None:
        setup_logging("INFO")
        setup_logging("DEBUG")
        self.assertEqual(len(self.logger.handlers), 1)
        self.assertEqual(self.logger.level, logging.DEBUG)

    def test_unknown_level_falls_back_to_warning(self) -> None:
        setup_logging("chatty")
        self.assertEqual(self.logger.level, logging.WARNING)

    def test_file_handler(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            log_file = Path(d) / "logs" / "registry.log"
            setup_logging("INFO", log_file)
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in self.logger.handlers))

            logging.getLogger("courseregistry.registry").info("Removing 1 record(s) from courseOfferings")
            for h in self.logger.handlers:
                h.flush()
            self.assertIn("Removing 1 record(s) from courseOfferings", log_file.read_text(encoding="utf-8"))

            for h in list(self.logger.handlers):
                self.logger.removeHandler(h)
                h.close()


if __name__ == "__main__":
    unittest.main()
