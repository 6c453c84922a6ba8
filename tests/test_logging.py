import logging
import tempfile
import unittest
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from strata.logging import LoggingSettings, init_logging


class InitLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        self._saved_level = root.level
        self.addCleanup(self._restore)

    def _restore(self) -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self._saved_handlers:
                root.removeHandler(handler)
                handler.close()
        for handler in self._saved_handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(self._saved_level)

    def test_console_only(self) -> None:
        init_logging(LoggingSettings(level="warning"))

        root = logging.getLogger()
        self.assertEqual(root.level, logging.WARNING)
        self.assertEqual(len(root.handlers), 1)

    def test_rotating_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "logs" / "app.log"
            init_logging(LoggingSettings(level="DEBUG", path=str(log_path), backup_count=2))

            root = logging.getLogger()
            file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
            self.assertEqual(len(file_handlers), 1)
            self.assertEqual(file_handlers[0].backupCount, 2)

            logging.getLogger("strata.test").debug("config.loaded layers=%s", "config")
            file_handlers[0].flush()
            self.assertIn("config.loaded layers=config", log_path.read_text(encoding="utf-8"))
            self._restore()

    def test_unknown_level(self) -> None:
        with self.assertRaises(ValueError):
            init_logging(LoggingSettings(level="chatty"))


if __name__ == "__main__":
    unittest.main()
