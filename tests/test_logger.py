import os
import tempfile
import unittest

import helpers  # noqa: F401

from utils.logger import LOG_FILE_ENV, close_log_files, get_logger, log_to_file


class LogToFileTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "logs", "shop.log")
        self._previous = os.environ.get(LOG_FILE_ENV)
        self.logger = get_logger("shopvista.test_logger")

    def tearDown(self):
        close_log_files()
        if self._previous is not None:
            os.environ[LOG_FILE_ENV] = self._previous
        self._tmp.cleanup()

    def test_same_path_reuses_one_file(self):
        log_to_file(self.path)
        handler = self.logger.handlers[0]
        console = handler.console
        log_file = console.file

        log_to_file(self.path)
        log_to_file(os.path.join(self._tmp.name, "logs", ".", "shop.log"))
        self.assertIs(handler.console, console)
        self.assertIs(handler.console.file, log_file)
        self.assertFalse(log_file.closed)

        # loggers created afterwards share it too
        later = get_logger("shopvista.test_logger_later")
        self.assertIs(later.handlers[0].console, console)

    def test_close_releases_files(self):
        log_to_file(self.path)
        log_file = self.logger.handlers[0].console.file
        self.logger.info("written to disk")

        close_log_files()
        self.assertTrue(log_file.closed)
        self.assertIsNot(self.logger.handlers[0].console.file, log_file)
        self.assertNotIn(LOG_FILE_ENV, os.environ)
        with open(self.path, encoding="utf-8") as f:
            self.assertIn("written to disk", f.read())


if __name__ == "__main__":
    unittest.main()
