"""Tests for logging_utils: ErrorBuffer, ErrorBufferHandler, setup_logging."""

import logging
import unittest

from root_explorer.constants import LOGGER_NAME
from root_explorer.logging_utils import (
    ErrorBuffer,
    ErrorBufferHandler,
    error_buffer,
    setup_logging,
)


class TestErrorBuffer(unittest.TestCase):

    def test_rotates_at_max_size(self):
        buf = ErrorBuffer(max_size=3)
        for i in range(5):
            buf.append("ts", "ERROR", f"msg {i}")
        entries = buf.get_all()
        self.assertEqual(len(entries), 3)
        # Newest first.
        self.assertEqual([e["message"] for e in entries], ["msg 4", "msg 3", "msg 2"])

    def test_truncates_long_messages(self):
        buf = ErrorBuffer()
        buf.append("ts", "WARNING", "x" * 1000)
        self.assertEqual(len(buf.get_all()[0]["message"]), 500)

    def test_clear(self):
        buf = ErrorBuffer()
        buf.append("ts", "ERROR", "boom")
        buf.clear()
        self.assertEqual(buf.get_all(), [])


class TestErrorBufferHandler(unittest.TestCase):

    def test_captures_warning_and_skips_info(self):
        buf = ErrorBuffer()
        handler = ErrorBufferHandler(buf)
        logger = logging.getLogger(LOGGER_NAME)
        prev_level = logger.level
        logger.addHandler(handler)
        try:
            logger.setLevel(logging.DEBUG)
            logger.info("just info")
            logger.warning("Rejected path traversal attempt")
            entries = buf.get_all()
            self.assertEqual(len(entries), 1)
            self.assertEqual(entries[0]["level"], "WARNING")
            self.assertIn("traversal", entries[0]["message"])
        finally:
            logger.removeHandler(handler)
            logger.setLevel(prev_level)


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        logger = logging.getLogger(LOGGER_NAME)
        root = logging.getLogger()
        prev = (logger.level, root.level, list(logger.handlers))

        def _restore():
            logger.setLevel(prev[0])
            root.setLevel(prev[1])
            logger.handlers[:] = prev[2]
            error_buffer.clear()

        self.addCleanup(_restore)

    def test_sets_level_and_adds_single_buffer_handler(self):
        setup_logging("debug")
        setup_logging("DEBUG")
        logger = logging.getLogger(LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)
        buffers = [h for h in logger.handlers if isinstance(h, ErrorBufferHandler)]
        self.assertEqual(len(buffers), 1)
        self.assertEqual(logging.getLogger("werkzeug").level, logging.WARNING)

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        self.assertEqual(logging.getLogger(LOGGER_NAME).level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
