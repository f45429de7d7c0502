import logging
import unittest

import colorlog

from blocksight.config.logging import get_logger


class GetLoggerTests(unittest.TestCase):
    def test_logger_is_cached(self) -> None:
        first = get_logger("blocksight.test.cached", level="DEBUG")
        second = get_logger("blocksight.test.cached", level="ERROR")

        self.assertIs(first, second)
        self.assertEqual(first.level, logging.DEBUG)
        self.assertEqual(len(first.handlers), 1)

    def test_colored_formatter(self) -> None:
        logger = get_logger("blocksight.test.color", color=True)

        self.assertIsInstance(logger.handlers[0].formatter, colorlog.ColoredFormatter)

    def test_invalid_level(self) -> None:
        with self.assertRaises(ValueError):
            get_logger("blocksight.test.bad", level="LOUD")


if __name__ == "__main__":
    unittest.main()
