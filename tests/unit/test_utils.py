"""
Unit tests for flash_arbitrage/utils.py and flash_arbitrage/logging_config.py
"""

import logging
import unittest
from decimal import Decimal
from unittest.mock import patch

from flash_arbitrage import logging_config
from flash_arbitrage.utils import format_units, get_logger, parse_units


class TestGetLogger(unittest.TestCase):
    def setUp(self):
        self.root = logging.getLogger()

    def test_handler_added_once_without_root_handler(self):
        with patch.object(self.root, "handlers", []):
            first = get_logger("flash_arbitrage.test_utils.once")
            second = get_logger("flash_arbitrage.test_utils.once")

        self.assertIs(first, second)
        self.assertEqual(len(first.handlers), 1)
        self.assertTrue(first.propagate)

    def test_no_handler_when_root_configured(self):
        with patch.object(self.root, "handlers", [logging.NullHandler()]):
            logger = get_logger("flash_arbitrage.test_utils.configured")

        self.assertEqual(logger.handlers, [])

    def test_default_level(self):
        logger = get_logger("flash_arbitrage.test_utils.level")
        self.assertEqual(logger.level, logging.INFO)


class TestLoggingSetup(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self.saved_handlers = list(root.handlers)
        self.saved_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers[:] = self.saved_handlers
        root.setLevel(self.saved_level)

    def test_application_loggers_use_root_handler(self):
        with patch.object(logging.getLogger(), "handlers", []):
            module_logger = get_logger("flash_arbitrage.test_utils.setup")
        self.assertEqual(len(module_logger.handlers), 1)

        logging_config.setup(logging.WARNING)

        self.assertEqual(len(logging.getLogger().handlers), 1)
        self.assertEqual(module_logger.handlers, [])
        self.assertTrue(module_logger.propagate)
        self.assertEqual(module_logger.level, logging.WARNING)
        self.assertEqual(logging.getLogger("web3").level, logging.WARNING)

class TestUnits(unittest.TestCase):
    def test_parse_units(self):
        self.assertEqual(parse_units("1", 18), 10**18)
        self.assertEqual(parse_units("1.5", 18), 15 * 10**17)
        self.assertEqual(parse_units(2, 6), 2_000_000)
        self.assertEqual(parse_units(Decimal("0.000001"), 6), 1)
        self.assertEqual(parse_units("0", 18), 0)

    def test_parse_units_rejects_bad_values(self):
        for value in ("abc", "-1", "NaN", "Infinity"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_units(value, 18)

    def test_parse_units_rejects_excess_precision(self):
        with self.assertRaises(ValueError):
            parse_units("0.0000001", 6)

    def test_format_units(self):
        self.assertEqual(format_units(10**18, 18), "1.0")
        self.assertEqual(format_units(15 * 10**17, 18), "1.5")
        self.assertEqual(format_units(1, 18), "0.000000000000000001")
        self.assertEqual(format_units(0, 18), "0.0")
        self.assertEqual(format_units(42, 0), "42")

    def test_format_units_keeps_sign(self):
        self.assertEqual(format_units(-25 * 10**16, 18), "-0.25")


if __name__ == "__main__":
    unittest.main()
