"""
Unit tests for flash_arbitrage/exceptions.py
"""

import unittest

from flash_arbitrage.exceptions import (
    ConfigurationError,
    FetchError,
    FlashArbitrageError,
    InsufficientProfit,
    InvalidReserves,
    OnChainRevert,
    SubmissionError,
    TradeError,
    UnknownPipelineError,
    classify_error,
)


class TestExceptionHierarchy(unittest.TestCase):
    def test_all_derive_from_base(self):
        for cls in (
            ConfigurationError,
            InvalidReserves,
            FetchError,
            TradeError,
            SubmissionError,
            OnChainRevert,
            InsufficientProfit,
            UnknownPipelineError,
        ):
            self.assertTrue(issubclass(cls, FlashArbitrageError), cls)

    def test_trade_errors(self):
        self.assertTrue(issubclass(SubmissionError, TradeError))
        self.assertTrue(issubclass(InsufficientProfit, OnChainRevert))

    def test_details_default_to_empty_dict(self):
        error = FlashArbitrageError("boom")
        self.assertEqual(error.details, {})
        self.assertEqual(str(error), "boom")

    def test_fields_are_kept(self):
        revert = InsufficientProfit("Reverted", tx_hash="0xabc", block_number=7)
        self.assertEqual(revert.tx_hash, "0xabc")
        self.assertEqual(revert.block_number, 7)

        fetch = FetchError("down", pool="uniswap", address="0x1", details={"block": 3})
        self.assertEqual(fetch.pool, "uniswap")
        self.assertEqual(fetch.details, {"block": 3})

        original = RuntimeError("x")
        self.assertIs(UnknownPipelineError("y", original=original).original, original)


class TestClassifyError(unittest.TestCase):
    def test_known_kinds(self):
        self.assertEqual(classify_error(InvalidReserves("x")), "InvalidReserves")
        self.assertEqual(classify_error(FetchError("x")), "FetchError")
        self.assertEqual(classify_error(SubmissionError("x")), "SubmissionError")
        self.assertEqual(classify_error(OnChainRevert("x")), "OnChainRevert")
        self.assertEqual(classify_error(ConfigurationError("x")), "ConfigurationError")

    def test_most_specific_revert_wins(self):
        self.assertEqual(classify_error(InsufficientProfit("x")), "InsufficientProfit")

    def test_everything_else_is_unknown(self):
        self.assertEqual(classify_error(RuntimeError("x")), "UnknownPipelineError")
        self.assertEqual(classify_error(KeyError("x")), "UnknownPipelineError")


if __name__ == "__main__":
    unittest.main()
