"""
Exception hierarchy for the flash arbitrage bot.

Pure components (swap math, reserve reads) raise these; the trade executor
turns trade failures into a TradeOutcome and the block listener turns
everything else into a logged record.
"""

from typing import Any, Dict, Optional


class FlashArbitrageError(Exception):
    """Base exception for all flash arbitrage related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(FlashArbitrageError):
    """Raised when there are configuration-related issues."""

    pass


class InvalidReserves(FlashArbitrageError):
    """Raised when a swap is simulated against a pool with an empty reserve."""

    def __init__(
        self,
        message: str,
        reserve_in: Optional[int] = None,
        reserve_out: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.reserve_in = reserve_in
        self.reserve_out = reserve_out


class FetchError(FlashArbitrageError):
    """Raised when pool reserves cannot be read from the node."""

    def __init__(
        self,
        message: str,
        pool: Optional[str] = None,
        address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.pool = pool
        self.address = address


class TradeError(FlashArbitrageError):
    """Base class for failures while dispatching an arbitrage transaction."""

    pass


class SubmissionError(TradeError):
    """Raised when the transaction is rejected before inclusion."""

    pass


class OnChainRevert(TradeError):
    """Raised when the arbitrage transaction was mined but reverted."""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        block_number: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash
        self.block_number = block_number


class InsufficientProfit(OnChainRevert):
    """The contract's own minimum-profit check rejected the round trip."""

    pass


class UnknownPipelineError(FlashArbitrageError):
    """Wraps an unexpected exception raised while processing a block."""

    def __init__(
        self,
        message: str,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.original = original


def classify_error(error: BaseException) -> str:
    """Name the taxonomy bucket an exception falls into, for logs and metrics."""
    for kind in (
        InvalidReserves,
        FetchError,
        SubmissionError,
        InsufficientProfit,
        OnChainRevert,
        ConfigurationError,
    ):
        if isinstance(error, kind):
            return kind.__name__
    return UnknownPipelineError.__name__
