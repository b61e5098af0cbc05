"""
Flash Arbitrage Bot.

Watches two Uniswap-V2-style pools trading the same pair, simulates the
round trip in both directions on every new block, and asks an on-chain
flash-loan contract to execute the profitable one.
"""

from flash_arbitrage.version import __version__

PROJECT_NAME = "flash-arbitrage-bot"
VERSION = __version__

from flash_arbitrage.adapters.v2 import swap_out  # noqa: E402
from flash_arbitrage.config import ArbitrageConfig, load_config  # noqa: E402
from flash_arbitrage.evaluator import evaluate  # noqa: E402
from flash_arbitrage.exceptions import (  # noqa: E402
    ConfigurationError,
    FetchError,
    FlashArbitrageError,
    InsufficientProfit,
    InvalidReserves,
    OnChainRevert,
    SubmissionError,
    UnknownPipelineError,
)
from flash_arbitrage.opportunity_math import gross_profit  # noqa: E402
from flash_arbitrage.types import (  # noqa: E402
    Direction,
    Opportunity,
    ReservePair,
    TradeOutcome,
)

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "__version__",
    "swap_out",
    "gross_profit",
    "evaluate",
    "ArbitrageConfig",
    "load_config",
    "Direction",
    "Opportunity",
    "ReservePair",
    "TradeOutcome",
    "FlashArbitrageError",
    "ConfigurationError",
    "InvalidReserves",
    "FetchError",
    "SubmissionError",
    "OnChainRevert",
    "InsufficientProfit",
    "UnknownPipelineError",
]
