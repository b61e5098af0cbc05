"""
Core data types for two-pool flash arbitrage.

Every amount is a Python int in the token's smallest unit, so reserve math
never loses precision regardless of token decimals.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

# Smallest token units; non-negative for amounts, signed for profit
SwapAmount = int


@dataclass(frozen=True)
class ReservePair:
    """
    One pool's instantaneous liquidity, oriented to the configured pair.

    Attributes:
        base: Reserve of the base token (the flash-loaned token, e.g. WETH)
        quote: Reserve of the quote token (the trade token, e.g. DAI)
    """

    base: SwapAmount
    quote: SwapAmount

    def __post_init__(self):
        if self.base < 0 or self.quote < 0:
            raise ValueError(
                f"Reserves must be non-negative: base={self.base}, quote={self.quote}"
            )

    @classmethod
    def from_raw(cls, reserve0: int, reserve1: int, base_is_token0: bool) -> "ReservePair":
        """Build from a pair's (reserve0, reserve1) given which side is the base token."""
        if base_is_token0:
            return cls(base=int(reserve0), quote=int(reserve1))
        return cls(base=int(reserve1), quote=int(reserve0))


class Direction(Enum):
    """Which pool is bought on and which is sold on."""

    A_TO_B = "A->B"
    B_TO_A = "B->A"

    @property
    def buy_pool(self) -> str:
        return "a" if self is Direction.A_TO_B else "b"

    @property
    def sell_pool(self) -> str:
        return "b" if self is Direction.A_TO_B else "a"


@dataclass(frozen=True)
class Opportunity:
    """
    A profitable round trip found for one block.

    Attributes:
        direction: Buy/sell pool ordering
        gross_profit: Simulated profit in base-token units (before gas)
        amount_in: Flash-loan amount the simulation used
    """

    direction: Direction
    gross_profit: SwapAmount
    amount_in: SwapAmount


@dataclass
class TradeOutcome:
    """
    Result of one arbitrage dispatch.

    Attributes:
        submitted: Whether a transaction reached the network
        transaction_hash: Hash of the submitted transaction
        confirmed_block: Block the transaction was included in
        failure_reason: Why the trade did not succeed (None on success)
        direction: Direction that was traded
        amount_in: Flash-loan amount requested
        gas_used: Gas consumed by the mined transaction
        error_type: Exception class name behind failure_reason
        dry_run: True if the call was only logged, never signed
    """

    submitted: bool
    transaction_hash: Optional[str] = None
    confirmed_block: Optional[int] = None
    failure_reason: Optional[str] = None
    direction: Optional[Direction] = None
    amount_in: Optional[SwapAmount] = None
    gas_used: Optional[int] = None
    error_type: Optional[str] = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        if self.dry_run:
            return self.failure_reason is None
        return (
            self.submitted
            and self.confirmed_block is not None
            and self.failure_reason is None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "submitted": self.submitted,
            "tx_hash": self.transaction_hash,
            "confirmed_block": self.confirmed_block,
            "failure_reason": self.failure_reason,
            "error_type": self.error_type,
            "direction": self.direction.value if self.direction else None,
            "amount_in": self.amount_in,
            "gas_used": self.gas_used,
            "dry_run": self.dry_run,
        }


@dataclass
class BlockReport:
    """What happened while processing one block."""

    block_number: int
    reserves_a: Optional[ReservePair] = None
    reserves_b: Optional[ReservePair] = None
    profits: Dict[Direction, SwapAmount] = field(default_factory=dict)
    opportunity: Optional[Opportunity] = None
    outcome: Optional[TradeOutcome] = None
    duration_ms: Optional[float] = None
