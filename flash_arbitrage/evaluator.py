"""
Opportunity selection for one block.

Both directions are simulated and at most one is chosen. Only gross profit
is considered; gas and the fiat threshold are not compared here.
"""

from typing import Dict, Optional

from .opportunity_math import gross_profit
from .types import Direction, Opportunity, ReservePair, SwapAmount

# Evaluation order; the first strictly profitable direction wins
DIRECTION_PRIORITY = (Direction.A_TO_B, Direction.B_TO_A)


def evaluate_both(
    amount_in: SwapAmount,
    reserves_a: ReservePair,
    reserves_b: ReservePair,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> Dict[Direction, SwapAmount]:
    """Signed gross profit for each direction."""
    return {
        Direction.A_TO_B: gross_profit(
            amount_in, reserves_a, reserves_b, fee_numerator, fee_denominator
        ),
        Direction.B_TO_A: gross_profit(
            amount_in, reserves_b, reserves_a, fee_numerator, fee_denominator
        ),
    }


def select_opportunity(
    amount_in: SwapAmount, profits: Dict[Direction, SwapAmount]
) -> Optional[Opportunity]:
    """
    Pick the first direction, in DIRECTION_PRIORITY order, with profit > 0.

    When both directions are positive (inconsistent reserves, but the math
    allows it) A->B is chosen.
    """
    for direction in DIRECTION_PRIORITY:
        profit = profits.get(direction)
        if profit is not None and profit > 0:
            return Opportunity(
                direction=direction, gross_profit=profit, amount_in=amount_in
            )
    return None


def evaluate(
    amount_in: SwapAmount,
    reserves_a: ReservePair,
    reserves_b: ReservePair,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> Optional[Opportunity]:
    """
    Decide whether, and in which direction, to trade.

    Returns:
        The selected Opportunity, or None when neither direction is
        strictly profitable

    Raises:
        InvalidReserves: If either pool has an empty reserve
    """
    profits = evaluate_both(
        amount_in, reserves_a, reserves_b, fee_numerator, fee_denominator
    )
    return select_opportunity(amount_in, profits)
