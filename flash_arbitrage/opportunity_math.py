"""
Round-trip profitability for two-pool arbitrage.

Everything here is a read-only simulation over reserve snapshots: no
transfer is executed, and results are exact integers in base-token units.
"""

from .adapters.v2 import swap_out
from .types import ReservePair, SwapAmount


def gross_profit(
    amount_in: SwapAmount,
    reserves_a: ReservePair,
    reserves_b: ReservePair,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> SwapAmount:
    """
    Simulate base -> quote on pool A, then quote -> base on pool B.

    The first leg spends base tokens against pool A (base reserve on the
    input side); the second spends the received quote tokens against pool B,
    so pool B's reserves are used in the opposite role.

    Args:
        amount_in: Base tokens borrowed (smallest units)
        reserves_a: Reserves of the pool bought on
        reserves_b: Reserves of the pool sold on

    Returns:
        Base tokens returned minus amount_in. Negative when the round trip
        loses money, which is the normal case: the fee is paid twice.

    Raises:
        InvalidReserves: If either pool has an empty reserve
    """
    out_a = swap_out(
        amount_in, reserves_a.base, reserves_a.quote, fee_numerator, fee_denominator
    )
    out_b = swap_out(
        out_a, reserves_b.quote, reserves_b.base, fee_numerator, fee_denominator
    )
    return out_b - amount_in
