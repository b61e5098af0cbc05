"""
DEX adapter modules for different AMM types.
"""

from .v2 import fetch_reserves, fetch_reserves_async, fetch_token0, swap_out

__all__ = ["fetch_reserves", "fetch_reserves_async", "fetch_token0", "swap_out"]
