"""
Market state reads for the two configured pools.
"""

import asyncio
from typing import Any, Dict, Tuple

from web3 import Web3

from .adapters.v2 import BlockIdentifier, fetch_reserves_async, fetch_token0, pair_contract
from .config import ArbitrageConfig, PoolConfig
from .exceptions import ConfigurationError, FetchError
from .types import ReservePair
from .utils import get_logger

logger = get_logger(__name__)


class MarketStateFetcher:
    """
    Reads both pools' reserves for one block.

    The two getReserves() calls are issued together and both awaited; if
    either fails the whole read fails, so callers never see one fresh and one
    stale snapshot.
    """

    def __init__(self, web3: Web3, config: ArbitrageConfig):
        self.web3 = web3
        self.config = config
        self._pairs: Dict[str, Any] = {
            label: pair_contract(web3, config.pool(label).pair_address)
            for label in ("a", "b")
        }
        self._base_is_token0: Dict[str, bool] = {}
        for label in ("a", "b"):
            pinned = config.pool(label).base_is_token0
            if pinned is not None:
                self._base_is_token0[label] = pinned

    def resolve_orientation(self) -> Dict[str, bool]:
        """
        Work out which reserve slot holds the base token, once per pool.

        Pools pinned with base_is_token0 in the config are not queried.

        Raises:
            FetchError: If token0() cannot be read
            ConfigurationError: If token0 is neither the base nor the quote token
        """
        for label in ("a", "b"):
            if label in self._base_is_token0:
                continue
            pool = self.config.pool(label)
            try:
                token0 = fetch_token0(self._pairs[label])
            except Exception as e:
                raise FetchError(
                    f"Failed to read token0 of pool {pool.name}: {e}",
                    pool=pool.name,
                    address=pool.pair_address,
                ) from e

            if token0 == self.config.base.address:
                self._base_is_token0[label] = True
            elif token0 == self.config.quote.address:
                self._base_is_token0[label] = False
            else:
                raise ConfigurationError(
                    f"Pool {pool.name} ({pool.pair_address}) does not trade "
                    f"{self.config.base.symbol}/{self.config.quote.symbol}: token0={token0}"
                )
            logger.info(
                f"Pool {pool.name}: {self.config.base.symbol} is "
                f"{'token0' if self._base_is_token0[label] else 'token1'}"
            )
        return dict(self._base_is_token0)

    def _orient(self, label: str, raw: Tuple[int, int]) -> ReservePair:
        # Unresolved pools fall back to token0 = base, as the pair's creation order usually gives
        base_is_token0 = self._base_is_token0.get(label, True)
        return ReservePair.from_raw(raw[0], raw[1], base_is_token0)

    async def fetch_reserves(
        self, block_identifier: BlockIdentifier = "latest"
    ) -> Tuple[ReservePair, ReservePair]:
        """
        Fetch both pools' reserves concurrently at the same block.

        Returns:
            (reserves of pool A, reserves of pool B), oriented base/quote

        Raises:
            FetchError: If either read fails
        """
        results = await asyncio.gather(
            fetch_reserves_async(self._pairs["a"], block_identifier),
            fetch_reserves_async(self._pairs["b"], block_identifier),
            return_exceptions=True,
        )

        for label, result in zip(("a", "b"), results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                pool: PoolConfig = self.config.pool(label)
                raise FetchError(
                    f"Failed to fetch reserves of pool {pool.name} at block "
                    f"{block_identifier}: {result}",
                    pool=pool.name,
                    address=pool.pair_address,
                    details={"block": block_identifier},
                ) from result

        return self._orient("a", results[0]), self._orient("b", results[1])
