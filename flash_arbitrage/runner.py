"""
Main arbitrage runner.

Wires the node connection, reserve fetcher, evaluator and trade executor
into a per-block pipeline and drives it from new chain heads.
"""

import asyncio
import time
from typing import Optional

from web3 import HTTPProvider, LegacyWebSocketProvider, Web3

from .config import ArbitrageConfig
from .evaluator import evaluate_both, select_opportunity
from .exceptions import ConfigurationError
from .executor import TradeExecutor
from .fetcher import MarketStateFetcher
from .listener import BlockListener, poll_new_blocks
from .metrics import ArbitrageMetrics
from .types import BlockReport, Direction, Opportunity
from .utils import format_units, get_logger

logger = get_logger(__name__)


def make_provider(rpc_url: str, timeout: float):
    """HTTP(S) endpoints use HTTPProvider; ws(s) endpoints the blocking websocket provider."""
    if rpc_url.startswith(("ws://", "wss://")):
        return LegacyWebSocketProvider(rpc_url, websocket_timeout=int(timeout))
    return HTTPProvider(rpc_url, request_kwargs={"timeout": timeout})


class ArbitrageRunner:
    """
    Two-pool flash arbitrage bot.

    For every new block: read both pools' reserves, simulate both round
    trips, and if one is profitable ask the arbitrage contract to execute it.
    """

    def __init__(
        self,
        config: ArbitrageConfig,
        web3: Optional[Web3] = None,
        fetcher: Optional[MarketStateFetcher] = None,
        executor: Optional[TradeExecutor] = None,
        metrics: Optional[ArbitrageMetrics] = None,
    ):
        """
        Initialize runner with config.

        Args:
            config: Validated ArbitrageConfig instance
            web3: Pre-built Web3 instance (default: built by connect())
            fetcher: Reserve fetcher override (tests)
            executor: Trade executor override (tests)
            metrics: Metrics sink (default: none)
        """
        self.config = config
        self.web3 = web3
        self.fetcher = fetcher
        self.executor = executor
        self.metrics = metrics
        self.listener = BlockListener(self.process_block, metrics=metrics)

    def connect(self) -> None:
        """
        Connect to the node and build the pipeline components.

        Raises:
            ConnectionError: If the node is unreachable
            ConfigurationError: If the node is on the wrong chain or a pool
                does not trade the configured pair
        """
        if self.web3 is None:
            self.web3 = Web3(
                make_provider(self.config.rpc_url, self.config.request_timeout_sec)
            )
            if not self.web3.is_connected():
                raise ConnectionError(f"Web3 not connected; bad RPC URL? {self.config.rpc_url}")

        if self.config.chain_id is not None:
            chain_id = self.web3.eth.chain_id
            if chain_id != self.config.chain_id:
                raise ConfigurationError(
                    f"Connected to chain {chain_id}, config expects {self.config.chain_id}"
                )

        if self.fetcher is None:
            self.fetcher = MarketStateFetcher(self.web3, self.config)
            self.fetcher.resolve_orientation()
        if self.executor is None:
            self.executor = TradeExecutor(self.web3, self.config)

        logger.info(f"Connected to {self.config.rpc_url}")

    def _pool_names(self, direction: Direction):
        return (
            self.config.pool(direction.buy_pool).name,
            self.config.pool(direction.sell_pool).name,
        )

    def _fmt(self, amount: int) -> str:
        return f"{format_units(amount, self.config.base.decimals)} {self.config.base.symbol}"

    async def process_block(self, block_number: int) -> BlockReport:
        """
        Run fetch -> evaluate -> (execute) for one block.

        Raises:
            FetchError: If reserves cannot be read
            InvalidReserves: If a pool is empty
        """
        start = time.perf_counter()
        report = BlockReport(block_number=block_number)

        reserves_a, reserves_b = await self.fetcher.fetch_reserves(block_number)
        report.reserves_a, report.reserves_b = reserves_a, reserves_b

        log_data = {
            "block": block_number,
            self.config.pool_a.name: [reserves_a.base, reserves_a.quote],
            self.config.pool_b.name: [reserves_b.base, reserves_b.quote],
        }
        logger.info(f"BLOCK_RESERVES: {log_data}")

        amount_in = self.config.flash_loan_amount
        report.profits = evaluate_both(
            amount_in,
            reserves_a,
            reserves_b,
            self.config.fee_numerator,
            self.config.fee_denominator,
        )
        opportunity = select_opportunity(amount_in, report.profits)
        report.opportunity = opportunity

        if opportunity is None:
            log_data = {
                "block": block_number,
                "profits": {d.value: self._fmt(p) for d, p in report.profits.items()},
            }
            logger.info(f"NO_OPPORTUNITY: {log_data}")
        else:
            report.outcome = await self._dispatch(block_number, opportunity)

        report.duration_ms = (time.perf_counter() - start) * 1000
        return report

    async def _dispatch(self, block_number: int, opportunity: Opportunity):
        buy_name, sell_name = self._pool_names(opportunity.direction)
        logger.info(
            f"📈 Opportunity Found! Buy on {buy_name}, Sell on {sell_name}. "
            f"Gross Profit: {self._fmt(opportunity.gross_profit)}"
        )
        log_data = {
            "block": block_number,
            "direction": opportunity.direction.value,
            "buy": buy_name,
            "sell": sell_name,
            "amount_in": opportunity.amount_in,
            "gross_profit": opportunity.gross_profit,
        }
        logger.info(f"OPPORTUNITY_FOUND: {log_data}")
        if self.metrics:
            self.metrics.record_opportunity(opportunity.direction.value)

        outcome = await self.executor.execute(
            opportunity.direction, opportunity.amount_in
        )

        result_log = {"block": block_number, **outcome.to_dict()}
        if outcome.success:
            logger.info(f"EXECUTION_RESULT: {result_log}")
        else:
            logger.warning(f"EXECUTION_RESULT: {result_log}")
        if self.metrics:
            self.metrics.record_trade(outcome)
        return outcome

    def _log_banner(self) -> None:
        logger.info("🤖 Arbitrage Bot Started")
        logger.info(
            f"Pair: {self.config.base.symbol}/{self.config.quote.symbol} | "
            f"Pools: {self.config.pool_a.name} ({self.config.pool_a.pair_address}) vs "
            f"{self.config.pool_b.name} ({self.config.pool_b.pair_address})"
        )
        logger.info(f"Flash loan: {self._fmt(self.config.flash_loan_amount)}")
        logger.info(f"Minimum profit threshold: ${self.config.min_profit_threshold_usd}")
        if self.config.dry_run:
            logger.info("DRY RUN: opportunities are logged, no transactions are sent")
        logger.info("Watching for opportunities on block events...")

    async def run_async(self, once: bool = False) -> None:
        """
        Process blocks until cancelled.

        Args:
            once: Process only the current head, then return
        """
        if self.fetcher is None or self.executor is None:
            self.connect()

        self._log_banner()
        metrics_started = False
        if self.metrics and self.config.metrics.enabled:
            metrics_started = await self.metrics.start_server(
                port=self.config.metrics.port, host=self.config.metrics.host
            )

        try:
            if once:
                loop = asyncio.get_running_loop()
                head = await loop.run_in_executor(None, lambda: self.web3.eth.block_number)
                self.listener.notify(head)
                await self.listener.wait_idle()
            else:
                await self.listener.run(
                    poll_new_blocks(self.web3, self.config.poll_interval_sec)
                )
        finally:
            await self.listener.stop()
            if metrics_started:
                await self.metrics.stop_server()
            self.print_summary()

    def print_summary(self) -> None:
        """Log listener and execution statistics."""
        summary = {
            "blocks_seen": self.listener.blocks_seen,
            "blocks_processed": self.listener.blocks_processed,
            "blocks_coalesced": self.listener.blocks_coalesced,
            "pipeline_failures": self.listener.pipeline_failures,
        }
        if self.executor is not None:
            summary.update(self.executor.get_stats())
        logger.info(f"RUN_SUMMARY: {summary}")
