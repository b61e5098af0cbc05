"""
Prometheus Metrics for the flash arbitrage bot

Exposes per-block pipeline and trade counters for monitoring and alerting.
"""

import logging
import threading
from typing import Optional

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from .types import TradeOutcome

logger = logging.getLogger(__name__)


def trade_result_label(outcome: TradeOutcome) -> str:
    """Collapse a TradeOutcome into a low-cardinality metric label."""
    if outcome.dry_run:
        return "dry_run"
    if outcome.success:
        return "confirmed"
    if not outcome.submitted:
        return "submission_failed"
    if outcome.error_type == "InsufficientProfit":
        return "insufficient_profit"
    if outcome.error_type == "OnChainRevert":
        return "reverted"
    return "unconfirmed"


class ArbitrageMetrics:
    """
    Block pipeline metrics collection and exposure

    Provides Prometheus-compatible metrics for:
    - Blocks processed and coalesced
    - Opportunities found per direction
    - Trade outcomes
    - Pipeline errors and duration
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics with custom registry or default"""
        self.registry = registry or REGISTRY
        self._initialize_metrics()

        self._app = None
        self._runner = None
        self._site = None

        self._lock = threading.RLock()

    def _initialize_metrics(self):
        """Initialize all Prometheus metrics"""

        self.blocks_processed_total = Counter(
            "flash_arbitrage_blocks_processed_total",
            "Blocks whose pipeline ran to completion or failure",
            registry=self.registry,
        )

        self.blocks_coalesced_total = Counter(
            "flash_arbitrage_blocks_coalesced_total",
            "Blocks skipped because a newer block superseded them while busy",
            registry=self.registry,
        )

        self.opportunities_total = Counter(
            "flash_arbitrage_opportunities_total",
            "Profitable round trips found",
            ["direction"],
            registry=self.registry,
        )

        self.trades_total = Counter(
            "flash_arbitrage_trades_total",
            "Arbitrage dispatches by result",
            ["result"],
            registry=self.registry,
        )

        self.pipeline_errors_total = Counter(
            "flash_arbitrage_pipeline_errors_total",
            "Block pipelines that failed, by error kind",
            ["error_type"],
            registry=self.registry,
        )

        self.pipeline_duration_seconds = Histogram(
            "flash_arbitrage_pipeline_duration_seconds",
            "Time from block notification to pipeline completion",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 15.0, 60.0, 180.0],
            registry=self.registry,
        )

        self.last_block = Gauge(
            "flash_arbitrage_last_block",
            "Most recent block number processed",
            registry=self.registry,
        )

    # === RECORDING ===

    def record_block(self, block_number: int, duration_seconds: float):
        with self._lock:
            self.blocks_processed_total.inc()
            self.pipeline_duration_seconds.observe(duration_seconds)
            self.last_block.set(block_number)

    def record_coalesced(self, count: int = 1):
        with self._lock:
            self.blocks_coalesced_total.inc(count)

    def record_opportunity(self, direction: str):
        with self._lock:
            self.opportunities_total.labels(direction=direction).inc()

    def record_trade(self, outcome: TradeOutcome):
        with self._lock:
            self.trades_total.labels(result=trade_result_label(outcome)).inc()

    def record_pipeline_error(self, error_type: str):
        with self._lock:
            self.pipeline_errors_total.labels(error_type=error_type).inc()

    # === SERVER MANAGEMENT ===

    async def start_server(
        self, port: int = 8000, host: str = "0.0.0.0", path: str = "/metrics"
    ):
        """Start Prometheus metrics HTTP server"""
        try:
            self._app = web.Application()
            self._app.router.add_get(path, self._metrics_handler)
            self._app.router.add_get("/health", self._health_handler)

            self._runner = web.AppRunner(self._app)
            await self._runner.setup()

            self._site = web.TCPSite(self._runner, host, port)
            await self._site.start()

            logger.info(
                f"📊 Prometheus metrics server started on http://{host}:{port}{path}"
            )
            return True

        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

    async def stop_server(self):
        """Stop the metrics server"""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._site = None
        self._runner = None
        logger.info("📊 Metrics server stopped")

    async def _metrics_handler(self, request):
        """Handle metrics endpoint requests"""
        metrics_output = generate_latest(self.registry)
        # Strip charset from content type to avoid conflicts with aiohttp
        content_type = CONTENT_TYPE_LATEST.split(";")[0]
        return web.Response(
            text=metrics_output.decode("utf-8"), content_type=content_type
        )

    async def _health_handler(self, request):
        """Handle health check endpoint"""
        return web.Response(
            text='{"status": "healthy", "service": "flash_arbitrage_metrics"}',
            content_type="application/json",
        )
