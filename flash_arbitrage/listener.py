"""
Block-driven trigger for the arbitrage pipeline.

New heads arrive from a polling source. At most one pipeline runs at a time:
a block that arrives while a pipeline is in flight takes the single pending
slot, replacing any older pending block, and runs as soon as the current
pipeline finishes. Failures of a block's pipeline are logged here and never
stop the listener.
"""

import asyncio
import time
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from web3 import Web3

from .exceptions import FlashArbitrageError, UnknownPipelineError, classify_error
from .metrics import ArbitrageMetrics
from .utils import get_logger

logger = get_logger(__name__)

ProcessBlock = Callable[[int], Awaitable[Any]]


class ListenerState(Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"


async def poll_new_blocks(
    web3: Web3, poll_interval: float = 2.0
) -> AsyncIterator[int]:
    """
    Yield each new chain head once, in increasing order.

    When several blocks were produced between polls only the newest is
    yielded. RPC errors are logged and the poll is retried next interval.
    """
    loop = asyncio.get_running_loop()
    last_seen: Optional[int] = None

    while True:
        try:
            block_number = await loop.run_in_executor(
                None, lambda: web3.eth.block_number
            )
        except Exception as e:
            logger.warning(f"Failed to poll block number: {e}")
        else:
            if last_seen is None or block_number > last_seen:
                last_seen = block_number
                yield block_number
        await asyncio.sleep(poll_interval)


class BlockListener:
    """
    Runs `process_block` for incoming blocks, one pipeline at a time.

    States: IDLE (waiting for a block) and EVALUATING (running a pipeline).
    """

    def __init__(
        self, process_block: ProcessBlock, metrics: Optional[ArbitrageMetrics] = None
    ):
        """
        Args:
            process_block: Coroutine function running fetch -> evaluate -> execute
            metrics: Optional metrics sink
        """
        self.process_block = process_block
        self.metrics = metrics

        self.state = ListenerState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._pending_block: Optional[int] = None
        self._last_notified: Optional[int] = None

        self.blocks_seen = 0
        self.blocks_processed = 0
        self.blocks_coalesced = 0
        self.pipeline_failures = 0
        self.last_error: Optional[FlashArbitrageError] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending_block(self) -> Optional[int]:
        return self._pending_block

    def notify(self, block_number: int) -> None:
        """
        Handle a new-block event. Must be called from the event loop.

        Starts a pipeline when idle; otherwise parks the block in the pending
        slot. Blocks not newer than the last one seen are ignored.
        """
        if self._last_notified is not None and block_number <= self._last_notified:
            logger.debug(f"Ignoring stale block {block_number}")
            return
        self._last_notified = block_number
        self.blocks_seen += 1

        if self.busy:
            if self._pending_block is not None:
                self.blocks_coalesced += 1
                if self.metrics:
                    self.metrics.record_coalesced()
                logger.debug(
                    f"Block {self._pending_block} superseded by {block_number} while busy"
                )
            self._pending_block = block_number
            return

        self._task = asyncio.get_running_loop().create_task(
            self._drain(block_number), name=f"arbitrage-block-{block_number}"
        )

    async def _drain(self, block_number: int) -> None:
        current: Optional[int] = block_number
        try:
            while current is not None:
                self.state = ListenerState.EVALUATING
                await self._process(current)
                current, self._pending_block = self._pending_block, None
        finally:
            self.state = ListenerState.IDLE

    async def _process(self, block_number: int) -> None:
        """Run one block's pipeline; every failure stops here."""
        start = time.perf_counter()
        try:
            await self.process_block(block_number)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.pipeline_failures += 1
            kind = classify_error(e)
            if isinstance(e, FlashArbitrageError):
                self.last_error = e
            else:
                self.last_error = UnknownPipelineError(
                    f"Unexpected error: {e}", original=e
                )

            log_data = {"block": block_number, "error_type": kind, "error": str(e)}
            if isinstance(self.last_error, UnknownPipelineError):
                logger.error(f"PIPELINE_ERROR: {log_data}", exc_info=e)
            else:
                logger.warning(f"PIPELINE_ERROR: {log_data}")
            if self.metrics:
                self.metrics.record_pipeline_error(kind)
        finally:
            self.blocks_processed += 1
            if self.metrics:
                self.metrics.record_block(block_number, time.perf_counter() - start)

    async def wait_idle(self) -> None:
        """Wait until no pipeline is running and nothing is pending."""
        while self.busy:
            await self._task

    async def run(self, source: AsyncIterator[int]) -> None:
        """Feed every block from `source` into notify() until it is exhausted."""
        async for block_number in source:
            self.notify(block_number)

    async def stop(self) -> None:
        """Cancel the in-flight pipeline, if any, and drop the pending block."""
        self._pending_block = None
        if self.busy:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self.state = ListenerState.IDLE
