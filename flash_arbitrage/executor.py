"""
Arbitrage trade dispatch.

Handles:
- Building the executeArbitrage call for a chosen direction
- Signing and submitting it with an explicit gas ceiling
- Waiting for inclusion and classifying reverts
- Dry-run mode and execution statistics

Trades are never retried: a missed opportunity is superseded by the next
block's evaluation.
"""

import asyncio
import functools
from typing import Any, Callable, Dict, Optional, Tuple

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import ContractCustomError, ContractLogicError, TimeExhausted

from .abi import ARBITRAGE_CONTRACT_ABI, INSUFFICIENT_PROFIT_SIGNATURE
from .config import ArbitrageConfig
from .exceptions import (
    InsufficientProfit,
    OnChainRevert,
    SubmissionError,
    TradeError,
)
from .types import Direction, SwapAmount, TradeOutcome
from .utils import format_units, get_logger

logger = get_logger(__name__)

INSUFFICIENT_PROFIT_SELECTOR = Web3.to_hex(
    Web3.keccak(text=INSUFFICIENT_PROFIT_SIGNATURE)[:4]
).lower()


def error_reason(error: BaseException) -> str:
    """Best human-readable reason from a web3/eth-account error."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if error.args and isinstance(error.args[0], dict):
        return str(error.args[0].get("message", error.args[0]))
    return str(error) or type(error).__name__


class TradeExecutor:
    """
    Submits arbitrage transactions to the deployed contract.

    The contract borrows the base token, swaps it for the quote token on the
    buy router, swaps back on the sell router, repays the loan and reverts
    with InsufficientProfit if the result does not clear its own minimum.
    """

    def __init__(
        self,
        web3: Web3,
        config: ArbitrageConfig,
        account: Optional[LocalAccount] = None,
        contract: Optional[Any] = None,
    ):
        """
        Initialize executor.

        Args:
            web3: Web3 instance
            config: Runtime configuration
            account: Signing account (default: loaded from config.private_key)
            contract: Bound arbitrage contract (default: built from config)
        """
        self.web3 = web3
        self.config = config
        self.contract = contract or web3.eth.contract(
            address=config.contract_address, abi=ARBITRAGE_CONTRACT_ABI
        )

        self.account: Optional[LocalAccount] = account
        if self.account is None and config.private_key:
            try:
                self.account = Account.from_key(config.private_key)
            except Exception as e:
                logger.error(f"Failed to load private key: {e}")
                raise
        if self.account is not None:
            logger.info(f"Loaded account: {self.account.address}")

        # Execution statistics
        self.executions_attempted = 0
        self.executions_submitted = 0
        self.executions_successful = 0
        self.executions_reverted = 0

    def routers_for(self, direction: Direction) -> Tuple[str, str]:
        """Return (buy_router, sell_router) for a direction."""
        buy_pool = self.config.pool(direction.buy_pool)
        sell_pool = self.config.pool(direction.sell_pool)
        return buy_pool.router_address, sell_pool.router_address

    def build_call(self, direction: Direction, amount_in: SwapAmount) -> Any:
        """Bind executeArbitrage(flashLoanToken, amount, buyRouter, sellRouter, tradeToken)."""
        buy_router, sell_router = self.routers_for(direction)
        return self.contract.functions.executeArbitrage(
            self.config.base.address,
            amount_in,
            buy_router,
            sell_router,
            self.config.quote.address,
        )

    async def execute(self, direction: Direction, amount_in: SwapAmount) -> TradeOutcome:
        """
        Execute one arbitrage attempt and wait for its confirmation.

        Args:
            direction: Which pool to buy on and which to sell on
            amount_in: Flash-loan amount (base-token smallest units)

        Returns:
            TradeOutcome describing what happened; failures are reported in
            failure_reason rather than raised
        """
        self.executions_attempted += 1
        buy_router, sell_router = self.routers_for(direction)
        amount_str = f"{format_units(amount_in, self.config.base.decimals)} {self.config.base.symbol}"

        if self.config.dry_run:
            logger.info(
                f"[DRY RUN] Would call executeArbitrage({self.config.base.address}, "
                f"{amount_in}, {buy_router}, {sell_router}, {self.config.quote.address}) "
                f"gas={self.config.gas_limit} ({direction.value}, borrowing {amount_str})"
            )
            return TradeOutcome(
                submitted=False, direction=direction, amount_in=amount_in, dry_run=True
            )

        logger.info(f"🚀 Executing arbitrage {direction.value}: borrowing {amount_str}...")
        outcome = await self._send_and_confirm(
            functools.partial(self.build_call, direction, amount_in),
            label="executeArbitrage",
        )
        outcome.direction = direction
        outcome.amount_in = amount_in
        return outcome

    async def withdraw(self, token: str) -> TradeOutcome:
        """
        Recover a token balance held by the contract (owner only).

        Args:
            token: Token address to sweep to the owner

        Returns:
            TradeOutcome for the withdraw transaction
        """
        token = Web3.to_checksum_address(token)
        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would call withdraw({token})")
            return TradeOutcome(submitted=False, dry_run=True)

        logger.info(f"Withdrawing {token} from {self.config.contract_address}...")
        return await self._send_and_confirm(
            lambda: self.contract.functions.withdraw(token), label="withdraw"
        )

    async def _send_and_confirm(self, build: Callable[[], Any], label: str) -> TradeOutcome:
        """Submit a contract call, wait for its receipt, and classify the result."""
        try:
            tx_hash = await self._run(self._submit, build)
        except SubmissionError as e:
            logger.error(f"❌ {label} submission failed: {e}")
            return TradeOutcome(
                submitted=False, failure_reason=str(e), error_type=type(e).__name__
            )

        self.executions_submitted += 1
        logger.info(f"✅ Transaction sent! Hash: {tx_hash}")
        link = self.config.explorer_link(tx_hash)
        if link:
            logger.info(f"🔍 View on explorer: {link}")

        try:
            receipt = await self._run(self._wait_for_receipt, tx_hash)
            block_number = await self._run(self._check_receipt, receipt, tx_hash)
        except OnChainRevert as e:
            self.executions_reverted += 1
            logger.error(f"❌ {label} reverted in block {e.block_number}: {e}")
            return TradeOutcome(
                submitted=True,
                transaction_hash=tx_hash,
                confirmed_block=e.block_number,
                failure_reason=str(e),
                error_type=type(e).__name__,
            )
        except TimeExhausted as e:
            reason = (
                f"Transaction {tx_hash} not confirmed after "
                f"{self.config.receipt_timeout_sec:.0f}s"
            )
            logger.error(f"❌ {reason}")
            return TradeOutcome(
                submitted=True,
                transaction_hash=tx_hash,
                failure_reason=reason,
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.error(f"❌ Failed to confirm {tx_hash}: {error_reason(e)}")
            return TradeOutcome(
                submitted=True,
                transaction_hash=tx_hash,
                failure_reason=error_reason(e),
                error_type=type(e).__name__,
            )

        self.executions_successful += 1
        logger.info(f"🎉 Transaction confirmed in block {block_number}!")
        return TradeOutcome(
            submitted=True,
            transaction_hash=tx_hash,
            confirmed_block=block_number,
            gas_used=receipt.get("gasUsed"),
        )

    async def _run(self, func: Callable, *args) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    def _submit(self, build: Callable[[], Any]) -> str:
        """
        Build, sign and broadcast a transaction.

        Raises:
            SubmissionError: If anything fails before the node accepts it
        """
        if self.account is None:
            raise SubmissionError("No account loaded (missing private key)")

        address = self.account.address
        try:
            tx = build().build_transaction(
                {
                    "from": address,
                    "gas": self.config.gas_limit,
                    "nonce": self.web3.eth.get_transaction_count(address, "pending"),
                    "chainId": self.web3.eth.chain_id,
                }
            )
            signed = self.account.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except TradeError:
            raise
        except Exception as e:
            raise SubmissionError(
                f"Transaction rejected: {error_reason(e)}",
                details={"error_type": type(e).__name__},
            ) from e

        return self.web3.to_hex(tx_hash)

    def _wait_for_receipt(self, tx_hash: str) -> Dict:
        return self.web3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.config.receipt_timeout_sec
        )

    def _check_receipt(self, receipt: Dict, tx_hash: str) -> int:
        """
        Return the confirming block, or raise if the transaction reverted.

        Raises:
            InsufficientProfit: If the contract's minimum-profit check failed
            OnChainRevert: For any other revert
        """
        block_number = receipt["blockNumber"]
        if receipt.get("status", 1) == 1:
            return block_number

        revert_data, reason = self._revert_info(tx_hash, block_number)
        if revert_data and revert_data.lower().startswith(INSUFFICIENT_PROFIT_SELECTOR):
            raise InsufficientProfit(
                "Reverted: InsufficientProfit", tx_hash=tx_hash, block_number=block_number
            )
        reason = reason or revert_data
        message = f"Reverted: {reason}" if reason else "Reverted"
        raise OnChainRevert(message, tx_hash=tx_hash, block_number=block_number)

    def _revert_info(
        self, tx_hash: str, block_number: int
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Replay a reverted transaction as eth_call.

        Returns:
            (raw revert data, decoded reason); either may be None
        """
        try:
            tx = self.web3.eth.get_transaction(tx_hash)
            self.web3.eth.call(
                {
                    "from": tx["from"],
                    "to": tx["to"],
                    "data": tx["input"],
                    "value": tx.get("value", 0),
                    "gas": tx["gas"],
                },
                block_number - 1,
            )
        except ContractCustomError as e:
            # Undecoded custom error: message and data both hold the selector
            return (str(e.data) if e.data else None), None
        except ContractLogicError as e:
            data = e.data if isinstance(e.data, str) else None
            return data, e.message
        except Exception as e:
            logger.debug(f"Could not replay {tx_hash} for revert reason: {e}")
        return None, None

    def get_stats(self) -> Dict:
        """Get execution statistics."""
        success_rate = (
            self.executions_successful / self.executions_attempted * 100
            if self.executions_attempted > 0
            else 0.0
        )

        return {
            "executions_attempted": self.executions_attempted,
            "executions_submitted": self.executions_submitted,
            "executions_successful": self.executions_successful,
            "executions_reverted": self.executions_reverted,
            "success_rate_pct": success_rate,
        }
