"""
Uniswap V2 style adapter for constant-product AMM pools.

Implements reserve reads and swap simulation using the x*y=k formula with
the fee taken from the input, in exact integer arithmetic matching the
on-chain getAmountOut.
"""

import asyncio
from typing import Any, Tuple, Union

from web3 import Web3
from web3.exceptions import Web3Exception

from ..abi import UNISWAP_V2_PAIR_ABI
from ..exceptions import InvalidReserves

BlockIdentifier = Union[int, str]

RATE_LIMIT_MARKERS = ("429", "too many requests", "-32005", "limit exceeded")


def swap_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> int:
    """
    Calculate output amount for a V2 swap using constant-product formula.

    Formula (fee embedded, integer floor division as on-chain):
        amountInWithFee = amountIn * feeNumerator
        amountOut = (amountInWithFee * reserveOut)
                    // (reserveIn * feeDenominator + amountInWithFee)

    Args:
        amount_in: Input token amount (smallest units)
        reserve_in: Reserve of input token
        reserve_out: Reserve of output token
        fee_numerator: Share of the input kept after the fee (997 for 0.30%)
        fee_denominator: Fee scale (1000)

    Returns:
        Output token amount (smallest units), rounded down

    Raises:
        InvalidReserves: If either reserve is zero
        ValueError: If an amount is negative or the fee is malformed
    """
    if amount_in < 0:
        raise ValueError(f"amount_in must be non-negative: {amount_in}")
    if reserve_in < 0 or reserve_out < 0:
        raise ValueError(
            f"Reserves must be non-negative: in={reserve_in}, out={reserve_out}"
        )
    if not 0 < fee_numerator <= fee_denominator:
        raise ValueError(
            f"Fee must satisfy 0 < numerator <= denominator: {fee_numerator}/{fee_denominator}"
        )
    if reserve_in == 0 or reserve_out == 0:
        raise InvalidReserves(
            f"Cannot swap against empty pool: in={reserve_in}, out={reserve_out}",
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
    if amount_in == 0:
        return 0

    amount_in_with_fee = amount_in * fee_numerator
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * fee_denominator + amount_in_with_fee

    return numerator // denominator


def pair_contract(web3: Web3, pair_addr: str) -> Any:
    """Bind the V2 pair ABI to an address."""
    if not Web3.is_checksum_address(pair_addr):
        raise ValueError(f"Invalid pair address: {pair_addr}")
    return web3.eth.contract(address=pair_addr, abi=UNISWAP_V2_PAIR_ABI)


def _is_rate_limit(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def _parse_reserves(raw: Any, pair_addr: str) -> Tuple[int, int]:
    """Validate a getReserves() result and return (reserve0, reserve1)."""
    try:
        reserve0, reserve1 = int(raw[0]), int(raw[1])
    except (TypeError, ValueError, IndexError) as e:
        raise Web3Exception(
            f"Malformed getReserves() response from {pair_addr}: {raw!r}"
        ) from e
    if reserve0 < 0 or reserve1 < 0:
        raise Web3Exception(
            f"Negative reserves from {pair_addr}: {reserve0}, {reserve1}"
        )
    return reserve0, reserve1


def fetch_reserves(
    pair: Any, block_identifier: BlockIdentifier = "latest"
) -> Tuple[int, int]:
    """
    Read (reserve0, reserve1) from a bound pair contract at one block.

    Raises:
        Web3Exception: If the call fails or the response is malformed
    """
    pair_addr = getattr(pair, "address", "?")
    try:
        raw = pair.functions.getReserves().call(block_identifier=block_identifier)
    except Web3Exception:
        raise
    except Exception as e:
        raise Web3Exception(f"getReserves() failed on {pair_addr}: {e}") from e
    return _parse_reserves(raw, pair_addr)


async def fetch_reserves_async(
    pair: Any,
    block_identifier: BlockIdentifier = "latest",
    max_retries: int = 3,
    backoff_sec: float = 0.5,
) -> Tuple[int, int]:
    """
    Async version of fetch_reserves.

    Runs the synchronous RPC call in the default thread pool so two pools can
    be read at once. Only rate-limit errors are retried, with exponential
    backoff; any other failure is raised immediately.

    Raises:
        Web3Exception: If the read fails
    """
    loop = asyncio.get_running_loop()
    last_error: Exception = Web3Exception("no attempts made")

    for attempt in range(max_retries):
        try:
            return await loop.run_in_executor(
                None, fetch_reserves, pair, block_identifier
            )
        except Web3Exception as e:
            last_error = e
            if _is_rate_limit(e) and attempt < max_retries - 1:
                await asyncio.sleep(backoff_sec * (2**attempt))
                continue
            raise

    raise last_error


def fetch_token0(pair: Any) -> str:
    """Read the checksummed token0 address of a pair."""
    return Web3.to_checksum_address(pair.functions.token0().call())
