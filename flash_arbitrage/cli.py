"""
Command line entry point for the flash arbitrage bot.

MODES:
  1. Live (default): submit executeArbitrage transactions
  2. Dry run: evaluate every block and log the call that would be made

Usage:
  # Dry run against the configured pools
  flash-arb --config configs/sepolia.yaml --dry-run

  # Live execution (requires PRIVATE_KEY)
  export PRIVATE_KEY="0x..."
  flash-arb --config configs/sepolia.yaml --live

  # Recover tokens left in the contract (owner only)
  flash-arb --config configs/sepolia.yaml --withdraw 0x7b79995e5f793A07Bc00c21412e50Ecae098E7f9

Environment Variables:
  RPC_URL_WSS: Node endpoint (used when rpc_url is absent from the config)
  PRIVATE_KEY: Signing key (required unless --dry-run)
  ARBITRAGE_CONTRACT_ADDRESS: Deployed contract (used when absent from the config)
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import logging_config
from .config import load_config
from .exceptions import ConfigurationError
from .executor import TradeExecutor
from .metrics import ArbitrageMetrics
from .runner import ArbitrageRunner
from .utils import get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Two-pool flash-loan arbitrage bot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to config YAML file",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to .env file (default: ./.env)",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate blocks and log trades without sending transactions",
    )
    mode_group.add_argument(
        "--live",
        action="store_true",
        help="Send transactions even if the config enables dry_run",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Process the current block and exit",
    )
    parser.add_argument(
        "--withdraw",
        metavar="TOKEN",
        help="Call withdraw(TOKEN) on the contract and exit",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument(
        "--quiet", "-q", action="store_true", help="Only warnings and errors"
    )

    return parser.parse_args(argv)


def settings_overrides(args: argparse.Namespace) -> dict:
    """Map mode flags onto config settings."""
    if args.dry_run:
        return {"dry_run": True}
    if args.live:
        return {"dry_run": False}
    return {}


async def run(args: argparse.Namespace) -> int:
    config = load_config(
        args.config, env_file=args.env_file, overrides=settings_overrides(args)
    )

    mode_name = "DRY RUN" if config.dry_run else "LIVE"
    logger.info(f"Execution Mode: {mode_name}")
    if not config.dry_run and config.private_key:
        key_preview = f"{config.private_key[:6]}...{config.private_key[-4:]}"
        logger.info(f"Private Key: {key_preview}")

    runner = ArbitrageRunner(config, metrics=ArbitrageMetrics())

    if args.withdraw:
        runner.connect()
        executor: TradeExecutor = runner.executor
        outcome = await executor.withdraw(args.withdraw)
        logger.info(f"WITHDRAW_RESULT: {outcome.to_dict()}")
        return 0 if outcome.success else 1

    await runner.run_async(once=args.once)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging_config.setup_debug()
    elif args.quiet:
        logging_config.setup_minimal()
    else:
        logging_config.setup()

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
        return 0
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
