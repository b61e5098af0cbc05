"""
Logging configuration for the bot's console output.

Usage:
    from flash_arbitrage import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure root logging for readable per-block output.

    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Quiets web3/urllib3 request chatter
    """

    root = logging.getLogger()
    root.setLevel(level)

    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    # Application loggers follow the requested level and log through the
    # root handler only
    for name in ["flash_arbitrage"] + [
        n for n in list(logging.root.manager.loggerDict) if n.startswith("flash_arbitrage.")
    ]:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(level)
        app_logger.handlers.clear()
        app_logger.propagate = True


def setup_minimal():
    """
    Only warnings and errors.
    Good for production or when you only care about problems.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging, including web3 request traces.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
