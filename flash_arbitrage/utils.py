"""
Common helpers for the flash arbitrage bot.

Logging setup shared by every module, and conversion between smallest token
units and human-readable token amounts.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Union


# Logging utilities
def get_logger(name: str, level: Union[str, int] = logging.INFO) -> logging.Logger:
    """
    Get a structured logger with consistent formatting.

    The module handler gives readable output when nothing else configured
    logging; logging_config.setup() removes it so records reach the single
    root handler instead.

    Args:
        name: Logger name (typically __name__)
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


# Token unit utilities
def parse_units(value: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human-readable token amount into smallest units.

    "1.5" with 18 decimals -> 1500000000000000000. Fractions finer than the
    token's precision are rejected rather than silently truncated.

    Raises:
        ValueError: If the value is not a non-negative number representable
            in the given precision
    """
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0: {decimals}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid token amount: {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Token amount must be a non-negative number: {value!r}")

    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value!r} has more than {decimals} decimal places")
    return int(scaled)


def format_units(amount: int, decimals: int) -> str:
    """
    Format an integer amount of smallest units as a decimal string.

    Negative values keep their sign, so signed profits format correctly.
    Trailing zeros are dropped but at least one fractional digit is kept,
    e.g. 10**18 with 18 decimals -> "1.0".
    """
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(int(amount)), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_str}"
