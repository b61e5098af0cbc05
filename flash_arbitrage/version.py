"""Version information for the flash arbitrage bot."""

__version__ = "0.1.0"
