"""Shared fixtures: a valid two-pool configuration with digit-only addresses."""

import pytest

from flash_arbitrage.config import build_config

BASE_TOKEN = "0x" + "1" * 40
QUOTE_TOKEN = "0x" + "2" * 40
PAIR_A = "0x" + "3" * 40
PAIR_B = "0x" + "4" * 40
ROUTER_A = "0x" + "5" * 40
ROUTER_B = "0x" + "6" * 40
CONTRACT = "0x" + "7" * 40
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

ONE = 10**18


@pytest.fixture
def config_dict():
    """Parsed YAML document equivalent of configs/sepolia.yaml."""
    return {
        "contract_address": CONTRACT,
        "tokens": {
            "base": {"symbol": "WETH", "address": BASE_TOKEN, "decimals": 18},
            "quote": {"symbol": "DAI", "address": QUOTE_TOKEN, "decimals": 18},
        },
        "pools": {
            "a": {
                "name": "uniswap",
                "pair_address": PAIR_A,
                "router_address": ROUTER_A,
                "base_is_token0": True,
            },
            "b": {
                "name": "sushiswap",
                "pair_address": PAIR_B,
                "router_address": ROUTER_B,
                "base_is_token0": True,
            },
        },
        "settings": {
            "flash_loan_amount": "1",
            "min_profit_threshold_usd": 5,
            "receipt_timeout_sec": 5,
        },
    }


@pytest.fixture
def env():
    return {"RPC_URL_WSS": "http://127.0.0.1:8545", "PRIVATE_KEY": TEST_PRIVATE_KEY}


@pytest.fixture
def config(config_dict, env):
    return build_config(config_dict, env)


@pytest.fixture
def dry_run_config(config_dict, env):
    config_dict["settings"]["dry_run"] = True
    return build_config(config_dict, env)
