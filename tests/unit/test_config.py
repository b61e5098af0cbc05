"""
Unit tests for flash_arbitrage/config.py
"""

import dataclasses

import pytest
import yaml
from web3 import Web3

from flash_arbitrage.config import (
    DEFAULT_GAS_LIMIT,
    ArbitrageConfig,
    build_config,
    load_config,
)
from flash_arbitrage.exceptions import ConfigurationError


class TestBuildConfig:
    """Validation of a parsed config document plus environment."""

    def test_valid_config(self, config):
        assert isinstance(config, ArbitrageConfig)
        assert config.base.symbol == "WETH"
        assert config.quote.symbol == "DAI"
        assert config.pool_a.name == "uniswap"
        assert config.pool_b.name == "sushiswap"
        assert config.flash_loan_amount == 10**18
        assert config.gas_limit == DEFAULT_GAS_LIMIT
        assert (config.fee_numerator, config.fee_denominator) == (997, 1000)
        assert config.rpc_url == "http://127.0.0.1:8545"
        assert config.dry_run is False

    def test_config_is_immutable(self, config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.gas_limit = 1

    def test_private_key_not_in_repr(self, config):
        assert config.private_key not in repr(config)

    def test_pool_lookup(self, config):
        assert config.pool("a") is config.pool_a
        assert config.pool("b") is config.pool_b
        with pytest.raises(KeyError):
            config.pool("c")

    def test_explorer_link(self, config_dict, env):
        config_dict["settings"]["explorer_tx_url"] = "https://sepolia.etherscan.io/tx/"
        config = build_config(config_dict, env)
        assert config.explorer_link("0xabc") == "https://sepolia.etherscan.io/tx/0xabc"

    def test_no_explorer_link_without_url(self, config):
        assert config.explorer_link("0xabc") is None

    def test_fractional_flash_loan(self, config_dict, env):
        config_dict["settings"]["flash_loan_amount"] = "0.5"
        assert build_config(config_dict, env).flash_loan_amount == 5 * 10**17

    def test_flash_loan_respects_decimals(self, config_dict, env):
        config_dict["tokens"]["base"]["decimals"] = 6
        config_dict["settings"]["flash_loan_amount"] = "2.5"
        assert build_config(config_dict, env).flash_loan_amount == 2_500_000

    def test_rpc_url_fallback(self, config_dict):
        env = {"RPC_URL": "http://node:8545", "PRIVATE_KEY": "0x01"}
        assert build_config(config_dict, env).rpc_url == "http://node:8545"

    def test_rpc_url_in_config_wins(self, config_dict, env):
        config_dict["rpc_url"] = "wss://example.invalid/ws"
        assert build_config(config_dict, env).rpc_url == "wss://example.invalid/ws"

    def test_env_names_overridable(self, config_dict):
        config_dict["env"] = {"rpc_url": "MY_NODE", "private_key": "MY_KEY"}
        config = build_config(config_dict, {"MY_NODE": "http://x", "MY_KEY": "0x02"})
        assert config.rpc_url == "http://x"
        assert config.private_key == "0x02"

    def test_contract_from_env(self, config_dict, env):
        del config_dict["contract_address"]
        env["ARBITRAGE_CONTRACT_ADDRESS"] = "0x" + "8" * 40
        assert build_config(config_dict, env).contract_address == "0x" + "8" * 40

    def test_addresses_are_checksummed(self, config_dict, env):
        config_dict["tokens"]["base"]["address"] = "0x7b79995e5f793a07bc00c21412e50ecae098e7f9"
        config = build_config(config_dict, env)
        assert config.base.address == Web3.to_checksum_address(
            "0x7b79995e5f793a07bc00c21412e50ecae098e7f9"
        )
        assert config.base.address != "0x7b79995e5f793a07bc00c21412e50ecae098e7f9"

    def test_dry_run_does_not_need_key(self, config_dict):
        config_dict["settings"]["dry_run"] = True
        config = build_config(config_dict, {"RPC_URL_WSS": "http://x"})
        assert config.dry_run is True
        assert config.private_key is None

    def test_metrics_section(self, config_dict, env):
        config_dict["metrics"] = {"enabled": True, "port": 9100}
        config = build_config(config_dict, env)
        assert config.metrics.enabled is True
        assert config.metrics.port == 9100


class TestBuildConfigErrors:
    def test_missing_private_key(self, config_dict):
        with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
            build_config(config_dict, {"RPC_URL_WSS": "http://x"})

    def test_missing_rpc(self, config_dict):
        with pytest.raises(ConfigurationError, match="RPC"):
            build_config(config_dict, {"PRIVATE_KEY": "0x01"})

    def test_missing_contract(self, config_dict, env):
        del config_dict["contract_address"]
        with pytest.raises(ConfigurationError, match="contract"):
            build_config(config_dict, env)

    def test_missing_pool(self, config_dict, env):
        del config_dict["pools"]["b"]
        with pytest.raises(ConfigurationError, match="pools.b"):
            build_config(config_dict, env)

    def test_invalid_address(self, config_dict, env):
        config_dict["pools"]["a"]["router_address"] = "0xnot-an-address"
        with pytest.raises(ConfigurationError, match="router_address"):
            build_config(config_dict, env)

    def test_same_tokens(self, config_dict, env):
        config_dict["tokens"]["quote"]["address"] = config_dict["tokens"]["base"]["address"]
        with pytest.raises(ConfigurationError, match="differ"):
            build_config(config_dict, env)

    def test_same_pools(self, config_dict, env):
        config_dict["pools"]["b"]["pair_address"] = config_dict["pools"]["a"]["pair_address"]
        with pytest.raises(ConfigurationError):
            build_config(config_dict, env)

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "1.0000000000000000001"])
    def test_bad_flash_loan_amount(self, config_dict, env, amount):
        config_dict["settings"]["flash_loan_amount"] = amount
        with pytest.raises(ConfigurationError, match="flash_loan_amount"):
            build_config(config_dict, env)

    def test_bad_fee(self, config_dict, env):
        config_dict["settings"]["fee_numerator"] = 1001
        with pytest.raises(ConfigurationError, match="Fee"):
            build_config(config_dict, env)

    def test_bad_gas_limit(self, config_dict, env):
        config_dict["settings"]["gas_limit"] = 0
        with pytest.raises(ConfigurationError, match="gas_limit"):
            build_config(config_dict, env)

    @pytest.mark.parametrize(
        "key,value",
        [
            ("fee_numerator", "abc"),
            ("fee_denominator", "1e3x"),
            ("gas_limit", "lots"),
            ("gas_limit", 1.5),
            ("min_profit_threshold_usd", "five"),
            ("receipt_timeout_sec", None),
        ],
    )
    def test_non_numeric_settings(self, config_dict, env, key, value):
        config_dict["settings"][key] = value
        with pytest.raises(ConfigurationError, match=key):
            build_config(config_dict, env)

    def test_numeric_strings_accepted(self, config_dict, env):
        config_dict["settings"]["gas_limit"] = "450000"
        config_dict["settings"]["min_profit_threshold_usd"] = "2.5"
        config = build_config(config_dict, env)
        assert config.gas_limit == 450_000
        assert config.min_profit_threshold_usd == 2.5

    @pytest.mark.parametrize("port", ["http", 0, 70000])
    def test_bad_metrics_port(self, config_dict, env, port):
        config_dict["metrics"] = {"enabled": True, "port": port}
        with pytest.raises(ConfigurationError, match="metrics.port"):
            build_config(config_dict, env)

    def test_bad_poll_interval(self, config_dict, env):
        config_dict["settings"]["poll_interval_sec"] = -1
        with pytest.raises(ConfigurationError, match="poll_interval_sec"):
            build_config(config_dict, env)

    def test_bad_orientation_flag(self, config_dict, env):
        config_dict["pools"]["a"]["base_is_token0"] = "yes"
        with pytest.raises(ConfigurationError, match="base_is_token0"):
            build_config(config_dict, env)

    def test_bad_chain_id(self, config_dict, env):
        config_dict["chain_id"] = "sepolia"
        with pytest.raises(ConfigurationError, match="chain_id"):
            build_config(config_dict, env)


class TestLoadConfig:
    @pytest.fixture
    def config_file(self, tmp_path, config_dict, monkeypatch):
        monkeypatch.setenv("RPC_URL_WSS", "http://127.0.0.1:8545")
        monkeypatch.setenv("PRIVATE_KEY", "0x01")
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(config_dict))
        return path

    def test_load_from_yaml(self, config_file, tmp_path):
        config = load_config(config_file, env_file=tmp_path / "missing.env")
        assert config.pool_a.name == "uniswap"
        assert config.private_key == "0x01"

    def test_overrides_merge_into_settings(self, config_file, tmp_path):
        config = load_config(
            config_file, env_file=tmp_path / "missing.env", overrides={"dry_run": True}
        )
        assert config.dry_run is True
        assert config.flash_loan_amount == 10**18

    def test_env_file_is_loaded(self, config_file, tmp_path, monkeypatch):
        monkeypatch.delenv("PRIVATE_KEY")
        env_file = tmp_path / ".env"
        env_file.write_text("PRIVATE_KEY=0x03\n")
        try:
            config = load_config(config_file, env_file=env_file)
        finally:
            monkeypatch.delenv("PRIVATE_KEY", raising=False)
        assert config.private_key == "0x03"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tokens: [unclosed\n")
        with pytest.raises(ConfigurationError, match="YAML"):
            load_config(path, env_file=tmp_path / "missing.env")

    def test_non_dict_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="dictionary"):
            load_config(path, env_file=tmp_path / "missing.env")
