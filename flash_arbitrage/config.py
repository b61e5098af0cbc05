"""
Configuration loading and validation for the flash arbitrage bot.

Static settings (tokens, pools, routers, trade size) come from a YAML file;
secrets and endpoints come from the environment, optionally populated from a
.env file. The result is one immutable ArbitrageConfig that is built once at
start-up and handed to every component.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv
from web3 import Web3

from .exceptions import ConfigurationError
from .utils import get_logger, parse_units

logger = get_logger(__name__)

DEFAULT_GAS_LIMIT = 1_000_000
DEFAULT_FEE_NUMERATOR = 997
DEFAULT_FEE_DENOMINATOR = 1000


@dataclass(frozen=True)
class TokenConfig:
    """Token configuration for one side of the traded pair."""

    symbol: str
    address: str
    decimals: int


@dataclass(frozen=True)
class PoolConfig:
    """
    One liquidity pool and the router used to trade against it.

    Attributes:
        name: Label used in logs (e.g. "uniswap")
        pair_address: Pair contract queried for reserves
        router_address: Router the arbitrage contract swaps through
        base_is_token0: Reserve orientation; None means read token0() at start-up
    """

    name: str
    pair_address: str
    router_address: str
    base_is_token0: Optional[bool] = None


@dataclass(frozen=True)
class MetricsConfig:
    """Prometheus exporter settings."""

    enabled: bool = False
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass(frozen=True)
class ArbitrageConfig:
    """
    Immutable runtime configuration.

    Attributes:
        rpc_url: Node endpoint (http(s):// or ws(s)://)
        contract_address: Deployed arbitrage contract
        private_key: Signing key (not required in dry-run mode)
        base: Flash-loaned token (e.g. WETH)
        quote: Intermediate trade token (e.g. DAI)
        pool_a: First pool ("Uniswap" in the default deployment)
        pool_b: Second pool ("Sushiswap" in the default deployment)
        flash_loan_amount: Amount borrowed per trade, in base-token smallest units
        min_profit_threshold_usd: Reported at start-up; not applied to decisions
        gas_limit: Gas ceiling sent with every arbitrage call
        fee_numerator: Pool fee numerator (997 for 0.30%)
        fee_denominator: Pool fee denominator
        poll_interval_sec: Seconds between new-head polls
        receipt_timeout_sec: How long to wait for a transaction receipt
        request_timeout_sec: HTTP request timeout for RPC calls
        dry_run: Log the arbitrage call instead of signing it
        explorer_tx_url: Block explorer URL prefix for transaction links
        chain_id: Expected chain id; checked on connect when set
        metrics: Prometheus exporter settings
    """

    rpc_url: str
    contract_address: str
    base: TokenConfig
    quote: TokenConfig
    pool_a: PoolConfig
    pool_b: PoolConfig
    flash_loan_amount: int
    private_key: Optional[str] = field(default=None, repr=False)
    min_profit_threshold_usd: float = 5.0
    gas_limit: int = DEFAULT_GAS_LIMIT
    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR
    poll_interval_sec: float = 2.0
    receipt_timeout_sec: float = 120.0
    request_timeout_sec: float = 20.0
    dry_run: bool = False
    explorer_tx_url: Optional[str] = None
    chain_id: Optional[int] = None
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    def pool(self, label: str) -> PoolConfig:
        """Return pool "a" or "b"."""
        if label == "a":
            return self.pool_a
        if label == "b":
            return self.pool_b
        raise KeyError(f"Unknown pool label: {label!r}")

    def explorer_link(self, tx_hash: str) -> Optional[str]:
        if not self.explorer_tx_url:
            return None
        return f"{self.explorer_tx_url.rstrip('/')}/{tx_hash}"


def _get_required(d: Mapping[str, Any], key: str, expected_type: type, where: str = "") -> Any:
    """Get required config field with type validation."""
    label = f"{where}.{key}" if where else key
    if key not in d or d[key] is None:
        raise ConfigurationError(f"Missing required config field: {label}")
    val = d[key]
    if not isinstance(val, expected_type):
        raise ConfigurationError(
            f"Config field '{label}' must be {expected_type.__name__}, got {type(val).__name__}"
        )
    return val


def _checksum(address: Any, label: str) -> str:
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ConfigurationError(f"Invalid address for {label}: {address!r}")
    return Web3.to_checksum_address(address)


def _parse_token(raw: Any, label: str) -> TokenConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Token '{label}' config must be a dict")
    decimals = raw.get("decimals", 18)
    if not isinstance(decimals, int) or isinstance(decimals, bool) or not 0 <= decimals <= 77:
        raise ConfigurationError(f"Token '{label}' has invalid decimals: {decimals!r}")
    return TokenConfig(
        symbol=str(raw.get("symbol", label.upper())),
        address=_checksum(raw.get("address"), f"tokens.{label}.address"),
        decimals=decimals,
    )


def _parse_pool(raw: Any, label: str) -> PoolConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Pool '{label}' config must be a dict")
    base_is_token0 = raw.get("base_is_token0")
    if base_is_token0 is not None and not isinstance(base_is_token0, bool):
        raise ConfigurationError(f"pools.{label}.base_is_token0 must be a boolean")
    return PoolConfig(
        name=str(raw.get("name", f"pool_{label}")),
        pair_address=_checksum(raw.get("pair_address"), f"pools.{label}.pair_address"),
        router_address=_checksum(
            raw.get("router_address"), f"pools.{label}.router_address"
        ),
        base_is_token0=base_is_token0,
    )


def _parse_metrics(raw: Any) -> MetricsConfig:
    if raw is None:
        return MetricsConfig()
    if not isinstance(raw, dict):
        raise ConfigurationError("metrics config must be a dict")
    port = _integer(raw.get("port", 8000), "metrics.port")
    if not 0 < port < 65536:
        raise ConfigurationError(f"metrics.port out of range: {port}")
    return MetricsConfig(
        enabled=bool(raw.get("enabled", False)),
        host=str(raw.get("host", "0.0.0.0")),
        port=port,
    )


def _number(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{label} must be a number, got {value!r}") from e


def _integer(value: Any, label: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ConfigurationError(f"{label} must be an integer, got {value!r}") from e


def _positive_number(value: Any, label: str) -> float:
    number = _number(value, label)
    if number <= 0:
        raise ConfigurationError(f"{label} must be positive, got {value!r}")
    return number


def build_config(
    config_dict: Mapping[str, Any], env: Optional[Mapping[str, str]] = None
) -> ArbitrageConfig:
    """
    Validate a parsed YAML document plus environment into an ArbitrageConfig.

    Environment variables (names overridable under `env:` in the YAML):
        RPC_URL_WSS / RPC_URL: Node endpoint, used when rpc_url is absent
        PRIVATE_KEY: Signing key
        ARBITRAGE_CONTRACT_ADDRESS: Contract address, used when absent in YAML

    Raises:
        ConfigurationError: If required fields are missing or invalid
    """
    if env is None:
        env = os.environ
    if not isinstance(config_dict, Mapping):
        raise ConfigurationError("Config must be a dictionary")

    env_names = config_dict.get("env") or {}
    rpc_env = env_names.get("rpc_url", "RPC_URL_WSS")
    key_env = env_names.get("private_key", "PRIVATE_KEY")
    contract_env = env_names.get("contract_address", "ARBITRAGE_CONTRACT_ADDRESS")

    rpc_url = config_dict.get("rpc_url") or env.get(rpc_env) or env.get("RPC_URL")
    if not rpc_url:
        raise ConfigurationError(
            f"Missing RPC endpoint: set rpc_url in the config or {rpc_env} in the environment"
        )

    contract_raw = config_dict.get("contract_address") or env.get(contract_env)
    if not contract_raw:
        raise ConfigurationError(
            f"Missing contract address: set contract_address or {contract_env}"
        )
    contract_address = _checksum(contract_raw, "contract_address")

    settings = config_dict.get("settings") or {}
    if not isinstance(settings, dict):
        raise ConfigurationError("settings must be a dict")
    dry_run = bool(settings.get("dry_run", False))

    private_key = env.get(key_env) or None
    if not private_key and not dry_run:
        raise ConfigurationError(
            f"Missing signing key: set {key_env} in the environment or enable dry_run"
        )

    tokens = _get_required(config_dict, "tokens", dict)
    base = _parse_token(_get_required(tokens, "base", dict, "tokens"), "base")
    quote = _parse_token(_get_required(tokens, "quote", dict, "tokens"), "quote")
    if base.address == quote.address:
        raise ConfigurationError("Base and quote tokens must differ")

    pools = _get_required(config_dict, "pools", dict)
    pool_a = _parse_pool(_get_required(pools, "a", dict, "pools"), "a")
    pool_b = _parse_pool(_get_required(pools, "b", dict, "pools"), "b")
    if pool_a.pair_address == pool_b.pair_address:
        raise ConfigurationError("Pools a and b must be different pair contracts")

    try:
        flash_loan_amount = parse_units(
            settings.get("flash_loan_amount", "1"), base.decimals
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid settings.flash_loan_amount: {e}") from e
    if flash_loan_amount <= 0:
        raise ConfigurationError("settings.flash_loan_amount must be positive")

    fee_numerator = _integer(
        settings.get("fee_numerator", DEFAULT_FEE_NUMERATOR), "settings.fee_numerator"
    )
    fee_denominator = _integer(
        settings.get("fee_denominator", DEFAULT_FEE_DENOMINATOR), "settings.fee_denominator"
    )
    if not 0 < fee_numerator <= fee_denominator:
        raise ConfigurationError(
            f"Fee must satisfy 0 < numerator <= denominator, got {fee_numerator}/{fee_denominator}"
        )

    gas_limit = _integer(settings.get("gas_limit", DEFAULT_GAS_LIMIT), "settings.gas_limit")
    if gas_limit <= 0:
        raise ConfigurationError("settings.gas_limit must be positive")

    chain_id = config_dict.get("chain_id")
    if chain_id is not None and not isinstance(chain_id, int):
        raise ConfigurationError("chain_id must be an integer")

    return ArbitrageConfig(
        rpc_url=str(rpc_url),
        contract_address=contract_address,
        private_key=private_key,
        base=base,
        quote=quote,
        pool_a=pool_a,
        pool_b=pool_b,
        flash_loan_amount=flash_loan_amount,
        min_profit_threshold_usd=_number(
            settings.get("min_profit_threshold_usd", 5.0), "settings.min_profit_threshold_usd"
        ),
        gas_limit=gas_limit,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
        poll_interval_sec=_positive_number(
            settings.get("poll_interval_sec", 2.0), "settings.poll_interval_sec"
        ),
        receipt_timeout_sec=_positive_number(
            settings.get("receipt_timeout_sec", 120.0), "settings.receipt_timeout_sec"
        ),
        request_timeout_sec=_positive_number(
            settings.get("request_timeout_sec", 20.0), "settings.request_timeout_sec"
        ),
        dry_run=dry_run,
        explorer_tx_url=settings.get("explorer_tx_url"),
        chain_id=chain_id,
        metrics=_parse_metrics(config_dict.get("metrics")),
    )


def load_config(
    config_path: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ArbitrageConfig:
    """
    Load and validate config from a YAML file and the environment.

    Args:
        config_path: Path to config YAML file
        env_file: .env file to load first (default: .env in the working directory)
        overrides: Values merged into `settings` before validation (CLI flags)

    Returns:
        Validated ArbitrageConfig instance

    Raises:
        ConfigurationError: If config invalid or file not found
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    try:
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("Config file must contain a YAML dictionary")

    if overrides:
        settings = dict(config_dict.get("settings") or {})
        settings.update(overrides)
        config_dict["settings"] = settings

    config = build_config(config_dict)
    logger.debug(f"Loaded config from {path}: {config}")
    return config
