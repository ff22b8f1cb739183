"""
Network and runtime configuration for neo-access.

``Network`` / ``NETWORKS`` describe the two ledger variants. ``Settings`` is
read from environment variables (optionally a ``.env`` file) by
``load_settings``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from neo_access.constants import (
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_MAX_REQUESTS_PER_MINUTE,
    RPC_TIMEOUT_SECONDS,
)
from neo_access.errors import ValidationError

__all__ = [
    "Network",
    "NetworkMode",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    "parse_network_mode",
    "Settings",
    "load_settings",
]


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


class NetworkMode(str, Enum):
    MAINNET_ONLY = "mainnet_only"
    TESTNET_ONLY = "testnet_only"
    BOTH = "both"

    @property
    def enabled_networks(self) -> Tuple[Network, ...]:
        if self is NetworkMode.MAINNET_ONLY:
            return (Network.MAINNET,)
        if self is NetworkMode.TESTNET_ONLY:
            return (Network.TESTNET,)
        return (Network.MAINNET, Network.TESTNET)

    @property
    def default_network(self) -> Network:
        return Network.TESTNET if self is NetworkMode.TESTNET_ONLY else Network.MAINNET


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    magic: int
    rpc_url: str


NETWORKS: Dict[Network, NetworkConfig] = {
    Network.MAINNET: NetworkConfig(
        name=Network.MAINNET,
        magic=860833102,
        rpc_url="https://mainnet1.neo.coz.io:443",
    ),
    Network.TESTNET: NetworkConfig(
        name=Network.TESTNET,
        magic=894710606,  # T5
        rpc_url="https://testnet1.neo.coz.io:443",
    ),
}


def get_network_config(network: Network, rpc_url: Optional[str] = None) -> NetworkConfig:
    cfg = NETWORKS[Network(network)]
    if rpc_url:
        return replace(cfg, rpc_url=rpc_url)
    return cfg


def parse_network_mode(value: Optional[str]) -> NetworkMode:
    """Parse NEO_NETWORK_MODE; unknown values fall back to ``both``."""
    if not value:
        return NetworkMode.BOTH

    normalized = value.strip().lower()
    if normalized in ("mainnet", "mainnet_only"):
        return NetworkMode.MAINNET_ONLY
    if normalized in ("testnet", "testnet_only"):
        return NetworkMode.TESTNET_ONLY
    return NetworkMode.BOTH


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Runtime settings. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    mainnet_rpc_url: str = Field(
        default=NETWORKS[Network.MAINNET].rpc_url,
        description="Mainnet JSON-RPC endpoint",
    )
    testnet_rpc_url: str = Field(
        default=NETWORKS[Network.TESTNET].rpc_url,
        description="Testnet JSON-RPC endpoint",
    )
    network_mode: NetworkMode = Field(
        default=NetworkMode.BOTH,
        description="Which networks are enabled",
    )
    rate_limiting_enabled: bool = Field(default=True)
    max_requests_per_minute: int = Field(default=DEFAULT_MAX_REQUESTS_PER_MINUTE, ge=1)
    cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, gt=0)
    rpc_max_attempts: int = Field(default=3, ge=1, le=10)
    rpc_timeout_seconds: float = Field(default=RPC_TIMEOUT_SECONDS, gt=0)
    log_level: LogLevel = Field(default="INFO")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    def rpc_url_for(self, network: Network) -> str:
        if Network(network) is Network.TESTNET:
            return self.testnet_rpc_url
        return self.mainnet_rpc_url


_ENV_FIELDS = {
    "NEO_MAINNET_RPC_URL": "mainnet_rpc_url",
    "NEO_TESTNET_RPC_URL": "testnet_rpc_url",
    "RATE_LIMITING_ENABLED": "rate_limiting_enabled",
    "MAX_REQUESTS_PER_MINUTE": "max_requests_per_minute",
    "CACHE_TTL_MS": "cache_ttl_ms",
    "RPC_MAX_ATTEMPTS": "rpc_max_attempts",
    "RPC_TIMEOUT_SECONDS": "rpc_timeout_seconds",
    "LOG_LEVEL": "log_level",
}


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[str] = None,
) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Variables to read (default: ``os.environ``)
        env_file: Optional ``.env`` file; real environment values win

    Raises:
        ValidationError: If a variable has an unusable value
    """
    source: Dict[str, str] = {}
    if env_file:
        source.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    source.update(os.environ if env is None else env)

    values: Dict[str, object] = {}
    for var, field_name in _ENV_FIELDS.items():
        raw = source.get(var)
        if raw is None or raw == "":
            continue
        if field_name == "rate_limiting_enabled":
            values[field_name] = raw.strip().lower() != "false"
        else:
            values[field_name] = raw.strip()
    values["network_mode"] = parse_network_mode(source.get("NEO_NETWORK_MODE"))

    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid configuration",
            code="INVALID_CONFIG",
            details={"errors": e.errors(include_url=False)},
        ) from e
