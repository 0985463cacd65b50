"""Configuration models for the connector.

Loads and validates configuration from YAML files using pydantic.
"""

from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from perp_connector.domain.errors import ConfigurationError
from perp_connector.domain.types import MarginType
from perp_connector.exchange.sizing import DEFAULT_LEVERAGE, MIN_COLLATERAL, default_leverage

BINANCE_FUTURES_API = "https://fapi.binance.com"
BINANCE_FUTURES_WS = "wss://fstream.binance.com/ws"


class ExchangeConfig(BaseModel):
    """Exchange connection configuration."""

    name: str = "binance"
    base_url: str = BINANCE_FUTURES_API
    ws_url: str = BINANCE_FUTURES_WS

    # Clock-skew tolerance for signed requests, in milliseconds
    recv_window: int = 20000
    request_timeout_seconds: float = 30.0

    # Credentials (loaded from environment or specified directly)
    api_key_env: str = "BINANCE_API_KEY"
    api_secret_env: str = "BINANCE_API_SECRET"

    # Direct credential values (override env vars if set)
    api_key: str | None = None
    api_secret: str | None = None


class PipelineConfig(BaseModel):
    """Order preparation settings."""

    min_collateral: Decimal = MIN_COLLATERAL
    margin_type: MarginType = MarginType.ISOLATED
    unsupported_reset_hours: float = 24.0
    # Treat any exchange failure during preparation as "market unsupported"
    blacklist_on_fetch_error: bool = True


class StreamConfig(BaseModel):
    """Market data stream settings."""

    reconnect_delay_seconds: float = 1.0
    max_reconnect_attempts: int = 5
    ping_interval_seconds: float = 30.0
    connect_timeout_seconds: float = 5.0
    channels: list[str] = Field(default_factory=list)


class ConnectorConfig(BaseModel):
    """Root configuration for the connector."""

    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    leverages: dict[str, int] = Field(
        default_factory=lambda: {"binance": DEFAULT_LEVERAGE}
    )
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)

    # Extra market -> symbol mappings, merged over the built-in table
    markets: dict[str, str] = Field(default_factory=dict)

    audit_log_path: str = "logs/binance-orders.json"

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @property
    def leverage(self) -> int:
        """Return the leverage configured for this exchange."""
        return default_leverage(self.exchange.name, self.leverages)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConnectorConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Validated ConnectorConfig

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValidationError: If the config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.model_validate(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectorConfig:
        """Load configuration from a dictionary."""
        return cls.model_validate(data)


class Credentials(BaseModel):
    """Binance API key pair."""

    api_key: str
    api_secret: str

    def __repr__(self) -> str:
        return f"Credentials(api_key={self.api_key[:4]}..., api_secret=***)"


def load_credentials(
    config: ExchangeConfig, environ: dict[str, str] | None = None
) -> Credentials:
    """Resolve API credentials from config or environment.

    Args:
        config: Exchange configuration
        environ: Environment mapping, defaults to os.environ

    Returns:
        Credentials

    Raises:
        ConfigurationError: If either value is missing
    """
    env = os.environ if environ is None else environ
    api_key = config.api_key or env.get(config.api_key_env, "")
    api_secret = config.api_secret or env.get(config.api_secret_env, "")

    if not api_key or not api_secret:
        raise ConfigurationError(
            f"Binance API credentials are not set. "
            f"Please set {config.api_key_env} and {config.api_secret_env}. "
            f"Current values: {config.api_key_env}: "
            f"{'Set' if api_key else 'Not set'}, {config.api_secret_env}: "
            f"{'Set' if api_secret else 'Not set'}",
            field=config.api_key_env if not api_key else config.api_secret_env,
        )

    return Credentials(api_key=api_key, api_secret=api_secret)


def load_config(path: str | Path | None = None) -> ConnectorConfig:
    """Load connector configuration.

    Looks for config in the following order:
    1. Provided path argument
    2. ./config/connector.yaml
    3. ./connector.yaml
    4. Default configuration

    Args:
        path: Optional explicit path to config file

    Returns:
        Validated ConnectorConfig
    """
    if path:
        return ConnectorConfig.from_yaml(path)

    default_paths = [
        Path("./config/connector.yaml"),
        Path("./connector.yaml"),
    ]

    for default_path in default_paths:
        if default_path.exists():
            return ConnectorConfig.from_yaml(default_path)

    return ConnectorConfig()
