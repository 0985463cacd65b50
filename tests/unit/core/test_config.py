"""Tests for configuration loading."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from perp_connector.core.config import (
    ConnectorConfig,
    ExchangeConfig,
    load_config,
    load_credentials,
)
from perp_connector.domain.errors import ConfigurationError
from perp_connector.domain.types import MarginType


class TestConnectorConfig:
    """Tests for ConnectorConfig."""

    def test_defaults(self) -> None:
        config = ConnectorConfig()

        assert config.exchange.base_url == "https://fapi.binance.com"
        assert config.exchange.recv_window == 20000
        assert config.leverage == 20
        assert config.pipeline.min_collateral == Decimal("50")
        assert config.pipeline.margin_type == MarginType.ISOLATED
        assert config.stream.reconnect_delay_seconds == 1.0
        assert config.stream.max_reconnect_attempts == 5
        assert config.audit_log_path == "logs/binance-orders.json"

    def test_leverage_per_exchange(self) -> None:
        config = ConnectorConfig.from_dict({"leverages": {"binance": 10}})
        assert config.leverage == 10

    def test_leverage_falls_back(self) -> None:
        config = ConnectorConfig.from_dict({"leverages": {"other": 5}})
        assert config.leverage == 20

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "connector.yaml"
        path.write_text(
            "exchange:\n"
            "  base_url: https://testnet.binancefuture.com\n"
            "pipeline:\n"
            "  min_collateral: '25'\n"
            "  margin_type: CROSSED\n"
            "stream:\n"
            "  channels:\n"
            "    - btcusdt@markPrice\n"
            "markets:\n"
            "  WIF-USD: WIFUSDT\n"
        )

        config = ConnectorConfig.from_yaml(path)

        assert config.exchange.base_url == "https://testnet.binancefuture.com"
        assert config.pipeline.min_collateral == Decimal("25")
        assert config.pipeline.margin_type == MarginType.CROSSED
        assert config.stream.channels == ["btcusdt@markPrice"]
        assert config.markets == {"WIF-USD": "WIFUSDT"}

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "connector.yaml"
        path.write_text("")
        assert ConnectorConfig.from_yaml(path).leverage == 20

    def test_missing_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConnectorConfig.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_value(self) -> None:
        with pytest.raises(ValidationError):
            ConnectorConfig.from_dict({"stream": {"max_reconnect_attempts": "many"}})

    def test_load_config_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == ConnectorConfig()

    def test_load_config_search_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "connector.yaml").write_text("log_level: DEBUG\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().log_level == "DEBUG"


class TestLoadCredentials:
    """Tests for credential resolution."""

    def test_from_environment(self) -> None:
        credentials = load_credentials(
            ExchangeConfig(),
            environ={"BINANCE_API_KEY": "key", "BINANCE_API_SECRET": "secret"},
        )
        assert credentials.api_key == "key"
        assert credentials.api_secret == "secret"

    def test_config_overrides_environment(self) -> None:
        config = ExchangeConfig(api_key="cfg-key", api_secret="cfg-secret")
        credentials = load_credentials(config, environ={"BINANCE_API_KEY": "env-key"})
        assert credentials.api_key == "cfg-key"

    def test_missing_secret(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_credentials(ExchangeConfig(), environ={"BINANCE_API_KEY": "key"})

        message = str(exc_info.value)
        assert "BINANCE_API_KEY: Set" in message
        assert "BINANCE_API_SECRET: Not set" in message
        assert exc_info.value.field == "BINANCE_API_SECRET"

    def test_repr_hides_secret(self) -> None:
        credentials = load_credentials(
            ExchangeConfig(),
            environ={"BINANCE_API_KEY": "abcdefgh", "BINANCE_API_SECRET": "topsecret"},
        )
        assert "topsecret" not in repr(credentials)
