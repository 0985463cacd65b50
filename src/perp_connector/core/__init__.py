"""Configuration and process lifecycle."""

from perp_connector.core.config import (
    ConnectorConfig,
    Credentials,
    load_config,
    load_credentials,
)

__all__ = [
    "ConnectorConfig",
    "Credentials",
    "load_config",
    "load_credentials",
]
