"""Entry point for the connector.

Usage:
    python -m perp_connector --config config/connector.yaml
    python -m perp_connector --stream btcusdt@markPrice --stream ethusdt@markPrice
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from perp_connector.core.config import (
    ConnectorConfig,
    Credentials,
    load_config,
    load_credentials,
)
from perp_connector.core.controller import ConnectorController
from perp_connector.domain.errors import AuthenticationError, ConfigurationError


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Binance futures connector",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--stream",
        "-s",
        type=str,
        action="append",
        help="Stream channel to subscribe (can specify multiple)",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and credentials without connecting",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ConnectorConfig:
    """Build configuration from file and command line args.

    Args:
        args: Parsed command line arguments

    Returns:
        Merged configuration
    """
    config = load_config(args.config)

    if args.stream:
        config.stream.channels = list(args.stream)

    if args.log_level:
        config.log_level = args.log_level

    if args.log_file:
        config.log_file = args.log_file

    return config


async def main_async(config: ConnectorConfig, credentials: Credentials) -> int:
    """Async main entry point.

    Args:
        config: Connector configuration
        credentials: Binance API key pair

    Returns:
        Exit code
    """
    controller = ConnectorController(config, credentials)

    try:
        await controller.start()
        return 0
    except AuthenticationError as e:
        logging.error(f"Fatal error during API key validation: {e}")
        return 1
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_file)
    logger = logging.getLogger(__name__)

    try:
        credentials = load_credentials(config.exchange)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    logger.info("Connector starting")
    logger.info(f"Exchange: {config.exchange.name} ({config.exchange.base_url})")
    logger.info(f"Leverage: {config.leverage}x")
    logger.info(f"Streams: {config.stream.channels}")

    if args.dry_run:
        logger.info("Dry run - configuration valid")
        return 0

    return asyncio.run(main_async(config, credentials))


if __name__ == "__main__":
    sys.exit(main())
