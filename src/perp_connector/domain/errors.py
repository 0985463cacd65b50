"""Exception hierarchy for connector errors.

All connector errors inherit from TradingError, allowing code to catch
broad categories of errors. Each error type includes relevant context for
debugging and logging.

Error categories:
- ExchangeError: Issues with exchange connectivity or API
- AuthenticationError: Credentials rejected or missing at startup
- OrderError: Order submission failures
- ConfigurationError: Invalid configuration
"""

from __future__ import annotations

from typing import Any


class TradingError(Exception):
    """Base exception for all connector errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional structured data for logging/debugging
        """
        super().__init__(message)
        self.context = context or {}


class ExchangeError(TradingError):
    """Error related to exchange connectivity or API.

    Raised when:
    - REST API returns an error payload or non-2xx status
    - The HTTP request itself fails (timeout, DNS, TLS)
    """

    def __init__(
        self,
        message: str,
        exchange: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and exchange name.

        Args:
            message: Human-readable error description
            exchange: Name of the exchange (e.g., "binance")
            context: Additional structured data
        """
        super().__init__(message, context)
        self.exchange = exchange


class BinanceAPIError(ExchangeError):
    """Binance REST request failed.

    Carries the diagnostic fields Binance returns so callers can log them:
    the numeric error code (e.g. -2019 margin insufficient), the HTTP status,
    the raw response body and the request URL.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        status: int | None = None,
        body: str | None = None,
        request_url: str | None = None,
    ) -> None:
        super().__init__(
            message,
            exchange="binance",
            context={
                "code": code,
                "status": status,
                "body": body,
                "request_url": request_url,
            },
        )
        self.code = code
        self.status = status
        self.body = body
        self.request_url = request_url


class AuthenticationError(ExchangeError):
    """API credentials were rejected by the exchange."""


class OrderError(TradingError):
    """Error related to order operations."""

    def __init__(
        self,
        message: str,
        symbol: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and symbol.

        Args:
            message: Human-readable error description
            symbol: Exchange symbol the order was for
            context: Additional structured data
        """
        super().__init__(message, context)
        self.symbol = symbol


class OrderSubmissionError(OrderError):
    """The exchange did not accept a new order.

    This is the only failure that crosses the order pipeline boundary:
    preparation problems resolve to an empty result, submission problems
    are raised to the caller.
    """


class ConfigurationError(TradingError):
    """Invalid configuration.

    Raised when:
    - Configuration file is malformed
    - Required configuration values are missing
    - Exchange credentials are not set
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Human-readable error description
            field: Name of the configuration field with the issue
            context: Additional structured data
        """
        super().__init__(message, context)
        self.field = field
