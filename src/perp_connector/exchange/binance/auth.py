"""Binance request signing.

Signed (USER_DATA / TRADE) endpoints require:
1. A millisecond `timestamp` and a `recvWindow` tolerance
2. An HMAC-SHA256 signature of the url-encoded query, keyed by the API secret
3. The API key in the X-MBX-APIKEY header
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any
from urllib.parse import urlencode

from perp_connector.core.config import Credentials


class BinanceAuth:
    """Signs Binance REST requests with an HMAC API key pair."""

    def __init__(self, credentials: Credentials, recv_window: int = 20000) -> None:
        """Initialize with credentials.

        Args:
            credentials: Binance API key pair
            recv_window: Allowed clock skew between us and the exchange, in ms
        """
        self._credentials = credentials
        self._recv_window = recv_window

    def get_auth_headers(self) -> dict[str, str]:
        """Return headers identifying the API key."""
        return {"X-MBX-APIKEY": self._credentials.api_key}

    def signature(self, query: str) -> str:
        """Return the hex HMAC-SHA256 of a query string."""
        return hmac.new(
            self._credentials.api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def sign_params(
        self, params: dict[str, Any] | None = None, timestamp: int | None = None
    ) -> list[tuple[str, str]]:
        """Return request parameters with timestamp and signature appended.

        The signature covers the parameters in the order they are sent,
        so the result is an ordered list rather than a dict.

        Args:
            params: Request parameters
            timestamp: Millisecond timestamp, defaults to now

        Returns:
            Ordered (name, value) pairs ready for the query string
        """
        pairs = [
            (key, _format_value(value))
            for key, value in (params or {}).items()
            if value is not None
        ]
        pairs.append(("timestamp", str(timestamp or int(time.time() * 1000))))
        pairs.append(("recvWindow", str(self._recv_window)))
        pairs.append(("signature", self.signature(urlencode(pairs))))
        return pairs


def _format_value(value: Any) -> str:
    """Format a parameter the way Binance expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
