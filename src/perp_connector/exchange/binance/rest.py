"""Binance USD-M futures REST API client.

Handles exchange metadata, mark prices, symbol configuration, order
submission and account queries.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx

from perp_connector.core.config import BINANCE_FUTURES_API
from perp_connector.domain.errors import BinanceAPIError
from perp_connector.domain.types import MarginType, OrderSide
from perp_connector.exchange.binance.auth import BinanceAuth

logger = logging.getLogger(__name__)


class BinanceFuturesRestClient:
    """REST client for the Binance USD-M futures API.

    Handles:
    - Exchange info and mark price queries (public)
    - Leverage and margin type configuration (signed)
    - Order submission (signed)
    - Account and position queries (signed)

    All methods are async. Every request carries a bounded timeout.
    """

    def __init__(
        self,
        auth: BinanceAuth,
        base_url: str = BINANCE_FUTURES_API,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the REST client.

        Args:
            auth: Request signer
            base_url: API root URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._auth = auth
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Start the REST client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )

    async def stop(self) -> None:
        """Stop the REST client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        signed: bool = False,
    ) -> Any:
        """Make a request.

        Args:
            method: HTTP method
            endpoint: API endpoint (relative to base URL)
            params: Query parameters
            signed: Whether the endpoint requires a signature

        Returns:
            Decoded JSON response

        Raises:
            BinanceAPIError: If the request fails
        """
        if not self._client:
            raise BinanceAPIError("Client not started")

        if signed:
            query: Any = self._auth.sign_params(params)
            headers = self._auth.get_auth_headers()
        else:
            query = {k: v for k, v in (params or {}).items() if v is not None}
            headers = {}

        try:
            response = await self._client.request(
                method, endpoint, params=query, headers=headers
            )
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            body = e.response.text
            code: int | None = None
            message = body
            try:
                payload = e.response.json()
                code = payload.get("code")
                message = payload.get("msg", body)
            except ValueError:
                pass

            logger.error(
                f"Binance API error: {e.response.status_code} {code} - {message}"
            )
            raise BinanceAPIError(
                f"API error {e.response.status_code}: {message}",
                code=code,
                status=e.response.status_code,
                body=body,
                request_url=_redact(str(e.request.url)),
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Binance request failed: {e}")
            raise BinanceAPIError(
                f"Request failed: {e}",
                request_url=_redact(str(e.request.url)),
            ) from e

    # Market metadata

    async def get_exchange_info(self) -> dict[str, Any]:
        """Get exchange trading rules and symbol information.

        Returns:
            Exchange info with a `symbols` list, each carrying
            `quantityPrecision` and a `filters` list
        """
        return await self._request("GET", "/fapi/v1/exchangeInfo")

    async def get_mark_price(
        self, symbol: str, isolated: bool = False
    ) -> dict[str, Any]:
        """Get the mark price for a symbol.

        Args:
            symbol: Exchange symbol (e.g., "BTCUSDT")
            isolated: Request the isolated-margin price variant

        Returns:
            Premium index payload including `markPrice`
        """
        return await self._request(
            "GET",
            "/fapi/v1/premiumIndex",
            params={"symbol": symbol, "isIsolated": "TRUE" if isolated else None},
        )

    # Symbol configuration

    async def get_symbol_config(self, symbol: str) -> list[dict[str, Any]]:
        """Get the account's leverage and margin type for a symbol.

        Args:
            symbol: Exchange symbol

        Returns:
            List with one entry holding `leverage` and `marginType`
        """
        return await self._request(
            "GET", "/fapi/v1/symbolConfig", params={"symbol": symbol}, signed=True
        )

    async def set_leverage(self, symbol: str, leverage: int) -> dict[str, Any]:
        """Change initial leverage for a symbol.

        Args:
            symbol: Exchange symbol
            leverage: Target leverage (1-125)

        Returns:
            Leverage change response
        """
        logger.info(f"Setting leverage for {symbol} to {leverage}x")
        return await self._request(
            "POST",
            "/fapi/v1/leverage",
            params={"symbol": symbol, "leverage": leverage},
            signed=True,
        )

    async def set_margin_type(
        self, symbol: str, margin_type: MarginType
    ) -> dict[str, Any]:
        """Change margin type for a symbol.

        Args:
            symbol: Exchange symbol
            margin_type: ISOLATED or CROSSED

        Returns:
            Margin type change response
        """
        logger.info(f"Setting margin type for {symbol} to {margin_type.value}")
        return await self._request(
            "POST",
            "/fapi/v1/marginType",
            params={"symbol": symbol, "marginType": margin_type.value},
            signed=True,
        )

    # Order operations

    async def submit_new_order(
        self,
        symbol: str,
        side: OrderSide,
        quantity: Decimal,
        order_type: str = "MARKET",
        reduce_only: bool = False,
        working_type: str = "MARK_PRICE",
    ) -> dict[str, Any]:
        """Submit a new order.

        Args:
            symbol: Exchange symbol
            side: BUY or SELL
            quantity: Base-asset quantity
            order_type: Order type, "MARKET" by default
            reduce_only: Only reduce an existing position
            working_type: Price type that triggers conditional orders

        Returns:
            Order response with `orderId`, `status`, `executedQty`, `avgPrice`
        """
        return await self._request(
            "POST",
            "/fapi/v1/order",
            params={
                "symbol": symbol,
                "side": side.value,
                "type": order_type,
                "quantity": format(quantity, "f"),
                "reduceOnly": reduce_only,
                "workingType": working_type,
            },
            signed=True,
        )

    # Account operations

    async def get_account_info(self) -> dict[str, Any]:
        """Get account information.

        Returns:
            Account payload including `canTrade`
        """
        return await self._request("GET", "/fapi/v3/account", signed=True)

    async def get_positions(self, symbol: str | None = None) -> list[dict[str, Any]]:
        """Get current position information.

        Args:
            symbol: Optional symbol filter

        Returns:
            List of position risk entries
        """
        return await self._request(
            "GET", "/fapi/v3/positionRisk", params={"symbol": symbol}, signed=True
        )


def _redact(url: str) -> str:
    """Strip the signature from a URL before it is logged."""
    head, sep, _ = url.partition("&signature=")
    return head if sep else url
