"""Process-lifetime state shared by order preparation runs."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from perp_connector.domain.types import SavedSymbolConfig

logger = logging.getLogger(__name__)

DEFAULT_RESET_INTERVAL_SECONDS = 24 * 60 * 60


class PipelineContext:
    """Owns the unsupported-market set and the symbol config memo.

    The unsupported set is a negative cache: once a market is in it,
    preparation for that market short-circuits without exchange calls.
    A background task clears it on a fixed interval.

    Not protected against concurrent mutation. All access happens on a
    single event loop.
    """

    def __init__(
        self, reset_interval_seconds: float = DEFAULT_RESET_INTERVAL_SECONDS
    ) -> None:
        """Initialize empty state.

        Args:
            reset_interval_seconds: How often the unsupported set is cleared
        """
        self._reset_interval = reset_interval_seconds
        self._unsupported_markets: set[str] = set()
        self._saved_config_symbols: dict[str, SavedSymbolConfig] = {}
        self._reset_task: asyncio.Task[None] | None = None

    @property
    def unsupported_markets(self) -> frozenset[str]:
        """Return a snapshot of the unsupported markets."""
        return frozenset(self._unsupported_markets)

    @property
    def saved_config_symbols(self) -> dict[str, SavedSymbolConfig]:
        """Return the symbols whose settings have been rewritten."""
        return dict(self._saved_config_symbols)

    def is_unsupported(self, market: str) -> bool:
        """Return True if the market is currently blacklisted."""
        return market in self._unsupported_markets

    def mark_unsupported(self, market: str) -> None:
        """Add a market to the unsupported set."""
        if market not in self._unsupported_markets:
            self._unsupported_markets.add(market)
            logger.info(f"Market marked unsupported: {market}")

    def clear_unsupported(self) -> None:
        """Forget all unsupported markets."""
        if self._unsupported_markets:
            logger.info(
                f"Clearing {len(self._unsupported_markets)} unsupported markets"
            )
        self._unsupported_markets.clear()

    def save_config(
        self, symbol: str, leverage: bool = False, margin_type: bool = False
    ) -> SavedSymbolConfig:
        """Record that leverage and/or margin type were written for a symbol.

        Flags accumulate: a later call never unsets an earlier one.
        """
        saved = self._saved_config_symbols.setdefault(symbol, SavedSymbolConfig())
        saved.leverage = saved.leverage or leverage
        saved.margin_type = saved.margin_type or margin_type
        return saved

    # --- Reset timer ---

    def start_reset_timer(self) -> None:
        """Start clearing the unsupported set periodically."""
        if self._reset_task is None or self._reset_task.done():
            self._reset_task = asyncio.create_task(self._reset_loop())

    async def stop_reset_timer(self) -> None:
        """Stop the periodic reset."""
        if self._reset_task:
            self._reset_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reset_task
            self._reset_task = None

    async def _reset_loop(self) -> None:
        """Clear the unsupported set every interval."""
        while True:
            await asyncio.sleep(self._reset_interval)
            self.clear_unsupported()
