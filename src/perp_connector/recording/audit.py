"""Append-only audit trail of submitted orders.

Orders are kept as a single JSON array so the file stays readable with
any JSON tool.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class OrderAuditLog:
    """Records submitted orders to a JSON array file.

    The directory and file are created on first write. Existing entries
    are never modified.
    """

    def __init__(self, path: str | Path = "logs/binance-orders.json") -> None:
        """Initialize audit log.

        Args:
            path: File holding the JSON array of orders
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get audit file path."""
        return self._path

    def entries(self) -> list[dict[str, Any]]:
        """Return all recorded orders, oldest first."""
        if not self._path.exists():
            return []

        with open(self._path, encoding="utf-8") as f:
            content = f.read()

        return json.loads(content) if content.strip() else []

    def record(self, order: dict[str, Any]) -> dict[str, Any]:
        """Append an order to the log.

        An existing file that cannot be parsed is renamed with a
        `.corrupt-<timestamp>` suffix and a fresh array is started.

        Args:
            order: Order parameters and exchange response fields

        Returns:
            The entry as written, including its timestamp
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)

        try:
            entries = self.entries()
        except ValueError as e:
            entries = []
            self._quarantine(e)
        if not isinstance(entries, list):
            entries = []
            self._quarantine(ValueError("audit file is not a JSON array"))

        entry = {k: _jsonable(v) for k, v in order.items()}
        entry["timestamp"] = datetime.now(UTC).isoformat()
        entries.append(entry)

        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2)

        logger.debug(f"Order recorded to {self._path}")
        return entry

    def _quarantine(self, error: Exception) -> None:
        """Move an unreadable audit file aside so new orders can be recorded."""
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
        target = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        self._path.replace(target)
        logger.error(f"Audit log {self._path} is unreadable ({error}), moved to {target}")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value
