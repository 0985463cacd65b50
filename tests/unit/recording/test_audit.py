"""Tests for the order audit log."""

import json
from decimal import Decimal
from pathlib import Path

from perp_connector.domain.types import OrderSide
from perp_connector.recording.audit import OrderAuditLog


class TestOrderAuditLog:
    """Tests for OrderAuditLog."""

    def test_entries_empty_when_missing(self, tmp_path: Path) -> None:
        audit = OrderAuditLog(tmp_path / "missing.json")
        assert audit.entries() == []

    def test_entries_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_text("")
        assert OrderAuditLog(path).entries() == []

    def test_record_creates_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "logs" / "orders.json"
        audit = OrderAuditLog(path)

        entry = audit.record({"symbol": "BTCUSDT", "quantity": Decimal("0.020")})

        assert path.exists()
        assert entry["quantity"] == "0.020"
        assert "timestamp" in entry

    def test_record_appends(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        audit = OrderAuditLog(path)

        audit.record({"symbol": "BTCUSDT", "side": OrderSide.BUY})
        audit.record({"symbol": "ETHUSDT", "side": OrderSide.SELL})

        data = json.loads(path.read_text())
        assert [e["symbol"] for e in data] == ["BTCUSDT", "ETHUSDT"]
        assert [e["side"] for e in data] == ["BUY", "SELL"]
        assert audit.entries() == data

    def test_file_is_indented(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        OrderAuditLog(path).record({"symbol": "BTCUSDT"})

        assert path.read_text().startswith("[\n  {")

    def test_corrupt_file_moved_aside(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_text("{not json")
        audit = OrderAuditLog(path)

        audit.record({"symbol": "BTCUSDT"})

        assert [e["symbol"] for e in audit.entries()] == ["BTCUSDT"]
        moved = list(tmp_path.glob("orders.json.corrupt-*"))
        assert len(moved) == 1
        assert moved[0].read_text() == "{not json"

    def test_non_array_file_moved_aside(self, tmp_path: Path) -> None:
        path = tmp_path / "orders.json"
        path.write_text('{"symbol": "ETHUSDT"}')
        audit = OrderAuditLog(path)

        audit.record({"symbol": "BTCUSDT"})

        assert [e["symbol"] for e in audit.entries()] == ["BTCUSDT"]
        assert len(list(tmp_path.glob("orders.json.corrupt-*"))) == 1
