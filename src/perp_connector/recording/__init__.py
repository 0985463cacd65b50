"""Order audit recording."""

from perp_connector.recording.audit import OrderAuditLog

__all__ = [
    "OrderAuditLog",
]
