"""
Business logic services for the Pantry service.
"""

from .audit_store import AuditStore
from .change_diff import describe_changes, diff_items
from .inventory_service import InventoryService
from .quantity_ledger import QuantityLedger
from .uniqueness_guard import UniquenessGuard

__all__ = [
    "AuditStore",
    "InventoryService",
    "QuantityLedger",
    "UniquenessGuard",
    "diff_items",
    "describe_changes",
]
