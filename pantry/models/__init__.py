"""
Data models for the Pantry service.

This module exports all data models for easy import.
"""

from .audit_log import (
    AuditAction,
    AuditChanges,
    AuditLogEntry,
    CreateChanges,
    DeleteChanges,
    FieldChange,
    QuantityAdjustChanges,
    UpdateChanges,
    create_audit_entry,
)
from .inventory import (
    AdjustmentResult,
    InventoryItem,
    InventoryStats,
    ItemInput,
    QuantityAdjustment,
    validate_item_id,
)

__all__ = [
    # Inventory models
    "InventoryItem",
    "InventoryStats",
    "ItemInput",
    "QuantityAdjustment",
    "AdjustmentResult",
    "validate_item_id",
    # Audit log models
    "AuditAction",
    "AuditChanges",
    "AuditLogEntry",
    "CreateChanges",
    "UpdateChanges",
    "DeleteChanges",
    "QuantityAdjustChanges",
    "FieldChange",
    "create_audit_entry",
]
