"""
Storage layer for the Pantry service.
"""

from .db_manager import (
    DatabaseManager,
    check_deadline,
    create_database_manager,
    row_to_audit_entry,
    row_to_item,
    store_deadline,
    to_db_time,
    translate_error,
)

__all__ = [
    "DatabaseManager",
    "create_database_manager",
    "row_to_item",
    "row_to_audit_entry",
    "to_db_time",
    "translate_error",
    "store_deadline",
    "check_deadline",
]
