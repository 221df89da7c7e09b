"""
Append-only audit journal for inventory items.

Entries are written once, after the item write they describe has
committed, and are never updated or deleted.
"""

import json
from typing import List

from pantry.database.db_manager import (
    DatabaseManager,
    row_to_audit_entry,
    store_deadline,
    to_db_time,
)
from pantry.exceptions import InvalidArgumentError
from pantry.models import AuditLogEntry
from pantry.utils import get_logger


class AuditStore:
    """
    Audit store that writes to the database audit log.

    Every appended entry is also echoed to the "audit" logger.
    """

    def __init__(self, db_manager: DatabaseManager, max_limit: int = 500) -> None:
        """
        Initialize audit store.

        Args:
            db_manager: Database manager instance
            max_limit: Largest number of entries a single listing may return
        """
        self.db_manager = db_manager
        self.max_limit = max_limit
        self.file_logger = get_logger("audit")

    def append(self, entry: AuditLogEntry) -> None:
        """
        Append an entry to the audit trail.

        Store failures propagate; the entry is never silently dropped. The
        caller's deadline does not apply: the write being recorded has
        already committed, so the entry is written regardless.

        Args:
            entry: Entry to persist
        """
        query = """
            INSERT INTO audit_log
            (log_id, item_id, item_name, action, actor_id, changes, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            entry.log_id,
            entry.item_id,
            entry.item_name,
            entry.action.value,
            entry.actor_id,
            json.dumps(entry.changes.model_dump(mode="json")),
            to_db_time(entry.timestamp),
        )

        with store_deadline(None):
            self.db_manager.execute_update(query, params)

        self.file_logger.info(
            f"AUDIT: {entry.action.value} '{entry.item_name}' ({entry.item_id}) by {entry.actor_id}"
        )

    def _check_limit(self, limit: int) -> None:
        if limit < 1 or limit > self.max_limit:
            raise InvalidArgumentError(f"limit must be between 1 and {self.max_limit}")

    def list_for_item(self, item_id: str, limit: int = 50) -> List[AuditLogEntry]:
        """
        Get audit entries for one item, newest first.

        Entries of deleted items remain listed.

        Args:
            item_id: Item ID
            limit: Maximum number of entries

        Returns:
            List of AuditLogEntry
        """
        self._check_limit(limit)

        query = """
            SELECT * FROM audit_log
            WHERE item_id = ?
            ORDER BY timestamp DESC, seq DESC
            LIMIT ?
        """
        rows = self.db_manager.execute_query(query, (item_id, limit))
        return [row_to_audit_entry(row) for row in rows]

    def replay(self, item_id: str) -> List[AuditLogEntry]:
        """
        Get the full history of one item in the order it happened.

        Args:
            item_id: Item ID

        Returns:
            List of AuditLogEntry, oldest first
        """
        query = """
            SELECT * FROM audit_log
            WHERE item_id = ?
            ORDER BY timestamp ASC, seq ASC
        """
        rows = self.db_manager.execute_query(query, (item_id,))
        return [row_to_audit_entry(row) for row in rows]

    def get_recent(self, limit: int = 50) -> List[AuditLogEntry]:
        """
        Get the most recent entries across all items.

        No ordering is implied between entries of different items beyond
        their timestamps.
        """
        self._check_limit(limit)

        query = """
            SELECT * FROM audit_log
            ORDER BY timestamp DESC, seq DESC
            LIMIT ?
        """
        rows = self.db_manager.execute_query(query, (limit,))
        return [row_to_audit_entry(row) for row in rows]

    def get_by_actor(self, actor_id: str, limit: int = 50) -> List[AuditLogEntry]:
        """
        Get entries triggered by one caller, newest first.

        Args:
            actor_id: Caller identity
            limit: Maximum number of entries

        Returns:
            List of AuditLogEntry
        """
        self._check_limit(limit)

        query = """
            SELECT * FROM audit_log
            WHERE actor_id = ?
            ORDER BY timestamp DESC, seq DESC
            LIMIT ?
        """
        rows = self.db_manager.execute_query(query, (actor_id, limit))
        return [row_to_audit_entry(row) for row in rows]

    def count_for_item(self, item_id: str) -> int:
        rows = self.db_manager.execute_query(
            "SELECT COUNT(*) AS count FROM audit_log WHERE item_id = ?", (item_id,)
        )
        return rows[0]["count"]
