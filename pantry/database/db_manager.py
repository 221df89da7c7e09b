"""
Database manager for the Pantry item and audit stores.

This module handles all SQLite access and translates store failures into
the service error taxonomy.
"""

import json
import sqlite3
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from pantry.exceptions import (
    ConflictError,
    InternalError,
    InvalidStateError,
    PantryError,
    StoreTimeoutError,
)
from pantry.models import AuditLogEntry, InventoryItem
from pantry.utils import get_logger


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def translate_error(error: sqlite3.Error) -> PantryError:
    """
    Map a sqlite3 error to a service error.

    Args:
        error: Error raised by sqlite3

    Returns:
        Matching PantryError instance
    """
    message = str(error)
    if isinstance(error, sqlite3.IntegrityError):
        if "UNIQUE" in message:
            return ConflictError(f"Store rejected duplicate value: {message}")
        if "CHECK" in message:
            return InvalidStateError(f"Store rejected invalid value: {message}")
    if isinstance(error, sqlite3.OperationalError):
        if "locked" in message or "busy" in message:
            return StoreTimeoutError(f"Store did not respond in time: {message}")
        if "interrupted" in message:
            return StoreTimeoutError("Store call exceeded its deadline")
    return InternalError(f"Store failure: {message}")


# Monotonic time by which the current unit of work must commit
_deadline: ContextVar[Optional[float]] = ContextVar("store_deadline", default=None)


@contextmanager
def store_deadline(deadline: Optional[float]) -> Iterator[None]:
    """
    Bound every store call made inside the block by a deadline.

    Work that has not committed by then is interrupted and rolled back, and
    StoreTimeoutError is raised. The deadline follows the context, so it
    applies inside asyncio.to_thread workers started within the block.

    Args:
        deadline: time.monotonic() value, or None for no deadline
    """
    token = _deadline.set(deadline)
    try:
        yield
    finally:
        _deadline.reset(token)


def check_deadline() -> None:
    """Raise StoreTimeoutError if the current deadline has passed."""
    deadline = _deadline.get()
    if deadline is not None and time.monotonic() >= deadline:
        raise StoreTimeoutError("Store call exceeded its deadline")


class DatabaseManager:
    """
    Manages the SQLite database backing the item and audit stores.

    Connections are opened per unit of work; the manager itself is the
    process-wide handle created once at startup.
    """

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        """
        Initialize database manager.

        Args:
            db_path: Path to the database file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.logger = get_logger("database")
        self._closed = False

        # Ensure database directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Schema file path
        self.schema_path = Path(__file__).parent / "schema.sql"

    def _connect(self) -> sqlite3.Connection:
        if self._closed:
            raise InternalError("Database manager is closed")
        check_deadline()

        deadline = _deadline.get()
        timeout = self.timeout
        if deadline is not None:
            timeout = max(0.0, min(timeout, deadline - time.monotonic()))

        try:
            conn = sqlite3.connect(str(self.db_path), timeout=timeout)
        except sqlite3.Error as e:
            raise translate_error(e) from e
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        if deadline is not None:
            conn.set_progress_handler(lambda: time.monotonic() >= deadline, 1000)
        return conn

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for database connections.

        Commits on success, rolls back on any error. A unit of work that
        finishes after the current deadline is rolled back instead of
        committed.

        Yields:
            Database connection object
        """
        conn = self._connect()
        try:
            yield conn
            check_deadline()
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise translate_error(e) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for a write-locked transaction.

        Takes the write lock up front so a read-check-write sequence on a
        row cannot interleave with another writer.

        Yields:
            Database connection object inside BEGIN IMMEDIATE
        """
        with self.get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            yield conn

    def initialize_database(self) -> None:
        """
        Initialize database with schema from schema.sql.

        Creates all tables, indexes and triggers if they don't exist.
        """
        if not self.schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")

        with open(self.schema_path, 'r') as f:
            schema_sql = f.read()

        with self.get_connection() as conn:
            conn.executescript(schema_sql)

        self.logger.info(f"Database initialized at: {self.db_path}")

    def execute_query(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> List[sqlite3.Row]:
        """
        Execute a SELECT query and return results.

        Args:
            query: SQL SELECT query
            params: Query parameters (optional)

        Returns:
            List of rows as dict-like objects
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.fetchall()

    def execute_update(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> int:
        """
        Execute an INSERT, UPDATE, or DELETE query.

        Args:
            query: SQL query
            params: Query parameters (optional)

        Returns:
            Number of affected rows
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.rowcount

    def table_exists(self, table_name: str) -> bool:
        """
        Check if a table exists in the database.

        Args:
            table_name: Name of the table

        Returns:
            True if table exists
        """
        query = """
            SELECT name FROM sqlite_master
            WHERE type='table' AND name=?
        """
        rows = self.execute_query(query, (table_name,))
        return len(rows) > 0

    def get_row_count(self, table_name: str) -> int:
        """
        Get the number of rows in a table.

        Args:
            table_name: Name of the table

        Returns:
            Number of rows
        """
        query = f"SELECT COUNT(*) as count FROM {table_name}"
        rows = self.execute_query(query)
        return rows[0]['count'] if rows else 0

    def close(self) -> None:
        """
        Close the database manager.

        Connections are per unit of work, so this only refuses new ones.
        """
        if not self._closed:
            self._closed = True
            self.logger.info(f"Database closed: {self.db_path}")


def create_database_manager(
    db_path: str = "data/pantry.db",
    timeout: float = 5.0
) -> DatabaseManager:
    """
    Factory function to create a DatabaseManager instance.

    Args:
        db_path: Path to database file
        timeout: Lock wait timeout in seconds

    Returns:
        Configured DatabaseManager instance
    """
    return DatabaseManager(db_path, timeout)


def to_db_time(value: datetime) -> str:
    """Fixed-width ISO timestamp so stored values sort chronologically."""
    return value.isoformat(timespec="microseconds")


def row_to_item(row: sqlite3.Row) -> InventoryItem:
    """
    Convert a database row to an InventoryItem.

    Args:
        row: Row from the items table

    Returns:
        InventoryItem object
    """
    return InventoryItem(
        item_id=row["item_id"],
        name=row["name"],
        category=row["category"],
        unit=row["unit"],
        quantity=row["quantity"],
        reorder_threshold=row["reorder_threshold"],
        cost_price=row["cost_price"],
        created_by=row["created_by"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def row_to_audit_entry(row: sqlite3.Row) -> AuditLogEntry:
    """
    Convert a database row to an AuditLogEntry.

    The changes column holds the JSON payload; pydantic picks the variant
    from its "action" tag.

    Args:
        row: Row from the audit_log table

    Returns:
        AuditLogEntry object
    """
    return AuditLogEntry(
        log_id=row["log_id"],
        item_id=row["item_id"],
        item_name=row["item_name"],
        action=row["action"],
        actor_id=row["actor_id"],
        changes=json.loads(row["changes"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )
