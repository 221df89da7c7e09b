"""
Name uniqueness check for live items.
"""

from typing import Optional

from pantry.database.db_manager import DatabaseManager
from pantry.exceptions import ConflictError


class UniquenessGuard:
    """
    Pre-write check that no other live item has a given name.

    The unique index on items.name stays the source of truth: two writers
    can both pass this check, and the second insert is then rejected by the
    store.
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager = db_manager

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check whether a live item other than exclude_id uses name.

        Args:
            name: Candidate name (exact, case-sensitive)
            exclude_id: Item being updated, if any

        Returns:
            True if a conflicting item exists
        """
        if exclude_id is None:
            query = "SELECT 1 FROM items WHERE name = ? LIMIT 1"
            params = (name,)
        else:
            query = "SELECT 1 FROM items WHERE name = ? AND item_id != ? LIMIT 1"
            params = (name, exclude_id)

        return len(self.db_manager.execute_query(query, params)) > 0

    def ensure_available(self, name: str, exclude_id: Optional[str] = None) -> None:
        """Raise ConflictError if name is taken."""
        if self.name_taken(name, exclude_id):
            raise ConflictError(f"An item named '{name}' already exists")
