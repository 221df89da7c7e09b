"""
Inventory service for managing kitchen stock items.

Handles CRUD operations, quantity adjustments, audit history and
inventory queries. Every mutation is journaled after it commits.
"""

import json
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from pantry.database.db_manager import DatabaseManager, row_to_item, to_db_time
from pantry.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from pantry.models import (
    AdjustmentResult,
    AuditLogEntry,
    CreateChanges,
    DeleteChanges,
    InventoryItem,
    InventoryStats,
    ItemInput,
    UpdateChanges,
    create_audit_entry,
    validate_item_id,
)
from pantry.utils import get_logger
from pantry.services.audit_store import AuditStore
from pantry.services.change_diff import describe_changes, diff_items
from pantry.services.quantity_ledger import QuantityLedger
from pantry.services.uniqueness_guard import UniquenessGuard

# API sort key -> column
SORT_FIELDS = {
    "name": "name",
    "quantity": "quantity",
    "updatedAt": "updated_at",
    "costPrice": "cost_price",
}
SORT_ORDERS = {"asc": "ASC", "desc": "DESC"}


class InventoryService:
    """Service for managing inventory items and their audit trail."""

    def __init__(
        self,
        db_manager: DatabaseManager,
        max_page_size: int = 100,
        audit_max_limit: int = 500,
    ) -> None:
        """
        Initialize inventory service.

        Args:
            db_manager: Database manager instance
            max_page_size: Largest page a listing may request
            audit_max_limit: Largest audit listing a caller may request
        """
        self.db_manager = db_manager
        self.max_page_size = max_page_size
        self.logger = get_logger("inventory_service")
        self.audit_store = AuditStore(db_manager, max_limit=audit_max_limit)
        self.uniqueness_guard = UniquenessGuard(db_manager)
        self.ledger = QuantityLedger(db_manager, self.audit_store)

    @staticmethod
    def _validate_input(data: Union[ItemInput, Dict[str, Any]]) -> ItemInput:
        if isinstance(data, ItemInput):
            return data
        try:
            return ItemInput.model_validate(data)
        except ValidationError as e:
            raise InvalidArgumentError(
                "Validation failed", details=json.loads(e.json(include_url=False))
            ) from e

    @staticmethod
    def _require_actor(actor_id: str) -> None:
        if not actor_id:
            raise UnauthenticatedError("An authenticated caller is required")

    def create_item(
        self, data: Union[ItemInput, Dict[str, Any]], actor_id: str
    ) -> InventoryItem:
        """
        Create a new inventory item.

        Args:
            data: Item fields (ItemInput or raw dict)
            actor_id: Authenticated caller, recorded as the owner

        Returns:
            The created InventoryItem

        Raises:
            InvalidArgumentError: Input fails validation
            ConflictError: Another item has the same name
        """
        self._require_actor(actor_id)
        data = self._validate_input(data)
        self.uniqueness_guard.ensure_available(data.name)

        item = InventoryItem.from_input(data, created_by=actor_id)
        query = """
            INSERT INTO items (
                item_id, name, category, unit, quantity,
                reorder_threshold, cost_price, created_by,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """

        try:
            self.db_manager.execute_update(
                query,
                (
                    item.item_id,
                    item.name,
                    item.category,
                    item.unit,
                    item.quantity,
                    item.reorder_threshold,
                    item.cost_price,
                    item.created_by,
                    to_db_time(item.created_at),
                    to_db_time(item.updated_at),
                ),
            )
        except ConflictError:
            raise ConflictError(f"An item named '{item.name}' already exists") from None

        self.audit_store.append(
            create_audit_entry(
                item,
                actor_id,
                CreateChanges(new_value=f"Created with quantity: {item.quantity_label()}"),
            )
        )

        self.logger.info(f"Created inventory item: {item.name} ({item.item_id})")
        return item

    def get_item(self, item_id: str) -> InventoryItem:
        """
        Get an inventory item by ID.

        Args:
            item_id: Item ID

        Returns:
            InventoryItem

        Raises:
            InvalidArgumentError: Malformed ID
            NotFoundError: No live item with this ID
        """
        item_id = validate_item_id(item_id)
        rows = self.db_manager.execute_query(
            "SELECT * FROM items WHERE item_id = ?", (item_id,)
        )

        if not rows:
            raise NotFoundError(f"Item not found: {item_id}")

        return row_to_item(rows[0])

    def update_item(
        self,
        item_id: str,
        data: Union[ItemInput, Dict[str, Any]],
        actor_id: str,
    ) -> InventoryItem:
        """
        Replace all editable fields of an item.

        An update entry is journaled only when at least one field changed.

        Args:
            item_id: Item ID
            data: Full set of item fields
            actor_id: Authenticated caller

        Returns:
            The updated InventoryItem

        Raises:
            InvalidArgumentError: Malformed ID or input
            NotFoundError: Item does not exist
            ConflictError: Another item has the new name
        """
        self._require_actor(actor_id)
        old_item = self.get_item(item_id)
        data = self._validate_input(data)
        self.uniqueness_guard.ensure_available(data.name, exclude_id=old_item.item_id)

        new_item = old_item.replaced_with(data)
        query = """
            UPDATE items SET
                name = ?, category = ?, unit = ?, quantity = ?,
                reorder_threshold = ?, cost_price = ?, updated_at = ?
            WHERE item_id = ?
        """

        try:
            count = self.db_manager.execute_update(
                query,
                (
                    new_item.name,
                    new_item.category,
                    new_item.unit,
                    new_item.quantity,
                    new_item.reorder_threshold,
                    new_item.cost_price,
                    to_db_time(new_item.updated_at),
                    new_item.item_id,
                ),
            )
        except ConflictError:
            raise ConflictError(f"An item named '{new_item.name}' already exists") from None

        if count == 0:
            raise NotFoundError(f"Item not found: {new_item.item_id}")

        changes = diff_items(old_item, new_item)
        if changes:
            self.audit_store.append(
                create_audit_entry(new_item, actor_id, UpdateChanges(field_changes=changes))
            )
            self.logger.info(
                f"Updated inventory item: {new_item.name} ({new_item.item_id}): "
                f"{describe_changes(changes)}"
            )
        else:
            self.logger.debug(f"Update of {new_item.item_id} changed nothing")

        return new_item

    def delete_item(self, item_id: str, actor_id: str) -> InventoryItem:
        """
        Delete an inventory item.

        Its audit entries stay queryable by item ID afterwards.

        Args:
            item_id: Item ID
            actor_id: Authenticated caller

        Returns:
            The item as it was just before deletion

        Raises:
            InvalidArgumentError: Malformed ID
            NotFoundError: Item does not exist
        """
        self._require_actor(actor_id)
        item = self.get_item(item_id)

        count = self.db_manager.execute_update(
            "DELETE FROM items WHERE item_id = ?", (item.item_id,)
        )
        if count == 0:
            raise NotFoundError(f"Item not found: {item.item_id}")

        self.audit_store.append(
            create_audit_entry(
                item,
                actor_id,
                DeleteChanges(old_value=f"Deleted item with quantity: {item.quantity_label()}"),
            )
        )

        self.logger.info(f"Deleted inventory item: {item.name} ({item.item_id})")
        return item

    def adjust_quantity(
        self,
        item_id: str,
        delta: float,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> Tuple[InventoryItem, AdjustmentResult]:
        """
        Apply a signed quantity change through the ledger.

        Returns:
            Tuple of (updated item, adjustment result)
        """
        self._require_actor(actor_id)
        return self.ledger.adjust(item_id, delta, actor_id, reason=reason)

    def get_audit_log(self, item_id: str, limit: int = 50) -> List[AuditLogEntry]:
        """
        Get the audit trail of an item, newest first.

        The item does not need to exist; entries of deleted items are
        still returned.

        Args:
            item_id: Item ID
            limit: Maximum number of entries

        Returns:
            List of AuditLogEntry
        """
        return self.audit_store.list_for_item(validate_item_id(item_id), limit=limit)

    def get_item_history(self, item_id: str) -> List[AuditLogEntry]:
        """Full audit trail of an item, oldest first."""
        return self.audit_store.replay(validate_item_id(item_id))

    def list_items(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[InventoryItem], int]:
        """
        Search, filter, sort and paginate items.

        Args:
            search: Case-insensitive substring of name or category
            category: Exact category
            sort_by: One of name, quantity, updatedAt, costPrice
            sort_order: asc or desc
            page: 1-based page number
            page_size: Items per page (1 to max_page_size)

        Returns:
            Tuple of (items on the page, total matching items)

        Raises:
            InvalidArgumentError: Unsupported sort or pagination values
        """
        if sort_by not in SORT_FIELDS:
            raise InvalidArgumentError(
                f"Unsupported sort field '{sort_by}', expected one of {sorted(SORT_FIELDS)}"
            )
        if sort_order not in SORT_ORDERS:
            raise InvalidArgumentError(f"Sort order must be 'asc' or 'desc', got '{sort_order}'")
        if page < 1:
            raise InvalidArgumentError("page must be 1 or greater")
        if page_size < 1 or page_size > self.max_page_size:
            raise InvalidArgumentError(f"limit must be between 1 and {self.max_page_size}")

        conditions = []
        params: List[Any] = []

        search = search.strip() if search else None
        if search:
            needle = search.casefold()
            conditions.append(
                "(instr(casefold(name), ?) > 0 OR instr(casefold(category), ?) > 0)"
            )
            params.extend([needle, needle])

        if category:
            conditions.append("category = ?")
            params.append(category)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        order = f"ORDER BY {SORT_FIELDS[sort_by]} {SORT_ORDERS[sort_order]}, item_id ASC"

        with self.db_manager.get_connection() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM items {where}", params
            ).fetchone()["count"]
            rows = conn.execute(
                f"SELECT * FROM items {where} {order} LIMIT ? OFFSET ?",
                params + [page_size, (page - 1) * page_size],
            ).fetchall()

        return [row_to_item(row) for row in rows], total

    def get_categories(self) -> List[str]:
        """
        Get distinct categories of live items.

        Returns:
            Sorted list of category names
        """
        rows = self.db_manager.execute_query(
            "SELECT DISTINCT category FROM items ORDER BY category"
        )
        return [row["category"] for row in rows]

    def get_low_stock_items(self) -> List[InventoryItem]:
        """
        Get items at or below their reorder threshold.

        Returns:
            List of low-stock InventoryItems, lowest quantity first
        """
        query = """
            SELECT * FROM items
            WHERE quantity <= reorder_threshold
            ORDER BY quantity ASC, name ASC
        """
        rows = self.db_manager.execute_query(query)
        return [row_to_item(row) for row in rows]

    def get_stats(self) -> InventoryStats:
        """
        Get inventory statistics.

        Returns:
            InventoryStats over all live items
        """
        query = """
            SELECT
                COUNT(*) AS total_items,
                COALESCE(SUM(CASE WHEN quantity <= reorder_threshold THEN 1 ELSE 0 END), 0)
                    AS low_stock_items,
                COALESCE(SUM(quantity), 0) AS total_quantity,
                COALESCE(SUM(quantity * cost_price), 0) AS total_value,
                COUNT(DISTINCT category) AS category_count
            FROM items
        """
        row = self.db_manager.execute_query(query)[0]
        return InventoryStats(
            total_items=row["total_items"],
            low_stock_items=row["low_stock_items"],
            total_quantity=row["total_quantity"],
            total_value=round(row["total_value"], 2),
            category_count=row["category_count"],
        )
