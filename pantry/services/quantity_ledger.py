"""
Quantity ledger: applies signed deltas to item stock.

Stock never goes below zero. The quantity write commits before its audit
entry is appended, so a crash in between leaves history one entry short
rather than ahead of the stock it describes.
"""

import math
from typing import Optional, Tuple

from pantry.database.db_manager import DatabaseManager, row_to_item, to_db_time
from pantry.exceptions import InvalidArgumentError, InvalidStateError, NotFoundError
from pantry.models import (
    AdjustmentResult,
    InventoryItem,
    QuantityAdjustChanges,
    create_audit_entry,
    validate_item_id,
)
from pantry.models.base import format_number, utc_now
from pantry.utils import get_logger
from pantry.services.audit_store import AuditStore

MAX_REASON_LENGTH = 200

# Decimal places kept for quantities and deltas, to absorb float drift
QUANTITY_PRECISION = 9


class QuantityLedger:
    """Applies relative quantity changes with a non-negativity check."""

    def __init__(self, db_manager: DatabaseManager, audit_store: AuditStore) -> None:
        """
        Initialize quantity ledger.

        Args:
            db_manager: Database manager instance
            audit_store: Journal receiving quantity_adjust entries
        """
        self.db_manager = db_manager
        self.audit_store = audit_store
        self.logger = get_logger("quantity_ledger")

    def adjust(
        self,
        item_id: str,
        delta: float,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> Tuple[InventoryItem, AdjustmentResult]:
        """
        Apply delta to an item's quantity.

        Args:
            item_id: Item ID
            delta: Signed amount to add, non-zero at 9 decimal places
            actor_id: Authenticated caller
            reason: Optional free-text note (max 200 chars)

        Returns:
            Tuple of (updated item, adjustment result)

        Raises:
            InvalidArgumentError: Zero or non-finite delta, bad id or reason
            NotFoundError: Item does not exist
            InvalidStateError: Quantity would go negative
        """
        if not math.isfinite(delta):
            raise InvalidArgumentError("Delta must be a finite number")
        # Recorded delta carries the same precision as stored quantities
        delta = round(delta, QUANTITY_PRECISION)
        if delta == 0:
            raise InvalidArgumentError("Delta cannot be zero")
        item_id = validate_item_id(item_id)
        if reason is not None:
            reason = reason.strip() or None
            if reason is not None and len(reason) > MAX_REASON_LENGTH:
                raise InvalidArgumentError(
                    f"Reason must be at most {MAX_REASON_LENGTH} characters"
                )

        with self.db_manager.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM items WHERE item_id = ?", (item_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Item not found: {item_id}")

            item = row_to_item(row)
            old_quantity = item.quantity
            new_quantity = round(old_quantity + delta, QUANTITY_PRECISION)
            if new_quantity < 0:
                raise InvalidStateError(
                    f"Adjustment would go negative: {format_number(old_quantity)} "
                    f"{item.unit} on hand, delta {format_number(delta)}"
                )
            if new_quantity == 0:
                new_quantity = 0.0  # not -0.0

            updated = item.model_copy(
                update={"quantity": new_quantity, "updated_at": utc_now()}
            )
            conn.execute(
                "UPDATE items SET quantity = ?, updated_at = ? WHERE item_id = ?",
                (updated.quantity, to_db_time(updated.updated_at), item_id),
            )

        self.audit_store.append(
            create_audit_entry(
                updated,
                actor_id,
                QuantityAdjustChanges(
                    old_value=old_quantity,
                    new_value=new_quantity,
                    delta=delta,
                    reason=reason,
                ),
            )
        )

        self.logger.info(
            f"Adjusted quantity for {item.name} ({item_id}): "
            f"{format_number(old_quantity)} -> {format_number(new_quantity)}"
        )

        return updated, AdjustmentResult(
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            delta=delta,
        )
