"""
Field-level change detection between two item snapshots.

Used by full updates to decide whether an update entry is journaled and
what it records.
"""

from typing import List, Tuple

from pantry.models import FieldChange, InventoryItem

# (attribute, label) in the order changes are reported
TRACKED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "name"),
    ("category", "category"),
    ("unit", "unit"),
    ("quantity", "quantity"),
    ("cost_price", "costPrice"),
    ("reorder_threshold", "reorderThreshold"),
)


def diff_items(old: InventoryItem, new: InventoryItem) -> List[FieldChange]:
    """
    Compare two snapshots of the same item.

    Each tracked field is compared by value independently of the others.

    Args:
        old: Item as it was before the update
        new: Item as committed by the update

    Returns:
        One FieldChange per differing field, empty if nothing changed
    """
    changes = []
    for attribute, label in TRACKED_FIELDS:
        old_value = getattr(old, attribute)
        new_value = getattr(new, attribute)
        if old_value != new_value:
            changes.append(
                FieldChange(field=label, old_value=old_value, new_value=new_value)
            )
    return changes


def describe_changes(changes: List[FieldChange]) -> str:
    """Render changes as 'field: old → new' fragments joined by commas."""
    return ", ".join(change.describe() for change in changes)
