"""
Audit log data models.

Each entry is an immutable fact about one item. The shape of its changes
depends on the action, modelled as a tagged union keyed by "action".
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, computed_field, model_validator

from pantry.models.base import CamelModel, format_number, utc_now
from pantry.models.inventory import InventoryItem


class AuditAction(str, Enum):
    """Types of item events that are journaled."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    QUANTITY_ADJUST = "quantity_adjust"


# Fields whose values render as money
MONEY_FIELDS = {"costPrice"}


class FieldChange(CamelModel):
    """One attribute that differs between two item snapshots."""

    field: str
    old_value: Union[float, str]
    new_value: Union[float, str]

    def _render(self, value: Union[float, str]) -> str:
        if isinstance(value, str):
            return value
        if self.field in MONEY_FIELDS:
            return f"${value:.2f}"
        return format_number(value)

    def describe(self) -> str:
        """Human-readable fragment, e.g. 'category: Dairy → Cheese'."""
        return f"{self.field}: {self._render(self.old_value)} → {self._render(self.new_value)}"


class CreateChanges(CamelModel):
    action: Literal["create"] = "create"
    new_value: str


class UpdateChanges(CamelModel):
    action: Literal["update"] = "update"
    field_changes: List[FieldChange] = Field(..., min_length=1)

    @computed_field(alias="newValue")
    @property
    def summary(self) -> str:
        """Flattened rendering of field_changes for display."""
        return ", ".join(change.describe() for change in self.field_changes)


class DeleteChanges(CamelModel):
    action: Literal["delete"] = "delete"
    old_value: str


class QuantityAdjustChanges(CamelModel):
    action: Literal["quantity_adjust"] = "quantity_adjust"
    old_value: float
    new_value: float
    delta: float
    reason: Optional[str] = Field(None, max_length=200)


AuditChanges = Annotated[
    Union[CreateChanges, UpdateChanges, DeleteChanges, QuantityAdjustChanges],
    Field(discriminator="action"),
]


class AuditLogEntry(CamelModel):
    """Represents a single audit log entry."""

    log_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="id")
    item_id: str
    item_name: str
    action: AuditAction
    actor_id: str
    changes: AuditChanges
    timestamp: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_changes_match_action(self) -> "AuditLogEntry":
        if self.changes.action != self.action.value:
            raise ValueError(
                f"changes for '{self.changes.action}' cannot describe a '{self.action.value}' entry"
            )
        return self

    def to_readable_string(self) -> str:
        """Convert log entry to human-readable string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        action_str = self.action.value.replace("_", " ").title()
        base = f"[{timestamp_str}] {self.actor_id}: {action_str} {self.item_name}"

        changes = self.changes
        if isinstance(changes, CreateChanges):
            return f"{base} - {changes.new_value}"
        if isinstance(changes, UpdateChanges):
            return f"{base} - {changes.summary}"
        if isinstance(changes, DeleteChanges):
            return f"{base} - {changes.old_value}"

        line = (
            f"{base} - {format_number(changes.old_value)} → {format_number(changes.new_value)}"
            f" ({changes.delta:+g})"
        )
        if changes.reason:
            line += f" - {changes.reason}"
        return line


def create_audit_entry(
    item: InventoryItem,
    actor_id: str,
    changes: Union[CreateChanges, UpdateChanges, DeleteChanges, QuantityAdjustChanges],
) -> AuditLogEntry:
    """
    Factory function to create an audit entry for an item event.

    Args:
        item: Item snapshot the event applies to (name is captured as-is)
        actor_id: Authenticated caller that triggered the event
        changes: Action-specific payload

    Returns:
        AuditLogEntry instance
    """
    return AuditLogEntry(
        item_id=item.item_id,
        item_name=item.name,
        action=AuditAction(changes.action),
        actor_id=actor_id,
        changes=changes,
    )
