"""
Inventory data models.

Defines data structures for kitchen stock items and quantity adjustments.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, computed_field

from pantry.exceptions import InvalidArgumentError
from pantry.models.base import CamelModel, format_number, utc_now


def validate_item_id(item_id: str) -> str:
    """
    Check that item_id is a well-formed item identifier.

    Args:
        item_id: Identifier from the caller

    Returns:
        The identifier in canonical (lowercase, hyphenated) form

    Raises:
        InvalidArgumentError: If it is not a UUID
    """
    try:
        return str(uuid.UUID(item_id))
    except (ValueError, TypeError, AttributeError):
        raise InvalidArgumentError(f"Invalid item ID: {item_id!r}") from None


class ItemInput(CamelModel):
    """Full set of user-editable item fields, used by create and update."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Mozzarella Cheese",
                "category": "Dairy",
                "unit": "kg",
                "quantity": 50,
                "reorderThreshold": 10,
                "costPrice": 8.99
            }
        },
    )

    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    unit: str = Field(..., min_length=1, max_length=20)  # kg, liters, units, etc.
    quantity: float = Field(..., ge=0.0)
    reorder_threshold: float = Field(default=0.0, ge=0.0)
    cost_price: float = Field(default=0.0, ge=0.0)


class InventoryItem(CamelModel):
    """Represents a single stock-keeping unit in the kitchen inventory."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f0b9c1e-6a1f-4f7e-9d57-2b8f0c6c1a11",
                "name": "Pepperoni",
                "category": "Meats",
                "unit": "kg",
                "quantity": 25,
                "reorderThreshold": 5,
                "costPrice": 12.5,
                "createdBy": "user_123"
            }
        },
    )

    item_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="id")
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    unit: str = Field(..., min_length=1, max_length=20)
    quantity: float = Field(default=0.0, ge=0.0)
    reorder_threshold: float = Field(default=0.0, ge=0.0)
    cost_price: float = Field(default=0.0, ge=0.0)
    created_by: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_input(cls, data: ItemInput, created_by: str) -> "InventoryItem":
        """Build a new item owned by created_by from validated input."""
        now = utc_now()
        return cls(
            name=data.name,
            category=data.category,
            unit=data.unit,
            quantity=data.quantity,
            reorder_threshold=data.reorder_threshold,
            cost_price=data.cost_price,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def replaced_with(self, data: ItemInput) -> "InventoryItem":
        """Copy of this item with every editable field replaced by data."""
        return self.model_copy(
            update={
                "name": data.name,
                "category": data.category,
                "unit": data.unit,
                "quantity": data.quantity,
                "reorder_threshold": data.reorder_threshold,
                "cost_price": data.cost_price,
                "updated_at": utc_now(),
            }
        )

    @computed_field(alias="isLowStock")
    @property
    def is_low_stock(self) -> bool:
        """At or below the reorder threshold."""
        return self.quantity <= self.reorder_threshold

    def quantity_label(self) -> str:
        """Quantity with its unit, e.g. '12.5 kg'."""
        return f"{format_number(self.quantity)} {self.unit}"


class QuantityAdjustment(CamelModel):
    """Request body for a relative quantity change."""

    delta: float
    reason: Optional[str] = Field(None, max_length=200)


class AdjustmentResult(CamelModel):
    """Before/after quantities of an applied adjustment."""

    old_quantity: float
    new_quantity: float
    delta: float


class InventoryStats(CamelModel):
    """Aggregate figures over all live items."""

    total_items: int = 0
    low_stock_items: int = 0
    total_quantity: float = 0.0
    total_value: float = 0.0
    category_count: int = 0
