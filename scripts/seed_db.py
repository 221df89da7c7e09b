#!/usr/bin/env python3
"""
Seed the database with sample kitchen inventory.

Items are created through the inventory service, so each one gets its
create audit entry.

Usage:
    python scripts/seed_db.py            # Add sample items that don't exist yet
    python scripts/seed_db.py --reset    # Delete existing items first
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pantry.config import get_config_manager
from pantry.database import create_database_manager
from pantry.exceptions import ConflictError
from pantry.services import InventoryService
from pantry.utils import get_logger

SEED_ACTOR = "seed_script"

SAMPLE_ITEMS = [
    {"name": "Mozzarella Cheese", "category": "Dairy", "unit": "kg",
     "quantity": 50, "reorder_threshold": 10, "cost_price": 8.99},
    {"name": "Pepperoni", "category": "Meats", "unit": "kg",
     "quantity": 25, "reorder_threshold": 5, "cost_price": 12.5},
    {"name": "Pizza Dough", "category": "Bakery", "unit": "units",
     "quantity": 100, "reorder_threshold": 20, "cost_price": 1.5},
    {"name": "Tomato Sauce", "category": "Sauces", "unit": "liters",
     "quantity": 30, "reorder_threshold": 8, "cost_price": 4.25},
    {"name": "Bell Peppers", "category": "Vegetables", "unit": "kg",
     "quantity": 15, "reorder_threshold": 5, "cost_price": 3.75},
    {"name": "Mushrooms", "category": "Vegetables", "unit": "kg",
     "quantity": 12, "reorder_threshold": 4, "cost_price": 5.5},
    {"name": "Italian Sausage", "category": "Meats", "unit": "kg",
     "quantity": 20, "reorder_threshold": 6, "cost_price": 9.99},
    {"name": "Parmesan Cheese", "category": "Dairy", "unit": "kg",
     "quantity": 8, "reorder_threshold": 3, "cost_price": 15.99},
    {"name": "Olive Oil", "category": "Oils", "unit": "liters",
     "quantity": 10, "reorder_threshold": 3, "cost_price": 12.0},
    {"name": "Fresh Basil", "category": "Herbs", "unit": "bunches",
     "quantity": 20, "reorder_threshold": 5, "cost_price": 2.5},
    {"name": "Black Olives", "category": "Toppings", "unit": "kg",
     "quantity": 5, "reorder_threshold": 2, "cost_price": 6.75},
    {"name": "Onions", "category": "Vegetables", "unit": "kg",
     "quantity": 18, "reorder_threshold": 5, "cost_price": 2.25},
]


def main() -> None:
    """Seed sample items."""
    parser = argparse.ArgumentParser(description="Seed the Pantry database with sample items")
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Delete all existing items (through the service, so deletions are audited)'
    )
    args = parser.parse_args()

    logger = get_logger("seed_db")
    config = get_config_manager()

    db_manager = create_database_manager(
        config.get("database.path", "data/pantry.db"),
        config.get("database.timeout_seconds", 5.0),
    )
    db_manager.initialize_database()
    service = InventoryService(db_manager)

    if args.reset:
        existing, total = service.list_items(page_size=100)
        logger.info(f"Deleting {total} existing items...")
        while existing:
            for item in existing:
                service.delete_item(item.item_id, SEED_ACTOR)
            existing, _ = service.list_items(page_size=100)

    created = 0
    for data in SAMPLE_ITEMS:
        try:
            item = service.create_item(data, SEED_ACTOR)
        except ConflictError:
            logger.info(f"  - {data['name']} already exists, skipped")
            continue
        created += 1
        logger.info(f"  - {item.name} ({item.category}): {item.quantity_label()}")

    logger.info(f"✅ Seed completed: {created} items created")
    db_manager.close()


if __name__ == "__main__":
    main()
