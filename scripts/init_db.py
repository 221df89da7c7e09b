#!/usr/bin/env python3
"""
Database initialization script.

Creates the Pantry item and audit tables.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pantry.config import get_config_manager
from pantry.database import create_database_manager
from pantry.exceptions import PantryError
from pantry.utils import get_logger


def main() -> None:
    """Initialize the database."""
    logger = get_logger("init_db")

    logger.info("=" * 60)
    logger.info("Pantry Database Initialization")
    logger.info("=" * 60)

    config = get_config_manager()
    db_path = config.get("database.path", "data/pantry.db")

    logger.info(f"Creating database at: {db_path}")
    db_manager = create_database_manager(db_path, config.get("database.timeout_seconds", 5.0))

    try:
        db_manager.initialize_database()

        logger.info("Verifying database tables:")
        missing = False
        for table in ("items", "audit_log"):
            if db_manager.table_exists(table):
                logger.info(f"  ✓ {table} ({db_manager.get_row_count(table)} rows)")
            else:
                logger.warning(f"  ✗ {table} - NOT FOUND")
                missing = True

        if missing:
            sys.exit(1)

        logger.info("=" * 60)
        logger.info("Database initialization complete!")
        logger.info("=" * 60)

    except (PantryError, OSError) as e:
        logger.exception(f"Database initialization failed: {e}")
        sys.exit(1)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
