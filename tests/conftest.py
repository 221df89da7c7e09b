"""
Shared fixtures: every test gets its own config directory, log directory
and database file under tmp_path.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pantry.config import get_config_manager, reset_config_manager
from pantry.database import DatabaseManager
from pantry.services import InventoryService
from pantry.utils import reset_loggers


@pytest.fixture(autouse=True)
def pantry_config(tmp_path, monkeypatch):
    """Isolated configuration for one test."""
    monkeypatch.setenv("PANTRY_CONFIG_DIR", str(tmp_path / "config"))
    reset_loggers()
    reset_config_manager()

    config = get_config_manager()
    config.set("logging.dir", str(tmp_path / "logs"))
    config.set("database.path", str(tmp_path / "pantry.db"))

    yield config

    reset_loggers()
    reset_config_manager()


@pytest.fixture
def db_manager(tmp_path):
    db = DatabaseManager(str(tmp_path / "pantry.db"))
    db.initialize_database()
    yield db
    db.close()


@pytest.fixture
def service(db_manager):
    return InventoryService(db_manager)


@pytest.fixture
def item_data():
    """Factory for valid item input dicts."""
    def _make(**overrides):
        data = {
            "name": "Mozzarella Cheese",
            "category": "Dairy",
            "unit": "kg",
            "quantity": 10,
            "reorder_threshold": 3,
            "cost_price": 8.99,
        }
        data.update(overrides)
        return data
    return _make
