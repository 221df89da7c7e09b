"""
Utility functions for the Pantry service.
"""

from .logger import (
    PantryLogger,
    get_logger,
    reset_loggers,
)

__all__ = [
    "PantryLogger",
    "get_logger",
    "reset_loggers",
]
