"""
Logging infrastructure for the Pantry service.

Provides structured logging with file rotation.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional


class PantryLogger:
    """
    Custom logger for the Pantry service.

    Provides both file and console logging with proper formatting.
    """

    def __init__(
        self,
        name: str = "pantry",
        log_dir: Optional[str] = None,
        log_file: str = "pantry.log"
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Logger name
            log_dir: Directory for log files (defaults to logging.dir setting)
            log_file: Log file name
        """
        from pantry.config.config_manager import get_config_manager

        config = get_config_manager()
        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.dir", "logs"))
        self.log_file = self.log_dir / log_file

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_level = config.get("logging.level", "INFO")
        self.max_file_size_mb = config.get("logging.max_file_size_mb", 10)
        self.backup_count = config.get("logging.backup_count", 5)

        # All pantry loggers share the file and console handlers of the root one
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.log_level))
        self.logger.propagate = False

        # Remove existing handlers
        self._close_handlers()

        self.file_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        self._setup_file_handler()
        self._setup_console_handler()

    def _setup_file_handler(self) -> None:
        """Set up rotating file handler."""
        max_bytes = self.max_file_size_mb * 1024 * 1024

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(self.file_formatter)

        self.logger.addHandler(file_handler)

    def _setup_console_handler(self) -> None:
        """Set up console handler."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.log_level))
        console_handler.setFormatter(self.console_formatter)

        self.logger.addHandler(console_handler)

    def _close_handlers(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def close(self) -> None:
        """Close all handlers (releases the log file)."""
        self._close_handlers()

    def get_logger(self) -> logging.Logger:
        """
        Get underlying logger instance.

        Returns:
            logging.Logger instance
        """
        return self.logger


# Global logger instances
_root_logger: Optional[PantryLogger] = None
_child_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get application logger.

    Named loggers are children of the "pantry" logger and share its handlers.

    Args:
        name: Optional component name (e.g. "inventory_service")

    Returns:
        Logger instance
    """
    global _root_logger
    if _root_logger is None:
        _root_logger = PantryLogger("pantry")

    root = _root_logger.get_logger()
    if not name or name == "pantry":
        return root

    if name not in _child_loggers:
        child = root.getChild(name)
        child.setLevel(logging.NOTSET)
        _child_loggers[name] = child
    return _child_loggers[name]


def reset_loggers() -> None:
    """Reset global logger instances (mainly for testing)."""
    global _root_logger
    if _root_logger is not None:
        _root_logger.close()
    _root_logger = None
    _child_loggers.clear()
