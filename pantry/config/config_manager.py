"""
Configuration management for the Pantry service.

Settings live in app_config.json; secrets live Fernet-encrypted in
credentials.enc next to the key that opens them.
"""

import copy
import json
import os
import secrets
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet

CONFIG_DIR_ENV = "PANTRY_CONFIG_DIR"
AUTH_SECRET_CREDENTIAL = "auth_token_secret"

DEFAULT_CONFIG: Dict[str, Any] = {
    "app_version": "0.1.0",
    "database": {
        "path": "data/pantry.db",
        "timeout_seconds": 5.0,
    },
    "api": {
        "host": "127.0.0.1",
        "port": 8000,
        "request_timeout_seconds": 10.0,
    },
    "auth": {
        "algorithm": "HS256",
        "token_expire_minutes": 720,
    },
    "query": {
        "default_page_size": 20,
        "max_page_size": 100,
    },
    "audit": {
        "default_limit": 50,
        "max_limit": 500,
    },
    "logging": {
        "level": "INFO",
        "dir": "logs",
        "max_file_size_mb": 10,
        "backup_count": 5,
    },
}

_MISSING = object()


def _merge_defaults(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay loaded settings on the defaults, section by section."""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def _write_private(path: Path, data: bytes) -> None:
    path.write_bytes(data)
    # Owner-only on Unix-like systems
    if os.name != 'nt':
        os.chmod(path, 0o600)


class ConfigManager:
    """
    Manages service settings and encrypted credentials.

    Settings missing from an existing app_config.json fall back to
    DEFAULT_CONFIG, so files written by older versions keep working.
    """

    def __init__(self, config_dir: str = "config") -> None:
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory holding app_config.json, credentials.enc and .key
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "app_config.json"
        self.credentials_file = self.config_dir / "credentials.enc"
        self.key_file = self.config_dir / ".key"

        self.cipher = Fernet(self._load_or_create_key())
        self.config = self._load_settings()
        self.credentials = self._load_credentials()

    def _load_or_create_key(self) -> bytes:
        if self.key_file.exists():
            return self.key_file.read_bytes()
        key = Fernet.generate_key()
        _write_private(self.key_file, key)
        return key

    def _load_settings(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            settings = copy.deepcopy(DEFAULT_CONFIG)
            self.config_file.write_text(json.dumps(settings, indent=2))
            return settings
        return _merge_defaults(DEFAULT_CONFIG, json.loads(self.config_file.read_text()))

    def _load_credentials(self) -> Dict[str, str]:
        if not self.credentials_file.exists():
            return {}
        return json.loads(self.cipher.decrypt(self.credentials_file.read_bytes()))

    def save_config(self) -> None:
        """Write settings to app_config.json."""
        self.config_file.write_text(json.dumps(self.config, indent=2))

    def save_credentials(self) -> None:
        """Encrypt and write credentials to credentials.enc."""
        _write_private(
            self.credentials_file,
            self.cipher.encrypt(json.dumps(self.credentials).encode()),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting by dotted path, e.g. "database.path".

        Returns:
            The value, or default when any part of the path is missing
        """
        value: Any = self.config
        for part in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(part, _MISSING)
            if value is _MISSING:
                return default
        return value

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set a setting by dotted path, creating sections as needed.

        Args:
            key: Dotted setting path
            value: New value
            save: Write app_config.json immediately
        """
        *sections, name = key.split('.')
        target = self.config
        for section in sections:
            target = target.setdefault(section, {})
        target[name] = value

        if save:
            self.save_config()

    def get_credential(self, key: str) -> Optional[str]:
        """Decrypted credential, or None if it was never set."""
        return self.credentials.get(key)

    def set_credential(self, key: str, value: str, save: bool = True) -> None:
        self.credentials[key] = value
        if save:
            self.save_credentials()

    def remove_credential(self, key: str) -> bool:
        """
        Delete a credential.

        Returns:
            True if it existed
        """
        if self.credentials.pop(key, None) is None:
            return False
        self.save_credentials()
        return True

    def get_auth_secret(self) -> str:
        """
        Get the bearer token signing secret, generating it on first use.

        Returns:
            Signing secret
        """
        secret = self.get_credential(AUTH_SECRET_CREDENTIAL)
        if secret is None:
            secret = secrets.token_urlsafe(48)
            self.set_credential(AUTH_SECRET_CREDENTIAL, secret)
        return secret


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """
    Get global configuration manager instance.

    The directory comes from PANTRY_CONFIG_DIR when set.

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(os.environ.get(CONFIG_DIR_ENV, "config"))
    return _config_manager


def reset_config_manager() -> None:
    """Reset global configuration manager (mainly for testing)."""
    global _config_manager
    _config_manager = None
