"""
Configuration management for WIMS.

Settings live in ``app_config.json``; secrets such as the storage
encryption key live in ``credentials.enc``, encrypted with a per-install
Fernet key.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

STORAGE_KEY_CREDENTIAL = "storage_encryption_key"

DEFAULT_CONFIG: Dict[str, Any] = {
    "app_version": "0.4.0",
    "storage": {
        "path": "data/wims_storage.json",
        "encrypted": False,
        "backup_enabled": True,
    },
    "session": {
        "validity_days": 7,
        "remember_days": 30,
    },
    "inventory": {
        "default_operator": "Admin",
        "movement_history_limit": 100,
    },
    "audit": {
        "max_entries": 500,
    },
    "logging": {
        "level": "INFO",
        "max_file_size_mb": 10,
        "backup_count": 5,
    },
}


def _restrict_permissions(path: Path) -> None:
    if os.name != 'nt':
        os.chmod(path, 0o600)


def _merge_defaults(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay loaded settings on the defaults, keeping keys added since the file was written."""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Manages application configuration and encrypted credentials.

    Values are addressed with dot notation, e.g. ``get("session.validity_days")``.
    """

    def __init__(self, config_dir: str = "config") -> None:
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory for configuration files
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "app_config.json"
        self.credentials_file = self.config_dir / "credentials.enc"
        self.key_file = self.config_dir / ".key"

        self.cipher = Fernet(self._load_or_create_key())
        self.config: Dict[str, Any] = self._read_config()
        self.credentials: Dict[str, str] = self._read_credentials()

    def _load_or_create_key(self) -> bytes:
        if self.key_file.exists():
            return self.key_file.read_bytes()

        key = Fernet.generate_key()
        self.key_file.write_bytes(key)
        _restrict_permissions(self.key_file)
        return key

    def _read_config(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            config = copy.deepcopy(DEFAULT_CONFIG)
            self._write_json(config)
            return config

        with open(self.config_file, 'r', encoding='utf-8') as f:
            return _merge_defaults(DEFAULT_CONFIG, json.load(f))

    def _read_credentials(self) -> Dict[str, str]:
        if not self.credentials_file.exists():
            return {}

        try:
            decrypted = self.cipher.decrypt(self.credentials_file.read_bytes())
        except InvalidToken as e:
            raise ValueError(
                f"Cannot decrypt {self.credentials_file}; was {self.key_file} replaced?"
            ) from e
        return json.loads(decrypted.decode('utf-8'))

    def _write_json(self, config: Dict[str, Any]) -> None:
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2)

    def save_config(self) -> None:
        """Save configuration to file."""
        self._write_json(self.config)

    def save_credentials(self) -> None:
        """Encrypt and save credentials to file."""
        payload = json.dumps(self.credentials).encode('utf-8')
        self.credentials_file.write_bytes(self.cipher.encrypt(payload))
        _restrict_permissions(self.credentials_file)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Dotted configuration key, e.g. "storage.path"
            default: Returned when any part of the key is missing

        Returns:
            Configuration value
        """
        node: Any = self.config
        for part in key.split('.'):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set configuration value, creating intermediate sections.

        Args:
            key: Dotted configuration key
            value: Value to set
            save: Whether to write the file immediately
        """
        *sections, leaf = key.split('.')
        node = self.config
        for part in sections:
            node = node.setdefault(part, {})
        node[leaf] = value

        if save:
            self.save_config()

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        self.save_config()

    # Credentials

    def get_credential(self, key: str) -> Optional[str]:
        return self.credentials.get(key)

    def set_credential(self, key: str, value: str, save: bool = True) -> None:
        self.credentials[key] = value
        if save:
            self.save_credentials()

    def remove_credential(self, key: str, save: bool = True) -> bool:
        """
        Remove a credential.

        Returns:
            True if the credential existed
        """
        if self.credentials.pop(key, None) is None:
            return False
        if save:
            self.save_credentials()
        return True

    def get_storage_encryption_key(self) -> Optional[str]:
        """
        Get the local storage encryption key.

        Returns:
            Fernet key string, or None if storage has never been encrypted
        """
        return self.get_credential(STORAGE_KEY_CREDENTIAL)

    def set_storage_encryption_key(self, key: str) -> None:
        self.set_credential(STORAGE_KEY_CREDENTIAL, key)


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[str] = None) -> ConfigManager:
    """
    Get global configuration manager instance.

    Args:
        config_dir: Configuration directory, only used on first call

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_dir or "config")
    return _config_manager


def reset_config_manager() -> None:
    """Reset global configuration manager (mainly for testing)."""
    global _config_manager
    _config_manager = None
