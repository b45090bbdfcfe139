"""
Local key-value storage with optional Fernet encryption.

Every key maps to a JSON value. The whole store is kept in one file so a
single write persists a consistent snapshot; ``path=None`` keeps the data in
memory only.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography.fernet import InvalidToken

from ..exceptions import StorageError
from ..utils.encryption import decrypt_data, encrypt_data


class StorageKeys:
    """Key names used in local storage."""
    SESSION = "wims-session-v4"
    USERS = "wims-users-v4"
    PASSWORDS = "wims-passwords"
    INVENTORY = "wims-inventory-v2"
    INVENTORY_LEGACY = "wims-inventory"
    TRANSFERS = "wims-transfers"
    MOVEMENTS = "wims-movements"
    ALERTS = "wims-alerts"
    ORDERS = "wims-orders"
    VENDORS = "wims-vendors"
    PERMISSION_REQUESTS = "wims-permission-requests"
    AUDIT_LOG = "wims-audit-log"
    INVENTORY_LAST_SYNC = "wims-inventory-last-sync"

    INVENTORY_KEYS = (INVENTORY, INVENTORY_LEGACY, TRANSFERS, MOVEMENTS, ALERTS, INVENTORY_LAST_SYNC)


class LocalStorage:
    """
    Manages the local key-value store.

    Values are held as JSON text, the same way a browser's localStorage
    holds them, so reads always return fresh copies.
    """

    def __init__(self, path: Optional[str] = None, encryption_key: Optional[str] = None) -> None:
        """
        Initialize local storage.

        Args:
            path: Path to the storage file (None keeps data in memory)
            encryption_key: Fernet key; None stores plain JSON

        Raises:
            StorageError: If an existing file cannot be read or decrypted
        """
        self.path = Path(path) if path else None
        self.encryption_key = encryption_key
        self._data: Dict[str, str] = {}

        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                self._data = self._read_file(self.path)

    @property
    def is_encrypted(self) -> bool:
        return self.encryption_key is not None

    @property
    def is_persistent(self) -> bool:
        return self.path is not None

    def _read_file(self, path: Path) -> Dict[str, str]:
        raw = path.read_bytes()
        if not raw:
            return {}

        try:
            if self.encryption_key:
                raw = decrypt_data(raw, self.encryption_key)
            data = json.loads(raw.decode('utf-8'))
        except InvalidToken as e:
            raise StorageError(f"Cannot decrypt storage file {path}: wrong key or corrupted data") from e
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Storage file {path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Storage file {path} does not contain a key-value object")
        return data

    def _serialize(self) -> bytes:
        payload = json.dumps(self._data).encode('utf-8')
        if self.encryption_key:
            payload = encrypt_data(payload, self.encryption_key)
        return payload

    def _flush(self) -> None:
        """Write the whole store to disk atomically."""
        if self.path is None:
            return

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_bytes(self._serialize())
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write storage file {self.path}: {e}") from e

    def get_item(self, key: str, default: Any = None) -> Any:
        """
        Get the value stored under a key.

        Args:
            key: Storage key
            default: Value returned when the key is absent

        Returns:
            Parsed JSON value

        Raises:
            StorageError: If the stored text is not valid JSON
        """
        text = self._data.get(key)
        if text is None:
            return default

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Value under '{key}' is not valid JSON: {e}") from e

    def set_item(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under a key.

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        try:
            text = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON serializable: {e}") from e

        self._data[key] = text
        self._flush()

    def remove_item(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        if key not in self._data:
            return False
        del self._data[key]
        self._flush()
        return True

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def clear(self) -> None:
        """Remove every key."""
        self._data.clear()
        self._flush()

    def backup(self, backup_path: str) -> None:
        """
        Write a snapshot of the store to another file.

        The backup uses the same encryption key as the live store.

        Args:
            backup_path: Path for the backup file
        """
        target = Path(backup_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            target.write_bytes(self._serialize())
        except OSError as e:
            raise StorageError(f"Failed to write backup {target}: {e}") from e


def create_local_storage(
    path: Optional[str] = "data/wims_storage.json",
    encryption_key: Optional[str] = None
) -> LocalStorage:
    """
    Factory function to create a LocalStorage instance.

    Args:
        path: Path to storage file (None for in-memory)
        encryption_key: Fernet key (None for plain JSON)

    Returns:
        Configured LocalStorage instance
    """
    return LocalStorage(path, encryption_key)
