"""
Persistence layer for WIMS.
"""

from .local_storage import LocalStorage, StorageKeys, create_local_storage
from .store import WimsStore, create_store

__all__ = ["LocalStorage", "StorageKeys", "create_local_storage", "WimsStore", "create_store"]
