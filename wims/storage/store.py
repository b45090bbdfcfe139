"""
Application state owner.

WimsStore holds every collection in memory, loads it from local storage at
startup and writes a collection back whenever a service asks it to. Storage
failures are logged and the in-memory state stays authoritative for the
running session.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError as ModelValidationError

from ..exceptions import StorageError
from ..models import (
    InventoryAlert,
    InventoryItem,
    Order,
    PermissionRequest,
    Session,
    StockMovement,
    StockTransfer,
    User,
    Vendor,
    WimsModel,
)
from ..utils import get_logger
from .local_storage import LocalStorage, StorageKeys

ModelT = TypeVar("ModelT", bound=WimsModel)


class WimsStore:
    """In-memory collections backed by LocalStorage."""

    def __init__(self, storage: LocalStorage) -> None:
        """
        Initialize the store.

        Args:
            storage: LocalStorage instance to load from and save to
        """
        self.storage = storage
        self.logger = get_logger("store")

        self.users: List[User] = []
        self.session: Optional[Session] = None
        self.password_hashes: Dict[str, Dict[str, str]] = {}
        self.inventory: List[InventoryItem] = []
        self.transfers: List[StockTransfer] = []
        self.movements: List[StockMovement] = []
        self.alerts: List[InventoryAlert] = []
        self.orders: List[Order] = []
        self.vendors: List[Vendor] = []
        self.permission_requests: List[PermissionRequest] = []
        self.is_loaded = False

    # Loading

    def load(self) -> None:
        """Load every collection from storage and re-derive inventory fields."""
        self.users = self._load_collection(StorageKeys.USERS, User)
        self.session = self._load_session()
        self.password_hashes = self._safe_get(StorageKeys.PASSWORDS, {})
        if not isinstance(self.password_hashes, dict):
            self.password_hashes = {}
        self.orders = self._load_collection(StorageKeys.ORDERS, Order)
        self.vendors = self._load_collection(StorageKeys.VENDORS, Vendor)
        self.permission_requests = self._load_collection(
            StorageKeys.PERMISSION_REQUESTS, PermissionRequest
        )
        self._load_inventory()
        self.is_loaded = True

        self.logger.info(
            f"Loaded store: {len(self.users)} users, {len(self.inventory)} inventory items, "
            f"{len(self.transfers)} transfers, {len(self.movements)} movements, "
            f"{len(self.alerts)} alerts, {len(self.orders)} orders, {len(self.vendors)} vendors"
        )

    def _load_inventory(self) -> None:
        self.inventory = self._load_collection(
            StorageKeys.INVENTORY, InventoryItem, fallback_keys=(StorageKeys.INVENTORY_LEGACY,)
        )
        self.transfers = self._load_collection(StorageKeys.TRANSFERS, StockTransfer)
        self.movements = self._load_collection(StorageKeys.MOVEMENTS, StockMovement)
        self.alerts = self._load_collection(StorageKeys.ALERTS, InventoryAlert)

        # One full pass at startup; afterwards only mutated items are refreshed
        for item in self.inventory:
            item.refresh_derived()

    def reload_inventory(self) -> None:
        """Discard in-memory inventory state and re-read it from storage."""
        self._load_inventory()
        self.logger.info("Reloaded inventory data from storage")

    def _safe_get(self, key: str, default):
        try:
            return self.storage.get_item(key, default)
        except StorageError as e:
            self.logger.error(f"Error reading storage key '{key}': {e}")
            return default

    def _load_collection(
        self,
        key: str,
        model: Type[ModelT],
        fallback_keys: Sequence[str] = ()
    ) -> List[ModelT]:
        raw = self._safe_get(key, None)
        for fallback in fallback_keys:
            if raw is not None:
                break
            raw = self._safe_get(fallback, None)

        if raw is None:
            return []
        if not isinstance(raw, list):
            self.logger.warning(f"Ignoring storage key '{key}': expected a list")
            return []

        records: List[ModelT] = []
        for entry in raw:
            try:
                records.append(model.model_validate(entry))
            except ModelValidationError as e:
                self.logger.warning(f"Skipping invalid {model.__name__} record in '{key}': {e}")
        return records

    def _load_session(self) -> Optional[Session]:
        raw = self._safe_get(StorageKeys.SESSION, None)
        if raw is None:
            return None
        try:
            return Session.model_validate(raw)
        except ModelValidationError as e:
            self.logger.error(f"Discarding unreadable session: {e}")
            self._safe_remove(StorageKeys.SESSION)
            return None

    # Saving

    def _safe_set(self, key: str, value) -> bool:
        try:
            self.storage.set_item(key, value)
            return True
        except StorageError as e:
            self.logger.error(f"Error writing storage key '{key}': {e}")
            return False

    def _safe_remove(self, key: str) -> None:
        try:
            self.storage.remove_item(key)
        except StorageError as e:
            self.logger.error(f"Error removing storage key '{key}': {e}")

    def _save_records(self, key: str, records: Sequence[WimsModel]) -> bool:
        return self._safe_set(key, [record.to_storage() for record in records])

    def _save_inventory_records(self, key: str, records: Sequence[WimsModel]) -> bool:
        saved = self._save_records(key, records)
        if saved:
            self._safe_set(StorageKeys.INVENTORY_LAST_SYNC, datetime.now().isoformat())
        return saved

    def save_users(self) -> bool:
        return self._save_records(StorageKeys.USERS, self.users)

    def save_passwords(self) -> bool:
        return self._safe_set(StorageKeys.PASSWORDS, self.password_hashes)

    def save_session(self) -> bool:
        """Persist the current session, or remove it when logged out."""
        if self.session is None:
            self._safe_remove(StorageKeys.SESSION)
            return True
        return self._safe_set(StorageKeys.SESSION, self.session.to_storage())

    def save_inventory(self) -> bool:
        return self._save_inventory_records(StorageKeys.INVENTORY, self.inventory)

    def save_transfers(self) -> bool:
        return self._save_inventory_records(StorageKeys.TRANSFERS, self.transfers)

    def save_movements(self) -> bool:
        return self._save_inventory_records(StorageKeys.MOVEMENTS, self.movements)

    def save_alerts(self) -> bool:
        return self._save_inventory_records(StorageKeys.ALERTS, self.alerts)

    def save_orders(self) -> bool:
        return self._save_records(StorageKeys.ORDERS, self.orders)

    def save_vendors(self) -> bool:
        return self._save_records(StorageKeys.VENDORS, self.vendors)

    def save_permission_requests(self) -> bool:
        return self._save_records(StorageKeys.PERMISSION_REQUESTS, self.permission_requests)

    def clear_inventory_data(self) -> None:
        """Drop inventory, transfers, movements and alerts from memory and storage."""
        self.inventory = []
        self.transfers = []
        self.movements = []
        self.alerts = []
        for key in StorageKeys.INVENTORY_KEYS:
            self._safe_remove(key)
        self.logger.info("Cleared all inventory data")

    # Lookups

    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((i for i in self.inventory if i.id == item_id), None)

    def find_transfer(self, transfer_id: str) -> Optional[StockTransfer]:
        return next((t for t in self.transfers if t.id == transfer_id), None)

    def find_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    def find_vendor(self, vendor_id: str) -> Optional[Vendor]:
        return next((v for v in self.vendors if v.id == vendor_id), None)


def create_store(storage: LocalStorage) -> WimsStore:
    """
    Create a store and load it from storage.

    Args:
        storage: LocalStorage instance

    Returns:
        Loaded WimsStore
    """
    store = WimsStore(storage)
    store.load()
    return store
