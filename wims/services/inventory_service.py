"""
Inventory service for managing warehouse stock.

Handles stock updates and the movement log, transfers between locations,
threshold alerts, and inventory summaries.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from ..config import get_config_manager
from ..exceptions import ValidationError
from ..models import (
    ActionType,
    AlertSeverity,
    AlertType,
    InventoryAlert,
    InventoryItem,
    MovementType,
    StockMovement,
    StockStatus,
    StockTransfer,
    TransferStatus,
    TransferType,
)
from ..storage import WimsStore
from ..utils import get_audit_logger, get_logger


class InventoryService:
    """Service for managing inventory items, movements, transfers and alerts."""

    def __init__(self, store: WimsStore) -> None:
        """
        Initialize inventory service.

        Args:
            store: Loaded application store
        """
        self.store = store
        self.logger = get_logger("inventory_service")
        self.audit_logger = get_audit_logger(store.storage)
        self.operator = get_config_manager().get("inventory.default_operator", "Admin")

    # Items

    def add_item(self, item: InventoryItem) -> str:
        """
        Add a new inventory item.

        Args:
            item: InventoryItem to add

        Returns:
            Item ID

        Raises:
            ValidationError: If an item with the same ID already exists
        """
        if self.store.find_item(item.id) is not None:
            raise ValidationError(f"Inventory item {item.id} already exists")

        item.refresh_derived()
        self.store.inventory.append(item)
        self.store.save_inventory()

        self.audit_logger.log_action(
            action_type=ActionType.INVENTORY_CREATED,
            actor=self.operator,
            details={"name": item.name, "current_stock": item.current_stock},
            item_id=item.id,
        )
        self.logger.info(f"Created inventory item: {item.name} ({item.id})")
        return item.id

    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        return self.store.find_item(item_id)

    def get_all_items(self) -> List[InventoryItem]:
        """Get all inventory items ordered by name."""
        return sorted(self.store.inventory, key=lambda item: item.name.lower())

    def get_items_by_category(self, category: str) -> List[InventoryItem]:
        return [item for item in self.get_all_items() if item.category == category]

    def get_items_by_status(self, status: StockStatus) -> List[InventoryItem]:
        return [item for item in self.get_all_items() if item.status == status]

    def get_low_stock_items(self) -> List[InventoryItem]:
        """
        Get items at or below their minimum, including empty ones.

        Returns:
            Items ordered by current stock, lowest first
        """
        items = [item for item in self.store.inventory if item.is_low_stock()]
        return sorted(items, key=lambda item: item.current_stock)

    def search_items(self, search_term: str) -> List[InventoryItem]:
        """Search items by name, category, supplier or location."""
        term = search_term.lower()
        return [
            item for item in self.get_all_items()
            if term in item.name.lower()
            or term in item.category.lower()
            or term in item.supplier.lower()
            or term in item.location.lower()
        ]

    def update_item_price(self, item_id: str, new_price: float) -> Optional[InventoryItem]:
        """
        Change an item's unit cost and re-derive its total value.

        Returns:
            Updated item, or None if not found
        """
        if new_price < 0:
            raise ValidationError("Unit cost cannot be negative")

        item = self.store.find_item(item_id)
        if item is None:
            self.logger.warning(f"Price update ignored: unknown item {item_id}")
            return None

        old_price = item.unit_cost
        item.unit_cost = float(new_price)
        item.refresh_derived()
        self.store.save_inventory()

        self.audit_logger.log_action(
            action_type=ActionType.INVENTORY_PRICE_UPDATED,
            actor=self.operator,
            details={"old_price": old_price, "new_price": item.unit_cost},
            item_id=item_id,
        )
        self.logger.info(f"Updated unit cost for {item.name} ({item_id}): {old_price} -> {item.unit_cost}")
        return item

    def remove_item(self, item_id: str) -> bool:
        """
        Remove an inventory item.

        Movements referencing the item are kept.

        Returns:
            True if the item was removed
        """
        item = self.store.find_item(item_id)
        if item is None:
            return False

        self.store.inventory = [i for i in self.store.inventory if i.id != item_id]
        self.store.save_inventory()

        self.audit_logger.log_action(
            action_type=ActionType.INVENTORY_DELETED,
            actor=self.operator,
            details={"name": item.name},
            item_id=item_id,
        )
        self.logger.info(f"Removed inventory item: {item.name} ({item_id})")
        return True

    # Stock movements

    def update_stock(
        self,
        item_id: str,
        quantity: int,
        reason: str,
        movement_type: Union[MovementType, str],
        performed_by: Optional[str] = None,
        transfer_id: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> Optional[StockMovement]:
        """
        Move stock in or out and record the movement.

        Stock is floored at zero. The item's status and total value are
        re-derived before returning, and the movement is prepended to the
        log so the log stays most-recent-first.

        Args:
            item_id: Item ID
            quantity: Units moved (non-negative)
            reason: Why the stock changed
            movement_type: "in" or "out"
            performed_by: Operator name (defaults to the configured operator)
            transfer_id: Transfer that caused the movement
            order_id: Order that caused the movement

        Returns:
            The recorded StockMovement, or None if the item does not exist

        Raises:
            ValidationError: If quantity is negative or the direction is not in/out
        """
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        try:
            direction = MovementType(movement_type)
        except ValueError:
            raise ValidationError(f"Invalid stock update direction: {movement_type}") from None
        if direction not in (MovementType.IN, MovementType.OUT):
            raise ValidationError("Stock updates must be 'in' or 'out'")

        item = self.store.find_item(item_id)
        if item is None:
            self.logger.warning(f"Stock update ignored: unknown item {item_id}")
            return None

        previous = item.current_stock
        if direction == MovementType.IN:
            item.current_stock = previous + quantity
        else:
            item.current_stock = max(0, previous - quantity)
        item.refresh_derived()

        movement = StockMovement(
            item_id=item_id,
            item_name=item.name,
            type=direction,
            quantity=quantity,
            reason=reason,
            location=item.location,
            performed_by=performed_by or self.operator,
            transfer_id=transfer_id,
            order_id=order_id,
        )
        self.store.movements.insert(0, movement)

        self.store.save_inventory()
        self.store.save_movements()

        self.audit_logger.log_action(
            action_type=ActionType.STOCK_IN if direction == MovementType.IN else ActionType.STOCK_OUT,
            actor=movement.performed_by,
            details={
                "quantity": quantity,
                "previous_stock": previous,
                "new_stock": item.current_stock,
                "reason": reason,
            },
            item_id=item_id,
            order_id=order_id,
        )
        self.logger.info(
            f"Stock {direction.value} for {item.name} ({item_id}): "
            f"{previous} -> {item.current_stock} [{item.status.value}]"
        )
        return movement

    def get_movements(self, item_id: Optional[str] = None, limit: Optional[int] = None) -> List[StockMovement]:
        """
        Get movement log entries, most recent first.

        Args:
            item_id: Only movements for this item
            limit: Maximum number of entries

        Returns:
            List of StockMovements
        """
        movements = self.store.movements
        if item_id is not None:
            movements = [m for m in movements if m.item_id == item_id]
        return list(movements[:limit] if limit is not None else movements)

    # Transfers

    def create_transfer(
        self,
        item_id: str,
        from_location: str,
        to_location: str,
        quantity: int,
        requested_by: str,
        transfer_type: Union[TransferType, str] = TransferType.WAREHOUSE_TO_STORE,
        notes: Optional[str] = None,
    ) -> StockTransfer:
        """
        Create a pending transfer.

        No stock moves until the transfer is completed.

        Returns:
            The new StockTransfer
        """
        item = self.store.find_item(item_id)
        transfer = StockTransfer(
            item_id=item_id,
            item_name=item.name if item else "",
            from_location=from_location,
            to_location=to_location,
            quantity=quantity,
            requested_by=requested_by,
            transfer_type=TransferType(transfer_type),
            notes=notes,
        )
        self.store.transfers.insert(0, transfer)
        self.store.save_transfers()

        self.audit_logger.log_action(
            action_type=ActionType.TRANSFER_CREATED,
            actor=requested_by,
            details={
                "transfer_id": transfer.id,
                "from": from_location,
                "to": to_location,
                "quantity": quantity,
                "type": transfer.transfer_type.value,
            },
            item_id=item_id,
        )
        self.logger.info(f"Created transfer {transfer.id}: {quantity} x {item_id} {from_location} -> {to_location}")
        return transfer

    def update_transfer_status(
        self,
        transfer_id: str,
        status: Union[TransferStatus, str],
        notes: Optional[str] = None,
    ) -> Optional[StockTransfer]:
        """
        Move a transfer to a new status.

        A pending transfer may go in transit or be cancelled; an in-transit
        transfer may be completed or cancelled. Completing a
        warehouse-to-store transfer takes its quantity out of the source
        item. Other transfer types complete without moving stock.

        Args:
            transfer_id: Transfer ID
            status: New status
            notes: Replaces the transfer notes when given

        Returns:
            Updated transfer, or None if unknown or the move is not allowed

        Raises:
            ValidationError: If status is not a transfer status
        """
        try:
            new_status = TransferStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid transfer status: {status}") from None

        transfer = self.store.find_transfer(transfer_id)
        if transfer is None:
            self.logger.warning(f"Transfer update ignored: unknown transfer {transfer_id}")
            return None
        if not transfer.can_transition_to(new_status):
            self.logger.warning(
                f"Transfer update ignored: {transfer_id} cannot move from "
                f"{transfer.status.value} to {new_status.value}"
            )
            return None

        previous = transfer.status
        transfer.status = new_status
        if notes:
            transfer.notes = notes

        if new_status == TransferStatus.COMPLETED:
            transfer.completed_at = datetime.now()
            transfer.approved_by = self.operator

            if transfer.transfer_type == TransferType.WAREHOUSE_TO_STORE:
                self.update_stock(
                    transfer.item_id,
                    transfer.quantity,
                    f"Transfer to {transfer.to_location}",
                    MovementType.OUT,
                    transfer_id=transfer.id,
                )

        self.store.save_transfers()

        self.audit_logger.log_action(
            action_type=ActionType.TRANSFER_STATUS_CHANGED,
            actor=self.operator,
            details={"transfer_id": transfer_id, "from": previous.value, "to": new_status.value},
            item_id=transfer.item_id,
        )
        self.logger.info(f"Transfer {transfer_id}: {previous.value} -> {new_status.value}")
        return transfer

    def get_transfers(self, status: Optional[TransferStatus] = None) -> List[StockTransfer]:
        if status is None:
            return list(self.store.transfers)
        return [t for t in self.store.transfers if t.status == status]

    # Alerts

    def create_alert(
        self,
        item: InventoryItem,
        alert_type: AlertType,
        message: str,
        severity: AlertSeverity = AlertSeverity.MEDIUM,
    ) -> InventoryAlert:
        """Record a new unacknowledged alert for an item."""
        alert = InventoryAlert(
            type=alert_type,
            item_id=item.id,
            item_name=item.name,
            message=message,
            severity=severity,
        )
        self.store.alerts.insert(0, alert)
        self.store.save_alerts()

        self.audit_logger.log_action(
            action_type=ActionType.ALERT_CREATED,
            actor="system",
            details={"alert_id": alert.id, "type": alert_type.value, "severity": severity.value},
            item_id=item.id,
        )
        return alert

    def check_stock_alerts(self) -> List[InventoryAlert]:
        """
        Raise alerts for items that crossed a stock threshold.

        An item that already has an unacknowledged alert of the same type
        gets no duplicate.

        Returns:
            Alerts created by this check
        """
        open_alerts = {
            (alert.item_id, alert.type) for alert in self.store.alerts if not alert.acknowledged
        }
        created: List[InventoryAlert] = []

        for item in self.store.inventory:
            if item.status == StockStatus.OUT_OF_STOCK:
                alert_type = AlertType.OUT_OF_STOCK
                severity = AlertSeverity.CRITICAL
                message = f"{item.name} is out of stock"
            elif item.status == StockStatus.LOW_STOCK:
                alert_type = AlertType.LOW_STOCK
                if item.current_stock < item.min_stock * 0.5:
                    severity = AlertSeverity.CRITICAL
                else:
                    severity = AlertSeverity.HIGH
                message = f"{item.name} is low ({item.current_stock} left, minimum {item.min_stock})"
            elif item.status == StockStatus.OVERSTOCKED:
                alert_type = AlertType.OVERSTOCK
                severity = AlertSeverity.LOW
                message = f"{item.name} is overstocked ({item.current_stock}, maximum {item.max_stock})"
            else:
                continue

            if (item.id, alert_type) in open_alerts:
                continue
            created.append(self.create_alert(item, alert_type, message, severity))

        if created:
            self.logger.info(f"Stock check raised {len(created)} alert(s)")
        return created

    def acknowledge_alert(self, alert_id: str) -> Optional[InventoryAlert]:
        """
        Mark an alert acknowledged.

        Returns:
            The alert, or None if not found
        """
        alert = next((a for a in self.store.alerts if a.id == alert_id), None)
        if alert is None:
            self.logger.warning(f"Acknowledge ignored: unknown alert {alert_id}")
            return None

        alert.acknowledged = True
        self.store.save_alerts()

        self.audit_logger.log_action(
            action_type=ActionType.ALERT_ACKNOWLEDGED,
            actor=self.operator,
            details={"alert_id": alert_id},
            item_id=alert.item_id,
        )
        self.logger.info(f"Acknowledged alert {alert_id}")
        return alert

    def get_alerts(self, include_acknowledged: bool = False) -> List[InventoryAlert]:
        if include_acknowledged:
            return list(self.store.alerts)
        return [a for a in self.store.alerts if not a.acknowledged]

    # Summary and maintenance

    def get_inventory_summary(self) -> Dict[str, float]:
        """
        Get inventory statistics from the live collections.

        Returns:
            Dictionary with totals and per-status counts
        """
        inventory = self.store.inventory

        def count(status: StockStatus) -> int:
            return sum(1 for item in inventory if item.status == status)

        return {
            "total_items": sum(item.current_stock for item in inventory),
            "total_value": sum(item.total_value for item in inventory),
            "in_stock_items": count(StockStatus.IN_STOCK),
            "low_stock_items": count(StockStatus.LOW_STOCK),
            "out_of_stock_items": count(StockStatus.OUT_OF_STOCK),
            "overstocked_items": count(StockStatus.OVERSTOCKED),
            "pending_transfers": sum(
                1 for t in self.store.transfers if t.status == TransferStatus.PENDING
            ),
        }

    def refresh_inventory(self) -> None:
        """Re-read inventory data from storage."""
        self.store.reload_inventory()

    def clear_inventory_data(self) -> None:
        """Delete all inventory, transfer, movement and alert data."""
        self.store.clear_inventory_data()
        self.audit_logger.log_action(
            action_type=ActionType.INVENTORY_DATA_CLEARED,
            actor=self.operator,
        )
