"""
Tests for the inventory ledger: stock updates, transfers, alerts and summaries.
"""

import pytest

from wims.exceptions import ValidationError
from wims.models import (
    ActionType,
    AlertSeverity,
    AlertType,
    InventoryItem,
    MovementType,
    StockStatus,
    TransferStatus,
    TransferType,
)
from wims.storage import StorageKeys
from wims.utils import get_audit_logger


def make_item(item_id: str, name: str, current: int, min_stock: int = 20, max_stock: int = 500,
              unit_cost: float = 10.0) -> InventoryItem:
    return InventoryItem(
        id=item_id,
        name=name,
        current_stock=current,
        min_stock=min_stock,
        max_stock=max_stock,
        unit_cost=unit_cost,
        location="Main Warehouse",
    )


class TestStockUpdates:
    """Stock in/out and the movement log."""

    @pytest.fixture(autouse=True)
    def setup(self, inventory_service, mango, store):
        self.service = inventory_service
        self.item = mango
        self.store = store

    def test_stock_in(self):
        movement = self.service.update_stock("2", 50, "Delivery", "in")

        assert self.item.current_stock == 150
        assert self.item.total_value == pytest.approx(150 * 300.0)
        assert movement.type == MovementType.IN
        assert movement.quantity == 50
        assert movement.item_name == "Mango"
        assert movement.performed_by == "Admin"
        assert movement.id.startswith("M-")

    def test_stock_out_is_floored_at_zero(self):
        self.service.update_stock("2", 150, "Damaged", MovementType.OUT)

        assert self.item.current_stock == 0
        assert self.item.status == StockStatus.OUT_OF_STOCK
        assert self.item.total_value == 0

    def test_status_follows_every_update(self):
        self.service.update_stock("2", 80, "Sale", "out")
        assert self.item.status == StockStatus.LOW_STOCK

        self.service.update_stock("2", 500, "Delivery", "in")
        assert self.item.status == StockStatus.OVERSTOCKED

        self.service.update_stock("2", 200, "Sale", "out")
        assert self.item.status == StockStatus.IN_STOCK

    def test_movements_are_most_recent_first(self):
        first = self.service.update_stock("2", 5, "First", "in")
        second = self.service.update_stock("2", 3, "Second", "out", performed_by="Ravi", order_id="ORD-1")

        movements = self.service.get_movements()

        assert movements == [second, first]
        assert movements[0].performed_by == "Ravi"
        assert movements[0].order_id == "ORD-1"
        assert self.service.get_movements(limit=1) == [second]
        assert self.service.get_movements(item_id="other") == []

    def test_one_movement_per_update(self):
        for _ in range(3):
            self.service.update_stock("2", 1, "Count", "in")

        assert len(self.store.movements) == 3

    def test_unknown_item_is_a_no_op(self):
        assert self.service.update_stock("missing", 5, "x", "in") is None
        assert self.store.movements == []

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            self.service.update_stock("2", -1, "x", "in")
        assert self.item.current_stock == 100

    def test_invalid_direction_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            self.service.update_stock("2", 1, "x", "sideways")
        assert excinfo.value.__suppress_context__ is True
        with pytest.raises(ValidationError):
            self.service.update_stock("2", 1, "x", MovementType.ADJUSTMENT)

    def test_updates_are_persisted(self, storage):
        self.service.update_stock("2", 10, "Delivery", "in")

        saved_items = storage.get_item(StorageKeys.INVENTORY)
        saved_movements = storage.get_item(StorageKeys.MOVEMENTS)

        assert saved_items[0]["currentStock"] == 110
        assert saved_items[0]["status"] == "in-stock"
        assert saved_movements[0]["itemId"] == "2"
        assert storage.get_item(StorageKeys.INVENTORY_LAST_SYNC) is not None

    def test_updates_are_audited(self, storage):
        self.service.update_stock("2", 10, "Sale", "out")

        log = get_audit_logger(storage).get_recent_logs(1)[0]

        assert log.action_type == ActionType.STOCK_OUT
        assert log.item_id == "2"
        assert log.details["new_stock"] == 90


class TestTransfers:
    """Transfer workflow and stock effects on completion."""

    @pytest.fixture(autouse=True)
    def setup(self, inventory_service, mango, store):
        self.service = inventory_service
        self.item = mango
        self.store = store

    def _transfer(self, transfer_type=TransferType.WAREHOUSE_TO_STORE, quantity=30):
        return self.service.create_transfer(
            "2", "Main Warehouse", "Store 1", quantity, requested_by="Ravi", transfer_type=transfer_type
        )

    def _in_transit(self, transfer_type=TransferType.WAREHOUSE_TO_STORE, quantity=30):
        transfer = self._transfer(transfer_type, quantity)
        self.service.update_transfer_status(transfer.id, TransferStatus.IN_TRANSIT)
        return transfer

    def test_create_transfer_is_pending(self):
        transfer = self._transfer()

        assert transfer.status == TransferStatus.PENDING
        assert transfer.id.startswith("T-")
        assert transfer.item_name == "Mango"
        assert self.item.current_stock == 100
        assert self.service.get_inventory_summary()["pending_transfers"] == 1

    def test_completing_warehouse_to_store_moves_stock_out(self):
        transfer = self._in_transit()

        updated = self.service.update_transfer_status(transfer.id, TransferStatus.COMPLETED)

        assert updated.status == TransferStatus.COMPLETED
        assert updated.completed_at is not None
        assert updated.approved_by == "Admin"
        assert self.item.current_stock == 70
        movement = self.store.movements[0]
        assert movement.type == MovementType.OUT
        assert movement.reason == "Transfer to Store 1"
        assert movement.transfer_id == transfer.id

    def test_completing_other_types_moves_no_stock(self):
        transfer = self._in_transit(TransferType.STORE_TO_WAREHOUSE)

        self.service.update_transfer_status(transfer.id, "completed")

        assert transfer.status == TransferStatus.COMPLETED
        assert self.item.current_stock == 100
        assert self.store.movements == []

    def test_completed_transfer_cannot_complete_twice(self):
        transfer = self._in_transit()
        self.service.update_transfer_status(transfer.id, "completed")

        assert self.service.update_transfer_status(transfer.id, "completed") is None
        assert self.item.current_stock == 70
        assert len(self.store.movements) == 1

    def test_cancelled_transfer_is_final(self):
        transfer = self._transfer()
        self.service.update_transfer_status(transfer.id, "cancelled")

        assert self.service.update_transfer_status(transfer.id, "in-transit") is None
        assert transfer.status == TransferStatus.CANCELLED

    def test_in_transit_transfer_can_be_cancelled(self):
        transfer = self._in_transit()

        assert self.service.update_transfer_status(transfer.id, "cancelled") is transfer
        assert transfer.status == TransferStatus.CANCELLED
        assert self.item.current_stock == 100

    def test_in_transit_cannot_return_to_pending(self):
        transfer = self._in_transit()

        assert self.service.update_transfer_status(transfer.id, "pending") is None
        assert transfer.status == TransferStatus.IN_TRANSIT
        assert self.service.get_inventory_summary()["pending_transfers"] == 0

    def test_pending_cannot_complete_without_dispatch(self):
        transfer = self._transfer()

        assert self.service.update_transfer_status(transfer.id, "completed") is None
        assert transfer.status == TransferStatus.PENDING
        assert transfer.completed_at is None
        assert self.item.current_stock == 100
        assert self.store.movements == []

    def test_unknown_status_rejected(self):
        transfer = self._transfer()

        with pytest.raises(ValidationError):
            self.service.update_transfer_status(transfer.id, "lost")
        assert transfer.status == TransferStatus.PENDING

    def test_notes_replaced_only_when_given(self):
        transfer = self._transfer()
        self.service.update_transfer_status(transfer.id, "in-transit", notes="Truck 4")
        self.service.update_transfer_status(transfer.id, "completed")

        assert transfer.notes == "Truck 4"

    def test_unknown_transfer_is_a_no_op(self):
        assert self.service.update_transfer_status("T-missing", "completed") is None

    def test_get_transfers_by_status(self):
        pending = self._transfer()
        done = self._in_transit()
        self.service.update_transfer_status(done.id, "completed")

        assert self.service.get_transfers(TransferStatus.PENDING) == [pending]
        assert self.service.get_transfers(TransferStatus.COMPLETED) == [done]
        assert len(self.service.get_transfers()) == 2


class TestAlerts:

    def test_check_stock_alerts(self, inventory_service):
        inventory_service.add_item(make_item("out", "Guava", 0))
        inventory_service.add_item(make_item("low", "Litchi", 15))
        inventory_service.add_item(make_item("very-low", "Orange", 5))
        inventory_service.add_item(make_item("over", "Mix Fruit", 600))
        inventory_service.add_item(make_item("ok", "Mango", 100))

        alerts = {a.item_id: a for a in inventory_service.check_stock_alerts()}

        assert set(alerts) == {"out", "low", "very-low", "over"}
        assert alerts["out"].type == AlertType.OUT_OF_STOCK
        assert alerts["out"].severity == AlertSeverity.CRITICAL
        assert alerts["low"].severity == AlertSeverity.HIGH
        assert alerts["very-low"].severity == AlertSeverity.CRITICAL
        assert alerts["over"].type == AlertType.OVERSTOCK
        assert alerts["over"].severity == AlertSeverity.LOW

    def test_open_alerts_are_not_duplicated(self, inventory_service):
        inventory_service.add_item(make_item("out", "Guava", 0))

        first = inventory_service.check_stock_alerts()
        assert inventory_service.check_stock_alerts() == []

        inventory_service.acknowledge_alert(first[0].id)
        assert len(inventory_service.check_stock_alerts()) == 1

    def test_acknowledge_alert(self, inventory_service, storage):
        inventory_service.add_item(make_item("out", "Guava", 0))
        alert = inventory_service.check_stock_alerts()[0]

        acknowledged = inventory_service.acknowledge_alert(alert.id)

        assert acknowledged.acknowledged is True
        assert inventory_service.get_alerts() == []
        assert inventory_service.get_alerts(include_acknowledged=True) == [alert]
        assert storage.get_item(StorageKeys.ALERTS)[0]["acknowledged"] is True
        assert inventory_service.acknowledge_alert("A-missing") is None


class TestItems:

    def test_add_item_derives_fields(self, inventory_service):
        item = make_item("x", "Guava", 10, unit_cost=2.5)

        inventory_service.add_item(item)

        assert item.status == StockStatus.LOW_STOCK
        assert item.total_value == pytest.approx(25)
        assert inventory_service.get_item("x") is item

    def test_duplicate_item_rejected(self, inventory_service, mango):
        with pytest.raises(ValidationError):
            inventory_service.add_item(make_item("2", "Mango again", 1))

    def test_update_item_price(self, inventory_service, mango):
        updated = inventory_service.update_item_price("2", 350)

        assert updated.unit_cost == 350
        assert updated.total_value == pytest.approx(100 * 350)
        assert inventory_service.update_item_price("missing", 1) is None

    def test_remove_item(self, inventory_service, mango, store):
        assert inventory_service.remove_item("2") is True
        assert inventory_service.get_item("2") is None
        assert inventory_service.remove_item("2") is False

    def test_search_and_low_stock(self, inventory_service, mango):
        inventory_service.add_item(make_item("low", "Litchi", 15))
        inventory_service.add_item(make_item("out", "Guava", 0))

        assert [i.id for i in inventory_service.search_items("mang")] == ["2"]
        assert [i.id for i in inventory_service.get_low_stock_items()] == ["out", "low"]
        assert [i.name for i in inventory_service.get_all_items()] == ["Guava", "Litchi", "Mango"]


def test_inventory_summary(inventory_service):
    inventory_service.add_item(make_item("a", "A", 100, unit_cost=2))
    inventory_service.add_item(make_item("b", "B", 10, unit_cost=3))
    inventory_service.add_item(make_item("c", "C", 0))
    inventory_service.add_item(make_item("d", "D", 600, unit_cost=1))

    summary = inventory_service.get_inventory_summary()

    assert summary["total_items"] == 710
    assert summary["total_value"] == pytest.approx(200 + 30 + 600)
    assert summary["in_stock_items"] == 1
    assert summary["low_stock_items"] == 1
    assert summary["out_of_stock_items"] == 1
    assert summary["overstocked_items"] == 1
    assert summary["pending_transfers"] == 0


def test_clear_and_refresh_inventory(inventory_service, mango, store, storage):
    inventory_service.update_stock("2", 5, "Delivery", "in")

    inventory_service.clear_inventory_data()

    assert store.inventory == []
    assert store.movements == []
    assert storage.get_item(StorageKeys.INVENTORY) is None

    storage.set_item(StorageKeys.INVENTORY, [make_item("z", "Orange", 50).to_storage()])
    inventory_service.refresh_inventory()

    assert [i.id for i in inventory_service.get_all_items()] == ["z"]
