"""
Tests for the order pricing workflow and vendors.
"""

import pytest

from wims.exceptions import ValidationError
from wims.models import DEFAULT_CATALOG, ActionType, Order, OrderItem, OrderStatus
from wims.storage import StorageKeys
from wims.utils import get_audit_logger


class TestOrderWorkflow:
    """Order creation through approval."""

    @pytest.fixture(autouse=True)
    def setup(self, order_service, two_line_items, store):
        self.service = order_service
        self.store = store
        self.order = order_service.create_order(
            salesman_id="s1",
            vendor_id="v1",
            items=two_line_items,
            salesman_name="Ravi",
            vendor_name="City Mart",
            with_gst=True,
        )

    def test_new_order_is_pending(self):
        assert self.order.status == OrderStatus.PENDING
        assert self.order.id.startswith("ORD-")
        assert self.order.total_items == 5
        assert self.order.admin_pricing is None
        assert self.service.get_order(self.order.id) is self.order

    def test_caller_status_is_overridden(self, two_line_items):
        order = Order(salesman_id="s2", vendor_id="v1", items=two_line_items, status=OrderStatus.APPROVED)

        stored = self.service.add_order(order)

        assert stored.status == OrderStatus.PENDING

    def test_empty_order_is_rejected(self):
        with pytest.raises(ValidationError):
            self.service.create_order("s1", "v1", [])
        assert len(self.store.orders) == 1

    def test_admin_pricing(self):
        order = self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50}, admin_notes="Festival rates")

        assert order.status == OrderStatus.ADMIN_PRICED
        assert order.admin_priced_at is not None
        assert order.admin_pricing.subtotal == pytest.approx(350)
        assert order.admin_pricing.tax == pytest.approx(42)
        assert order.admin_pricing.total == pytest.approx(392)
        assert order.admin_notes == "Festival rates"
        assert [i.admin_price for i in order.items] == [100, 50]
        assert [i.final_price for i in order.items] == [100, 50]
        assert order.allow_price_adjustment is False
        assert order.price_adjustment_range is None

    def test_admin_pricing_unmapped_item_gets_zero(self):
        order = self.service.set_admin_pricing(self.order.id, {"a": 100})

        assert order.get_item("b").admin_price == 0
        assert order.admin_pricing.subtotal == pytest.approx(200)

    def test_allowing_adjustment_attaches_fixed_range(self):
        order = self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50}, allow_adjustment=True)

        assert order.allow_price_adjustment is True
        assert order.price_adjustment_range.min == 10
        assert order.price_adjustment_range.max == 15

    def test_salesman_adjustment(self):
        self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50}, allow_adjustment=True)

        order = self.service.set_salesman_adjustment(self.order.id, {"a": 10, "b": -5}, notes="Bulk buyer")

        assert order.status == OrderStatus.SALESMAN_ADJUSTED
        assert order.salesman_adjusted_at is not None
        assert order.final_pricing.item_prices == {"a": 110, "b": 45}
        assert order.final_pricing.subtotal == pytest.approx(355)
        assert order.final_pricing.tax == pytest.approx(35.5)
        assert order.final_pricing.total == pytest.approx(390.5)
        assert [i.final_price for i in order.items] == [110, 45]
        assert order.salesman_adjustment_notes == "Bulk buyer"
        # Admin pricing stays as the admin set it
        assert order.admin_pricing.total == pytest.approx(392)

    def test_adjustment_ignored_when_not_allowed(self):
        self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50})
        before = self.order.model_dump()

        result = self.service.set_salesman_adjustment(self.order.id, {"a": 10})

        assert result is None
        assert self.order.model_dump() == before
        assert self.order.status == OrderStatus.ADMIN_PRICED

    def test_adjustment_ignored_without_admin_pricing(self):
        self.order.allow_price_adjustment = True

        assert self.service.set_salesman_adjustment(self.order.id, {"a": 10}) is None
        assert self.order.final_pricing is None
        assert self.order.status == OrderStatus.PENDING

    def test_engine_does_not_clamp_adjustments(self):
        self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50}, allow_adjustment=True)

        order = self.service.set_salesman_adjustment(self.order.id, {"a": 40})

        assert order.final_pricing.item_prices["a"] == 140

    def test_approve(self):
        order = self.service.approve_order(self.order.id)

        assert order.status == OrderStatus.APPROVED
        assert order.approved_at is not None

    def test_approve_rejected_order_is_allowed(self):
        self.service.reject_order(self.order.id, "No stock")

        assert self.service.approve_order(self.order.id).status == OrderStatus.APPROVED

    def test_reject_overwrites_notes_and_keeps_pricing(self):
        self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50}, admin_notes="First note", allow_adjustment=True)
        self.service.set_salesman_adjustment(self.order.id, {"a": 10, "b": -5})
        admin_pricing = self.order.admin_pricing.model_dump()
        final_pricing = self.order.final_pricing.model_dump()

        order = self.service.reject_order(self.order.id, "Price too low")

        assert order.status == OrderStatus.REJECTED
        assert order.admin_notes == "Price too low"
        assert order.admin_pricing.model_dump() == admin_pricing
        assert order.final_pricing.model_dump() == final_pricing

    def test_unknown_order_is_a_no_op(self):
        assert self.service.set_admin_pricing("ORD-missing", {"a": 1}) is None
        assert self.service.approve_order("ORD-missing") is None
        assert self.service.reject_order("ORD-missing", "x") is None
        assert self.service.update_order_status("ORD-missing", "completed") is None
        assert len(self.store.orders) == 1

    def test_update_order_status(self):
        order = self.service.update_order_status(self.order.id, "completed")

        assert order.status == OrderStatus.COMPLETED
        assert self.service.get_orders_by_status(OrderStatus.COMPLETED) == [order]

    def test_unknown_order_status_rejected(self):
        with pytest.raises(ValidationError):
            self.service.update_order_status(self.order.id, "shipped")
        with pytest.raises(ValidationError):
            self.service.get_orders_by_status("shipped")
        assert self.order.status == OrderStatus.PENDING

    def test_orders_are_persisted_in_camel_case(self, storage):
        self.service.set_admin_pricing(self.order.id, {"a": 100, "b": 50})

        saved = storage.get_item(StorageKeys.ORDERS)

        assert saved[0]["id"] == self.order.id
        assert saved[0]["status"] == "admin_priced"
        assert saved[0]["adminPricing"]["itemPrices"] == {"a": 100, "b": 50}
        assert saved[0]["items"][0]["requestedQuantity"] == 2

    def test_workflow_is_audited(self, storage):
        self.service.approve_order(self.order.id)

        logs = get_audit_logger(storage).get_recent_logs(10)

        assert logs[0].action_type == ActionType.ORDER_APPROVED
        assert logs[0].order_id == self.order.id
        assert logs[1].action_type == ActionType.ORDER_CREATED


def test_adjustment_tax_ignores_gst_flag(order_service, two_line_items):
    order = order_service.create_order(salesman_id="s1", vendor_id="v1", items=two_line_items, with_gst=False)
    order_service.set_admin_pricing(order.id, {"a": 100, "b": 50}, allow_adjustment=True)
    assert order.admin_pricing.tax == 0

    order_service.set_salesman_adjustment(order.id, {"a": 10, "b": -5})

    assert order.final_pricing.subtotal == pytest.approx(355)
    assert order.final_pricing.tax == pytest.approx(35.5)
    assert order.final_pricing.total == pytest.approx(390.5)


def test_salesman_prices_on_create(order_service, two_line_items):
    order = order_service.create_order(
        "s1", "v1", two_line_items, with_gst=True, salesman_prices={"a": 90, "b": 40}
    )

    assert order.salesman_pricing.subtotal == pytest.approx(300)
    assert order.salesman_pricing.total == pytest.approx(336)
    assert order.get_item("a").line_total == pytest.approx(180)


def test_orders_by_salesman(order_service, two_line_items):
    first = order_service.create_order("s1", "v1", two_line_items)
    order_service.create_order("s2", "v1", [OrderItem(id="a", name="Item A", requested_quantity=1)])

    assert order_service.get_orders_for_salesman("s1") == [first]


def test_vendor_name_is_looked_up(order_service, two_line_items):
    vendor = order_service.add_vendor("City Mart", email="buy@citymart.in", created_by="Ravi")

    order = order_service.create_order("s1", vendor.id, two_line_items)

    assert order.vendor_name == "City Mart"


class TestVendors:

    def test_add_vendor(self, order_service, storage):
        vendor = order_service.add_vendor(
            "  Fresh Foods ", phone="98765", contact_person="Anil", created_by="Sales User"
        )

        assert vendor.id.startswith("VEN-")
        assert vendor.name == "Fresh Foods"
        assert vendor.created_by == "Sales User"
        assert order_service.get_vendors() == [vendor]
        assert storage.get_item(StorageKeys.VENDORS)[0]["contactPerson"] == "Anil"

    def test_vendor_name_required(self, order_service):
        with pytest.raises(ValidationError):
            order_service.add_vendor("   ")
        assert order_service.get_vendors() == []

    def test_vendor_email_must_be_valid(self, order_service):
        with pytest.raises(ValidationError):
            order_service.add_vendor("Fresh Foods", email="not-an-email")


def test_default_catalog(order_service):
    catalog = order_service.get_catalog()

    assert [item.name for item in catalog] == ["Litchi", "Mango", "Guava", "Mix Fruit", "Orange"]
    assert all(item.bottles_per_case == 40 for item in catalog)
    assert order_service.get_catalog_item("2").name == "Mango"
    assert len(DEFAULT_CATALOG) == 5
