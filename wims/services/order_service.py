"""
Order service for the salesman order pricing workflow.

Orders move pending -> admin_priced -> [salesman_adjusted] -> approved or
rejected. Each pricing stage is computed by the functions in ``pricing``.
"""

from datetime import datetime
from typing import Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as ModelValidationError

from ..config import get_config_manager
from ..exceptions import ValidationError
from ..models import (
    DEFAULT_CATALOG,
    ActionType,
    CatalogItem,
    Order,
    OrderItem,
    OrderStatus,
    Vendor,
)
from ..storage import WimsStore
from ..utils import get_audit_logger, get_logger, is_valid_email
from .pricing import (
    compute_adjusted_pricing,
    compute_admin_pricing,
    compute_salesman_pricing,
    default_adjustment_range,
)


def _parse_order_status(status: Union[OrderStatus, str]) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid order status: {status}") from None


class OrderService:
    """Service for managing orders and vendors."""

    def __init__(self, store: WimsStore, catalog: Optional[List[CatalogItem]] = None) -> None:
        """
        Initialize order service.

        Args:
            store: Loaded application store
            catalog: Orderable products (defaults to the juice catalog)
        """
        self.store = store
        self.catalog = list(catalog) if catalog is not None else list(DEFAULT_CATALOG)
        self.logger = get_logger("order_service")
        self.audit_logger = get_audit_logger(store.storage)
        self.operator = get_config_manager().get("inventory.default_operator", "Admin")

    # Catalog

    def get_catalog(self) -> List[CatalogItem]:
        return list(self.catalog)

    def get_catalog_item(self, item_id: str) -> Optional[CatalogItem]:
        return next((item for item in self.catalog if item.id == item_id), None)

    # Vendors

    def add_vendor(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        address: str = "",
        contact_person: str = "",
        created_by: str = "",
    ) -> Vendor:
        """
        Register a vendor.

        Args:
            name: Vendor name (required)
            email: Contact email, validated when given
            phone: Contact phone
            address: Street address
            contact_person: Person to ask for
            created_by: Name of the user adding the vendor

        Returns:
            The new Vendor

        Raises:
            ValidationError: If the name is blank or the email is malformed
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("Vendor name is required")
        if email and not is_valid_email(email):
            raise ValidationError("Please enter a valid email address")

        vendor = Vendor(
            name=name,
            email=email,
            phone=phone.strip(),
            address=address.strip(),
            contact_person=contact_person.strip(),
            created_by=created_by,
        )
        self.store.vendors.append(vendor)
        self.store.save_vendors()

        self.audit_logger.log_action(
            action_type=ActionType.VENDOR_CREATED,
            actor=created_by or self.operator,
            details={"vendor_id": vendor.id, "name": vendor.name},
        )
        self.logger.info(f"Added vendor: {vendor.name} ({vendor.id})")
        return vendor

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        return self.store.find_vendor(vendor_id)

    def get_vendors(self) -> List[Vendor]:
        return list(self.store.vendors)

    # Orders

    def create_order(
        self,
        salesman_id: str,
        vendor_id: str,
        items: List[OrderItem],
        salesman_name: str = "",
        vendor_name: str = "",
        notes: str = "",
        with_gst: bool = False,
        gst_number: Optional[str] = None,
        salesman_prices: Optional[Mapping[str, float]] = None,
    ) -> Order:
        """
        Create a pending order.

        Args:
            salesman_id: Ordering salesman
            vendor_id: Vendor the order is for
            items: Order lines (at least one, positive quantities)
            salesman_name: Display name of the salesman
            vendor_name: Display name of the vendor (looked up when omitted)
            notes: Free-text notes
            with_gst: Whether GST applies to this order
            gst_number: Vendor GST registration number
            salesman_prices: Optional unit prices the salesman proposes

        Returns:
            The stored Order

        Raises:
            ValidationError: If the order has no items
        """
        if not vendor_name:
            vendor = self.store.find_vendor(vendor_id)
            vendor_name = vendor.name if vendor else ""

        try:
            order = Order(
                salesman_id=salesman_id,
                salesman_name=salesman_name,
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                items=items,
                notes=notes,
                with_gst=with_gst,
                gst_number=gst_number,
            )
        except ModelValidationError as e:
            raise ValidationError(f"Invalid order: {e.errors()[0]['msg']}") from e

        if salesman_prices:
            order.salesman_pricing = compute_salesman_pricing(order.items, salesman_prices, with_gst)
            for item in order.items:
                price = order.salesman_pricing.item_prices[item.id]
                item.salesman_price = price
                item.unit_price = price
                item.line_total = price * item.requested_quantity

        return self.add_order(order)

    def add_order(self, order: Order) -> Order:
        """
        Store a new order.

        Whatever status the caller set, a new order always starts pending
        with a fresh creation timestamp.
        """
        order.status = OrderStatus.PENDING
        order.created_at = datetime.now()
        order.total_items = order.calculate_total_items()

        self.store.orders.insert(0, order)
        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_CREATED,
            actor=order.salesman_name or order.salesman_id,
            details={
                "vendor_id": order.vendor_id,
                "total_items": order.total_items,
                "with_gst": order.with_gst,
            },
            order_id=order.id,
        )
        self.logger.info(
            f"Created order {order.id} for vendor {order.vendor_id} "
            f"({len(order.items)} lines, {order.total_items} units)"
        )
        return order

    def set_admin_pricing(
        self,
        order_id: str,
        item_prices: Mapping[str, float],
        admin_notes: Optional[str] = None,
        allow_adjustment: bool = False,
    ) -> Optional[Order]:
        """
        Attach admin prices to an order.

        Items missing from ``item_prices`` are priced at 0. Tax is 12% when
        the order is GST-flagged, otherwise 0. Allowing adjustment always
        attaches the standard 10-15 range.

        Args:
            order_id: Order ID
            item_prices: Unit price per item id
            admin_notes: Notes for the salesman
            allow_adjustment: Whether the salesman may adjust prices

        Returns:
            Updated order, or None if not found
        """
        order = self.store.find_order(order_id)
        if order is None:
            self.logger.warning(f"Admin pricing ignored: unknown order {order_id}")
            return None

        pricing = compute_admin_pricing(order.items, item_prices, order.with_gst)
        for item in order.items:
            price = item_prices.get(item.id, 0) or 0
            item.admin_price = price
            item.final_price = price

        order.admin_pricing = pricing
        order.status = OrderStatus.ADMIN_PRICED
        order.admin_priced_at = datetime.now()
        order.allow_price_adjustment = allow_adjustment
        order.price_adjustment_range = default_adjustment_range() if allow_adjustment else None
        if admin_notes is not None:
            order.admin_notes = admin_notes

        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_ADMIN_PRICED,
            actor=self.operator,
            details={
                "subtotal": pricing.subtotal,
                "tax": pricing.tax,
                "total": pricing.total,
                "allow_adjustment": allow_adjustment,
            },
            order_id=order_id,
        )
        self.logger.info(f"Admin priced order {order_id}: total {pricing.total:.2f}")
        return order

    def set_salesman_adjustment(
        self,
        order_id: str,
        adjustments: Mapping[str, float],
        notes: Optional[str] = None,
    ) -> Optional[Order]:
        """
        Apply a salesman's per-item price deltas.

        Deltas are used as given. Orders without admin pricing, or whose
        admin did not allow adjustment, are left unchanged.

        Args:
            order_id: Order ID
            adjustments: Price delta per item id
            notes: Salesman's notes on the adjustment

        Returns:
            Updated order, or None if the order is unknown or not adjustable
        """
        order = self.store.find_order(order_id)
        if order is None:
            self.logger.warning(f"Adjustment ignored: unknown order {order_id}")
            return None
        if not order.allow_price_adjustment or order.admin_pricing is None:
            self.logger.info(f"Adjustment ignored: order {order_id} does not allow price adjustment")
            return None

        final = compute_adjusted_pricing(order.items, order.admin_pricing.item_prices, adjustments)
        for item in order.items:
            item.final_price = final.item_prices[item.id]

        order.final_pricing = final
        order.status = OrderStatus.SALESMAN_ADJUSTED
        order.salesman_adjusted_at = datetime.now()
        if notes is not None:
            order.salesman_adjustment_notes = notes

        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_SALESMAN_ADJUSTED,
            actor=order.salesman_name or order.salesman_id,
            details={"adjustments": dict(adjustments), "total": final.total},
            order_id=order_id,
        )
        self.logger.info(f"Salesman adjusted order {order_id}: total {final.total:.2f}")
        return order

    def update_order_status(
        self,
        order_id: str,
        status: Union[OrderStatus, str],
    ) -> Optional[Order]:
        """
        Set an order's status directly.

        Returns:
            Updated order, or None if not found

        Raises:
            ValidationError: If status is not an order status
        """
        new_status = _parse_order_status(status)
        order = self.store.find_order(order_id)
        if order is None:
            self.logger.warning(f"Status update ignored: unknown order {order_id}")
            return None

        previous = order.status
        order.status = new_status
        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_STATUS_CHANGED,
            actor=self.operator,
            details={"from": previous.value, "to": new_status.value},
            order_id=order_id,
        )
        self.logger.info(f"Order {order_id}: {previous.value} -> {new_status.value}")
        return order

    def approve_order(self, order_id: str) -> Optional[Order]:
        """Approve an order from whatever status it is in."""
        order = self.store.find_order(order_id)
        if order is None:
            self.logger.warning(f"Approval ignored: unknown order {order_id}")
            return None

        order.status = OrderStatus.APPROVED
        order.approved_at = datetime.now()
        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_APPROVED,
            actor=self.operator,
            order_id=order_id,
        )
        self.logger.info(f"Approved order {order_id}")
        return order

    def reject_order(self, order_id: str, reason: str) -> Optional[Order]:
        """
        Reject an order.

        The reason overwrites any existing admin notes. Pricing is kept.
        """
        order = self.store.find_order(order_id)
        if order is None:
            self.logger.warning(f"Rejection ignored: unknown order {order_id}")
            return None

        order.status = OrderStatus.REJECTED
        order.admin_notes = reason
        self.store.save_orders()

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_REJECTED,
            actor=self.operator,
            details={"reason": reason},
            order_id=order_id,
        )
        self.logger.info(f"Rejected order {order_id}: {reason}")
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.store.find_order(order_id)

    def get_orders(self) -> List[Order]:
        """Get all orders, newest first."""
        return list(self.store.orders)

    def get_orders_for_salesman(self, salesman_id: str) -> List[Order]:
        return [o for o in self.store.orders if o.salesman_id == salesman_id]

    def get_orders_by_status(self, status: Union[OrderStatus, str]) -> List[Order]:
        wanted = _parse_order_status(status)
        return [o for o in self.store.orders if o.status == wanted]

    def get_order_totals(self) -> Dict[str, int]:
        """Count orders per status."""
        totals = {status.value: 0 for status in OrderStatus}
        for order in self.store.orders:
            totals[order.status.value] += 1
        return totals
