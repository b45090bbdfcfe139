#!/usr/bin/env python3
"""
Main entry point for WIMS.

Loads the local store, wires up the services and runs a single
command-line action against them.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import get_config_manager
from .exceptions import StorageError
from .services import AuthService, InventoryService, OrderService, PermissionService
from .storage import WimsStore, create_local_storage, create_store
from .utils import get_audit_logger, get_logger


class WimsApplication:
    """Main application controller."""

    def __init__(self) -> None:
        """Initialize the application."""
        self.logger = get_logger("wims")
        self.config = get_config_manager()
        self.storage = None
        self.store: Optional[WimsStore] = None
        self.auth_service: Optional[AuthService] = None
        self.inventory_service: Optional[InventoryService] = None
        self.order_service: Optional[OrderService] = None
        self.permission_service: Optional[PermissionService] = None

    def initialize(self) -> bool:
        """
        Initialize application components.

        Returns:
            True if initialization successful
        """
        storage_path = self.config.get("storage.path", "data/wims_storage.json")
        encryption_key = None
        if self.config.get("storage.encrypted", False):
            encryption_key = self.config.get_storage_encryption_key()

        self.logger.info(f"WIMS {__version__}")
        self.logger.info(f"Opening storage: {storage_path}")

        if not Path(storage_path).exists():
            self.logger.warning("Storage not found. Please run 'python scripts/init_storage.py' first.")
            return False

        try:
            self.storage = create_local_storage(storage_path, encryption_key)
        except StorageError as e:
            self.logger.error(f"Initialization failed: {e}")
            return False

        get_audit_logger(self.storage)
        self.store = create_store(self.storage)
        self.auth_service = AuthService(self.store, self.config)
        self.inventory_service = InventoryService(self.store)
        self.order_service = OrderService(self.store)
        self.permission_service = PermissionService(self.store, self.auth_service)

        self.logger.info("Application initialized successfully")
        return True

    def show_summary(self) -> None:
        summary = self.inventory_service.get_inventory_summary()
        print("Inventory summary")
        print(f"  Units in stock:     {summary['total_items']}")
        print(f"  Total value:        {summary['total_value']:.2f}")
        print(f"  In stock:           {summary['in_stock_items']}")
        print(f"  Low stock:          {summary['low_stock_items']}")
        print(f"  Out of stock:       {summary['out_of_stock_items']}")
        print(f"  Overstocked:        {summary['overstocked_items']}")
        print(f"  Pending transfers:  {summary['pending_transfers']}")

    def show_low_stock(self) -> None:
        items = self.inventory_service.get_low_stock_items()
        if not items:
            print("No low stock items")
            return
        for item in items:
            print(f"{item.id:<30} {item.name:<20} {item.current_stock:>6} / min {item.min_stock:<6} {item.status.value}")

    def check_alerts(self) -> None:
        created = self.inventory_service.check_stock_alerts()
        print(f"{len(created)} new alert(s)")
        for alert in self.inventory_service.get_alerts():
            print(f"[{alert.severity.value.upper():<8}] {alert.message}")

    def show_movements(self, item_id: Optional[str], limit: int) -> None:
        for movement in self.inventory_service.get_movements(item_id, limit):
            print(
                f"{movement.timestamp:%Y-%m-%d %H:%M} {movement.type.value:<4} "
                f"{movement.quantity:>6} {movement.item_name:<20} {movement.reason}"
            )

    def show_orders(self, status: Optional[str]) -> None:
        orders = (
            self.order_service.get_orders_by_status(status)
            if status else self.order_service.get_orders()
        )
        for order in orders:
            pricing = order.final_pricing or order.admin_pricing
            total = f"{pricing.total:.2f}" if pricing else "-"
            print(f"{order.id:<32} {order.status.value:<18} {order.vendor_name:<20} {total:>10}")

    def show_catalog(self) -> None:
        for item in self.order_service.get_catalog():
            print(f"{item.id:<4} {item.name:<12} {item.volume:<8} {item.bottles_per_case} per case")

    def run(self, args: argparse.Namespace) -> int:
        """
        Run one command.

        Returns:
            Exit code
        """
        if args.command == "summary":
            self.show_summary()
        elif args.command == "low-stock":
            self.show_low_stock()
        elif args.command == "alerts":
            self.check_alerts()
        elif args.command == "movements":
            self.show_movements(args.item, args.limit)
        elif args.command == "orders":
            self.show_orders(args.status)
        elif args.command == "catalog":
            self.show_catalog()
        else:
            return 2
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wims", description="Warehouse inventory and order pricing")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("summary", help="Show inventory totals")
    subparsers.add_parser("low-stock", help="List items at or below minimum stock")
    subparsers.add_parser("alerts", help="Check stock thresholds and list open alerts")

    movements = subparsers.add_parser("movements", help="Show recent stock movements")
    movements.add_argument("--item", help="Only movements for this item id")
    movements.add_argument(
        "--limit",
        type=int,
        default=get_config_manager().get("inventory.movement_history_limit", 100),
    )

    orders = subparsers.add_parser("orders", help="List orders")
    orders.add_argument(
        "--status",
        choices=["pending", "admin_priced", "salesman_adjusted", "approved", "rejected", "completed"],
    )

    subparsers.add_parser("catalog", help="List orderable products")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)
    app = WimsApplication()

    if not app.initialize():
        print("\n" + "=" * 60)
        print("ERROR: Application initialization failed")
        print("=" * 60)
        print("\nPlease run the storage initialization script:")
        print("  python scripts/init_storage.py")
        print("=" * 60)
        return 1

    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
