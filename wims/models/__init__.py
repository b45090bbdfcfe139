"""
Data models for WIMS.

This module exports all data models for easy import.
"""

from .audit_log import ActionType, AuditLog, Outcome
from .base import WimsModel, generate_id, now_ms
from .inventory import (
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
    derive_stock_status,
)
from .order import (
    DEFAULT_CATALOG,
    AdjustmentRange,
    CatalogItem,
    FinalPricing,
    Order,
    OrderItem,
    OrderStatus,
    Pricing,
    Vendor,
)
from .permission import (
    PermissionRequest,
    PermissionRequestStatus,
    PermissionRequestType,
)
from .user import Session, User, UserRole

__all__ = [
    "WimsModel",
    "generate_id",
    "now_ms",
    # Inventory models
    "InventoryItem",
    "StockMovement",
    "StockTransfer",
    "InventoryAlert",
    "StockStatus",
    "MovementType",
    "TransferStatus",
    "TransferType",
    "AlertType",
    "AlertSeverity",
    "derive_stock_status",
    # Order models
    "Order",
    "OrderItem",
    "OrderStatus",
    "Pricing",
    "FinalPricing",
    "AdjustmentRange",
    "CatalogItem",
    "Vendor",
    "DEFAULT_CATALOG",
    # User models
    "User",
    "UserRole",
    "Session",
    "PermissionRequest",
    "PermissionRequestStatus",
    "PermissionRequestType",
    # Audit log models
    "AuditLog",
    "ActionType",
    "Outcome",
]
