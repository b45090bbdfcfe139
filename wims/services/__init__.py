"""
Business logic services for WIMS.
"""

from .auth_service import AuthService
from .inventory_service import InventoryService
from .order_service import OrderService
from .permission_service import PermissionService

__all__ = ["AuthService", "InventoryService", "OrderService", "PermissionService"]
