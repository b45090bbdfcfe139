"""
Audit log data models.

Defines data structures for recording who changed what in the warehouse.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """Types of actions that can be logged."""
    # Inventory actions
    INVENTORY_CREATED = "inventory_created"
    INVENTORY_DELETED = "inventory_deleted"
    INVENTORY_PRICE_UPDATED = "inventory_price_updated"
    INVENTORY_DATA_CLEARED = "inventory_data_cleared"
    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"

    # Transfer and alert actions
    TRANSFER_CREATED = "transfer_created"
    TRANSFER_STATUS_CHANGED = "transfer_status_changed"
    ALERT_CREATED = "alert_created"
    ALERT_ACKNOWLEDGED = "alert_acknowledged"

    # Order actions
    ORDER_CREATED = "order_created"
    ORDER_ADMIN_PRICED = "order_admin_priced"
    ORDER_SALESMAN_ADJUSTED = "order_salesman_adjusted"
    ORDER_STATUS_CHANGED = "order_status_changed"
    ORDER_APPROVED = "order_approved"
    ORDER_REJECTED = "order_rejected"
    VENDOR_CREATED = "vendor_created"

    # User actions
    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    PERMISSION_REQUESTED = "permission_requested"
    PERMISSION_APPROVED = "permission_approved"
    PERMISSION_REJECTED = "permission_rejected"


class Outcome(str, Enum):
    """Result of the action."""
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLog(BaseModel):
    """Represents a single audit log entry."""

    log_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    action_type: ActionType
    actor: str
    details: Dict[str, Any] = Field(default_factory=dict)
    outcome: Outcome = Field(default=Outcome.SUCCESS)
    item_id: Optional[str] = None
    order_id: Optional[str] = None
    error_message: Optional[str] = None

    def to_readable_string(self) -> str:
        """Convert log entry to human-readable string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        action_str = self.action_type.value.replace("_", " ").title()
        base = f"[{timestamp_str}] {self.actor}: {action_str} - {self.outcome.value.upper()}"

        if self.error_message:
            base += f" - Error: {self.error_message}"

        return base
