"""
Admin permission request models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import WimsModel, generate_id


class PermissionRequestType(str, Enum):
    LOGIN = "login"
    ORDER_EDIT = "order_edit"
    PRICE_ADJUSTMENT = "price_adjustment"


class PermissionRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PermissionRequest(WimsModel):
    """A salesman's request for an admin to grant a capability."""

    id: str = Field(default_factory=lambda: generate_id("req"))
    salesman_id: str
    salesman_name: str = ""
    request_type: PermissionRequestType
    status: PermissionRequestStatus = Field(default=PermissionRequestStatus.PENDING)
    timestamp: datetime = Field(default_factory=datetime.now)
    notes: Optional[str] = None
