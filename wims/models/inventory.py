"""
Inventory data models.

Defines warehouse stock items, the stock movement log, transfers between
locations, and threshold alerts.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from .base import WimsModel, generate_id


class StockStatus(str, Enum):
    """Stock level category derived from thresholds."""
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    OVERSTOCKED = "overstocked"


class MovementType(str, Enum):
    """Direction or cause of a stock movement."""
    IN = "in"
    OUT = "out"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"


class TransferStatus(str, Enum):
    """Transfer workflow status."""
    PENDING = "pending"
    IN_TRANSIT = "in-transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransferType(str, Enum):
    """Where stock moves from and to."""
    WAREHOUSE_TO_STORE = "warehouse-to-store"
    STORE_TO_WAREHOUSE = "store-to-warehouse"
    STORE_TO_STORE = "store-to-store"


class AlertType(str, Enum):
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    EXPIRY_WARNING = "expiry-warning"
    OVERSTOCK = "overstock"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


TERMINAL_TRANSFER_STATUSES = (TransferStatus.COMPLETED, TransferStatus.CANCELLED)

ALLOWED_TRANSFER_TRANSITIONS = {
    TransferStatus.PENDING: (TransferStatus.IN_TRANSIT, TransferStatus.CANCELLED),
    TransferStatus.IN_TRANSIT: (TransferStatus.COMPLETED, TransferStatus.CANCELLED),
    TransferStatus.COMPLETED: (),
    TransferStatus.CANCELLED: (),
}


def derive_stock_status(current_stock: float, min_stock: float, max_stock: float) -> StockStatus:
    """
    Categorize a stock level against its thresholds.

    Checks run in order: empty, at or below minimum, at or above maximum.

    Args:
        current_stock: Units on hand
        min_stock: Low-stock threshold (inclusive)
        max_stock: Overstock threshold (inclusive)

    Returns:
        StockStatus for the level
    """
    if current_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock <= min_stock:
        return StockStatus.LOW_STOCK
    if current_stock >= max_stock:
        return StockStatus.OVERSTOCKED
    return StockStatus.IN_STOCK


class InventoryItem(WimsModel):
    """
    Represents a single stock-keeping item in the warehouse.

    ``status`` and ``total_value`` are derived from ``current_stock`` and are
    recomputed on construction and by ``refresh_derived``.
    """

    id: str = Field(default_factory=lambda: generate_id("ITEM"))
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(default="", max_length=100)
    volume: str = Field(default="", max_length=50)  # e.g. "160 ml"
    bottles_per_case: int = Field(default=0, ge=0)
    current_stock: int = Field(default=0, ge=0)
    min_stock: int = Field(..., ge=0)
    max_stock: int = Field(..., ge=0)
    status: StockStatus = Field(default=StockStatus.IN_STOCK)
    unit_cost: float = Field(default=0.0, ge=0.0)
    total_value: float = Field(default=0.0, ge=0.0)
    reorder_point: int = Field(default=0, ge=0)
    location: str = Field(default="", max_length=100)
    supplier: str = Field(default="", max_length=200)
    last_updated: datetime = Field(default_factory=datetime.now)
    last_order_date: Optional[str] = None
    expiry_date: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0.0)
    max_price: Optional[float] = Field(None, ge=0.0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Mango",
                "category": "Fruit Juice",
                "volume": "160 ml",
                "bottlesPerCase": 40,
                "currentStock": 120,
                "minStock": 20,
                "maxStock": 500,
                "unitCost": 320.0,
                "reorderPoint": 30,
                "location": "Main Warehouse",
                "supplier": "Ekta Beverages"
            }
        }
    )

    @field_validator('unit_cost', mode='before')
    @classmethod
    def coerce_unit_cost(cls, v):
        """Stored costs may arrive as strings or garbage; non-numeric becomes 0."""
        try:
            return float(v)
        except (TypeError, ValueError):
            return 0.0

    @model_validator(mode='after')
    def apply_derived_fields(self) -> "InventoryItem":
        self.status = derive_stock_status(self.current_stock, self.min_stock, self.max_stock)
        self.total_value = self.current_stock * self.unit_cost
        return self

    def refresh_derived(self) -> None:
        """Recompute status and total value after a stock or cost change."""
        self.status = derive_stock_status(self.current_stock, self.min_stock, self.max_stock)
        self.total_value = self.current_stock * self.unit_cost
        self.last_updated = datetime.now()

    def is_low_stock(self) -> bool:
        return self.status in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK)

    def needs_reorder(self) -> bool:
        """Check if stock has fallen to the reorder point."""
        return self.current_stock <= self.reorder_point


class StockMovement(WimsModel):
    """Immutable log entry recording one stock quantity change and its cause."""

    id: str = Field(default_factory=lambda: generate_id("M"))
    item_id: str
    item_name: str = ""
    type: MovementType
    quantity: int = Field(..., ge=0)
    reason: str = ""
    location: str = ""
    performed_by: str = "Admin"
    timestamp: datetime = Field(default_factory=datetime.now)
    order_id: Optional[str] = None
    transfer_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class StockTransfer(WimsModel):
    """A request to relocate stock between two locations."""

    id: str = Field(default_factory=lambda: generate_id("T"))
    item_id: str
    item_name: str = ""
    from_location: str = Field(..., min_length=1)
    to_location: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    status: TransferStatus = Field(default=TransferStatus.PENDING)
    requested_by: str = ""
    approved_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    transfer_type: TransferType = Field(default=TransferType.WAREHOUSE_TO_STORE)

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TRANSFER_STATUSES

    def can_transition_to(self, status: TransferStatus) -> bool:
        """Check whether the transfer may move from its current status to ``status``."""
        return status in ALLOWED_TRANSFER_TRANSITIONS[self.status]


class InventoryAlert(WimsModel):
    """Threshold alert raised for an inventory item."""

    id: str = Field(default_factory=lambda: generate_id("A"))
    type: AlertType
    item_id: str
    item_name: str = ""
    message: str
    severity: AlertSeverity = Field(default=AlertSeverity.MEDIUM)
    created_at: datetime = Field(default_factory=datetime.now)
    acknowledged: bool = False
