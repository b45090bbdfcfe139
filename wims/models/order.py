"""
Order data models.

Defines salesman orders, their pricing stages, vendors, and the orderable
product catalog.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import WimsModel, generate_id


class OrderStatus(str, Enum):
    """
    Order pricing workflow status.

    pending -> admin_priced -> [salesman_adjusted] -> approved | rejected
    """
    PENDING = "pending"
    ADMIN_PRICED = "admin_priced"
    SALESMAN_ADJUSTED = "salesman_adjusted"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class CatalogItem(WimsModel):
    """A product a salesman can put on an order."""

    id: str
    name: str = Field(..., min_length=1)
    category: str = ""
    volume: str = ""
    bottles_per_case: int = Field(default=0, ge=0)
    unit: str = "cases"
    description: Optional[str] = None


class OrderItem(WimsModel):
    """Represents a single line on an order."""

    id: str  # Catalog / inventory item id
    name: str = Field(..., min_length=1)
    category: str = ""
    volume: str = ""
    bottles_per_case: int = Field(default=0, ge=0)
    requested_quantity: int = Field(..., gt=0)
    unit: str = "cases"
    description: Optional[str] = None
    unit_price: Optional[float] = None
    line_total: Optional[float] = None
    salesman_price: Optional[float] = None
    admin_price: Optional[float] = None
    final_price: Optional[float] = None

    @classmethod
    def from_catalog(cls, item: CatalogItem, quantity: int) -> "OrderItem":
        """Create an order line for a catalog product."""
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            volume=item.volume,
            bottles_per_case=item.bottles_per_case,
            requested_quantity=quantity,
            unit=item.unit,
            description=item.description,
        )


class Pricing(WimsModel):
    """Priced totals for an order at one stage."""

    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    item_prices: Dict[str, float] = Field(default_factory=dict)


class FinalPricing(Pricing):
    """Pricing after salesman adjustment, with the deltas that produced it."""

    adjustments: Dict[str, float] = Field(default_factory=dict)


class AdjustmentRange(WimsModel):
    """Bounds of the per-item price delta a salesman may apply."""

    min: float = 10.0
    max: float = 15.0


class Order(WimsModel):
    """Represents a salesman order moving through the pricing workflow."""

    id: str = Field(default_factory=lambda: generate_id("ORD"))
    salesman_id: str
    salesman_name: str = ""
    vendor_id: str
    vendor_name: str = ""
    items: List[OrderItem]
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    total_items: int = Field(default=0, ge=0)
    notes: str = ""
    with_gst: bool = False
    gst_number: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    admin_priced_at: Optional[datetime] = None
    salesman_adjusted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    salesman_adjustment_notes: Optional[str] = None
    allow_price_adjustment: bool = False
    price_adjustment_range: Optional[AdjustmentRange] = None
    salesman_pricing: Optional[Pricing] = None
    admin_pricing: Optional[Pricing] = None
    final_pricing: Optional[FinalPricing] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "salesmanId": "1718000000000",
                "salesmanName": "Ravi",
                "vendorId": "VEN-1718000000000-ab12cd",
                "vendorName": "City Mart",
                "items": [
                    {"id": "2", "name": "Mango", "requestedQuantity": 10}
                ],
                "withGst": True
            }
        }
    )

    @field_validator('items')
    @classmethod
    def validate_items_not_empty(cls, v: List[OrderItem]) -> List[OrderItem]:
        """Ensure order has at least one item."""
        if len(v) == 0:
            raise ValueError('Order must have at least one item')
        return v

    def calculate_total_items(self) -> int:
        """Total requested quantity across all lines."""
        return sum(item.requested_quantity for item in self.items)

    def get_item(self, item_id: str) -> Optional[OrderItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class Vendor(WimsModel):
    """A customer outlet orders are placed for."""

    id: str = Field(default_factory=lambda: generate_id("VEN"))
    name: str = Field(..., min_length=1, max_length=200)
    email: str = ""
    phone: str = ""
    address: str = ""
    contact_person: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    created_by: str = ""


DEFAULT_CATALOG: List[CatalogItem] = [
    CatalogItem(
        id=str(index),
        name=flavor,
        category="Fruit Juice",
        volume="160 ml",
        bottles_per_case=40,
        description=f"{flavor} flavored juice - 160ml bottles, 40 bottles per case",
    )
    for index, flavor in enumerate(["Litchi", "Mango", "Guava", "Mix Fruit", "Orange"], start=1)
]
