"""Order models for the storefront"""

from decimal import Decimal
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .checkout import CustomerInfo, PaymentMethod


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


STATUS_COLORS: dict[str, str] = {
    OrderStatus.PENDING.value: "#f59e0b",
    OrderStatus.CONFIRMED.value: "#10b981",
    OrderStatus.PROCESSING.value: "#3b82f6",
    OrderStatus.SHIPPED.value: "#8b5cf6",
    OrderStatus.DELIVERED.value: "#059669",
    OrderStatus.CANCELLED.value: "#ef4444",
}
DEFAULT_STATUS_COLOR = "#6b7280"


class OrderTotals(BaseModel):
    """Derived order amounts in whole currency units"""
    subtotal: Decimal = Field(default=Decimal("0"), ge=0)
    shipping: Decimal = Field(default=Decimal("0"), ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(default=Decimal("0"), ge=0)

    class Config:
        frozen = True


class OrderItem(BaseModel):
    """Item in an order"""
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class Order(BaseModel):
    """Placed order, immutable once created"""
    order_number: str
    status: OrderStatus = OrderStatus.CONFIRMED
    payment_status: PaymentStatus = PaymentStatus.PAID
    payment_method: PaymentMethod
    items: list[OrderItem]
    totals: OrderTotals
    customer_info: CustomerInfo
    created_at: datetime
    remote_id: Optional[str] = None  # Row id in the data store, None if never persisted
    user_id: Optional[str] = None
    session_id: Optional[str] = None

    class Config:
        frozen = True

    @property
    def persisted(self) -> bool:
        return self.remote_id is not None


class OrderConfirmation(BaseModel):
    """Snapshot of the last placed order kept in local persistence"""
    order_number: str
    order: Order
    items: list[OrderItem]
    totals: OrderTotals
    customer_info: CustomerInfo


class OrderSummary(BaseModel):
    """Order as shown in the order history"""
    id: str
    order_number: str
    status: str
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    shipping_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    billing_address: dict = {}
    shipping_address: dict = {}
    items: list[OrderItem] = []
    created_at: Optional[datetime] = None
    from_local_cache: bool = False

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def status_color(self) -> str:
        return STATUS_COLORS.get(self.status, DEFAULT_STATUS_COLOR)

    def preview(self, max_items: int = 3) -> tuple[list[OrderItem], int]:
        """First few items plus the count of the rest"""
        return self.items[:max_items], max(len(self.items) - max_items, 0)


class OrderHistoryResponse(BaseModel):
    """Order history API response"""
    orders: list[OrderSummary]
    from_local_cache: bool = False
