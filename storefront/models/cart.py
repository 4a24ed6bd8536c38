"""Cart models for the storefront"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

from .order import OrderTotals


class CartItem(BaseModel):
    """Line item in a shopping cart"""
    id: int
    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    image: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: int
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity (0 removes the item)"""
    quantity: int = Field(ge=0)


class CartResponse(BaseModel):
    """Cart API response"""
    session_id: str
    items: list[CartItem]
    item_count: int
    totals: OrderTotals
    message: Optional[str] = None
