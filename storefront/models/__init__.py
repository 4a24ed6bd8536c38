# Storefront Models

from .product import Product, ProductCategory, ProductSearchResponse
from .checkout import (
    Address,
    CheckoutStep,
    CustomerInfo,
    CustomerInfoForm,
    PaymentDetails,
    PaymentForm,
    PaymentMethod,
    PromoCodeRequest,
    ReviewSnapshot,
)
from .order import (
    Order,
    OrderConfirmation,
    OrderHistoryResponse,
    OrderItem,
    OrderStatus,
    OrderSummary,
    OrderTotals,
    PaymentStatus,
)
from .cart import CartItem, AddToCartRequest, UpdateCartItemRequest, CartResponse

__all__ = [
    "Product",
    "ProductCategory",
    "ProductSearchResponse",
    "Address",
    "CheckoutStep",
    "CustomerInfo",
    "CustomerInfoForm",
    "PaymentDetails",
    "PaymentForm",
    "PaymentMethod",
    "PromoCodeRequest",
    "ReviewSnapshot",
    "Order",
    "OrderConfirmation",
    "OrderHistoryResponse",
    "OrderItem",
    "OrderStatus",
    "OrderSummary",
    "OrderTotals",
    "PaymentStatus",
    "CartItem",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
]
