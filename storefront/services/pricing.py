"""
Pricing Engine

Computes order totals from cart contents and the active discount.
All amounts are whole currency units rounded half away from zero.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from ..models.cart import CartItem
from ..models.order import OrderTotals

FREE_SHIPPING_THRESHOLD = Decimal("899")
SHIPPING_FEE = Decimal("99")
TAX_RATE = Decimal("0.06")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_currency(amount: Decimal) -> Decimal:
    """Round to whole currency units, halves away from zero"""
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def compute_subtotal(items: Iterable[CartItem]) -> Decimal:
    subtotal = Decimal("0")
    for item in items:
        if item.quantity < 0 or item.unit_price < 0:
            raise ValueError(f"Invalid cart line for item {item.id}")
        subtotal += item.unit_price * item.quantity
    return round_currency(subtotal)


def compute_totals(
    items: Iterable[CartItem],
    discount_fraction: Number = Decimal("0"),
    *,
    free_shipping_threshold: Number = FREE_SHIPPING_THRESHOLD,
    shipping_fee: Number = SHIPPING_FEE,
    tax_rate: Number = TAX_RATE,
) -> OrderTotals:
    """
    Compute subtotal, shipping, tax, discount and total.

    Args:
        items: Cart line items
        discount_fraction: Active promo discount in [0, 1], 0 when none

    Returns:
        OrderTotals for exactly these inputs
    """
    fraction = to_decimal(discount_fraction)
    if fraction < 0 or fraction > 1:
        raise ValueError(f"discount fraction must be within [0, 1], got {fraction}")

    subtotal = compute_subtotal(items)

    if subtotal == 0:
        shipping = Decimal("0")
    elif subtotal > to_decimal(free_shipping_threshold):
        shipping = Decimal("0")
    else:
        shipping = round_currency(to_decimal(shipping_fee))

    tax = round_currency(subtotal * to_decimal(tax_rate))
    discount = round_currency(subtotal * fraction)
    total = subtotal + shipping + tax - discount

    return OrderTotals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=discount,
        total=total,
    )


class PricingEngine:
    """compute_totals bound to configured shipping and tax rules"""

    def __init__(
        self,
        free_shipping_threshold: Number = FREE_SHIPPING_THRESHOLD,
        shipping_fee: Number = SHIPPING_FEE,
        tax_rate: Number = TAX_RATE,
    ):
        self.free_shipping_threshold = to_decimal(free_shipping_threshold)
        self.shipping_fee = to_decimal(shipping_fee)
        self.tax_rate = to_decimal(tax_rate)

    @classmethod
    def from_settings(cls, settings) -> "PricingEngine":
        return cls(
            free_shipping_threshold=settings.free_shipping_threshold,
            shipping_fee=settings.shipping_fee,
            tax_rate=settings.tax_rate,
        )

    def compute_totals(self, items: Iterable[CartItem], discount_fraction: Number = Decimal("0")) -> OrderTotals:
        return compute_totals(
            items,
            discount_fraction,
            free_shipping_threshold=self.free_shipping_threshold,
            shipping_fee=self.shipping_fee,
            tax_rate=self.tax_rate,
        )
