"""Checkout models for the storefront"""

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, Field


class CheckoutStep(IntEnum):
    CUSTOMER_INFO = 1
    PAYMENT = 2
    REVIEW = 3


class PaymentMethod(str, Enum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    COD = "cod"


PAYMENT_METHOD_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.CARD: "Card",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.NETBANKING: "Net Banking",
    PaymentMethod.COD: "Cash on Delivery",
}


class Address(BaseModel):
    """Billing or shipping address"""
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    postal: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def one_line(self) -> str:
        return f"{self.full_name}, {self.address}, {self.city}, {self.state} {self.postal}"


class CustomerInfoForm(BaseModel):
    """Raw customer info step input"""
    email: str = ""
    phone: str = ""
    billing: Address = Field(default_factory=Address)
    same_shipping: bool = True
    shipping: Optional[Address] = None


class PaymentForm(BaseModel):
    """Raw payment step input"""
    method: Optional[str] = None
    card_number: str = ""
    expiry: str = ""
    cvv: str = ""
    card_name: str = ""
    upi_id: str = ""
    bank: str = ""


class CustomerInfo(BaseModel):
    """Validated customer info"""
    email: str
    phone: str
    billing: Address
    shipping: Address
    separate_shipping: bool = False

    class Config:
        frozen = True


class PaymentDetails(BaseModel):
    """Validated payment details"""
    method: PaymentMethod
    card_number: Optional[str] = None  # Digits only
    expiry: Optional[str] = None
    cvv: Optional[str] = Field(default=None, exclude=True, repr=False)
    cardholder_name: Optional[str] = None
    upi_id: Optional[str] = None
    bank: Optional[str] = None

    class Config:
        frozen = True

    @property
    def last_four(self) -> Optional[str]:
        if not self.card_number:
            return None
        return self.card_number[-4:]


class ReviewSnapshot(BaseModel):
    """Read-only summary shown on the review step"""
    email: str
    phone: str
    billing_summary: str
    shipping_summary: Optional[str] = None  # None when shipping to the billing address
    payment_method: PaymentMethod
    payment_summary: str
    masked_card_number: Optional[str] = None

    class Config:
        frozen = True


class PromoCodeRequest(BaseModel):
    """Request to apply a promo code"""
    code: str = ""
