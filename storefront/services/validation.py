"""
Checkout input validation.

Each validator walks its fields in a fixed order and raises a
ValidationError for the first field that fails. Errors are never
aggregated.
"""

import re
from datetime import date
from typing import Optional

from ..errors import ValidationError
from ..models.checkout import (
    Address,
    CustomerInfo,
    CustomerInfoForm,
    PaymentDetails,
    PaymentForm,
    PaymentMethod,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[6-9]\d{9}$")
CARD_NUMBER_RE = re.compile(r"^\d{13,19}$")
CVV_RE = re.compile(r"^\d{3,4}$")
EXPIRY_RE = re.compile(r"^(\d{1,2})\s*/\s*(\d{2}|\d{4})$")
UPI_RE = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z]{3,}$")
CARD_SEPARATORS_RE = re.compile(r"[\s-]")

# (attribute, label) in the order they are checked
ADDRESS_FIELDS: tuple[tuple[str, str], ...] = (
    ("first_name", "first name"),
    ("last_name", "last name"),
    ("address", "address"),
    ("city", "city"),
    ("state", "state"),
    ("postal", "postal code"),
)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def is_valid_phone(phone: str) -> bool:
    digits = re.sub(r"\D", "", phone or "")
    return bool(PHONE_RE.match(digits))


def strip_card_number(card_number: str) -> str:
    return CARD_SEPARATORS_RE.sub("", card_number or "")


def is_valid_card_number(card_number: str) -> bool:
    return bool(CARD_NUMBER_RE.match(strip_card_number(card_number)))


def parse_expiry(expiry: str) -> Optional[tuple[int, int]]:
    """Parse MM/YY (or MM/YYYY) into (month, full year)"""
    match = EXPIRY_RE.match((expiry or "").strip())
    if not match:
        return None
    month = int(match.group(1))
    year = int(match.group(2))
    if year < 100:
        year += 2000
    if not 1 <= month <= 12:
        return None
    return month, year


def is_valid_expiry(expiry: str, today: date) -> bool:
    """Expiry month must not be before the current month"""
    parsed = parse_expiry(expiry)
    if parsed is None:
        return False
    month, year = parsed
    return (year, month) >= (today.year, today.month)


def is_valid_cvv(cvv: str) -> bool:
    return bool(CVV_RE.match(cvv or ""))


def is_valid_upi(upi_id: str) -> bool:
    return bool(UPI_RE.match(upi_id or ""))


def _require_address(address: Address, prefix: str, label_prefix: str = "") -> None:
    for attr, label in ADDRESS_FIELDS:
        if not getattr(address, attr).strip():
            raise ValidationError(f"{prefix}.{attr}", f"Please fill in {label_prefix}{label}")


def _clean_address(address: Address) -> Address:
    return Address(**{name: value.strip() for name, value in address.model_dump().items()})


def validate_customer_info(form: CustomerInfoForm) -> CustomerInfo:
    """
    Validate the customer info step.

    Order: required contact and billing fields, email format, phone
    format, then shipping fields when a separate address is requested.
    """
    if not form.email.strip():
        raise ValidationError("email", "Please fill in email")
    if not form.phone.strip():
        raise ValidationError("phone", "Please fill in phone")
    _require_address(form.billing, "billing")

    if not is_valid_email(form.email.strip()):
        raise ValidationError("email", "Please enter a valid email address")

    if not is_valid_phone(form.phone):
        raise ValidationError("phone", "Please enter a valid phone number")

    billing = _clean_address(form.billing)
    if form.same_shipping:
        shipping = billing
    else:
        _require_address(form.shipping or Address(), "shipping", "shipping ")
        shipping = _clean_address(form.shipping)

    return CustomerInfo(
        email=form.email.strip(),
        phone=form.phone.strip(),
        billing=billing,
        shipping=shipping,
        separate_shipping=not form.same_shipping and shipping != billing,
    )


def validate_payment(form: PaymentForm, today: date) -> PaymentDetails:
    """Validate the payment step for the selected method"""
    if not form.method:
        raise ValidationError("method", "Please select a payment method")

    try:
        method = PaymentMethod(form.method.strip().lower())
    except ValueError:
        raise ValidationError("method", "Please select a payment method")

    if method == PaymentMethod.CARD:
        card_number = strip_card_number(form.card_number)
        if not is_valid_card_number(card_number):
            raise ValidationError("card_number", "Please enter a valid card number")
        if not is_valid_expiry(form.expiry, today):
            raise ValidationError("expiry", "Please enter a valid expiry date")
        if not is_valid_cvv(form.cvv.strip()):
            raise ValidationError("cvv", "Please enter a valid CVV")
        if not form.card_name.strip():
            raise ValidationError("card_name", "Please enter the name on card")
        return PaymentDetails(
            method=method,
            card_number=card_number,
            expiry=form.expiry.strip(),
            cvv=form.cvv.strip(),
            cardholder_name=form.card_name.strip(),
        )

    if method == PaymentMethod.UPI:
        upi_id = form.upi_id.strip()
        if not upi_id:
            raise ValidationError("upi_id", "Please enter a UPI ID")
        if not is_valid_upi(upi_id):
            raise ValidationError("upi_id", "Please enter a valid UPI ID (e.g., user@paytm)")
        return PaymentDetails(method=method, upi_id=upi_id)

    if method == PaymentMethod.NETBANKING:
        if not form.bank.strip():
            raise ValidationError("bank", "Please select a bank")
        return PaymentDetails(method=method, bank=form.bank.strip())

    return PaymentDetails(method=method)
