"""Shared fixtures for storefront tests."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from storefront.database.carts import CartStore
from storefront.database.local_store import KeyValueStore
from storefront.models.cart import CartItem
from storefront.models.checkout import Address, CustomerInfoForm, PaymentForm
from storefront.services.backend_client import InMemoryDataStore
from storefront.services.checkout_flow import CheckoutSession
from storefront.services.pricing import PricingEngine

TODAY = date(2025, 6, 15)
NOW = datetime(2025, 6, 15, 10, 30, tzinfo=timezone.utc)


def make_item(item_id: int = 1, price: str = "2499", quantity: int = 1, name: str = "Whey Protein pro") -> CartItem:
    return CartItem(id=item_id, name=name, unit_price=Decimal(price), quantity=quantity)


def make_address(**overrides) -> Address:
    fields = {
        "first_name": "Asha",
        "last_name": "Rao",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal": "560001",
    }
    fields.update(overrides)
    return Address(**fields)


def make_customer_form(**overrides) -> CustomerInfoForm:
    fields = {
        "email": "asha@example.com",
        "phone": "9876543210",
        "billing": make_address(),
    }
    fields.update(overrides)
    return CustomerInfoForm(**fields)


def make_card_form(**overrides) -> PaymentForm:
    fields = {
        "method": "card",
        "card_number": "4111 1111 1111 1234",
        "expiry": "12/27",
        "cvv": "123",
        "card_name": "Asha Rao",
    }
    fields.update(overrides)
    return PaymentForm(**fields)


@pytest.fixture
def store():
    return KeyValueStore()


@pytest.fixture
def cart_store(store):
    return CartStore(store)


@pytest.fixture
def data_store():
    return InMemoryDataStore()


@pytest.fixture
def checkout(cart_store):
    """Checkout session over a one-item cart, pinned to a fixed date"""
    cart_store.save([make_item()])
    return CheckoutSession(cart_store, pricing=PricingEngine(), today=lambda: TODAY)
