"""
Order submission.

Persists the assembled order through the data store, tolerating remote
failures: the shopper always reaches the confirmation, and the local
snapshot is the display record whenever the remote save did not
return one.
"""

import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ..errors import CollaboratorError
from ..models.cart import CartItem
from ..models.checkout import Address, CustomerInfo, PaymentDetails
from ..models.order import (
    Order,
    OrderConfirmation,
    OrderItem,
    OrderStatus,
    OrderTotals,
    PaymentStatus,
)
from ..database.carts import CartStore
from ..database.local_store import (
    KeyValueStore,
    GUEST_SESSION_KEY,
    LAST_ORDER_EMAIL_KEY,
    ORDER_CONFIRMATION_KEY,
)
from .auth_client import AuthUser
from .backend_client import DataStore

logger = logging.getLogger(__name__)

ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
BASE36_ALPHABET = string.digits + string.ascii_lowercase


def epoch_millis(now: Optional[datetime] = None) -> int:
    if now is None:
        return int(time.time() * 1000)
    return int(now.timestamp() * 1000)


def generate_order_number(
    prefix: str = "FF",
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Prefix + last 8 digits of the millisecond timestamp + 4 random characters"""
    rng = rng or random
    timestamp = str(epoch_millis(now))[-8:]
    suffix = "".join(rng.choice(ORDER_SUFFIX_ALPHABET) for _ in range(4))
    return f"{prefix}{timestamp}{suffix}"


def generate_guest_session_id(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    suffix = "".join(rng.choice(BASE36_ALPHABET) for _ in range(9))
    return f"guest_{epoch_millis(now)}_{suffix}"


def get_or_create_guest_session_id(store: KeyValueStore) -> str:
    """Guest session id kept in local persistence"""
    session_id = store.get_item(GUEST_SESSION_KEY)
    if not session_id:
        session_id = generate_guest_session_id()
        store.set_item(GUEST_SESSION_KEY, session_id)
    return session_id


def _address_json(address: Address) -> str:
    return json.dumps(address.model_dump(mode="json"))


def _address_row(user_id: str, address: Address, is_default: bool) -> dict:
    return {
        "user_id": user_id,
        "type": "shipping",
        "full_name": address.full_name,
        "address_line_1": address.address,
        "address_line_2": address.address2 or None,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal,
        "country": "India",
        "is_default": is_default,
    }


class OrderSubmitter:
    """Turns a reviewed checkout into an order"""

    def __init__(
        self,
        data_store: DataStore,
        local_store: KeyValueStore,
        order_number_prefix: str = "FF",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.data_store = data_store
        self.local_store = local_store
        self.cart_store = CartStore(local_store)
        self.order_number_prefix = order_number_prefix
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def submit(
        self,
        cart: list[CartItem],
        customer_info: CustomerInfo,
        payment: PaymentDetails,
        totals: OrderTotals,
        user: Optional[AuthUser] = None,
    ) -> Order:
        """
        Place an order.

        Remote persistence is best-effort. The returned order carries
        ``remote_id`` only when the order row was saved.
        """
        created_at = self._clock()
        order_number = generate_order_number(self.order_number_prefix, now=created_at)
        session_id = None if user else get_or_create_guest_session_id(self.local_store)

        items = [
            OrderItem(
                product_id=item.id,
                product_name=item.name,
                product_image=item.image,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.line_total,
            )
            for item in cart
        ]

        order_row = {
            "user_id": user.id if user else None,
            "session_id": session_id,
            "order_number": order_number,
            "status": OrderStatus.CONFIRMED.value,
            "subtotal": str(totals.subtotal),
            "tax_amount": str(totals.tax),
            "shipping_amount": str(totals.shipping),
            "discount_amount": str(totals.discount),
            "total_amount": str(totals.total),
            "billing_address": _address_json(customer_info.billing),
            "shipping_address": _address_json(customer_info.shipping),
            "payment_method": payment.method.value,
            "payment_status": PaymentStatus.PAID.value,
            "customer_email": customer_info.email,
            "customer_phone": customer_info.phone,
            "created_at": created_at.isoformat(),
        }

        remote_id = await self._save_order(order_row, items, created_at)

        if user:
            await self._save_customer_details(user, customer_info)

        order = Order(
            order_number=order_number,
            status=OrderStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            payment_method=payment.method,
            items=items,
            totals=totals,
            customer_info=customer_info,
            created_at=created_at,
            remote_id=remote_id,
            user_id=user.id if user else None,
            session_id=session_id,
        )

        self._record_confirmation(order)
        self.cart_store.clear()

        logger.info(
            f"Order {order_number} placed: {totals.total} - "
            f"{'saved' if remote_id else 'local only'}"
        )
        return order

    async def _save_order(self, order_row: dict, items: list[OrderItem], created_at: datetime) -> Optional[str]:
        """Insert the order and its items; returns the saved order id or None"""
        try:
            saved = await self.data_store.insert("orders", [order_row], notify=False)
        except CollaboratorError as e:
            logger.error(f"Error saving order {order_row['order_number']}: {e}")
            logger.warning("Database save failed, continuing to confirmation")
            return None

        if not saved or not saved[0].get("id"):
            logger.warning(f"Order {order_row['order_number']} save returned no record")
            return None

        order_id = str(saved[0]["id"])

        if items:
            item_rows = [
                {
                    "order_id": order_id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "product_image": item.product_image,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "total_price": str(item.total_price),
                    "created_at": created_at.isoformat(),
                }
                for item in items
            ]
            try:
                await self.data_store.insert("order_items", item_rows)
            except CollaboratorError as e:
                # TODO: flag partially written orders for repair once a reconciliation policy exists
                logger.error(f"Error saving order items for {order_row['order_number']}: {e}")

        # notify once the item rows exist
        await self.data_store.notify_inserts("orders", saved)
        return order_id

    async def _save_customer_details(self, user: AuthUser, customer_info: CustomerInfo) -> None:
        """Profile and address persistence, best-effort"""
        try:
            await self.save_profile(user, customer_info)
            await self.save_address(user.id, customer_info.billing)
            if customer_info.shipping != customer_info.billing:
                await self.save_address(user.id, customer_info.shipping)
        except CollaboratorError as e:
            logger.error(f"Error saving customer profile/address: {e}")

    async def save_profile(self, user: AuthUser, customer_info: CustomerInfo) -> list[dict]:
        profile = {
            "id": user.id,
            "full_name": customer_info.billing.full_name,
            "email": customer_info.email or user.email,
            "phone": customer_info.phone,
            "updated_at": self._clock().isoformat(),
        }
        return await self.data_store.upsert("profiles", profile, on_conflict="id")

    async def save_address(self, user_id: str, address: Address) -> Optional[dict]:
        """Save an address unless the same one is already on file"""
        existing = await self.data_store.select("addresses", {"user_id": user_id})

        for row in existing:
            if (
                row.get("address_line_1") == address.address
                and row.get("city") == address.city
                and row.get("postal_code") == address.postal
            ):
                return row

        saved = await self.data_store.insert(
            "addresses",
            [_address_row(user_id, address, is_default=not existing)],
        )
        return saved[0] if saved else None

    def _record_confirmation(self, order: Order) -> None:
        confirmation = OrderConfirmation(
            order_number=order.order_number,
            order=order,
            items=order.items,
            totals=order.totals,
            customer_info=order.customer_info,
        )
        self.local_store.set_json(ORDER_CONFIRMATION_KEY, confirmation.model_dump(mode="json"))
        if order.customer_info.email:
            self.local_store.set_item(LAST_ORDER_EMAIL_KEY, order.customer_info.email)


def load_confirmation(store: KeyValueStore) -> Optional[OrderConfirmation]:
    """Last order snapshot from local persistence, if readable"""
    raw = store.get_json(ORDER_CONFIRMATION_KEY)
    if not raw:
        return None
    try:
        return OrderConfirmation.model_validate(raw)
    except ValueError as e:
        logger.error(f"Invalid order confirmation data: {e}")
        return None
