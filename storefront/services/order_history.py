"""Order history with local fallback"""

import inspect
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Optional, Union

from ..errors import CollaboratorError, DataStoreError
from ..models.order import OrderItem, OrderSummary
from ..database.local_store import KeyValueStore, GUEST_SESSION_KEY, LAST_ORDER_EMAIL_KEY
from .auth_client import AuthUser
from .backend_client import DataStore
from .order_submission import load_confirmation

logger = logging.getLogger(__name__)

OrdersCallback = Callable[[list[OrderSummary]], Union[None, Awaitable[None]]]


def _parse_address(value: Any) -> dict:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value:
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing address: {e}")
    return {}


def _amount(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.error(f"Error parsing amount: {value!r}")
        return Decimal("0")


def summary_from_row(row: dict, items: list[dict]) -> OrderSummary:
    """Build a display record from an ``orders`` row and its item rows"""
    return OrderSummary(
        id=str(row.get("id")),
        order_number=row.get("order_number") or "",
        status=row.get("status") or "pending",
        payment_method=row.get("payment_method"),
        payment_status=row.get("payment_status"),
        subtotal=_amount(row.get("subtotal")),
        tax_amount=_amount(row.get("tax_amount")),
        shipping_amount=_amount(row.get("shipping_amount")),
        discount_amount=_amount(row.get("discount_amount")),
        total_amount=_amount(row.get("total_amount")),
        customer_email=row.get("customer_email"),
        customer_phone=row.get("customer_phone"),
        billing_address=_parse_address(row.get("billing_address")),
        shipping_address=_parse_address(row.get("shipping_address")),
        items=[
            OrderItem(
                product_id=item.get("product_id"),
                product_name=item.get("product_name") or "",
                product_image=item.get("product_image"),
                quantity=int(item.get("quantity") or 0),
                unit_price=_amount(item.get("unit_price")),
                total_price=_amount(item.get("total_price")),
            )
            for item in items
        ],
        created_at=row.get("created_at"),
    )


class OrderHistory:
    """Loads a shopper's orders"""

    def __init__(self, data_store: DataStore, local_store: KeyValueStore):
        self.data_store = data_store
        self.local_store = local_store

    def _owner_filter(self, user: Optional[AuthUser]) -> Optional[dict[str, str]]:
        if user:
            return {"user_id": user.id}

        guest_session_id = self.local_store.get_item(GUEST_SESSION_KEY)
        if guest_session_id:
            return {"session_id": guest_session_id}

        last_order_email = self.local_store.get_item(LAST_ORDER_EMAIL_KEY)
        if last_order_email:
            return {"customer_email": last_order_email}

        return None

    async def load(self, user: Optional[AuthUser] = None) -> list[OrderSummary]:
        """
        Orders for the signed-in user, the guest session, or the last
        order email, newest first.

        Falls back to the locally cached confirmation when the remote
        query comes back empty.

        Raises:
            DataStoreError: The orders query failed
        """
        owner = self._owner_filter(user)
        if owner is None:
            return self.local_fallback()

        try:
            rows = await self.data_store.select("orders", owner, order_by="created_at")
        except CollaboratorError as e:
            logger.error(f"Error fetching orders: {e}")
            raise DataStoreError(f"Unable to load orders: {e.message}. Please try again.") from e

        orders = []
        for row in rows:
            try:
                items = await self.data_store.select("order_items", {"order_id": row.get("id")})
            except CollaboratorError as e:
                logger.error(f"Error fetching order items for {row.get('order_number')}: {e}")
                items = []
            orders.append(summary_from_row(row, items))

        if not orders:
            return self.local_fallback()
        return orders

    def local_fallback(self) -> list[OrderSummary]:
        """The last order snapshot as a one-item history, or nothing"""
        confirmation = load_confirmation(self.local_store)
        if confirmation is None:
            return []

        order = confirmation.order
        info = confirmation.customer_info
        logger.info(f"Showing locally cached order {confirmation.order_number}")
        return [
            OrderSummary(
                id=order.remote_id or "local",
                order_number=confirmation.order_number,
                status=order.status.value,
                payment_method=order.payment_method.value,
                payment_status=order.payment_status.value,
                subtotal=confirmation.totals.subtotal,
                tax_amount=confirmation.totals.tax,
                shipping_amount=confirmation.totals.shipping,
                discount_amount=confirmation.totals.discount,
                total_amount=confirmation.totals.total,
                customer_email=info.email,
                customer_phone=info.phone,
                billing_address=info.billing.model_dump(),
                shipping_address=info.shipping.model_dump(),
                items=confirmation.items,
                created_at=order.created_at,
                from_local_cache=True,
            )
        ]

    def watch(self, callback: OrdersCallback, user: Optional[AuthUser] = None) -> Callable[[], None]:
        """Reload on every new order and pass the fresh list to callback"""

        async def on_insert(row: dict) -> None:
            logger.debug(f"New order inserted: {row.get('order_number')}")
            try:
                orders = await self.load(user)
            except DataStoreError as e:
                logger.warning(f"Order refresh failed: {e}")
                return
            result = callback(orders)
            if inspect.isawaitable(result):
                await result

        return self.data_store.subscribe_inserts("orders", on_insert)
