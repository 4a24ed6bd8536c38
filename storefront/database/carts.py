"""Cart storage on top of local persistence"""

import logging
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from ..models.cart import CartItem
from ..models.product import Product
from .local_store import KeyValueStore, CART_KEY

logger = logging.getLogger(__name__)


class CartStore:
    """Shopper cart persisted under the ``cart`` key"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> list[CartItem]:
        """Load cart items; corrupt data yields an empty cart"""
        raw_items = self.store.get_json(CART_KEY, default=[])
        if not isinstance(raw_items, list):
            logger.error("Stored cart is not a list, starting with an empty cart")
            return []

        try:
            return [CartItem.model_validate(item) for item in raw_items]
        except ModelValidationError as e:
            logger.error(f"Error parsing cart data: {e}")
            return []

    def save(self, items: list[CartItem]) -> None:
        self.store.set_json(CART_KEY, [item.model_dump(mode="json") for item in items])

    def add_item(self, product: Product, quantity: int = 1) -> list[CartItem]:
        """Add a product, merging with an existing line"""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        items = self.load()
        existing_item = next((item for item in items if item.id == product.id), None)

        if existing_item:
            existing_item.quantity += quantity
        else:
            items.append(
                CartItem(
                    id=product.id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=quantity,
                    image=product.image,
                )
            )

        self.save(items)
        return items

    def update_quantity(self, product_id: int, quantity: int) -> Optional[list[CartItem]]:
        """Set an item's quantity; 0 or less removes it. None if the item is not in the cart."""
        items = self.load()
        item = next((item for item in items if item.id == product_id), None)
        if not item:
            return None

        if quantity <= 0:
            items = [i for i in items if i.id != product_id]
        else:
            item.quantity = quantity

        self.save(items)
        return items

    def change_quantity(self, product_id: int, delta: int) -> Optional[list[CartItem]]:
        """Increment or decrement an item's quantity"""
        item = next((item for item in self.load() if item.id == product_id), None)
        if not item:
            return None
        return self.update_quantity(product_id, item.quantity + delta)

    def remove_item(self, product_id: int) -> list[CartItem]:
        items = [i for i in self.load() if i.id != product_id]
        self.save(items)
        return items

    def clear(self) -> None:
        self.store.remove_item(CART_KEY)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.load())
