# Database modules

from .products import product_db, ProductDatabase
from .local_store import KeyValueStore, JsonFileStore
from .carts import CartStore

__all__ = [
    "product_db",
    "ProductDatabase",
    "KeyValueStore",
    "JsonFileStore",
    "CartStore",
]
