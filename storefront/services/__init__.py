# Storefront services

from .pricing import compute_totals, PricingEngine
from .promo import PromoRegistry, PromoCode, AppliedPromo, promo_registry
from .checkout_flow import CheckoutSession, CheckoutState, transition, build_review
from .backend_client import DataStore, InMemoryDataStore, RestDataStore
from .auth_client import AuthClient, AuthUser, AuthSession
from .order_submission import OrderSubmitter, generate_order_number
from .order_history import OrderHistory

__all__ = [
    "compute_totals",
    "PricingEngine",
    "PromoRegistry",
    "PromoCode",
    "AppliedPromo",
    "promo_registry",
    "CheckoutSession",
    "CheckoutState",
    "transition",
    "build_review",
    "DataStore",
    "InMemoryDataStore",
    "RestDataStore",
    "AuthClient",
    "AuthUser",
    "AuthSession",
    "OrderSubmitter",
    "generate_order_number",
    "OrderHistory",
]
