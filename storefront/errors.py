"""Storefront error taxonomy"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront errors"""

    default_message = "An error occurred. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """A single user-correctable field error"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


# ==================== Promo codes ====================

class PromoError(StorefrontError):
    """Promo code could not be applied or removed"""
    pass


class EmptyCode(PromoError):
    default_message = "Please enter a promo code"


class AlreadyApplied(PromoError):
    default_message = "This promo code is already applied"


class ConflictingCode(PromoError):
    default_message = "A promo code is already applied. Remove it first to apply a new one."


class UnknownCode(PromoError):
    default_message = "Invalid promo code"


class NoActiveCode(PromoError):
    default_message = "No promo code is currently applied"


# ==================== Checkout flow ====================

class CheckoutError(StorefrontError):
    """Checkout action not allowed in the current state"""
    pass


class InvalidStepError(CheckoutError):
    default_message = "This action is not available at the current checkout step"


class EmptyCartError(CheckoutError):
    default_message = "Your cart is empty. Add some items before checkout."


# ==================== Collaborators ====================

class CollaboratorError(StorefrontError):
    """Hosted backend (auth or data store) failure"""
    pass


class DataStoreError(CollaboratorError):
    """Data store read or write failed"""

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class AuthError(CollaboratorError):
    """Authentication failed"""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ConfigUnavailable(StorefrontError):
    """Backend client was never made available"""
    default_message = "Config not available after waiting"
