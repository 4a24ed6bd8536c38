"""Storefront Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Fuel & Flex"
    app_version: str = "2.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001

    # Hosted backend (auth + database)
    backend_url: Optional[str] = None
    backend_anon_key: Optional[str] = None
    backend_jwt_secret: Optional[str] = None  # Verify access tokens when set
    backend_ready_timeout: float = 5.0

    # Local persistence (cart, guest session, last order snapshot)
    local_store_path: Optional[str] = None

    # Pricing
    currency: str = "INR"
    free_shipping_threshold: int = 899
    shipping_fee: int = 99
    tax_rate: float = 0.06

    # Orders
    order_number_prefix: str = "FF"

    # Features
    guest_checkout: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def backend_configured(self) -> bool:
        """Check if the hosted backend is configured"""
        return all([self.backend_url, self.backend_anon_key])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
