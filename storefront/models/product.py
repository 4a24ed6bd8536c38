"""Product models for the storefront catalog"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ProductCategory(str, Enum):
    PROTEIN = "protein"
    PERFORMANCE = "performance"
    RECOVERY = "recovery"
    ENERGY = "energy"
    HEALTH = "health"
    VITAMINS = "vitamins"
    TOPS = "tops"
    BOTTOMS = "bottoms"
    OUTERWEAR = "outerwear"
    ACCESSORIES = "accessories"


class Product(BaseModel):
    """Product in the catalog"""
    id: int
    name: str
    description: str
    price: Decimal = Field(gt=0)
    category: ProductCategory
    image: Optional[str] = None
    features: list[str] = []

    class Config:
        from_attributes = True


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int
