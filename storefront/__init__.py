"""Fuel & Flex storefront checkout service"""

__version__ = "2.0.0"
