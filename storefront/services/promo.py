"""Promo code registry"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from ..errors import EmptyCode, AlreadyApplied, ConflictingCode, UnknownCode, NoActiveCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoCode:
    """Registered promo code"""
    code: str
    discount_fraction: Decimal
    description: str = ""

    def __post_init__(self):
        if not Decimal("0") <= self.discount_fraction <= Decimal("1"):
            raise ValueError(f"{self.code}: discount fraction must be within [0, 1]")


@dataclass(frozen=True)
class AppliedPromo:
    """The single promo code active on a checkout session"""
    code: str
    discount_fraction: Decimal
    description: str = ""

    @property
    def percent_off(self) -> Decimal:
        value = self.discount_fraction * 100
        whole = value.to_integral_value()
        return whole if value == whole else value.normalize()


DEFAULT_PROMO_CODES: tuple[PromoCode, ...] = (
    PromoCode("WELCOME10", Decimal("0.10"), "Welcome discount - 10% off"),
    PromoCode("PARAM10", Decimal("0.10"), "PARAM10 special - 10% off"),
)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class PromoRegistry:
    """Static mapping of code to discount fraction"""

    def __init__(self, codes=DEFAULT_PROMO_CODES):
        self._codes: Mapping[str, PromoCode] = {normalize_code(p.code): p for p in codes}

    @property
    def codes(self) -> list[str]:
        return list(self._codes.keys())

    def lookup(self, code: str) -> Optional[PromoCode]:
        return self._codes.get(normalize_code(code))

    def apply(self, active: Optional[AppliedPromo], code: str) -> AppliedPromo:
        """
        Validate a code against the currently active one.

        Raises:
            EmptyCode, AlreadyApplied, ConflictingCode, UnknownCode
        """
        normalized = normalize_code(code)
        if not normalized:
            raise EmptyCode()

        if active is not None:
            if active.code == normalized:
                raise AlreadyApplied()
            raise ConflictingCode()

        promo = self._codes.get(normalized)
        if promo is None:
            hint = " or ".join(self.codes)
            raise UnknownCode(f"Invalid promo code. Try {hint}" if hint else None)

        logger.info(f"Promo code {normalized} applied ({promo.discount_fraction} off)")
        return AppliedPromo(
            code=normalized,
            discount_fraction=promo.discount_fraction,
            description=promo.description,
        )

    def remove(self, active: Optional[AppliedPromo]) -> None:
        """Check that there is an active code to remove"""
        if active is None:
            raise NoActiveCode()
        logger.info(f"Promo code {active.code} removed")


# Singleton instance
promo_registry = PromoRegistry()
