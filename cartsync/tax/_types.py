"""
Tax types — rates and exemptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cartsync._types import ProductType


@dataclass(frozen=True, slots=True)
class TaxRate:
    """
    One tax levied in a jurisdiction.

    compound: taxable base includes the non-compound taxes already applied
    (e.g. a provincial tax charged on top of a federal one).
    effective_to=None means open-ended.
    """

    id: str
    jurisdiction: str
    name: str
    rate: Decimal
    product_types: frozenset[ProductType]
    effective_from: date
    effective_to: date | None = None
    compound: bool = False

    def applies_on(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_to is None or day <= self.effective_to

    def covers(self, product_type: ProductType) -> bool:
        return product_type in self.product_types


@dataclass(frozen=True, slots=True)
class TaxExemption:
    """
    Customer exemption in one jurisdiction.

    tax_names=None exempts from every tax; otherwise only the named ones.
    """

    customer_id: str
    jurisdiction: str
    tax_names: frozenset[str] | None = None
    reason: str = ""

    def exempts(self, tax_name: str) -> bool:
        return self.tax_names is None or tax_name in self.tax_names


__all__ = ("TaxRate", "TaxExemption")
