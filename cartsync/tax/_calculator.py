"""
Tax calculation — TaxCalculator protocol and the rate-table implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from cartsync._logging import get_logger
from cartsync._types import LineItem, TaxBreakdown, TaxContext, TaxLine, utcnow
from cartsync.tax._rates import TaxRateTable
from cartsync.tax._types import TaxRate

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class TaxCalculator(Protocol):
    """Pure: same items and context give the same breakdown."""

    async def compute(self, items: Sequence[LineItem], context: TaxContext) -> TaxBreakdown: ...


class RateTableTaxCalculator:
    """
    Computes tax from a TaxRateTable.

    Each tax line is rounded to cents independently. Compound taxes apply to
    the eligible amount plus the non-compound tax already charged on it.
    An unknown jurisdiction yields no tax lines.

    Example:
        calc = RateTableTaxCalculator()
        breakdown = await calc.compute(cart.items, TaxContext("CA-ON"))
    """

    def __init__(self, table: TaxRateTable | None = None) -> None:
        self.table = table or TaxRateTable.seeded()

    async def compute(self, items: Sequence[LineItem], context: TaxContext) -> TaxBreakdown:
        subtotal = sum((i.line_total for i in items), Decimal("0"))

        if not self.table.knows(context.jurisdiction):
            logger.warning("Unknown tax jurisdiction", jurisdiction=context.jurisdiction)
            return TaxBreakdown(subtotal=subtotal, lines=(), total_tax=Decimal("0"), total=subtotal)

        day = context.as_of or utcnow().date()
        exemption = self.table.exemption_for(context.customer_id, context.jurisdiction)

        lines: list[TaxLine] = []
        charged: list[TaxRate] = []
        for rate in self.table.rates_for(context.jurisdiction, day):
            if exemption is not None and exemption.exempts(rate.name):
                continue
            if rate.rate == 0:
                continue

            taxable = self._taxable(items, rate, charged)
            if taxable == 0:
                continue

            line = TaxLine(
                jurisdiction=rate.jurisdiction,
                name=rate.name,
                rate=rate.rate,
                taxable_amount=taxable,
                amount=to_cents(taxable * rate.rate),
            )
            lines.append(line)
            if not rate.compound:
                charged.append(rate)

        total_tax = sum((line.amount for line in lines), Decimal("0"))
        return TaxBreakdown(
            subtotal=subtotal,
            lines=tuple(lines),
            total_tax=total_tax,
            total=subtotal + total_tax,
        )

    @staticmethod
    def _taxable(
        items: Sequence[LineItem],
        rate: TaxRate,
        charged: list[TaxRate],
    ) -> Decimal:
        eligible = [i for i in items if rate.covers(i.product_type)]
        base = sum((i.line_total for i in eligible), Decimal("0"))
        if not rate.compound:
            return base

        for prior in charged:
            overlap = sum(
                (i.line_total for i in eligible if prior.covers(i.product_type)),
                Decimal("0"),
            )
            base += to_cents(overlap * prior.rate)
        return base


__all__ = ("TaxCalculator", "RateTableTaxCalculator", "to_cents", "CENT")
