"""
Rate table — in-memory jurisdiction rates and customer exemptions.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from cartsync._types import ProductType
from cartsync.tax._types import TaxExemption, TaxRate

_ALL = frozenset(ProductType)
_GOODS = frozenset({ProductType.DEVICE, ProductType.ACCESSORY})
_GOODS_AND_SERVICES = _GOODS | {ProductType.SERVICE}


def default_rates() -> list[TaxRate]:
    """Seed rates for the supported Canadian and US jurisdictions."""
    return [
        TaxRate("ca-on-hst", "CA-ON", "HST", Decimal("0.13"), _ALL, date(2010, 7, 1)),
        TaxRate("ca-bc-gst", "CA-BC", "GST", Decimal("0.05"), _ALL, date(2013, 4, 1)),
        TaxRate("ca-bc-pst", "CA-BC", "PST", Decimal("0.07"), _GOODS, date(2013, 4, 1)),
        TaxRate("ca-ab-gst", "CA-AB", "GST", Decimal("0.05"), _ALL, date(2008, 1, 1)),
        TaxRate("ca-qc-gst", "CA-QC", "GST", Decimal("0.05"), _ALL, date(2008, 1, 1)),
        TaxRate(
            "ca-qc-qst",
            "CA-QC",
            "QST",
            Decimal("0.09975"),
            _ALL,
            date(2013, 1, 1),
            compound=True,
        ),
        TaxRate("us-ca-sales", "US-CA", "Sales Tax", Decimal("0.0725"), _GOODS, date(2017, 1, 1)),
        TaxRate("us-ny-sales", "US-NY", "Sales Tax", Decimal("0.04"), _GOODS, date(2005, 6, 1)),
        TaxRate(
            "us-tx-sales",
            "US-TX",
            "Sales Tax",
            Decimal("0.0625"),
            _GOODS_AND_SERVICES,
            date(1990, 7, 1),
        ),
        TaxRate("us-or-sales", "US-OR", "Sales Tax", Decimal("0"), _ALL, date(1970, 1, 1)),
    ]


class TaxRateTable:
    """
    Rates indexed by jurisdiction, plus exemptions by (customer, jurisdiction).

    Example:
        table = TaxRateTable.seeded()
        table.rates_for("CA-BC", date.today())   # [GST, PST]
    """

    def __init__(
        self,
        rates: Iterable[TaxRate] = (),
        exemptions: Iterable[TaxExemption] = (),
    ) -> None:
        self._rates: dict[str, list[TaxRate]] = {}
        self._exemptions: dict[tuple[str, str], TaxExemption] = {}
        for rate in rates:
            self.add_rate(rate)
        for exemption in exemptions:
            self.add_exemption(exemption)

    @classmethod
    def seeded(cls) -> TaxRateTable:
        return cls(default_rates())

    def add_rate(self, rate: TaxRate) -> None:
        self._rates.setdefault(rate.jurisdiction, []).append(rate)

    def add_exemption(self, exemption: TaxExemption) -> None:
        self._exemptions[(exemption.customer_id, exemption.jurisdiction)] = exemption

    def knows(self, jurisdiction: str) -> bool:
        return jurisdiction in self._rates

    def rates_for(self, jurisdiction: str, day: date) -> list[TaxRate]:
        """Rates effective on day; non-compound first."""
        active = [r for r in self._rates.get(jurisdiction, []) if r.applies_on(day)]
        return sorted(active, key=lambda r: r.compound)

    def exemption_for(self, customer_id: str | None, jurisdiction: str) -> TaxExemption | None:
        if customer_id is None:
            return None
        return self._exemptions.get((customer_id, jurisdiction))


__all__ = ("TaxRateTable", "default_rates")
