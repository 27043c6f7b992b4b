"""
Tax — jurisdiction rates, exemptions, and the calculator protocol.

    from cartsync import tax as T

    calc = T.RateTableTaxCalculator()
    breakdown = await calc.compute(items, TaxContext("CA-QC"))
    # GST 5% on the subtotal, QST 9.975% on subtotal + GST

    table = T.TaxRateTable.seeded()
    table.add_exemption(T.TaxExemption("cust-1", "CA-BC", frozenset({"PST"})))
"""

from cartsync.tax._types import TaxRate, TaxExemption
from cartsync.tax._rates import TaxRateTable, default_rates
from cartsync.tax._calculator import TaxCalculator, RateTableTaxCalculator, to_cents

__all__ = (
    "TaxRate",
    "TaxExemption",
    "TaxRateTable",
    "default_rates",
    "TaxCalculator",
    "RateTableTaxCalculator",
    "to_cents",
)
