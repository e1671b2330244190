"""
Liquidation rates -- the constants that drive valuation and default deductions.

Responsibility:
    Holds the quintal conversion factor, the license-rental tax rate, the
    per-quintal license fee, the fixed phytosanitary cost, the overpayment
    surcharge rate and the labels of the three seeded deduction items.

Architecture position:
    Kernel > Domain -- pure value object.  Engines receive a
    ``LiquidationRates`` as an explicit parameter (defaulting to
    ``STANDARD_RATES``); ``coffee_config`` builds instances from YAML.
    The kernel MUST NOT import ``coffee_config``.

Failure modes:
    - ValueError on construction with a negative rate or fee, or a
      non-positive kilograms-per-quintal factor.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LiquidationRates:
    """
    Rates used by the liquidation engines.

    Guarantees:
        - All amounts are Decimal.
        - ``kg_per_quintal`` is strictly positive.
        - Rates, fee and fixed cost are non-negative.
    """

    kg_per_quintal: Decimal = Decimal("46")
    tax_rate: Decimal = Decimal("0.025")
    license_fee_per_quintal: Decimal = Decimal("1.00")
    phytosanitary_cost: Decimal = Decimal("45.45")
    overpayment_tax_rate: Decimal = Decimal("0.025")

    tax_concept: str = "Impuestos (2.5% Alquiler Licencia)"
    license_fee_concept: str = "Honorarios Licencia ($1.00/qq)"
    phytosanitary_concept: str = "Costo Fitosanitario (Fijo)"

    def __post_init__(self) -> None:
        for name in (
            "kg_per_quintal",
            "tax_rate",
            "license_fee_per_quintal",
            "phytosanitary_cost",
            "overpayment_tax_rate",
        ):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))
        if self.kg_per_quintal <= Decimal("0"):
            raise ValueError("kg_per_quintal must be positive")
        for name in ("tax_rate", "license_fee_per_quintal", "phytosanitary_cost", "overpayment_tax_rate"):
            if getattr(self, name) < Decimal("0"):
                raise ValueError(f"{name} cannot be negative")


STANDARD_RATES = LiquidationRates()
