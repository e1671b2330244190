"""
Module: coffee_engines.valuation
Responsibility:
    Convert a contract's shipment lots into quintals (46 kg standard units)
    and into the contract's monetary value.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel.

Invariants enforced:
    - Per lot: units = explicit quintal override, else weight_kg / kg_per_quintal.
    - Per lot: line value = units x settled price; a lot without a price
      contributes zero.
    - Contract value is a plain sum, independent of lot order.
    - Never raises on bad numeric input (coerced to zero by the models).

Usage:
    from coffee_engines.valuation import contract_value

    contract_value(contract.lots)  # Decimal
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from coffee_kernel.domain.models import ShipmentLot
from coffee_kernel.domain.rates import STANDARD_RATES, LiquidationRates
from coffee_kernel.domain.values import ZERO, to_decimal
from coffee_kernel.logging_config import get_logger
from coffee_engines.tracer import traced_engine

logger = get_logger("engines.valuation")


def standard_units(lot: ShipmentLot, rates: LiquidationRates = STANDARD_RATES) -> Decimal:
    """Quintals in a lot; the explicit override wins over the weight."""
    if lot.quintales_override:
        return lot.quintales_override
    return to_decimal(lot.weight_kg) / rates.kg_per_quintal


def line_value(lot: ShipmentLot, rates: LiquidationRates = STANDARD_RATES) -> Decimal:
    """Monetary value of one lot."""
    return standard_units(lot, rates) * to_decimal(lot.settled_price)


@traced_engine("valuation", "1.0", fingerprint_fields=("lots",))
def contract_value(
    lots: Iterable[ShipmentLot | None],
    rates: LiquidationRates = STANDARD_RATES,
) -> Decimal:
    """Sum of line values over all lots (empty contract is worth zero)."""
    return sum((line_value(lot, rates) for lot in lots if lot is not None), ZERO)


@traced_engine("valuation_units", "1.0", fingerprint_fields=("lots",))
def total_standard_units(
    lots: Iterable[ShipmentLot | None],
    rates: LiquidationRates = STANDARD_RATES,
) -> Decimal:
    """Sum of quintals over all lots."""
    return sum((standard_units(lot, rates) for lot in lots if lot is not None), ZERO)
