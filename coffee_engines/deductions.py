"""
Module: coffee_engines.deductions
Responsibility:
    The deduction ledger of a contract liquidation: an ordered list of
    named costs (license-rental tax, license fee, phytosanitary cost, and
    any manual item) subtracted from the contract value.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel and sibling engines.

Invariants enforced:
    - ``seed_defaults`` returns exactly three items (tax, fee, fixed cost)
      with amounts rounded to cents.
    - The sum of item amounts is the single source of truth for total
      deductions once items exist.
    - Every operation returns a new tuple; inputs are never mutated.
    - Amount edits are coerced leniently (invalid input becomes 0).

Failure modes:
    - None: operations on an unknown item id leave the ledger unchanged.

Usage:
    from coffee_engines.deductions import seed_defaults, total_deductions

    items = seed_defaults(Decimal("10000"), Decimal("100"))
    total_deductions(items)  # Decimal("395.45")
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from coffee_kernel.domain.models import DeductionItem, ShipmentLot
from coffee_kernel.domain.rates import STANDARD_RATES, LiquidationRates
from coffee_kernel.domain.values import ZERO, round_money, to_decimal
from coffee_kernel.logging_config import get_logger
from coffee_engines.tracer import traced_engine
from coffee_engines.valuation import contract_value, total_standard_units

logger = get_logger("engines.deductions")


def new_item_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class DeductionBreakdown:
    """The three standard deduction components, for display."""

    taxes: Decimal = ZERO
    license_fee: Decimal = ZERO
    phytosanitary_cost: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.taxes + self.license_fee + self.phytosanitary_cost


def default_breakdown(
    value: Decimal,
    total_units: Decimal,
    rates: LiquidationRates = STANDARD_RATES,
) -> DeductionBreakdown:
    """Unrounded standard components computed live from value and quintals."""
    return DeductionBreakdown(
        taxes=to_decimal(value) * rates.tax_rate,
        license_fee=to_decimal(total_units) * rates.license_fee_per_quintal,
        phytosanitary_cost=rates.phytosanitary_cost,
    )


@traced_engine("deductions_seed", "1.0", fingerprint_fields=("value", "total_units"))
def seed_defaults(
    value: Decimal,
    total_units: Decimal,
    rates: LiquidationRates = STANDARD_RATES,
) -> tuple[DeductionItem, ...]:
    """
    The default deduction ledger for a contract.

    Args:
        value: Contract value.
        total_units: Total quintals across the contract's lots.
        rates: Liquidation rates and concept labels.

    Returns:
        Exactly three items: tax, license fee, phytosanitary cost.
    """
    components = default_breakdown(value, total_units, rates)
    return (
        DeductionItem(id="1", concept=rates.tax_concept, amount=round_money(components.taxes)),
        DeductionItem(id="2", concept=rates.license_fee_concept, amount=round_money(components.license_fee)),
        DeductionItem(id="3", concept=rates.phytosanitary_concept, amount=round_money(components.phytosanitary_cost)),
    )


def reset_to_defaults(
    lots: Iterable[ShipmentLot | None],
    rates: LiquidationRates = STANDARD_RATES,
) -> tuple[DeductionItem, ...]:
    """Replace the whole ledger with freshly computed defaults for ``lots``."""
    lots = tuple(lots)
    return seed_defaults(contract_value(lots, rates), total_standard_units(lots, rates), rates)


class DeductionField(str, Enum):
    """Editable fields of a deduction item."""

    CONCEPT = "concept"
    AMOUNT = "amount"


def add_item(
    items: Iterable[DeductionItem] | None,
    id_factory: Callable[[], str] = new_item_id,
) -> tuple[DeductionItem, ...]:
    """Append an empty, zero-amount item with a fresh id."""
    return tuple(items or ()) + (DeductionItem(id=id_factory(), concept="", amount=ZERO),)


def update_item(
    items: Iterable[DeductionItem] | None,
    item_id: str,
    field_name: DeductionField,
    value: Any,
) -> tuple[DeductionItem, ...]:
    """Replace one field of the item matching ``item_id``."""
    if field_name is DeductionField.CONCEPT:
        changes = {"concept": "" if value is None else str(value)}
    else:
        changes = {"amount": to_decimal(value)}
    return tuple(
        replace(item, **changes) if item.id == item_id else item
        for item in items or ()
    )


def remove_item(items: Iterable[DeductionItem] | None, item_id: str) -> tuple[DeductionItem, ...]:
    return tuple(item for item in items or () if item.id != item_id)


def total_deductions(items: Iterable[DeductionItem] | None) -> Decimal:
    """Sum of item amounts; non-numeric amounts count as zero."""
    return sum((to_decimal(item.amount) for item in items or ()), ZERO)


def breakdown_from_items(items: Iterable[DeductionItem] | None) -> DeductionBreakdown:
    """
    Locate the standard components in a ledger by their concept labels.

    Matching is case-insensitive: "impuesto" for taxes, "honorario" or
    "licencia" for the license fee, "fito" for the phytosanitary cost.
    Components are resolved in that order and an item claimed by one
    component is not reused for the next (the default tax label mentions
    "Licencia").  A component with no match is zero.
    """
    items = tuple(items or ())
    claimed: set[int] = set()

    def first(*markers: str) -> Decimal:
        for position, item in enumerate(items):
            if position in claimed:
                continue
            concept = (item.concept or "").lower()
            if any(marker in concept for marker in markers):
                claimed.add(position)
                return item.amount
        return ZERO

    taxes = first("impuesto")
    license_fee = first("honorario", "licencia")
    phytosanitary_cost = first("fito")
    return DeductionBreakdown(
        taxes=taxes,
        license_fee=license_fee,
        phytosanitary_cost=phytosanitary_cost,
    )
