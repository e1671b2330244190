"""
Module: coffee_engines.packaging
Responsibility:
    Derive the packaging materials a shipment lot needs from its declared
    package type and bag count, edit a lot's persisted requirement list,
    and summarize procurement progress across contracts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel.

Invariants enforced:
    - Derivation rules are ordered; the first rule whose markers all appear
      in the package label (case-sensitive substring match) wins.
    - A zero bag count derives nothing, whatever the label.
    - Once a lot has a persisted requirement list (even an empty one) it is
      authoritative and is never re-derived.
    - Edits return a new ShipmentLot; inputs are never mutated.

Failure modes:
    - IndexError when an edit addresses a requirement index that does not
      exist in the lot's list.

Usage:
    from coffee_engines.packaging import derive_requirements

    derive_requirements("Big Bag", 7)
    # (PackagingRequirement("Big Bag", 7, 0), PackagingRequirement("Tarimas", 4, 0))
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from coffee_kernel.domain.models import (
    Company,
    Contract,
    PackagingRequirement,
    ShipmentLot,
)
from coffee_kernel.domain.values import to_int
from coffee_kernel.logging_config import get_logger
from coffee_engines.tracer import traced_engine

logger = get_logger("engines.packaging")

NEW_MATERIAL_NAME = "Nuevo Material"


@dataclass(frozen=True)
class PackagingRule:
    """
    One derivation rule.

    ``markers`` must all occur in the package label for the rule to apply.
    Each entry of ``materials`` is (material name, units per item): the
    required quantity is ceil(unit_count / units_per_item).
    """

    markers: tuple[str, ...]
    materials: tuple[tuple[str, int], ...]

    def matches(self, label: str) -> bool:
        return all(marker in label for marker in self.markers)


PACKAGING_RULES: tuple[PackagingRule, ...] = (
    PackagingRule(
        markers=("Sacos de Yute", "GrainPro"),
        materials=(("Sacos de Yute", 1), ("Bolsas GrainPro", 1)),
    ),
    PackagingRule(markers=("Saco de Yute",), materials=(("Sacos de Yute", 1),)),
    # Two big bags per pallet
    PackagingRule(markers=("Big Bag",), materials=(("Big Bag", 1), ("Tarimas", 2))),
    PackagingRule(markers=("Jumbo",), materials=(("Jumbo", 1),)),
)


@traced_engine("packaging", "1.0", fingerprint_fields=("package_label", "unit_count"))
def derive_requirements(
    package_label: str | None,
    unit_count: Any,
) -> tuple[PackagingRequirement, ...]:
    """
    Derive packaging requirements from a package label and bag count.

    Args:
        package_label: Declared package type (free text allowed).
        unit_count: Number of bags/units; invalid or missing counts as 0.

    Returns:
        Requirements with ``purchased`` at 0, or an empty tuple when no rule
        matches or the count is 0.
    """
    count = to_int(unit_count)
    if count <= 0:
        return ()

    label = str(package_label or "")
    for rule in PACKAGING_RULES:
        if rule.matches(label):
            return tuple(
                PackagingRequirement(
                    item_name=name,
                    required=math.ceil(count / per_item),
                    purchased=0,
                )
                for name, per_item in rule.materials
            )
    return ()


def requirements_for_lot(lot: ShipmentLot) -> tuple[PackagingRequirement, ...]:
    """The lot's persisted list when present, otherwise the derived defaults."""
    if lot.packaging_records is not None:
        return lot.packaging_records
    return derive_requirements(lot.package_label, lot.unit_count)


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class RequirementField(str, Enum):
    """Editable fields of a packaging requirement."""

    NAME = "item_name"
    REQUIRED = "required"
    PURCHASED = "purchased"


def add_requirement(lot: ShipmentLot, item_name: str = NEW_MATERIAL_NAME) -> ShipmentLot:
    """Append a blank material, materializing the derived list first."""
    records = requirements_for_lot(lot) + (PackagingRequirement(item_name=item_name),)
    return replace(lot, packaging_records=records)


def _checked_index(records: list[PackagingRequirement], index: int) -> int:
    # Negative indexes would silently address the end of the list.
    if not 0 <= index < len(records):
        raise IndexError(f"No packaging requirement at index {index}")
    return index


def update_requirement(
    lot: ShipmentLot,
    index: int,
    field_name: RequirementField,
    value: Any,
) -> ShipmentLot:
    """
    Replace one field of the requirement at ``index``.

    Quantities are coerced leniently (invalid input becomes 0); names are
    taken as given.
    """
    records = list(requirements_for_lot(lot))
    current = records[_checked_index(records, index)]
    if field_name is RequirementField.NAME:
        records[index] = replace(current, item_name=str(value if value is not None else ""))
    elif field_name is RequirementField.REQUIRED:
        records[index] = replace(current, required=to_int(value))
    else:
        records[index] = replace(current, purchased=to_int(value))
    return replace(lot, packaging_records=tuple(records))


def remove_requirement(lot: ShipmentLot, index: int) -> ShipmentLot:
    """Drop the requirement at ``index``; an emptied list stays authoritative."""
    records = list(requirements_for_lot(lot))
    del records[_checked_index(records, index)]
    return replace(lot, packaging_records=tuple(records))


# ---------------------------------------------------------------------------
# Cross-contract summary
# ---------------------------------------------------------------------------

# Lower-case substring -> category, first match wins
PACKAGING_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("saco", "sacos"),
    ("grainpro", "grainpro"),
    ("big", "bigbag"),
    ("jumbo", "jumbo"),
)


@dataclass(frozen=True)
class CategoryProgress:
    required: int = 0
    purchased: int = 0


@dataclass(frozen=True)
class OutstandingMaterial:
    material: str
    required: int
    purchased: int
    missing: int


@dataclass(frozen=True)
class LotPackagingGap:
    """Materials still to be bought for one lot."""

    contract_id: str
    contract_number: str
    lot_id: str
    partida_reference: str
    items: tuple[OutstandingMaterial, ...]


@dataclass(frozen=True)
class PackagingSummary:
    """Procurement progress for one company's active contracts."""

    categories: dict[str, CategoryProgress] = field(default_factory=dict)
    total_missing: int = 0
    outstanding: tuple[LotPackagingGap, ...] = ()


def _category_for(item_name: str) -> str | None:
    name = item_name.lower()
    for marker, category in PACKAGING_CATEGORIES:
        if marker in name:
            return category
    return None


@traced_engine("packaging_summary", "1.0", fingerprint_fields=("company",))
def summarize_packaging(
    contracts: Iterable[Contract],
    company: Company,
    partida_prefix: str = "",
) -> PackagingSummary:
    """
    Aggregate packaging requirements over a company's non-terminated contracts.

    Args:
        contracts: All contracts; other companies and terminated ones are skipped.
        company: Company to summarize.
        partida_prefix: Prefix shown before each lot number (company specific).
    """
    totals: dict[str, list[int]] = {category: [0, 0] for _, category in PACKAGING_CATEGORIES}
    total_missing = 0
    outstanding: list[LotPackagingGap] = []

    for contract in contracts:
        if contract.is_terminated or contract.company != company:
            continue
        for lot in contract.lots:
            gaps: list[OutstandingMaterial] = []
            for record in requirements_for_lot(lot):
                category = _category_for(record.item_name)
                if category is not None:
                    totals[category][0] += record.required
                    totals[category][1] += record.purchased
                if record.missing > 0:
                    total_missing += record.missing
                    gaps.append(OutstandingMaterial(
                        material=record.item_name,
                        required=record.required,
                        purchased=record.purchased,
                        missing=record.missing,
                    ))
            if gaps:
                outstanding.append(LotPackagingGap(
                    contract_id=contract.id,
                    contract_number=contract.contract_number,
                    lot_id=lot.id,
                    partida_reference=f"{partida_prefix}{lot.partida_no}",
                    items=tuple(gaps),
                ))

    return PackagingSummary(
        categories={
            category: CategoryProgress(required=req, purchased=bought)
            for category, (req, bought) in totals.items()
        },
        total_missing=total_missing,
        outstanding=tuple(outstanding),
    )
