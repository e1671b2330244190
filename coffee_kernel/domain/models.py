"""
Liquidation Domain Models (``coffee_kernel.domain.models``).

Responsibility
--------------
Frozen dataclass records representing the nouns of a coffee-export sales
contract: shipment lots (partidas), packaging requirements, liquidation
deductions, license payments, sales reports (FOB reports) and the contract
that owns them.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Built by the
storage boundary (``coffee_services.records``), consumed by the engines,
handed read-only to the rendering layer.

Invariants enforced
-------------------
* All models are ``frozen=True``; edits go through ``dataclasses.replace``
  and return a new record.
* Numeric fields are coerced to Decimal/int at construction using the
  lenient policy of ``coffee_kernel.domain.values``: bad input is zero,
  never an exception.
* Collections are tuples, never lists.
* ``None`` for ``ShipmentLot.packaging_records`` and ``Contract.deductions``
  means "never persisted"; a tuple (even an empty one) is authoritative.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from coffee_kernel.domain.values import ZERO, to_decimal, to_int


class Company(str, Enum):
    """Exporting legal entities."""

    DIZANO = "dizano"
    PROBEN = "proben"


PACKAGE_TYPES: tuple[str, ...] = (
    "Saco de Yute",
    "Sacos de Yute y GrainPro",
    "Caja",
    "Big Bag",
    "Jumbo",
    "Otro",
)

OTHER_PACKAGE_TYPE = "Otro"


class PackagingStatus(str, Enum):
    """Procurement state of one packaging material."""

    PENDING = "Pendiente"
    PARTIAL = "Parcial"
    COMPLETED = "Completado"


def harvest_year_for(sale_date: date | None) -> str:
    """
    Harvest (crop) year containing a sale date.

    The crop year opens in October: 2024-10-01 belongs to "2024-2025",
    2024-09-30 to "2023-2024".  No date yields "".
    """
    if sale_date is None:
        return ""
    if sale_date.month >= 10:
        return f"{sale_date.year}-{sale_date.year + 1}"
    return f"{sale_date.year - 1}-{sale_date.year}"


@dataclass(frozen=True)
class PackagingRequirement:
    """One packaging material a lot needs, with its purchase progress."""

    item_name: str
    required: int = 0
    purchased: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "required", to_int(self.required))
        object.__setattr__(self, "purchased", to_int(self.purchased))

    @property
    def missing(self) -> int:
        return max(0, self.required - self.purchased)

    @property
    def status(self) -> PackagingStatus:
        # Over-purchase counts as completed.
        if self.purchased >= self.required:
            return PackagingStatus.COMPLETED
        if self.purchased > 0:
            return PackagingStatus.PARTIAL
        return PackagingStatus.PENDING


@dataclass(frozen=True)
class ShipmentLot:
    """A shipment lot (partida) of a contract."""

    id: str
    partida_no: str = ""
    weight_kg: Decimal = ZERO
    quintales_override: Decimal | None = None
    settled_price: Decimal = ZERO
    package_type: str = ""
    custom_package_type: str | None = None
    unit_count: int = 0
    packaging_records: tuple[PackagingRequirement, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight_kg", to_decimal(self.weight_kg))
        object.__setattr__(self, "settled_price", to_decimal(self.settled_price))
        object.__setattr__(self, "unit_count", to_int(self.unit_count))
        override = to_decimal(self.quintales_override)
        object.__setattr__(self, "quintales_override", override if override else None)
        if self.packaging_records is not None:
            object.__setattr__(self, "packaging_records", tuple(self.packaging_records))

    @property
    def package_label(self) -> str:
        """Package type as written on documents ("Otro" resolves to the free text)."""
        if self.package_type == OTHER_PACKAGE_TYPE:
            return self.custom_package_type or ""
        return self.package_type or ""


@dataclass(frozen=True)
class DeductionItem:
    """A named cost deducted from the contract value at liquidation."""

    id: str
    concept: str = ""
    amount: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class Payment:
    """A license payment received against a contract."""

    id: str
    contract_id: str
    payment_date: date | None
    amount: Decimal
    concept: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class ReportRecord:
    """An externally numbered sales report (FOB report) issued for a contract."""

    id: str | None
    report_no: str
    report_date: date | None = None
    buyer_id: str = ""
    buyer_name: str = ""
    quantity_text: str = ""
    weight_text: str = ""
    description: str = ""
    price: Decimal = ZERO
    shipment_period: str = ""
    shipping_port: str = ""
    destination_port: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def normalized_report_no(self) -> str:
        return (self.report_no or "").strip()


@dataclass(frozen=True)
class Contract:
    """A sales contract with its lots, liquidation ledger and sales reports."""

    id: str
    company: Company
    contract_number: str
    buyer: str = ""
    sale_date: date | None = None
    harvest_year: str | None = None
    is_terminated: bool = False
    is_license_rental: bool = False
    lots: tuple[ShipmentLot, ...] = ()
    deductions: tuple[DeductionItem, ...] | None = None
    liquidation_finalized: bool = False
    reports: tuple[ReportRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.company, Company):
            object.__setattr__(self, "company", Company(self.company))
        object.__setattr__(self, "lots", tuple(self.lots))
        object.__setattr__(self, "reports", tuple(self.reports))
        if self.deductions is not None:
            object.__setattr__(self, "deductions", tuple(self.deductions))

    @property
    def effective_harvest_year(self) -> str:
        return self.harvest_year or harvest_year_for(self.sale_date)

    def find_lot(self, lot_id: str) -> ShipmentLot | None:
        for lot in self.lots:
            if lot.id == lot_id:
                return lot
        return None
