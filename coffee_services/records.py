"""
Storage boundary (``coffee_services.records``).

Responsibility
--------------
Map the document records supplied by the storage layer (camelCase dicts as
the back office persists them) to the kernel's frozen models and back.
Contracts and payments are loaded wholesale; there are no partial loads.

Legacy migration
----------------
Early contracts carried a single sales report in ``fobContractData``;
later ones keep a history in ``fobContracts`` (and may still carry the
last-saved report in ``fobContractData``).  On load the legacy record is
folded into the history exactly once:

* no history -> the legacy record becomes the only history entry;
* history present -> the legacy record is appended only when neither its
  id nor its report number already appears in the history.

Records written back by ``contract_to_record`` only carry ``fobContracts``.

Failure modes
-------------
* ``RecordMappingError`` -- a record lacks its ``id`` (or a payment its
  ``contractId``, or a contract its ``company``).
* ``UnknownCompanyError`` -- company outside the closed set.
* Bad numbers and dates never raise: numbers coerce to zero, unparseable
  dates become None.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any

from coffee_kernel.domain.models import (
    Company,
    Contract,
    DeductionItem,
    PackagingRequirement,
    Payment,
    ReportRecord,
    ShipmentLot,
)
from coffee_kernel.exceptions import RecordMappingError, UnknownCompanyError
from coffee_kernel.logging_config import get_logger

logger = get_logger("services.records")

LEGACY_REPORT_ID_PREFIX = "legacy-"


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def parse_date(value: Any) -> date | None:
    """ISO date (or ISO timestamp) to ``date``; anything else to None."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _format_date(value: date | None) -> str:
    return value.isoformat() if value else ""


def _format_number(value: Decimal) -> str:
    return str(value)


def _require(record: dict[str, Any], key: str, record_type: str) -> Any:
    value = record.get(key)
    if value is None or value == "":
        raise RecordMappingError(record_type, key, record.get("id"))
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Records -> models
# ---------------------------------------------------------------------------


def requirement_from_record(record: dict[str, Any]) -> PackagingRequirement:
    return PackagingRequirement(
        item_name=_text(record.get("itemName")),
        required=record.get("required"),
        purchased=record.get("purchased"),
    )


def lot_from_record(record: dict[str, Any]) -> ShipmentLot:
    packaging = record.get("packagingRecords")
    return ShipmentLot(
        id=str(_require(record, "id", "Partida")),
        partida_no=_text(record.get("partidaNo")),
        weight_kg=record.get("pesoKg"),
        quintales_override=record.get("pesoQqs"),
        settled_price=record.get("finalPrice"),
        package_type=_text(record.get("packageType")),
        custom_package_type=record.get("customPackageType"),
        unit_count=record.get("numBultos"),
        packaging_records=(
            None if packaging is None
            else tuple(requirement_from_record(r) for r in packaging if r)
        ),
    )


def deduction_from_record(record: dict[str, Any]) -> DeductionItem:
    return DeductionItem(
        id=str(_require(record, "id", "LiquidationDeduction")),
        concept=_text(record.get("concept")),
        amount=record.get("amount"),
    )


def report_from_record(record: dict[str, Any]) -> ReportRecord:
    return ReportRecord(
        id=record.get("id") or None,
        report_no=_text(record.get("reportNo")),
        report_date=parse_date(record.get("date")),
        buyer_id=_text(record.get("buyerId")),
        buyer_name=_text(record.get("buyerName")),
        quantity_text=_text(record.get("quantityText")),
        weight_text=_text(record.get("weightText")),
        description=_text(record.get("description")),
        price=record.get("price"),
        shipment_period=_text(record.get("shipmentPeriod")),
        shipping_port=_text(record.get("shippingPort")),
        destination_port=_text(record.get("destinationPort")),
    )


def fold_legacy_reports(record: dict[str, Any]) -> list[dict[str, Any]]:
    """The contract's report history with the legacy singular record folded in."""
    history = [r for r in record.get("fobContracts") or () if r]
    legacy = record.get("fobContractData")
    if not legacy:
        return history

    legacy_id = legacy.get("id")
    legacy_no = _text(legacy.get("reportNo")).strip()
    # A blank number never identifies a report.
    already_present = any(
        (legacy_id and r.get("id") == legacy_id)
        or (legacy_no and _text(r.get("reportNo")).strip() == legacy_no)
        for r in history
    )
    if not already_present:
        history.append({**legacy, "id": legacy_id or f"{LEGACY_REPORT_ID_PREFIX}{legacy_no or 'report'}"})
        logger.info("legacy_report_folded", extra={
            "contract_id": record.get("id"),
            "report_no": legacy_no,
        })
    return history


def contract_from_record(record: dict[str, Any]) -> Contract:
    contract_id = str(_require(record, "id", "Contract"))
    raw_company = _require(record, "company", "Contract")
    try:
        company = Company(raw_company)
    except ValueError as e:
        raise UnknownCompanyError(str(raw_company)) from e

    costs = record.get("liquidationCosts")
    return Contract(
        id=contract_id,
        company=company,
        contract_number=_text(record.get("contractNumber")),
        buyer=_text(record.get("buyer")),
        sale_date=parse_date(record.get("saleDate")),
        harvest_year=record.get("harvestYear") or None,
        is_terminated=bool(record.get("isTerminated")),
        is_license_rental=bool(record.get("isLicenseRental")),
        lots=tuple(lot_from_record(p) for p in record.get("partidas") or () if p),
        deductions=(
            None if costs is None
            else tuple(deduction_from_record(c) for c in costs if c)
        ),
        liquidation_finalized=bool(record.get("notaAbonoGenerated")),
        reports=tuple(report_from_record(r) for r in fold_legacy_reports(record)),
    )


def payment_from_record(record: dict[str, Any]) -> Payment:
    return Payment(
        id=str(_require(record, "id", "LicensePayment")),
        contract_id=str(_require(record, "contractId", "LicensePayment")),
        payment_date=parse_date(record.get("date")),
        amount=record.get("amount"),
        concept=_text(record.get("concept")),
        notes=_text(record.get("notes")),
    )


def load_contracts(records: Iterable[dict[str, Any] | None]) -> tuple[Contract, ...]:
    """Map a wholesale list of contract records, skipping empty entries."""
    contracts = tuple(contract_from_record(r) for r in records if r)
    logger.info("contracts_loaded", extra={"contract_count": len(contracts)})
    return contracts


def load_payments(records: Iterable[dict[str, Any] | None]) -> tuple[Payment, ...]:
    payments = tuple(payment_from_record(r) for r in records if r)
    logger.info("payments_loaded", extra={"payment_count": len(payments)})
    return payments


# ---------------------------------------------------------------------------
# Models -> records
# ---------------------------------------------------------------------------


def requirement_to_record(requirement: PackagingRequirement) -> dict[str, Any]:
    return {
        "itemName": requirement.item_name,
        "required": requirement.required,
        "purchased": requirement.purchased,
    }


def lot_to_record(lot: ShipmentLot) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": lot.id,
        "partidaNo": lot.partida_no,
        "packageType": lot.package_type,
        "numBultos": lot.unit_count,
        "pesoKg": _format_number(lot.weight_kg),
        "finalPrice": _format_number(lot.settled_price),
    }
    if lot.custom_package_type is not None:
        record["customPackageType"] = lot.custom_package_type
    if lot.quintales_override is not None:
        record["pesoQqs"] = _format_number(lot.quintales_override)
    if lot.packaging_records is not None:
        record["packagingRecords"] = [requirement_to_record(r) for r in lot.packaging_records]
    return record


def report_to_record(report: ReportRecord) -> dict[str, Any]:
    return {
        "id": report.id,
        "reportNo": report.report_no,
        "date": _format_date(report.report_date),
        "buyerId": report.buyer_id,
        "buyerName": report.buyer_name,
        "quantityText": report.quantity_text,
        "weightText": report.weight_text,
        "description": report.description,
        "price": _format_number(report.price),
        "shipmentPeriod": report.shipment_period,
        "shippingPort": report.shipping_port,
        "destinationPort": report.destination_port,
    }


def contract_to_record(contract: Contract) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": contract.id,
        "company": contract.company.value,
        "contractNumber": contract.contract_number,
        "buyer": contract.buyer,
        "saleDate": _format_date(contract.sale_date),
        "isTerminated": contract.is_terminated,
        "isLicenseRental": contract.is_license_rental,
        "partidas": [lot_to_record(lot) for lot in contract.lots],
        "notaAbonoGenerated": contract.liquidation_finalized,
        "fobContracts": [report_to_record(r) for r in contract.reports],
    }
    if contract.harvest_year:
        record["harvestYear"] = contract.harvest_year
    if contract.deductions is not None:
        record["liquidationCosts"] = [
            {"id": d.id, "concept": d.concept, "amount": _format_number(d.amount)}
            for d in contract.deductions
        ]
    return record


def payment_to_record(payment: Payment) -> dict[str, Any]:
    return {
        "id": payment.id,
        "contractId": payment.contract_id,
        "date": _format_date(payment.payment_date),
        "amount": _format_number(payment.amount),
        "concept": payment.concept,
        "notes": payment.notes,
    }
