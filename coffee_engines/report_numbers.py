"""
Module: coffee_engines.report_numbers
Responsibility:
    Enforce that a sales report (FOB report) number is unique across all
    contracts of the same harvest year and exporting company.  Report
    numbers are allocated externally and must never collide within that
    scope.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel.

Invariants enforced:
    - Candidates and stored numbers are compared after trimming whitespace,
      by exact string equality.
    - Only contracts whose effective harvest year (explicit, else derived
      from the sale date) and company both match are searched.
    - The record being edited never conflicts with itself: it is skipped by
      id, and records of the edited contract still carrying the number the
      record had before the edit are skipped too.
    - Contracts are searched in input order and the FIRST conflict is
      reported; further conflicts are not collected.
    - Rejections are returned as ``ReportNumberCheck`` values, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from coffee_kernel.domain.models import Company, Contract
from coffee_kernel.logging_config import get_logger
from coffee_engines.tracer import traced_engine

logger = get_logger("engines.report_numbers")


class ReportNumberStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ReportNumberCheck:
    """Outcome of a report number uniqueness check."""

    status: ReportNumberStatus
    report_no: str
    harvest_year: str
    conflicting_contract_id: str | None = None
    conflicting_contract_number: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ReportNumberStatus.OK


@traced_engine(
    "report_numbers",
    "1.0",
    fingerprint_fields=("candidate_report_no", "harvest_year", "company", "current_contract_id"),
)
def validate_report_number(
    candidate_report_no: str | None,
    harvest_year: str,
    company: Company,
    contracts: Iterable[Contract],
    current_contract_id: str | None,
    current_record_id: str | None = None,
    previous_report_no: str | None = None,
) -> ReportNumberCheck:
    """
    Check a report number against every report in the same harvest/company.

    Args:
        candidate_report_no: Number typed by the user.
        harvest_year: Harvest year of the contract the report belongs to.
        company: Company of that contract.
        contracts: All contracts, searched in order.
        current_contract_id: Contract owning the report being saved.
        current_record_id: Id of the report being edited (None when new).
        previous_report_no: Number the edited report had before the edit.
    """
    normalized = (candidate_report_no or "").strip()
    if not normalized:
        return ReportNumberCheck(
            status=ReportNumberStatus.MISSING,
            report_no=normalized,
            harvest_year=harvest_year,
            message="Por favor, ingrese el número de Informe de Ventas.",
        )

    for contract in contracts:
        if contract.company != company or contract.effective_harvest_year != harvest_year:
            continue
        is_current = contract.id == current_contract_id
        for record in contract.reports:
            if is_current and record.id is not None and record.id == current_record_id:
                continue
            if is_current and previous_report_no is not None and record.report_no == previous_report_no:
                continue
            if record.normalized_report_no == normalized:
                return ReportNumberCheck(
                    status=ReportNumberStatus.CONFLICT,
                    report_no=normalized,
                    harvest_year=harvest_year,
                    conflicting_contract_id=contract.id,
                    conflicting_contract_number=contract.contract_number,
                    message=(
                        f"El Informe de Ventas No. {normalized} ya existe en la cosecha "
                        f"{harvest_year} (Contrato {contract.contract_number})."
                    ),
                )

    return ReportNumberCheck(
        status=ReportNumberStatus.OK,
        report_no=normalized,
        harvest_year=harvest_year,
    )


def validate_for_contract(
    candidate_report_no: str | None,
    contract: Contract,
    contracts: Iterable[Contract],
    current_record_id: str | None = None,
    previous_report_no: str | None = None,
) -> ReportNumberCheck:
    """``validate_report_number`` scoped by the owning contract's harvest and company."""
    return validate_report_number(
        candidate_report_no,
        contract.effective_harvest_year,
        contract.company,
        contracts,
        contract.id,
        current_record_id,
        previous_report_no,
    )
