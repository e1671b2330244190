"""
Module: coffee_engines.fob_reports
Responsibility:
    Maintain a contract's history of sales reports (FOB reports): save a
    new or edited report, delete one, prepare a duplicate for re-issue,
    and order the history for display.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel.

Invariants enforced:
    - Saving a report with a known id replaces it in place; any other
      report is appended with a fresh id.
    - Every operation returns a new Contract.
    - Uniqueness of report numbers is NOT checked here (see
      ``coffee_engines.report_numbers``).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from uuid import uuid4

from coffee_kernel.domain.models import Contract, ReportRecord


def new_report_id() -> str:
    return uuid4().hex


def save_report(
    contract: Contract,
    record: ReportRecord,
    id_factory: Callable[[], str] = new_report_id,
) -> tuple[Contract, ReportRecord]:
    """Return the updated contract and the stored record (with its id)."""
    if record.id is not None:
        for position, existing in enumerate(contract.reports):
            if existing.id == record.id:
                reports = list(contract.reports)
                reports[position] = record
                return replace(contract, reports=tuple(reports)), record

    stored = replace(record, id=id_factory())
    return replace(contract, reports=contract.reports + (stored,)), stored


def delete_report(contract: Contract, key: str) -> Contract:
    """Remove reports whose id, or failing that report number, equals ``key``."""
    kept = tuple(r for r in contract.reports if r.id != key and r.report_no != key)
    return replace(contract, reports=kept)


def duplicate_report(record: ReportRecord) -> ReportRecord:
    """A copy of ``record`` ready for re-issue: no id and a blank number."""
    return replace(record, id=None, report_no="")


def reports_for_display(contract: Contract) -> tuple[ReportRecord, ...]:
    """History ordered by report number, highest first."""
    return tuple(sorted(contract.reports, key=lambda r: r.report_no or "", reverse=True))
