"""
coffee_services.liquidation_service -- In-memory liquidation workspace.

Responsibility:
    Holds the loaded contracts and payments of the back office and applies
    every liquidation workflow step to them: opening a liquidation (with
    its one-time deduction seed), editing the deduction ledger, recording
    and deleting license payments, computing settlement figures and state,
    finalizing, maintaining the sales report history under the report
    number uniqueness rule, and editing packaging requirements.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes the pure engines of ``coffee_engines``; the clock, the rates,
    the company profiles and the id factory are injected so that every
    operation is deterministic under test.

Invariants enforced:
    - Contract and payment collections are immutable tuples replaced
      wholesale on every mutation; a caller holding an earlier tuple never
      sees it change.
    - Default deductions are seeded only when a contract's ledger has never
      been persisted (``deductions is None``).  An emptied ledger stays empty.
    - A sales report is stored only when its number passes the uniqueness
      check for the contract's harvest year and company.
    - Finalizing is one-way.

Failure modes:
    - ContractNotFoundError: contract id not in the workspace.
    - ShipmentLotNotFoundError: lot id not in the contract.
    - DeductionNotFoundError: deduction id not in the contract ledger.
    - IndexError: packaging edit addresses a missing requirement index.
    - Rejections (payment without amount, missing or duplicate report
      number) are returned as result objects, not raised.

Usage:
    from coffee_services.liquidation_service import LiquidationWorkspace

    workspace = LiquidationWorkspace.from_config(config, contracts, payments)
    workspace.open_liquidation(contract_id)
    workspace.record_payment(contract_id, "5000")
    workspace.settlement(contract_id).rounded().balance
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date
from typing import Any
from uuid import uuid4

from coffee_config.schema import CompanyProfile, LiquidationConfig
from coffee_engines.deductions import (
    DeductionField,
    add_item,
    remove_item,
    reset_to_defaults,
    total_deductions,
    update_item,
)
from coffee_engines.fob_reports import delete_report, save_report
from coffee_engines.packaging import (
    NEW_MATERIAL_NAME,
    PackagingSummary,
    RequirementField,
    add_requirement,
    remove_requirement,
    requirements_for_lot,
    summarize_packaging,
    update_requirement,
)
from coffee_engines.payments import (
    PaymentPostingResult,
    add_payment,
    payments_for_contract,
    remove_payment,
)
from coffee_engines.report_numbers import ReportNumberCheck, validate_for_contract
from coffee_engines.settlement import (
    LiquidationState,
    SettlementResult,
    finalize_liquidation,
    liquidation_state,
    settle,
)
from coffee_kernel.domain.clock import Clock, SystemClock
from coffee_kernel.domain.models import (
    Company,
    Contract,
    PackagingRequirement,
    Payment,
    ReportRecord,
    ShipmentLot,
)
from coffee_kernel.domain.rates import STANDARD_RATES, LiquidationRates
from coffee_kernel.exceptions import (
    ContractNotFoundError,
    DeductionNotFoundError,
    ShipmentLotNotFoundError,
)
from coffee_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.liquidation")


def _new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class ReportSaveResult:
    """
    Outcome of saving a sales report.

    ``contract`` and ``record`` are set only when the number check passed.
    """

    check: ReportNumberCheck
    contract: Contract | None = None
    record: ReportRecord | None = None

    @property
    def saved(self) -> bool:
        return self.check.ok and self.contract is not None


class LiquidationWorkspace:
    """
    The back office's working set of contracts and payments.

    Contract:
        Accepts contracts and payments as loaded by ``coffee_services.records``
        and exposes the liquidation workflow as methods keyed by contract id.
        After each mutating call, ``contracts`` / ``payments`` hold the new
        collections the storage layer should persist.

    Non-goals:
        - Does NOT persist anything; reading the updated collections and
          writing them back is the caller's job.
        - Does NOT render documents.
    """

    def __init__(
        self,
        contracts: Iterable[Contract] = (),
        payments: Iterable[Payment] = (),
        *,
        clock: Clock | None = None,
        rates: LiquidationRates = STANDARD_RATES,
        companies: Iterable[CompanyProfile] = (),
        id_factory: Callable[[], str] = _new_id,
    ):
        self._contracts: tuple[Contract, ...] = tuple(contracts)
        self._payments: tuple[Payment, ...] = tuple(payments)
        self._clock = clock or SystemClock()
        self._rates = rates
        self._companies = {profile.company: profile for profile in companies}
        self._id_factory = id_factory

    @classmethod
    def from_config(
        cls,
        config: LiquidationConfig,
        contracts: Iterable[Contract] = (),
        payments: Iterable[Payment] = (),
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> LiquidationWorkspace:
        return cls(
            contracts,
            payments,
            clock=clock,
            rates=config.rates,
            companies=config.companies,
            id_factory=id_factory,
        )

    @property
    def contracts(self) -> tuple[Contract, ...]:
        return self._contracts

    @property
    def payments(self) -> tuple[Payment, ...]:
        return self._payments

    @property
    def rates(self) -> LiquidationRates:
        return self._rates

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def contract(self, contract_id: str) -> Contract:
        for contract in self._contracts:
            if contract.id == contract_id:
                return contract
        raise ContractNotFoundError(contract_id)

    def _lot(self, contract: Contract, lot_id: str) -> ShipmentLot:
        lot = contract.find_lot(lot_id)
        if lot is None:
            raise ShipmentLotNotFoundError(contract.id, lot_id)
        return lot

    def _contract_with_deduction(self, contract_id: str, item_id: str) -> Contract:
        contract = self.contract(contract_id)
        if not any(item.id == item_id for item in contract.deductions or ()):
            raise DeductionNotFoundError(item_id)
        return contract

    def _store(self, updated: Contract) -> Contract:
        self._contracts = tuple(
            updated if contract.id == updated.id else contract
            for contract in self._contracts
        )
        return updated

    def _bind(self, contract: Contract) -> Any:
        return LogContext.bind(
            contract_id=contract.id,
            company=contract.company.value,
            harvest_year=contract.effective_harvest_year or None,
        )

    def partida_prefix(self, company: Company) -> str:
        profile = self._companies.get(company)
        return profile.partida_prefix if profile else ""

    # ------------------------------------------------------------------
    # Deduction ledger
    # ------------------------------------------------------------------

    def open_liquidation(self, contract_id: str) -> Contract:
        """
        Open a contract's liquidation view.

        Seeds the three default deductions the first time only; a ledger
        that was ever persisted (even emptied) is left alone.
        """
        contract = self.contract(contract_id)
        with self._bind(contract):
            logger.info("liquidation_opened", extra={
                "contract_number": contract.contract_number,
                "lot_count": len(contract.lots),
            })
            if contract.deductions is not None:
                return contract
            updated = replace(contract, deductions=reset_to_defaults(contract.lots, self._rates))
            logger.info("deductions_seeded", extra={
                "item_count": len(updated.deductions),
                "total": total_deductions(updated.deductions),
            })
            return self._store(updated)

    def add_deduction(self, contract_id: str) -> Contract:
        contract = self.contract(contract_id)
        return self._store(replace(
            contract,
            deductions=add_item(contract.deductions, self._id_factory),
        ))

    def update_deduction(
        self,
        contract_id: str,
        item_id: str,
        field_name: DeductionField,
        value: Any,
    ) -> Contract:
        contract = self._contract_with_deduction(contract_id, item_id)
        return self._store(replace(
            contract,
            deductions=update_item(contract.deductions, item_id, field_name, value),
        ))

    def remove_deduction(self, contract_id: str, item_id: str) -> Contract:
        contract = self._contract_with_deduction(contract_id, item_id)
        return self._store(replace(
            contract,
            deductions=remove_item(contract.deductions, item_id),
        ))

    def reset_deductions(self, contract_id: str) -> Contract:
        """Replace the whole ledger with freshly computed defaults."""
        contract = self.contract(contract_id)
        with self._bind(contract):
            updated = replace(contract, deductions=reset_to_defaults(contract.lots, self._rates))
            logger.info("deductions_reset", extra={"item_count": len(updated.deductions)})
            return self._store(updated)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        contract_id: str,
        amount: Any,
        payment_date: date | None = None,
        concept: str = "",
        notes: str = "",
    ) -> PaymentPostingResult:
        """
        Record a license payment.  The date defaults to today's clock date.

        Unknown (non-empty) contract ids raise; an empty id or a zero amount
        is returned as a rejected result.
        """
        contract = self.contract(contract_id) if contract_id else None
        result = add_payment(
            self._payments,
            contract_id=contract_id,
            payment_date=payment_date or self._clock.today(),
            amount=amount,
            concept=concept,
            notes=notes,
            id_factory=self._id_factory,
        )
        if contract is None:
            logger.warning("payment_rejected", extra={"reason": result.reason})
            return result

        with self._bind(contract):
            if not result.accepted:
                logger.warning("payment_rejected", extra={
                    "reason": result.reason,
                    "amount": amount,
                })
                return result
            self._payments = result.payments
            logger.info("payment_recorded", extra={
                "payment_id": result.payment.id,
                "amount": result.payment.amount,
                "payment_date": result.payment.payment_date,
            })
        return result

    def delete_payment(self, payment_id: str) -> tuple[Payment, ...]:
        self._payments = remove_payment(self._payments, payment_id)
        logger.info("payment_deleted", extra={"payment_id": payment_id})
        return self._payments

    def payments_for(self, contract_id: str) -> tuple[Payment, ...]:
        return payments_for_contract(self._payments, contract_id)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def settlement(self, contract_id: str) -> SettlementResult:
        return settle(self.contract(contract_id), self._payments, self._rates)

    def state(self, contract_id: str) -> LiquidationState:
        contract = self.contract(contract_id)
        return liquidation_state(contract, settle(contract, self._payments, self._rates))

    def finalize(self, contract_id: str) -> Contract:
        """Mark the liquidation summary as generated (one-way)."""
        contract = self.contract(contract_id)
        if contract.liquidation_finalized:
            return contract
        with self._bind(contract):
            result = settle(contract, self._payments, self._rates).rounded()
            logger.info("liquidation_finalized", extra={
                "balance": result.balance,
                "extra_tax": result.extra_tax,
            })
            return self._store(finalize_liquidation(contract))

    # ------------------------------------------------------------------
    # Sales reports
    # ------------------------------------------------------------------

    def check_report_number(
        self,
        contract_id: str,
        report_no: str | None,
        current_record_id: str | None = None,
        previous_report_no: str | None = None,
    ) -> ReportNumberCheck:
        contract = self.contract(contract_id)
        check = validate_for_contract(
            report_no,
            contract,
            self._contracts,
            current_record_id,
            previous_report_no,
        )
        if not check.ok:
            with self._bind(contract):
                logger.warning("report_number_conflict", extra={
                    "status": check.status.value,
                    "report_no": check.report_no,
                    "conflicting_contract_id": check.conflicting_contract_id,
                })
        return check

    def save_report(self, contract_id: str, record: ReportRecord) -> ReportSaveResult:
        """
        Validate and store a sales report on a contract.

        When ``record.id`` names an existing report, that report is the one
        being edited: its stored number does not count as a conflict.
        """
        contract = self.contract(contract_id)
        previous = next(
            (r for r in contract.reports if record.id is not None and r.id == record.id),
            None,
        )
        check = self.check_report_number(
            contract_id,
            record.report_no,
            current_record_id=record.id,
            previous_report_no=previous.report_no if previous else None,
        )
        if not check.ok:
            return ReportSaveResult(check=check)

        updated, stored = save_report(
            contract,
            replace(record, report_no=check.report_no),
            self._id_factory,
        )
        with self._bind(contract):
            logger.info("report_saved", extra={
                "report_id": stored.id,
                "report_no": stored.report_no,
                "edited": previous is not None,
            })
        return ReportSaveResult(check=check, contract=self._store(updated), record=stored)

    def delete_report(self, contract_id: str, key: str) -> Contract:
        contract = self.contract(contract_id)
        return self._store(delete_report(contract, key))

    # ------------------------------------------------------------------
    # Packaging
    # ------------------------------------------------------------------

    def packaging_for(self, contract_id: str, lot_id: str) -> tuple[PackagingRequirement, ...]:
        contract = self.contract(contract_id)
        return requirements_for_lot(self._lot(contract, lot_id))

    def _store_lot(self, contract: Contract, lot: ShipmentLot) -> Contract:
        lots = tuple(lot if existing.id == lot.id else existing for existing in contract.lots)
        return self._store(replace(contract, lots=lots))

    def add_packaging_item(
        self,
        contract_id: str,
        lot_id: str,
        item_name: str = NEW_MATERIAL_NAME,
    ) -> Contract:
        contract = self.contract(contract_id)
        lot = self._lot(contract, lot_id)
        return self._store_lot(contract, add_requirement(lot, item_name))

    def update_packaging_item(
        self,
        contract_id: str,
        lot_id: str,
        index: int,
        field_name: RequirementField,
        value: Any,
    ) -> Contract:
        contract = self.contract(contract_id)
        lot = self._lot(contract, lot_id)
        return self._store_lot(contract, update_requirement(lot, index, field_name, value))

    def remove_packaging_item(self, contract_id: str, lot_id: str, index: int) -> Contract:
        contract = self.contract(contract_id)
        lot = self._lot(contract, lot_id)
        return self._store_lot(contract, remove_requirement(lot, index))

    def packaging_summary(self, company: Company) -> PackagingSummary:
        return summarize_packaging(self._contracts, company, self.partida_prefix(company))
