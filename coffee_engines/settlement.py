"""
Module: coffee_engines.settlement
Responsibility:
    Combine valuation, the deduction ledger and the payment ledger into a
    contract's liquidation figures: balance, overpayment and the surcharge
    owed on the overpaid excess.  Also derives the liquidation state the
    rendering layer gates its actions on.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel and sibling engines.

Invariants enforced:
    - balance = value - deductions_total - paid
    - overpayment = max(0, -balance)
    - extra_tax = overpayment x overpayment_tax_rate
    - Figures are exact Decimals; rounding is a presentation step
      (``SettlementResult.rounded()``).
    - When the contract's deduction ledger is missing or empty the three
      standard components are computed live for display.  That fallback is
      never written back to the contract.
    - Finalizing is one-way: nothing here sets the flag back to False.

Usage:
    from coffee_engines.settlement import settle, liquidation_state

    result = settle(contract, payments)
    liquidation_state(contract, result)  # LiquidationState.PENDING
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from coffee_kernel.domain.models import Contract, Payment
from coffee_kernel.domain.rates import STANDARD_RATES, LiquidationRates
from coffee_kernel.domain.values import ZERO, Money, round_money
from coffee_kernel.logging_config import get_logger
from coffee_engines.deductions import (
    DeductionBreakdown,
    breakdown_from_items,
    default_breakdown,
    total_deductions,
)
from coffee_engines.payments import payments_for_contract, total_paid
from coffee_engines.tracer import traced_engine
from coffee_engines.valuation import contract_value, total_standard_units

logger = get_logger("engines.settlement")


class LiquidationState(str, Enum):
    """Where a contract stands in the liquidation workflow."""

    FINALIZED = "finalized"  # summary generated, view available
    READY_TO_FINALIZE = "ready_to_finalize"  # balance settled
    PENDING = "pending"  # partial summary viewable


@dataclass(frozen=True)
class SettlementResult:
    """
    Liquidation figures for one contract.

    ``uses_fallback_deductions`` is True when ``deductions_total`` came from
    the live default computation rather than the contract's ledger.
    """

    value: Decimal
    deductions_total: Decimal
    paid: Decimal
    balance: Decimal
    overpayment: Decimal
    extra_tax: Decimal
    breakdown: DeductionBreakdown
    uses_fallback_deductions: bool = False

    @property
    def is_settled(self) -> bool:
        return self.balance <= ZERO

    def rounded(self) -> SettlementResult:
        """Copy with every money figure rounded to cents."""
        return replace(
            self,
            value=round_money(self.value),
            deductions_total=round_money(self.deductions_total),
            paid=round_money(self.paid),
            balance=round_money(self.balance),
            overpayment=round_money(self.overpayment),
            extra_tax=round_money(self.extra_tax),
            breakdown=DeductionBreakdown(
                taxes=round_money(self.breakdown.taxes),
                license_fee=round_money(self.breakdown.license_fee),
                phytosanitary_cost=round_money(self.breakdown.phytosanitary_cost),
            ),
        )

    def as_money(self, currency: str = "USD") -> dict[str, Money]:
        """Rounded figures as Money, keyed for the rendering layer."""
        r = self.rounded()
        return {
            "value": Money(r.value, currency),
            "deductions_total": Money(r.deductions_total, currency),
            "paid": Money(r.paid, currency),
            "balance": Money(r.balance, currency),
            "overpayment": Money(r.overpayment, currency),
            "extra_tax": Money(r.extra_tax, currency),
        }


def compute_settlement(
    value: Decimal,
    deductions_total: Decimal,
    paid: Decimal,
    rates: LiquidationRates = STANDARD_RATES,
) -> tuple[Decimal, Decimal, Decimal]:
    """(balance, overpayment, extra_tax) for the given totals."""
    balance = value - deductions_total - paid
    overpayment = -balance if balance < ZERO else ZERO
    extra_tax = overpayment * rates.overpayment_tax_rate
    return balance, overpayment, extra_tax


@traced_engine("settlement", "1.0", fingerprint_fields=("contract", "payments"))
def settle(
    contract: Contract,
    payments: Iterable[Payment] | None,
    rates: LiquidationRates = STANDARD_RATES,
) -> SettlementResult:
    """
    Compute the liquidation figures of a contract.

    Args:
        contract: The contract being liquidated.
        payments: All known payments; only this contract's are counted.
        rates: Liquidation rates.
    """
    lots = contract.lots
    value = contract_value(lots, rates)

    if contract.deductions:
        deductions_total = total_deductions(contract.deductions)
        breakdown = breakdown_from_items(contract.deductions)
        uses_fallback = False
    else:
        breakdown = default_breakdown(value, total_standard_units(lots, rates), rates)
        deductions_total = breakdown.total
        uses_fallback = True

    paid = total_paid(payments_for_contract(payments, contract.id))
    balance, overpayment, extra_tax = compute_settlement(value, deductions_total, paid, rates)

    return SettlementResult(
        value=value,
        deductions_total=deductions_total,
        paid=paid,
        balance=balance,
        overpayment=overpayment,
        extra_tax=extra_tax,
        breakdown=breakdown,
        uses_fallback_deductions=uses_fallback,
    )


def liquidation_state(contract: Contract, result: SettlementResult) -> LiquidationState:
    """Finalized wins; otherwise a settled balance is ready to finalize."""
    if contract.liquidation_finalized:
        return LiquidationState.FINALIZED
    if result.balance <= ZERO:
        return LiquidationState.READY_TO_FINALIZE
    return LiquidationState.PENDING


def finalize_liquidation(contract: Contract) -> Contract:
    """Mark the liquidation summary as generated (idempotent, one-way)."""
    if contract.liquidation_finalized:
        return contract
    return replace(contract, liquidation_finalized=True)
