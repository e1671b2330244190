"""
Module: coffee_engines.payments
Responsibility:
    The payment ledger: license payments recorded against contracts,
    filtered per contract and summed.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel.

Invariants enforced:
    - Append-only from the caller's perspective: a payment is recorded or
      deleted, never edited in place.
    - A payment whose amount coerces to zero is rejected (returned as a
      rejected ``PaymentPostingResult``), never raised.
    - Per-contract filtering preserves insertion order; nothing is sorted.
    - Every operation returns a new tuple.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from coffee_kernel.domain.models import Payment
from coffee_kernel.domain.values import ZERO, to_decimal
from coffee_kernel.logging_config import get_logger

logger = get_logger("engines.payments")

REJECT_NO_AMOUNT = "Payment amount is required"
REJECT_NO_CONTRACT = "Payment must reference a contract"


def new_payment_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class PaymentPostingResult:
    """
    Outcome of recording a payment.

    ``payments`` is always the ledger to keep: the extended ledger when
    accepted, the unchanged input when rejected.
    """

    accepted: bool
    payments: tuple[Payment, ...]
    payment: Payment | None = None
    reason: str | None = None


def add_payment(
    payments: Iterable[Payment] | None,
    *,
    contract_id: str,
    payment_date: date | None,
    amount: Any,
    concept: str = "",
    notes: str = "",
    id_factory: Callable[[], str] = new_payment_id,
) -> PaymentPostingResult:
    """
    Append a payment to the ledger.

    Rejected (ledger unchanged) when the contract id is empty or the amount
    is missing, non-numeric or zero.  Negative amounts are accepted as
    given; positivity is the caller's business.
    """
    ledger = tuple(payments or ())
    if not contract_id:
        return PaymentPostingResult(accepted=False, payments=ledger, reason=REJECT_NO_CONTRACT)

    value = to_decimal(amount)
    if not value:
        return PaymentPostingResult(accepted=False, payments=ledger, reason=REJECT_NO_AMOUNT)

    payment = Payment(
        id=id_factory(),
        contract_id=contract_id,
        payment_date=payment_date,
        amount=value,
        concept=concept or "",
        notes=notes or "",
    )
    return PaymentPostingResult(accepted=True, payments=ledger + (payment,), payment=payment)


def remove_payment(payments: Iterable[Payment] | None, payment_id: str) -> tuple[Payment, ...]:
    return tuple(p for p in payments or () if p.id != payment_id)


def payments_for_contract(payments: Iterable[Payment] | None, contract_id: str) -> tuple[Payment, ...]:
    """Payments of one contract, in insertion order."""
    return tuple(p for p in payments or () if p is not None and p.contract_id == contract_id)


def total_paid(payments: Iterable[Payment] | None) -> Decimal:
    return sum((to_decimal(p.amount) for p in payments or ()), ZERO)
