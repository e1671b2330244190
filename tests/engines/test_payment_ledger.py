"""
Tests for the license payment ledger.
"""

from datetime import date
from decimal import Decimal

import pytest

from coffee_engines.payments import (
    REJECT_NO_AMOUNT,
    REJECT_NO_CONTRACT,
    add_payment,
    payments_for_contract,
    remove_payment,
    total_paid,
)


def _post(payments, contract_id, amount, payment_id):
    return add_payment(
        payments,
        contract_id=contract_id,
        payment_date=date(2024, 11, 4),
        amount=amount,
        id_factory=lambda: payment_id,
    )


class TestAddPayment:

    def test_accepted(self):
        result = _post((), "c-1", "5000", "p-1")
        assert result.accepted
        assert result.payment.amount == Decimal("5000")
        assert result.payments == (result.payment,)

    @pytest.mark.parametrize("amount", [0, "0", "", None, "abc"])
    def test_falsy_amount_rejected(self, amount):
        result = _post((), "c-1", amount, "p-1")
        assert not result.accepted
        assert result.reason == REJECT_NO_AMOUNT
        assert result.payments == ()
        assert result.payment is None

    def test_missing_contract_rejected(self):
        result = _post((), "", "100", "p-1")
        assert not result.accepted
        assert result.reason == REJECT_NO_CONTRACT

    def test_negative_amount_accepted(self):
        assert _post((), "c-1", "-10", "p-1").accepted

    def test_input_not_mutated(self):
        ledger = _post((), "c-1", "1", "p-1").payments
        _post(ledger, "c-1", "2", "p-2")
        assert len(ledger) == 1


class TestLedgerQueries:

    def setup_method(self):
        ledger = ()
        for contract_id, amount, payment_id in [
            ("c-1", "5000", "p-1"),
            ("c-2", "100", "p-2"),
            ("c-1", "4000", "p-3"),
        ]:
            ledger = _post(ledger, contract_id, amount, payment_id).payments
        self.ledger = ledger

    def test_filter_preserves_insertion_order(self):
        assert [p.id for p in payments_for_contract(self.ledger, "c-1")] == ["p-1", "p-3"]

    def test_total(self):
        assert total_paid(payments_for_contract(self.ledger, "c-1")) == Decimal("9000")
        assert total_paid(()) == Decimal("0")

    def test_remove(self):
        assert [p.id for p in remove_payment(self.ledger, "p-2")] == ["p-1", "p-3"]

    def test_remove_unknown_is_noop(self):
        assert remove_payment(self.ledger, "nope") == self.ledger
