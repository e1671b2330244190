"""
Tests for the deduction ledger engine.

Covers:
- Default seeding (three items, rounded)
- Add / update / remove and totals
- Reset from lots
- Locating the standard components by concept label
"""

from decimal import Decimal

from coffee_engines.deductions import (
    DeductionField,
    add_item,
    breakdown_from_items,
    default_breakdown,
    remove_item,
    reset_to_defaults,
    seed_defaults,
    total_deductions,
    update_item,
)
from coffee_kernel.domain.models import DeductionItem
from coffee_kernel.domain.rates import STANDARD_RATES


class TestSeedDefaults:

    def test_three_items(self):
        items = seed_defaults(Decimal("10000"), Decimal("46"))
        assert [(i.id, i.concept, i.amount) for i in items] == [
            ("1", STANDARD_RATES.tax_concept, Decimal("250.00")),
            ("2", STANDARD_RATES.license_fee_concept, Decimal("46.00")),
            ("3", STANDARD_RATES.phytosanitary_concept, Decimal("45.45")),
        ]

    def test_amounts_rounded_to_cents(self):
        items = seed_defaults(Decimal("1234.567"), Decimal("26.8478"))
        assert items[0].amount == Decimal("30.86")  # 30.864175
        assert items[1].amount == Decimal("26.85")

    def test_zero_contract(self):
        items = seed_defaults(Decimal("0"), Decimal("0"))
        assert total_deductions(items) == Decimal("45.45")

    def test_reset_from_lots(self, scenario_lots):
        assert total_deductions(reset_to_defaults(scenario_lots)) == Decimal("341.45")

    def test_default_breakdown_unrounded(self):
        breakdown = default_breakdown(Decimal("1234.567"), Decimal("1"))
        assert breakdown.taxes == Decimal("30.864175")
        assert breakdown.total == Decimal("30.864175") + Decimal("1.00") + Decimal("45.45")


class TestLedgerEdits:

    def setup_method(self):
        self.items = seed_defaults(Decimal("10000"), Decimal("46"))

    def test_add_item(self):
        updated = add_item(self.items, lambda: "new")
        assert len(updated) == 4
        assert updated[-1] == DeductionItem(id="new", concept="", amount=Decimal("0"))
        assert len(self.items) == 3

    def test_add_to_missing_ledger(self):
        assert len(add_item(None)) == 1

    def test_fresh_ids_are_unique(self):
        updated = add_item(add_item(self.items))
        assert len({item.id for item in updated}) == 5

    def test_update_amount(self):
        updated = update_item(self.items, "3", DeductionField.AMOUNT, "50")
        assert updated[2].amount == Decimal("50")
        assert total_deductions(updated) == Decimal("346.00")

    def test_invalid_amount_becomes_zero(self):
        updated = update_item(self.items, "1", DeductionField.AMOUNT, "twelve")
        assert updated[0].amount == Decimal("0")

    def test_update_concept_unvalidated(self):
        updated = update_item(self.items, "2", DeductionField.CONCEPT, "")
        assert updated[1].concept == ""

    def test_update_unknown_id_is_noop(self):
        assert update_item(self.items, "missing", DeductionField.AMOUNT, "1") == self.items

    def test_remove_item(self):
        updated = remove_item(self.items, "1")
        assert [i.id for i in updated] == ["2", "3"]

    def test_remove_all_leaves_empty_ledger(self):
        updated = self.items
        for item_id in ("1", "2", "3"):
            updated = remove_item(updated, item_id)
        assert updated == ()
        assert total_deductions(updated) == Decimal("0")

    def test_negative_amounts_are_summed(self):
        updated = update_item(self.items, "3", DeductionField.AMOUNT, "-45.45")
        assert total_deductions(updated) == Decimal("250.55")


class TestBreakdownFromItems:

    def test_seeded_ledger(self):
        breakdown = breakdown_from_items(seed_defaults(Decimal("10000"), Decimal("46")))
        assert breakdown.taxes == Decimal("250.00")
        assert breakdown.license_fee == Decimal("46.00")
        assert breakdown.phytosanitary_cost == Decimal("45.45")

    def test_tax_label_mentioning_license_is_not_reused(self):
        items = (
            DeductionItem(id="1", concept="Impuestos (2.5% Alquiler Licencia)", amount="250"),
            DeductionItem(id="2", concept="Otro costo", amount="10"),
        )
        breakdown = breakdown_from_items(items)
        assert breakdown.taxes == Decimal("250")
        assert breakdown.license_fee == Decimal("0")

    def test_case_insensitive(self):
        items = (DeductionItem(id="1", concept="COSTO FITOSANITARIO", amount="40"),)
        assert breakdown_from_items(items).phytosanitary_cost == Decimal("40")

    def test_empty(self):
        assert breakdown_from_items(()).total == Decimal("0")
