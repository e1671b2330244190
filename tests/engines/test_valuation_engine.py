"""
Tests for contract valuation in quintals.
"""

from decimal import Decimal

from coffee_engines.valuation import (
    contract_value,
    line_value,
    standard_units,
    total_standard_units,
)
from coffee_kernel.domain.models import ShipmentLot
from coffee_kernel.domain.rates import LiquidationRates


class TestStandardUnits:

    def test_from_weight(self):
        assert standard_units(ShipmentLot(id="l", weight_kg="4600")) == Decimal("100")

    def test_override_wins(self):
        lot = ShipmentLot(id="l", weight_kg="4600", quintales_override="99.5")
        assert standard_units(lot) == Decimal("99.5")

    def test_custom_rates(self):
        rates = LiquidationRates(kg_per_quintal=Decimal("50"))
        assert standard_units(ShipmentLot(id="l", weight_kg="500"), rates) == Decimal("10")


class TestContractValue:

    def test_single_lot(self):
        lot = ShipmentLot(id="l", weight_kg="2300", settled_price="180.50")
        assert contract_value([lot]) == Decimal("2300") / Decimal("46") * Decimal("180.50")

    def test_empty_contract(self):
        assert contract_value([]) == Decimal("0")
        assert total_standard_units([]) == Decimal("0")

    def test_scenario_lots(self, scenario_lots):
        assert contract_value(scenario_lots) == Decimal("10000")
        assert total_standard_units(scenario_lots) == Decimal("46")

    def test_order_independent(self, scenario_lots):
        assert contract_value(scenario_lots) == contract_value(tuple(reversed(scenario_lots)))

    def test_missing_price_contributes_zero(self):
        lots = [
            ShipmentLot(id="a", weight_kg="460", settled_price="abc"),
            ShipmentLot(id="b", weight_kg="460", settled_price="100"),
        ]
        assert line_value(lots[0]) == Decimal("0")
        assert contract_value(lots) == Decimal("1000")

    def test_none_lots_skipped(self):
        assert contract_value([None, ShipmentLot(id="a", weight_kg="46", settled_price="5")]) == Decimal("5")
