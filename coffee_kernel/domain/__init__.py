"""
Pure domain layer.

This module contains the immutable records of the liquidation core and the
value helpers they are built on, with NO dependencies on:
- Storage
- Time/clock (except the injectable Clock abstraction)
- I/O

All domain objects are frozen dataclasses; edits produce new instances.
"""

from coffee_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from coffee_kernel.domain.models import (
    PACKAGE_TYPES,
    Company,
    Contract,
    DeductionItem,
    PackagingRequirement,
    PackagingStatus,
    Payment,
    ReportRecord,
    ShipmentLot,
    harvest_year_for,
)
from coffee_kernel.domain.rates import STANDARD_RATES, LiquidationRates
from coffee_kernel.domain.values import Money, round_money, to_decimal, to_int

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Models
    "PACKAGE_TYPES",
    "Company",
    "Contract",
    "DeductionItem",
    "PackagingRequirement",
    "PackagingStatus",
    "Payment",
    "ReportRecord",
    "ShipmentLot",
    "harvest_year_for",
    # Rates
    "LiquidationRates",
    "STANDARD_RATES",
    # Values
    "Money",
    "round_money",
    "to_decimal",
    "to_int",
]
