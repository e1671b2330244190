"""
Module: coffee_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    liquidation engines.  This is the canonical import surface for
    coffee_services and for the rendering layer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import coffee_kernel (and sibling engine modules).
    MUST NOT import coffee_services or coffee_config.

Invariants enforced:
    - Purity: engines never read the clock; dates arrive as parameters.
    - Decimal-only arithmetic for money and weights.
    - Determinism: identical inputs always produce identical outputs.
    - Write operations return new collections and never mutate inputs.

Audit relevance:
    Engine entrypoints are traced via ``@traced_engine`` (see
    ``coffee_engines.tracer``), emitting COFFEE_ENGINE_TRACE log records.

Usage:
    from coffee_engines import settle, liquidation_state
    from coffee_engines import derive_requirements
    from coffee_engines import validate_report_number
"""

from coffee_kernel.logging_config import get_logger

logger = get_logger("engines")

from coffee_engines.deductions import (
    DeductionBreakdown,
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
from coffee_engines.fob_reports import (
    delete_report,
    duplicate_report,
    reports_for_display,
    save_report,
)
from coffee_engines.packaging import (
    PACKAGING_RULES,
    PackagingRule,
    PackagingSummary,
    RequirementField,
    add_requirement,
    derive_requirements,
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
    total_paid,
)
from coffee_engines.report_numbers import (
    ReportNumberCheck,
    ReportNumberStatus,
    validate_for_contract,
    validate_report_number,
)
from coffee_engines.settlement import (
    LiquidationState,
    SettlementResult,
    finalize_liquidation,
    liquidation_state,
    settle,
)
from coffee_engines.valuation import (
    contract_value,
    line_value,
    standard_units,
    total_standard_units,
)

__all__ = [
    # Packaging
    "PACKAGING_RULES",
    "PackagingRule",
    "PackagingSummary",
    "RequirementField",
    "derive_requirements",
    "requirements_for_lot",
    "add_requirement",
    "update_requirement",
    "remove_requirement",
    "summarize_packaging",
    # Valuation
    "standard_units",
    "line_value",
    "contract_value",
    "total_standard_units",
    # Deductions
    "DeductionBreakdown",
    "DeductionField",
    "seed_defaults",
    "reset_to_defaults",
    "default_breakdown",
    "breakdown_from_items",
    "add_item",
    "update_item",
    "remove_item",
    "total_deductions",
    # Payments
    "PaymentPostingResult",
    "add_payment",
    "remove_payment",
    "payments_for_contract",
    "total_paid",
    # Settlement
    "LiquidationState",
    "SettlementResult",
    "settle",
    "liquidation_state",
    "finalize_liquidation",
    # Report numbers
    "ReportNumberCheck",
    "ReportNumberStatus",
    "validate_report_number",
    "validate_for_contract",
    # FOB report history
    "save_report",
    "delete_report",
    "duplicate_report",
    "reports_for_display",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 7,
    "modules": [
        "packaging", "valuation", "deductions", "payments",
        "settlement", "report_numbers", "fob_reports",
    ],
})
