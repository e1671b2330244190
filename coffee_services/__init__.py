"""
coffee_services -- stateful orchestration over the liquidation engines.

    records               Storage boundary: camelCase records <-> kernel models.
    liquidation_service   In-memory workspace applying the liquidation workflow.
"""

from coffee_services.liquidation_service import LiquidationWorkspace, ReportSaveResult
from coffee_services.records import (
    contract_from_record,
    contract_to_record,
    load_contracts,
    load_payments,
    payment_from_record,
    payment_to_record,
)

__all__ = [
    "LiquidationWorkspace",
    "ReportSaveResult",
    "contract_from_record",
    "contract_to_record",
    "load_contracts",
    "load_payments",
    "payment_from_record",
    "payment_to_record",
]
