"""
Pytest fixtures for the coffee liquidation test suite.

Engines are pure, so most fixtures are plain model factories.  The logging
fixtures mirror production configuration: structured JSON on the
``coffee_kernel`` logger hierarchy, with ``captured_logs`` for asserting
on emitted events.
"""

import itertools
import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from coffee_kernel.domain.clock import DeterministicClock
from coffee_kernel.domain.models import (
    Company,
    Contract,
    ReportRecord,
    ShipmentLot,
)
from coffee_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture coffee_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, workspace):
            workspace.open_liquidation("c-1")
            logs = captured_logs()
            assert any(r["message"] == "deductions_seeded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("coffee_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock and id fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing (2024-11-04 12:00 UTC)."""
    return DeterministicClock()


@pytest.fixture
def sequential_ids():
    """Id factory yielding "id-1", "id-2", ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def scenario_lots():
    """Two lots totalling 46 quintals worth 10,000."""
    return (
        ShipmentLot(
            id="lot-a",
            partida_no="0101",
            weight_kg=Decimal("1380"),  # 30 qq
            settled_price=Decimal("200"),
            package_type="Saco de Yute",
            unit_count=20,
        ),
        ShipmentLot(
            id="lot-b",
            partida_no="0102",
            weight_kg=Decimal("736"),  # 16 qq
            settled_price=Decimal("250"),
            package_type="Big Bag",
            unit_count=7,
        ),
    )


@pytest.fixture
def scenario_contract(scenario_lots):
    """A Dizano contract of the 2024-2025 harvest with an unseeded ledger."""
    return Contract(
        id="c-1",
        company=Company.DIZANO,
        contract_number="D-001",
        buyer="Nordic Roasters",
        sale_date=date(2024, 11, 4),
        lots=scenario_lots,
    )


@pytest.fixture
def make_contract():
    """Factory for contracts holding one report per number, ids "<contract_id>-r<n>"."""

    def _make(
        contract_id: str,
        contract_number: str,
        *report_numbers: str,
        company: Company = Company.DIZANO,
        sale_date: date | None = date(2024, 11, 4),
        harvest_year: str | None = None,
    ) -> Contract:
        return Contract(
            id=contract_id,
            company=company,
            contract_number=contract_number,
            sale_date=sale_date,
            harvest_year=harvest_year,
            reports=tuple(
                ReportRecord(id=f"{contract_id}-r{n}", report_no=number)
                for n, number in enumerate(report_numbers, start=1)
            ),
        )

    return _make
