"""
Tests for sales report number uniqueness within a harvest year and company.
"""

from datetime import date

import pytest

from coffee_engines.report_numbers import (
    ReportNumberStatus,
    validate_for_contract,
    validate_report_number,
)
from coffee_kernel.domain.models import Company


@pytest.fixture
def two_contracts(make_contract):
    return [
        make_contract("c-1", "D-001", "8"),
        make_contract("c-2", "D-002", "8"),
    ]


class TestConflicts:

    def test_duplicate_reports_other_contract(self, two_contracts):
        first, second = two_contracts
        check = validate_for_contract("8", first, two_contracts, current_record_id="c-1-r1")
        assert check.status is ReportNumberStatus.CONFLICT
        assert check.conflicting_contract_id == "c-2"
        assert check.conflicting_contract_number == "D-002"
        assert "D-002" in check.message

        check = validate_for_contract("8", second, two_contracts, current_record_id="c-2-r1")
        assert check.conflicting_contract_number == "D-001"

    def test_renaming_resolves(self, two_contracts, make_contract):
        contracts = [two_contracts[0], make_contract("c-2", "D-002", "8B")]
        assert validate_for_contract("8", contracts[0], contracts, current_record_id="c-1-r1").ok
        assert validate_for_contract("8B", contracts[0], contracts).status is ReportNumberStatus.CONFLICT

    def test_candidate_is_trimmed(self, two_contracts):
        check = validate_for_contract("  8 ", two_contracts[0], two_contracts, current_record_id="c-1-r1")
        assert check.status is ReportNumberStatus.CONFLICT
        assert check.report_no == "8"

    def test_stored_numbers_are_trimmed(self, make_contract):
        contracts = [make_contract("c-1", "D-001"), make_contract("c-2", "D-002", " 12 ")]
        assert not validate_for_contract("12", contracts[0], contracts).ok

    def test_comparison_is_exact(self, two_contracts):
        assert validate_for_contract("08", two_contracts[0], two_contracts).ok

    def test_first_conflict_wins(self, make_contract):
        contracts = [
            make_contract("c-1", "D-001"),
            make_contract("c-2", "D-002", "5"),
            make_contract("c-3", "D-003", "5"),
        ]
        check = validate_for_contract("5", contracts[0], contracts)
        assert check.conflicting_contract_id == "c-2"

    def test_new_report_conflicts_with_own_contract(self, make_contract):
        contracts = [make_contract("c-1", "D-001", "3")]
        check = validate_for_contract("3", contracts[0], contracts)
        assert check.conflicting_contract_id == "c-1"


class TestScope:

    def test_other_harvest_year_is_ok(self, make_contract):
        contracts = [
            make_contract("c-1", "D-001"),
            make_contract("c-2", "D-002", "8", sale_date=date(2024, 3, 1)),
        ]
        assert validate_for_contract("8", contracts[0], contracts).ok

    def test_other_company_is_ok(self, make_contract):
        contracts = [
            make_contract("c-1", "D-001"),
            make_contract("c-2", "P-002", "8", company=Company.PROBEN),
        ]
        assert validate_for_contract("8", contracts[0], contracts).ok

    def test_explicit_harvest_year_used(self, make_contract):
        contracts = [
            make_contract("c-1", "D-001", harvest_year="2023-2024"),
            make_contract("c-2", "D-002", "8", sale_date=date(2024, 3, 1)),
        ]
        assert not validate_for_contract("8", contracts[0], contracts).ok

    def test_direct_call(self, two_contracts):
        check = validate_report_number("8", "2024-2025", Company.DIZANO, two_contracts, None)
        assert check.conflicting_contract_id == "c-1"


class TestSelfSkip:

    def test_edited_record_skipped_by_id(self, make_contract):
        contracts = [make_contract("c-1", "D-001", "8")]
        assert validate_for_contract("8", contracts[0], contracts, current_record_id="c-1-r1").ok

    def test_edited_record_skipped_by_previous_number(self, make_contract):
        contracts = [make_contract("c-1", "D-001", "8")]
        check = validate_for_contract(
            "8", contracts[0], contracts, current_record_id="unsaved", previous_report_no="8",
        )
        assert check.ok

    def test_previous_number_only_skips_within_own_contract(self, two_contracts):
        check = validate_for_contract(
            "8", two_contracts[0], two_contracts,
            current_record_id="c-1-r1", previous_report_no="8",
        )
        assert check.conflicting_contract_id == "c-2"


class TestMissing:

    @pytest.mark.parametrize("candidate", ["", "   ", None])
    def test_blank_number(self, candidate, two_contracts):
        check = validate_for_contract(candidate, two_contracts[0], two_contracts)
        assert check.status is ReportNumberStatus.MISSING
        assert check.message
