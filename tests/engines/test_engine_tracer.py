"""
Tests for the engine tracer decorator and input fingerprints.
"""

from decimal import Decimal

from coffee_engines.packaging import derive_requirements
from coffee_engines.tracer import compute_input_fingerprint, traced_engine
from coffee_kernel.domain.models import Company


class TestFingerprint:

    def test_deterministic(self):
        args = {"value": Decimal("10"), "company": Company.DIZANO}
        assert compute_input_fingerprint(("value", "company"), args) == compute_input_fingerprint(
            ("value", "company"), dict(reversed(list(args.items()))),
        )

    def test_length(self):
        assert len(compute_input_fingerprint(("x",), {"x": 1})) == 16

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})

    def test_different_inputs_differ(self):
        assert compute_input_fingerprint(("x",), {"x": 1}) != compute_input_fingerprint(("x",), {"x": 2})


class TestTracedEngine:

    def test_emits_trace(self, captured_logs):
        derive_requirements("Jumbo", 3)
        traces = [r for r in captured_logs() if r["message"] == "COFFEE_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "packaging"
        assert traces[-1]["engine_version"] == "1.0"
        assert len(traces[-1]["input_fingerprint"]) == 16

    def test_keyword_and_positional_calls_fingerprint_alike(self, captured_logs):
        derive_requirements("Jumbo", 3)
        derive_requirements(package_label="Jumbo", unit_count=3)
        traces = [r for r in captured_logs() if r["message"] == "COFFEE_ENGINE_TRACE"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_result_passed_through(self):
        @traced_engine("double", "0.1", fingerprint_fields=("n",))
        def double(n):
            return n * 2

        assert double(4) == 8
        assert double.__name__ == "double"
