"""
Unit tests for timing metrics and work budgets.
"""

import pytest

from pattern_toolkit.core.errors import BudgetExceeded
from pattern_toolkit.timing import TimingLog, WorkBudget, timed_unit


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestTimingLog:
    """Tests for TimingLog."""

    def test_slowest_units_when_many_then_sorted_descending(self):
        log = TimingLog()
        log.log_unit("rasterize", "page 1", 0.2)
        log.log_unit("rasterize", "page 2", 0.9)
        log.log_unit("merge", "cell (0, 0)", 0.5)

        assert log.slowest_units(2) == [
            ("rasterize", "page 2", 0.9),
            ("merge", "cell (0, 0)", 0.5),
        ]

    def test_summary_when_logged_then_mentions_stages_and_units(self):
        log = TimingLog()
        log.log_stage("merge", 1.5)
        log.log_unit("merge", "cell (1, 1)", 0.75)

        summary = log.summary()

        assert "merge" in summary
        assert "1.500s" in summary
        assert "merge/cell (1, 1): 0.750s" in summary

    def test_to_dict_when_logged_then_serialisable_structure(self):
        log = TimingLog()
        log.log_stage("rasterize", 2.0)
        log.log_unit("rasterize", "page 1", 1.0)

        assert log.to_dict() == {
            "stage_timings": {"rasterize": 2.0},
            "unit_timings": {"rasterize": [{"unit": "page 1", "duration": 1.0}]},
        }

    def test_timed_unit_when_unit_given_then_logs_unit(self):
        log = TimingLog()
        with timed_unit(log, "merge", "cell (0, 1)"):
            pass
        assert [unit for unit, _ in log.unit_timings["merge"]] == ["cell (0, 1)"]
        assert "merge" not in log.stage_timings

    def test_timed_unit_when_no_unit_then_logs_stage(self):
        log = TimingLog()
        with timed_unit(log, "rasterize"):
            pass
        assert "rasterize" in log.stage_timings

    def test_timed_unit_when_body_raises_then_still_logged(self):
        log = TimingLog()
        with pytest.raises(RuntimeError):
            with timed_unit(log, "rasterize", "page 3"):
                raise RuntimeError("boom")
        assert log.unit_timings["rasterize"][0][0] == "page 3"

    def test_timed_unit_when_log_none_then_no_error(self):
        with timed_unit(None, "merge", "cell (0, 0)"):
            pass


class TestWorkBudget:
    """Tests for WorkBudget."""

    def test_check_when_within_budget_then_passes(self):
        clock = FakeClock()
        budget = WorkBudget(60.0, clock=clock)
        clock.now += 59.0

        budget.check("page 1")

        assert budget.elapsed == pytest.approx(59.0)
        assert budget.remaining == pytest.approx(1.0)

    def test_check_when_spent_then_raises_naming_unit(self):
        clock = FakeClock()
        budget = WorkBudget(60.0, clock=clock)
        clock.now += 61.0

        with pytest.raises(BudgetExceeded) as exc_info:
            budget.check("cell (2, 3)")

        assert exc_info.value.unit == "cell (2, 3)"
        assert exc_info.value.budget == 60.0
        assert "cell (2, 3)" in str(exc_info.value)
        assert budget.remaining == 0.0

    def test_init_when_not_positive_then_raises_error(self):
        with pytest.raises(ValueError, match="budget must be positive"):
            WorkBudget(0)
