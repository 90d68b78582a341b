"""
Tests for the monthly goal progress tracker.
"""
from decimal import Decimal

import pytest

from pipdesk.goal_tracker import GoalProgressTracker


class TestGoalProgress:
    def test_halfway_to_goal(self):
        """1000 start, 500 goal, 250 profit -> balance 1250 and 50%."""
        tracker = GoalProgressTracker.from_entries(1000, 500, [100, 200, -50])
        assert tracker.accumulated_profit == Decimal("250")
        assert tracker.current_balance == Decimal("1250")
        assert tracker.percent_to_goal == Decimal("50.0")
        assert tracker.remaining_to_goal == Decimal("250")
        assert tracker.target_balance == Decimal("1500")
        assert not tracker.goal_reached

    def test_record_then_remove_is_identity(self):
        tracker = GoalProgressTracker(Decimal("1000"), Decimal("500"), Decimal("12.34"))
        for delta in ("0.01", "-75.5", "1e3"):
            tracker.record_entry(delta)
            tracker.remove_entry(delta)
            assert tracker.accumulated_profit == Decimal("12.34")

    def test_percent_never_negative(self):
        tracker = GoalProgressTracker.from_entries(1000, 500, [-100000])
        assert tracker.percent_to_goal == 0
        assert tracker.accumulated_profit == Decimal("-100000")
        assert tracker.current_balance == Decimal("-99000")

    @pytest.mark.parametrize("goal", [0, -10, None])
    def test_no_goal_means_zero_percent(self, goal):
        tracker = GoalProgressTracker.from_entries(1000, goal, [300])
        assert tracker.percent_to_goal == 0
        assert tracker.remaining_to_goal == 0
        assert not tracker.goal_reached

    def test_goal_reached(self):
        tracker = GoalProgressTracker.from_entries(1000, 500, [600])
        assert tracker.goal_reached
        assert tracker.percent_to_goal == Decimal("120")
        assert tracker.remaining_to_goal == 0

    def test_reset_period(self):
        tracker = GoalProgressTracker.from_entries(1000, 500, [250])
        tracker.reset_period()
        assert tracker.accumulated_profit == 0
        assert tracker.current_balance == Decimal("1000")

    def test_float_inputs_are_exact(self):
        tracker = GoalProgressTracker.from_entries(0.1, 0.2, [0.1, 0.2])
        assert tracker.accumulated_profit == Decimal("0.3")

    def test_snapshot_keys(self):
        snapshot = GoalProgressTracker.from_entries(1000, 500, [250]).snapshot()
        assert snapshot["current_balance"] == Decimal("1250")
        assert snapshot["percent_to_goal"] == Decimal("50")
        assert set(snapshot) == {
            "initial_balance", "monthly_goal", "accumulated_profit", "current_balance",
            "target_balance", "percent_to_goal", "remaining_to_goal", "goal_reached",
        }
