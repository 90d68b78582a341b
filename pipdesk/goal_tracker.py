# pipdesk/goal_tracker.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

HUNDRED = Decimal("100")


def _amount(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value))


@dataclass
class GoalProgressTracker:
    """
    Running profit aggregate for one user against a monthly goal.

    accumulated_profit keeps its sign for accounting; only percent_to_goal
    is clamped at zero.
    """

    initial_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    monthly_goal: Decimal = field(default_factory=lambda: Decimal("0"))
    accumulated_profit: Decimal = field(default_factory=lambda: Decimal("0"))

    def __post_init__(self):
        self.initial_balance = _amount(self.initial_balance)
        self.monthly_goal = _amount(self.monthly_goal)
        self.accumulated_profit = _amount(self.accumulated_profit)

    @classmethod
    def from_entries(
        cls,
        initial_balance=None,
        monthly_goal=None,
        profits: Optional[Iterable] = None,
    ) -> "GoalProgressTracker":
        tracker = cls(initial_balance, monthly_goal)
        for profit in profits or ():
            tracker.record_entry(profit)
        return tracker

    def record_entry(self, profit_delta) -> Decimal:
        self.accumulated_profit += _amount(profit_delta)
        return self.accumulated_profit

    def remove_entry(self, profit_delta) -> Decimal:
        self.accumulated_profit -= _amount(profit_delta)
        return self.accumulated_profit

    def reset_period(self) -> None:
        self.accumulated_profit = Decimal("0")

    @property
    def current_balance(self) -> Decimal:
        return self.initial_balance + self.accumulated_profit

    @property
    def target_balance(self) -> Decimal:
        return self.initial_balance + self.monthly_goal

    @property
    def percent_to_goal(self) -> Decimal:
        if self.monthly_goal <= 0:
            return Decimal("0")
        return max(Decimal("0"), self.accumulated_profit / self.monthly_goal * HUNDRED)

    @property
    def remaining_to_goal(self) -> Decimal:
        if self.monthly_goal <= 0:
            return Decimal("0")
        return max(Decimal("0"), self.monthly_goal - self.accumulated_profit)

    @property
    def goal_reached(self) -> bool:
        return self.monthly_goal > 0 and self.accumulated_profit >= self.monthly_goal

    def snapshot(self) -> dict:
        return {
            "initial_balance": self.initial_balance,
            "monthly_goal": self.monthly_goal,
            "accumulated_profit": self.accumulated_profit,
            "current_balance": self.current_balance,
            "target_balance": self.target_balance,
            "percent_to_goal": self.percent_to_goal,
            "remaining_to_goal": self.remaining_to_goal,
            "goal_reached": self.goal_reached,
        }
