from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from aggregation import percent_of


@dataclass(frozen=True)
class GoalProgress:
    percentage: int
    remaining: float


def compute_progress(current, target) -> int:
    """
    Completion percentage of a savings goal, rounded to a whole number.

    Not capped at 100: an over-funded goal reports more than 100%. A zero
    target yields 0 instead of a division error.
    """
    return percent_of(float(current or 0), float(target or 0))


def remaining_amount(current, target) -> float:
    """Amount still needed to reach the target, never below zero."""
    return max(float(target or 0) - float(current or 0), 0.0)


def goal_progress(goal) -> GoalProgress:
    return GoalProgress(
        percentage=compute_progress(goal.current, goal.target),
        remaining=remaining_amount(goal.current, goal.target),
    )


def months_until(deadline: datetime, today: Optional[datetime] = None) -> int:
    """Calendar months left until the deadline, at least 1."""
    today = today or datetime.today()
    return max((deadline.year - today.year) * 12 + (deadline.month - today.month), 1)


def goal_savings_plan(goal, today: Optional[datetime] = None) -> Optional[dict]:
    """Monthly contribution needed to hit the goal by its deadline."""
    if goal.deadline is None:
        return None

    months_remaining = months_until(goal.deadline, today)
    remaining_needed = remaining_amount(goal.current, goal.target)
    return {
        "goal": goal.name,
        "months_remaining": months_remaining,
        "remaining_needed": remaining_needed,
        "required_monthly": remaining_needed / months_remaining,
    }
