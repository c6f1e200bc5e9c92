"""Goal progress and withdrawal figures derived from the portfolio value."""

from decimal import Decimal

from .allocation import round2
from .config import Goal
from .models import GoalProgress

_HUNDRED = Decimal("100")


def goal_progress(goals: list[Goal], total_value: Decimal) -> list[GoalProgress]:
    """Completion of each goal; goals with a non-positive value are disabled."""
    result = []
    for goal in goals:
        if goal.value <= 0:
            continue
        completed = round2(min(_HUNDRED, total_value / goal.value * 100))
        result.append(
            GoalProgress(
                title=goal.title,
                target_value=goal.value,
                completed_pct=completed,
                remaining_pct=round2(_HUNDRED - completed),
            )
        )
    return result


def monthly_spend_limit(total_value: Decimal, withdrawal_rate: Decimal) -> Decimal:
    """Monthly amount that can be withdrawn at the configured yearly rate."""
    return round2(withdrawal_rate * total_value / 12)
