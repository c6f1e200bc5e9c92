"""Tests for goal progress and withdrawal figures."""

from decimal import Decimal

from portfolio_dashboard.core.config import Goal
from portfolio_dashboard.core.goals import goal_progress, monthly_spend_limit


def test_partial_progress():
    [p] = goal_progress([Goal("House", Decimal("300000"))], Decimal("100000"))
    assert p.title == "House"
    assert p.completed_pct == Decimal("33.33")
    assert p.remaining_pct == Decimal("66.67")


def test_completed_goal_capped_at_100():
    [p] = goal_progress([Goal("Emergency fund", Decimal("10000"))], Decimal("25000"))
    assert p.completed_pct == Decimal("100.00")
    assert p.remaining_pct == Decimal("0.00")


def test_disabled_goals_skipped():
    goals = [Goal("zero", Decimal("0")), Goal("negative", Decimal("-5")), Goal("ok", Decimal("10"))]
    assert [p.title for p in goal_progress(goals, Decimal("5"))] == ["ok"]


def test_empty_portfolio():
    [p] = goal_progress([Goal("FI", Decimal("1000000"))], Decimal("0"))
    assert p.completed_pct == Decimal("0.00")
    assert p.remaining_pct == Decimal("100.00")


def test_monthly_spend_limit():
    assert monthly_spend_limit(Decimal("300000"), Decimal("0.04")) == Decimal("1000.00")
    assert monthly_spend_limit(Decimal("0"), Decimal("0.04")) == Decimal("0.00")
