from __future__ import annotations

from typing import Iterable

from ..domain import AccountValue


def calculate_total_value(account_values: Iterable[AccountValue]) -> float:
    """Sum account subtotals with ordinary float addition."""
    return sum((value.usd_value for value in account_values), 0.0)


def per_account_breakdown(account_values: Iterable[AccountValue]) -> dict[str, float]:
    """Map each account to its USD value, merging repeated accounts."""
    breakdown: dict[str, float] = {}
    for value in account_values:
        breakdown[value.account] = breakdown.get(value.account, 0.0) + value.usd_value
    return breakdown
