from __future__ import annotations

from .account_value import holding_value, value_holdings
from .price_resolver import PriceResolver
from .total_value import calculate_total_value, per_account_breakdown

__all__ = [
    "PriceResolver",
    "holding_value",
    "value_holdings",
    "calculate_total_value",
    "per_account_breakdown",
]
