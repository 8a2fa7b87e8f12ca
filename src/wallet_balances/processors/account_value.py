from __future__ import annotations

import asyncio
from typing import Sequence

from ..domain import AccountValue, Holding, HoldingResult, ParseFailure
from ..logger import get_logger
from .price_resolver import PriceResolver

logger = get_logger(__name__)


def holding_value(holding: Holding, price: float | None) -> float:
    """USD value of one holding; a missing price or empty balance is worth 0."""
    if price is None or holding.raw_amount == 0:
        return 0.0
    return holding.ui_amount * price


async def value_holdings(
    account: str,
    results: Sequence[HoldingResult],
    resolver: PriceResolver,
) -> AccountValue:
    """Price the parsed holdings of one account and sum them.

    Args:
        account: Account the holdings belong to
        results: Parsed holdings and parse failures from a ledger adapter
        resolver: Price resolution chain shared across the aggregation

    Returns:
        The account subtotal. Parse failures are logged and count as 0.
    """
    holdings: list[Holding] = []
    failures: list[ParseFailure] = []
    for result in results:
        if isinstance(result, Holding):
            holdings.append(result)
        else:
            failures.append(result)

    for failure in failures:
        logger.warning("Skipping entry for %s: %s", account, failure.reason)

    priced = [h for h in holdings if h.raw_amount != 0]
    prices = await asyncio.gather(*(resolver.resolve(h) for h in priced))

    subtotal = sum(
        (holding_value(h, price) for h, price in zip(priced, prices)), 0.0
    )
    logger.debug(
        "Account %s: %d holdings, %d failures, $%.2f",
        account,
        len(holdings),
        len(failures),
        subtotal,
    )

    return AccountValue(
        account=account,
        usd_value=subtotal,
        holdings_count=len(holdings),
        failures_count=len(failures),
    )
