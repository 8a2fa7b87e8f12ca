from __future__ import annotations

import asyncio
from typing import Sequence

from ..adapters.price_adapters.base import BasePriceAdapter
from ..domain import Holding
from ..logger import get_logger

logger = get_logger(__name__)


class PriceResolver:
    """Resolve USD prices through an ordered chain of price sources.

    Order: inline price from the balance response, then each adapter in turn
    until one returns a quote. An exhausted chain yields None, which values
    the holding at zero.

    Quotes are memoised per resolver, so create one resolver per aggregation
    to keep prices fresh while looking each asset up only once.
    """

    def __init__(self, adapters: Sequence[BasePriceAdapter]):
        self.adapters = list(adapters)
        self._quotes: dict[str, asyncio.Task[float | None]] = {}

    async def resolve(self, holding: Holding) -> float | None:
        """Return the USD price to apply to ``holding``."""
        if holding.usd_price is not None and holding.usd_price > 0:
            return holding.usd_price
        return await self.quote(holding.asset_id)

    async def quote(self, asset_id: str) -> float | None:
        """Look up ``asset_id`` through the adapter chain, sharing in-flight lookups."""
        task = self._quotes.get(asset_id)
        if task is None:
            task = asyncio.ensure_future(self._walk_chain(asset_id))
            self._quotes[asset_id] = task
        # Shielded so one account's timeout does not cancel a lookup shared
        # with another account.
        return await asyncio.shield(task)

    async def _walk_chain(self, asset_id: str) -> float | None:
        for adapter in self.adapters:
            try:
                price = await adapter.fetch_price(asset_id)
            except Exception as e:
                logger.warning(
                    "Price source %s failed for %s: %s", adapter.adapter_name, asset_id, e
                )
                continue
            if price is not None:
                logger.debug(
                    "Priced %s at %s via %s", asset_id, price, adapter.adapter_name
                )
                return price
            logger.debug("No quote for %s from %s", asset_id, adapter.adapter_name)

        logger.warning("No price quote for %s; valuing at 0", asset_id)
        return None
