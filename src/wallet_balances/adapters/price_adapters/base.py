from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any

from ...settings import BalanceSettings


class BasePriceAdapter(ABC):
    """Abstract base class for USD price sources.

    ``fetch_price`` maps an asset identifier to a USD quote or None. It must
    not raise: upstream failures are logged and reported as "no quote".
    """

    def __init__(self, config: BalanceSettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_price(self, asset_id: str) -> float | None:
        """Fetch the USD price of one asset, or None if there is no quote."""
        ...

    @staticmethod
    def normalize_price(value: Any) -> float | None:
        """Return a positive finite float, or None for anything else."""
        if value is None or isinstance(value, bool):
            return None
        try:
            price = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(price) or price <= 0:
            return None
        return price
