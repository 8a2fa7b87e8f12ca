from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BasePriceAdapter
from .coingecko import CoinGeckoAdapter
from .jupiter import JupiterAdapter

if TYPE_CHECKING:
    from ...settings import BalanceSettings

PRICE_ADAPTER_REGISTRY: dict[str, type[BasePriceAdapter]] = {
    "jupiter": JupiterAdapter,
    "coingecko": CoinGeckoAdapter,
}


def build_price_adapters(config: BalanceSettings) -> list[BasePriceAdapter]:
    """Instantiate the configured price sources in fallback order."""
    return [PRICE_ADAPTER_REGISTRY[name](config) for name in config.price_sources]


__all__ = [
    "PRICE_ADAPTER_REGISTRY",
    "BasePriceAdapter",
    "CoinGeckoAdapter",
    "JupiterAdapter",
    "build_price_adapters",
]
