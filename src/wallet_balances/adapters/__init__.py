from __future__ import annotations

from .ledger_adapters import LEDGER_ADAPTER_REGISTRY
from .price_adapters import PRICE_ADAPTER_REGISTRY

__all__ = ["LEDGER_ADAPTER_REGISTRY", "PRICE_ADAPTER_REGISTRY"]
