from __future__ import annotations

from .base import BaseLedgerAdapter
from .solscan_pro import SolscanProAdapter
from .solscan_public import SolscanPublicAdapter

LEDGER_ADAPTER_REGISTRY: dict[str, type[BaseLedgerAdapter]] = {
    "solscan_public": SolscanPublicAdapter,
    "solscan_pro": SolscanProAdapter,
}


def get_ledger_adapter_class(adapter_name: str) -> type[BaseLedgerAdapter]:
    """Get ledger adapter class by name.

    Args:
        adapter_name: Name of the adapter (case-insensitive)

    Returns:
        Adapter class

    Raises:
        ValueError: If adapter_name is not recognized
    """
    adapter_name_normalized = adapter_name.lower()
    if adapter_name_normalized not in LEDGER_ADAPTER_REGISTRY:
        raise ValueError(
            f"Unknown ledger adapter '{adapter_name}'. "
            f"Available: {', '.join(LEDGER_ADAPTER_REGISTRY.keys())}"
        )
    return LEDGER_ADAPTER_REGISTRY[adapter_name_normalized]


__all__ = [
    "LEDGER_ADAPTER_REGISTRY",
    "BaseLedgerAdapter",
    "SolscanProAdapter",
    "SolscanPublicAdapter",
    "get_ledger_adapter_class",
]
