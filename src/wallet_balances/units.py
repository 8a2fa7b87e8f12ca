from __future__ import annotations

from decimal import Decimal

from .constants import LAMPORTS_PER_SOL


def to_ui_amount(raw_amount: int, decimals: int) -> float:
    """Convert an on-ledger integer amount into its human-readable amount.

    Args:
        raw_amount: Integer balance in the asset's smallest unit.
        decimals: Power-of-ten scale of the asset. Negative values are rejected.

    Returns:
        ``raw_amount / 10**decimals`` as a float.

    Notes:
        - The division is done in ``Decimal`` so large raw amounts keep their
          precision until the final float conversion.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    if raw_amount == 0:
        return 0.0
    return float(Decimal(raw_amount) / (Decimal(10) ** decimals))


def lamports_to_sol(lamports: int) -> float:
    """Convert lamports to SOL using the fixed ledger scale factor."""
    return float(Decimal(lamports) / Decimal(LAMPORTS_PER_SOL))
