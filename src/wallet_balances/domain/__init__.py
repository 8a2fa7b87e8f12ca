"""Domain models for the balance aggregator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from ..units import to_ui_amount


@dataclass(frozen=True)
class Holding:
    """One asset balance within an account."""

    asset_id: str
    raw_amount: int
    decimals: int = 0
    usd_price: float | None = None  # inline price from the balance response
    native: bool = False

    @property
    def ui_amount(self) -> float:
        return to_ui_amount(self.raw_amount, self.decimals)


@dataclass(frozen=True)
class ParseFailure:
    """Marker for a balance entry that could not be parsed into a Holding.

    Always contributes zero to the account value.
    """

    account: str
    reason: str
    payload: Any = None


HoldingResult = Holding | ParseFailure


@dataclass(frozen=True)
class AccountValue:
    """USD subtotal of one account plus what went wrong computing it."""

    account: str
    usd_value: float
    holdings_count: int = 0
    failures_count: int = 0
    error: str | None = None


@dataclass
class AggregateResult:
    """Total USD value across all accounts at request time."""

    total: float
    per_account: dict[str, float] = field(default_factory=dict)
    timestamp: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert the result to dictionary format."""
        return asdict(self)
