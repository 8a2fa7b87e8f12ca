from __future__ import annotations

import math
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from ...clients import get_json
from ...domain import HoldingResult
from ...settings import AuthScheme, BalanceSettings


def coerce_int(value: Any) -> int:
    """Parse an integer amount that upstreams send as int, str or integral float.

    Raises:
        ValueError: If the value is missing, boolean, fractional or not numeric
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Expected an integer amount, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError(f"Expected an integer amount, got {value!r}")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"Expected an integer amount, got {value!r}")
    raise ValueError(f"Expected an integer amount, got {value!r}")


def raw_from_ui_amount(ui_amount: Any, decimals: int) -> int:
    """Rebuild a raw amount from a UI amount when the upstream omits the raw one."""
    if ui_amount is None or isinstance(ui_amount, bool):
        raise ValueError(f"Expected a numeric UI amount, got {ui_amount!r}")
    try:
        scaled = Decimal(str(ui_amount)) * (Decimal(10) ** decimals)
    except InvalidOperation as e:
        raise ValueError(f"Expected a numeric UI amount, got {ui_amount!r}") from e
    if not scaled.is_finite():
        raise ValueError(f"Expected a finite UI amount, got {ui_amount!r}")
    return int(scaled.to_integral_value())


def parse_inline_price(value: Any) -> float | None:
    """Return an embedded USD price, or None when absent or unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


class BaseLedgerAdapter(ABC):
    """Abstract base class for ledger balance adapters.

    ``fetch_holdings`` raises when the account as a whole cannot be read;
    entries that cannot be parsed come back as ``ParseFailure`` markers.
    """

    def __init__(self, config: BalanceSettings):
        """Initialize the adapter with configuration.

        Args:
            config: Aggregator configuration
        """
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Return the API root this adapter talks to."""
        ...

    @abstractmethod
    async def fetch_holdings(self, account: str) -> list[HoldingResult]:
        """Fetch native and token holdings for the given account."""
        ...

    def auth_headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        api_key = self.config.api_key_value
        if not api_key:
            return headers
        if self.config.auth_scheme is AuthScheme.BEARER:
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            headers["token"] = api_key
        return headers

    async def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await get_json(
            f"{self.base_url.rstrip('/')}{path}",
            params=params,
            headers=self.auth_headers(),
            timeout=self.config.request_timeout,
            max_tries=self.config.max_tries,
        )
