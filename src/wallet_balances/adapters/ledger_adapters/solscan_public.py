from __future__ import annotations

from typing import Any

from ...constants import NATIVE_DECIMALS, SOL_MINT
from ...domain import Holding, HoldingResult, ParseFailure
from ...logger import get_logger
from .base import (
    BaseLedgerAdapter,
    coerce_int,
    parse_inline_price,
    raw_from_ui_amount,
)

logger = get_logger(__name__)


def parse_token_entry(account: str, entry: Any) -> HoldingResult:
    """Turn one ``tokens[]`` entry of the legacy account payload into a Holding."""
    if not isinstance(entry, dict):
        return ParseFailure(account, "token entry is not an object", entry)

    asset_id = entry.get("tokenAddress") or entry.get("mint")
    if not isinstance(asset_id, str) or not asset_id:
        return ParseFailure(account, "token entry has no mint address", entry)

    amount = entry.get("tokenAmount")
    if not isinstance(amount, dict):
        amount = {}

    try:
        decimals_value = amount.get("decimals", entry.get("tokenDecimals"))
        decimals = 0 if decimals_value is None else coerce_int(decimals_value)
        if decimals < 0:
            raise ValueError(f"negative decimals {decimals}")
        if amount.get("amount") is not None:
            raw_amount = coerce_int(amount["amount"])
        else:
            raw_amount = raw_from_ui_amount(amount.get("uiAmount"), decimals)
    except ValueError as e:
        return ParseFailure(account, f"invalid amount for {asset_id}: {e}", entry)

    price = parse_inline_price(entry.get("price"))
    if price is None:
        price = parse_inline_price(entry.get("priceUsdt"))

    return Holding(
        asset_id=asset_id,
        raw_amount=raw_amount,
        decimals=decimals,
        usd_price=price,
    )


def parse_account_payload(
    account: str, data: Any, include_native: bool = True
) -> list[HoldingResult]:
    """Parse the legacy ``/account/{address}`` payload.

    The payload carries ``lamports`` for the native balance and a ``tokens``
    list; either may be absent.
    """
    if not isinstance(data, dict):
        return [ParseFailure(account, "unexpected response format", data)]

    results: list[HoldingResult] = []

    if include_native and "lamports" in data:
        try:
            results.append(
                Holding(
                    asset_id=SOL_MINT,
                    raw_amount=coerce_int(data["lamports"]),
                    decimals=NATIVE_DECIMALS,
                    native=True,
                )
            )
        except ValueError as e:
            results.append(ParseFailure(account, f"invalid lamports: {e}", data))

    tokens = data.get("tokens")
    if tokens is None:
        return results
    if not isinstance(tokens, list):
        results.append(ParseFailure(account, "tokens is not a list", tokens))
        return results

    results.extend(parse_token_entry(account, entry) for entry in tokens)
    return results


class SolscanPublicAdapter(BaseLedgerAdapter):
    """Adapter for the legacy Solscan public API.

    One request per account; the credential goes in a ``token`` header unless
    ``auth_scheme`` says otherwise.
    """

    @property
    def adapter_name(self) -> str:
        return "solscan_public"

    @property
    def base_url(self) -> str:
        return self.config.public_api_url

    async def fetch_holdings(self, account: str) -> list[HoldingResult]:
        data = await self._get(f"/account/{account}")
        results = parse_account_payload(
            account, data, include_native=self.config.include_native
        )
        logger.debug(
            "Solscan public returned %d entries for %s", len(results), account
        )
        return results
