from __future__ import annotations

import asyncio
from typing import Any

import requests

from ...clients import UpstreamPayloadError
from ...constants import NATIVE_DECIMALS, SOL_MINT, SOLSCAN_PRO_PAGE_SIZE
from ...domain import Holding, HoldingResult, ParseFailure
from ...logger import get_logger
from .base import BaseLedgerAdapter, coerce_int, parse_inline_price

logger = get_logger(__name__)

SOLSCAN_PRO_MAX_PAGES = 10


def _unwrap(account: str, payload: Any, what: str) -> Any:
    """Return ``payload["data"]`` of a v2 envelope or raise ValueError."""
    if not isinstance(payload, dict):
        raise ValueError(f"{what} response for {account} is not an object")
    if payload.get("success") is False:
        raise ValueError(
            f"{what} request for {account} failed: {payload.get('errors') or payload}"
        )
    if "data" not in payload:
        raise ValueError(f"{what} response for {account} has no data field")
    return payload["data"]


def parse_account_detail(account: str, payload: Any) -> HoldingResult:
    """Parse ``/account/detail`` into the native SOL holding."""
    try:
        data = _unwrap(account, payload, "account detail")
        if not isinstance(data, dict):
            raise ValueError("data is not an object")
        lamports = coerce_int(data.get("lamports", 0))
    except ValueError as e:
        return ParseFailure(account, f"invalid account detail: {e}", payload)

    return Holding(
        asset_id=SOL_MINT,
        raw_amount=lamports,
        decimals=NATIVE_DECIMALS,
        native=True,
    )


def parse_token_account(account: str, entry: Any) -> HoldingResult:
    """Parse one ``/account/token-accounts`` row."""
    if not isinstance(entry, dict):
        return ParseFailure(account, "token account is not an object", entry)

    asset_id = entry.get("token_address")
    if not isinstance(asset_id, str) or not asset_id:
        return ParseFailure(account, "token account has no token_address", entry)

    try:
        decimals_value = entry.get("token_decimals")
        decimals = 0 if decimals_value is None else coerce_int(decimals_value)
        if decimals < 0:
            raise ValueError(f"negative decimals {decimals}")
        raw_amount = coerce_int(entry.get("amount"))
    except ValueError as e:
        return ParseFailure(account, f"invalid amount for {asset_id}: {e}", entry)

    return Holding(
        asset_id=asset_id,
        raw_amount=raw_amount,
        decimals=decimals,
        usd_price=parse_inline_price(entry.get("price_usdt")),
    )


def parse_token_accounts(account: str, payload: Any) -> list[HoldingResult]:
    try:
        data = _unwrap(account, payload, "token accounts")
    except ValueError as e:
        return [ParseFailure(account, str(e), payload)]
    if not isinstance(data, list):
        return [ParseFailure(account, "token accounts data is not a list", data)]
    return [parse_token_account(account, entry) for entry in data]


class SolscanProAdapter(BaseLedgerAdapter):
    """Adapter for the Solscan Pro v2 API.

    Native balance and token accounts come from separate endpoints; they are
    requested concurrently and a failure of one does not discard the other.
    """

    @property
    def adapter_name(self) -> str:
        return "solscan_pro"

    @property
    def base_url(self) -> str:
        return self.config.pro_api_url

    async def fetch_native(self, account: str) -> list[HoldingResult]:
        payload = await self._get("/account/detail", params={"address": account})
        return [parse_account_detail(account, payload)]

    async def fetch_tokens(self, account: str) -> list[HoldingResult]:
        """Page through token accounts.

        A failure on the first page propagates. A failure on a later page keeps
        the rows already collected and records a ParseFailure instead.
        """
        results: list[HoldingResult] = []
        for page in range(1, SOLSCAN_PRO_MAX_PAGES + 1):
            try:
                payload = await self._get(
                    "/account/token-accounts",
                    params={
                        "address": account,
                        "type": "token",
                        "page": page,
                        "page_size": SOLSCAN_PRO_PAGE_SIZE,
                        "hide_zero": "true",
                    },
                )
            except (requests.exceptions.RequestException, UpstreamPayloadError) as e:
                if page == 1:
                    raise
                logger.warning(
                    "Token accounts page %d failed for %s: %s", page, account, e
                )
                results.append(ParseFailure(account, f"page {page} failed: {e}"))
                break
            page_results = parse_token_accounts(account, payload)
            results.extend(page_results)
            if len(page_results) < SOLSCAN_PRO_PAGE_SIZE:
                break
        else:
            logger.warning(
                "Stopped paging token accounts for %s after %d pages",
                account,
                SOLSCAN_PRO_MAX_PAGES,
            )
        return results

    async def fetch_holdings(self, account: str) -> list[HoldingResult]:
        parts: list[tuple[str, Any]] = [("tokens", self.fetch_tokens(account))]
        if self.config.include_native:
            parts.append(("native", self.fetch_native(account)))

        outcomes = await asyncio.gather(
            *(coro for _, coro in parts), return_exceptions=True
        )

        results: list[HoldingResult] = []
        errors: list[BaseException] = []
        for (name, _), outcome in zip(parts, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Solscan pro %s request failed for %s: %s", name, account, outcome
                )
                errors.append(outcome)
                results.append(
                    ParseFailure(account, f"{name} request failed: {outcome}")
                )
            else:
                results.extend(outcome)

        if len(errors) == len(parts):
            raise errors[0]

        logger.debug("Solscan pro returned %d entries for %s", len(results), account)
        return results
