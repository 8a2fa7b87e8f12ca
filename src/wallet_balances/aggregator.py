"""Balance aggregation across the configured accounts."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Sequence

import requests

from .adapters.ledger_adapters import BaseLedgerAdapter, get_ledger_adapter_class
from .adapters.price_adapters import BasePriceAdapter, build_price_adapters
from .clients import UpstreamPayloadError
from .domain import AccountValue, AggregateResult
from .processors import (
    PriceResolver,
    calculate_total_value,
    per_account_breakdown,
    value_holdings,
)
from .state import AppState


class ConfigurationError(Exception):
    """Raised when the aggregator cannot run with the current configuration."""

    pass


class MissingCredentialError(ConfigurationError):
    """Raised when the ledger API key is not configured."""

    pass


class BalanceAggregator:
    """Sum the USD value of every holding across a list of accounts.

    Upstream failures never escape ``get_total_usd_value``: they are logged and
    the affected holding or account contributes zero. The only error it
    reports is a ``ConfigurationError``, raised before any outbound call.
    """

    def __init__(
        self,
        state: AppState,
        ledger_adapter: BaseLedgerAdapter | None = None,
        price_adapters: Sequence[BasePriceAdapter] | None = None,
    ):
        """Initialize the aggregator.

        Args:
            state: Application state containing settings and logger
            ledger_adapter: Balance source; defaults to the one named by
                ``settings.ledger_api``
            price_adapters: Price sources in fallback order; defaults to
                ``settings.price_sources``
        """
        self.state = state
        s = state.settings
        if ledger_adapter is None:
            ledger_adapter = get_ledger_adapter_class(s.ledger_api.value)(s)
        if price_adapters is None:
            price_adapters = build_price_adapters(s)
        self.ledger_adapter = ledger_adapter
        self.price_adapters = list(price_adapters)

    def ensure_configured(self) -> None:
        """Raise MissingCredentialError if the ledger API key is absent."""
        if not self.state.settings.api_key_value:
            raise MissingCredentialError("Missing SOLSCAN_API_KEY")

    async def get_total_usd_value(
        self, accounts: Sequence[str] | None = None
    ) -> AggregateResult:
        """Fetch, price and sum the holdings of every account.

        Args:
            accounts: Accounts to value; defaults to ``settings.accounts``

        Returns:
            Total USD value, the per-account breakdown and a UTC timestamp

        Raises:
            ConfigurationError: If the credential is missing or no accounts
                were given. Raised before any outbound call.
        """
        self.ensure_configured()
        log = self.state.logger

        account_list = (
            list(accounts) if accounts is not None else list(self.state.settings.accounts)
        )
        if not account_list:
            raise ConfigurationError("At least one account is required")

        log.info(
            "Valuing %d accounts via %s",
            len(account_list),
            self.ledger_adapter.adapter_name,
        )

        resolver = PriceResolver(self.price_adapters)
        account_values = await asyncio.gather(
            *(self._value_account(account, resolver) for account in account_list)
        )

        total = calculate_total_value(account_values)
        log.info("Total USD value: $%.2f", total)

        return AggregateResult(
            total=total,
            per_account=per_account_breakdown(account_values),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    async def _value_account(
        self, account: str, resolver: PriceResolver
    ) -> AccountValue:
        """Value one account, downgrading any failure to a zero contribution."""
        log = self.state.logger
        timeout_s = self.state.settings.account_timeout

        try:
            async with asyncio.timeout(timeout_s):
                results = await self.ledger_adapter.fetch_holdings(account)
                return await value_holdings(account, results, resolver)
        except TimeoutError:
            log.warning("Timed out after %.1fs valuing %s", timeout_s, account)
            error = f"timed out after {timeout_s}s"
        except requests.exceptions.RequestException as e:
            log.warning("Ledger API error for %s: %s", account, e)
            error = f"ledger request failed: {e}"
        except (UpstreamPayloadError, ValueError, TypeError, KeyError) as e:
            log.warning("Unexpected ledger response for %s: %s", account, e)
            error = f"invalid ledger response: {e}"
        except Exception as e:
            log.error("Failed to value %s: %s", account, e, exc_info=True)
            error = str(e)

        return AccountValue(account=account, usd_value=0.0, error=error)
