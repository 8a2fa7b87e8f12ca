import asyncio
import logging

import pytest
import requests
from conftest import ACCOUNT_A, ACCOUNT_B

from wallet_balances.adapters.ledger_adapters import (
    SolscanProAdapter,
    SolscanPublicAdapter,
)
from wallet_balances.adapters.price_adapters import CoinGeckoAdapter, JupiterAdapter
from wallet_balances.aggregator import (
    BalanceAggregator,
    ConfigurationError,
    MissingCredentialError,
)
from wallet_balances.constants import SOL_MINT
from wallet_balances.domain import Holding
from wallet_balances.settings import BalanceSettings, LedgerApi
from wallet_balances.state import AppState

TOKEN = "TokenMint"


@pytest.fixture
def two_account_holdings():
    # A: 1 SOL at $20 plus 2.5 tokens at $2; B: 0.5 SOL at $20
    return {
        ACCOUNT_A: [
            Holding(SOL_MINT, 1_000_000_000, 9, native=True),
            Holding(TOKEN, 2_500_000, 6),
        ],
        ACCOUNT_B: [Holding(SOL_MINT, 500_000_000, 9, native=True)],
    }


@pytest.fixture
def prices():
    return {SOL_MINT: 20.0, TOKEN: 2.0}


def test_default_adapters_follow_settings(state):
    aggregator = BalanceAggregator(state)

    assert isinstance(aggregator.ledger_adapter, SolscanPublicAdapter)
    assert [type(a) for a in aggregator.price_adapters] == [
        JupiterAdapter,
        CoinGeckoAdapter,
    ]


def test_pro_ledger_selected_by_settings():
    settings = BalanceSettings(
        api_key="k", ledger_api=LedgerApi.PRO, price_sources=["coingecko"]
    )
    aggregator = BalanceAggregator(
        AppState(settings=settings, logger=logging.getLogger("test"))
    )

    assert isinstance(aggregator.ledger_adapter, SolscanProAdapter)
    assert [type(a) for a in aggregator.price_adapters] == [CoinGeckoAdapter]


@pytest.mark.asyncio
async def test_two_account_scenario(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, two_account_holdings),
        price_adapters=[fake_price_cls(config, prices)],
    )

    result = await aggregator.get_total_usd_value()

    assert result.total == pytest.approx(35.0)
    assert result.per_account == {
        ACCOUNT_A: pytest.approx(25.0),
        ACCOUNT_B: pytest.approx(10.0),
    }
    assert result.timestamp is not None


@pytest.mark.asyncio
async def test_total_equals_sum_of_accounts_in_any_order(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, two_account_holdings),
        price_adapters=[fake_price_cls(config, prices)],
    )

    forward = await aggregator.get_total_usd_value([ACCOUNT_A, ACCOUNT_B])
    backward = await aggregator.get_total_usd_value([ACCOUNT_B, ACCOUNT_A])

    assert forward.total == pytest.approx(backward.total)
    assert forward.total == pytest.approx(sum(forward.per_account.values()))


@pytest.mark.asyncio
async def test_repeated_calls_are_idempotent(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, two_account_holdings),
        price_adapters=[fake_price_cls(config, prices)],
    )

    first = await aggregator.get_total_usd_value()
    second = await aggregator.get_total_usd_value()

    assert first.total == second.total
    assert first.per_account == second.per_account


@pytest.mark.asyncio
async def test_missing_credential_issues_no_outbound_calls(
    fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    settings = BalanceSettings(accounts=[ACCOUNT_A, ACCOUNT_B])
    ledger = fake_ledger_cls(settings, two_account_holdings)
    price_source = fake_price_cls(settings, prices)
    aggregator = BalanceAggregator(
        AppState(settings=settings, logger=logging.getLogger("test")),
        ledger_adapter=ledger,
        price_adapters=[price_source],
    )

    with pytest.raises(MissingCredentialError, match="Missing SOLSCAN_API_KEY"):
        await aggregator.get_total_usd_value()

    assert ledger.calls == []
    assert price_source.calls == []


@pytest.mark.asyncio
async def test_empty_account_list_is_configuration_error(
    state, config, fake_ledger_cls, fake_price_cls
):
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, {}),
        price_adapters=[fake_price_cls(config, {})],
    )

    with pytest.raises(ConfigurationError, match="At least one account"):
        await aggregator.get_total_usd_value([])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.HTTPError("500 Server Error"),
        requests.exceptions.Timeout("timed out"),
        ValueError("malformed payload"),
        RuntimeError("anything else"),
    ],
)
async def test_failing_account_contributes_zero(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings, prices, error
):
    holdings = {**two_account_holdings, ACCOUNT_A: error}
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, holdings),
        price_adapters=[fake_price_cls(config, prices)],
    )

    result = await aggregator.get_total_usd_value()

    assert result.per_account[ACCOUNT_A] == 0.0
    assert result.total == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_failing_price_lookup_contributes_zero(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings
):
    broken = fake_price_cls(config, {}, name="broken", raises=RuntimeError("500"))
    partial = fake_price_cls(config, {SOL_MINT: 20.0}, name="partial")
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, two_account_holdings),
        price_adapters=[broken, partial],
    )

    result = await aggregator.get_total_usd_value()

    # TOKEN has no quote anywhere, SOL falls back to the second source
    assert result.total == pytest.approx(30.0)


@pytest.mark.asyncio
async def test_slow_account_times_out_without_blocking_siblings(
    fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    settings = BalanceSettings(
        api_key="k",
        accounts=[ACCOUNT_A, ACCOUNT_B],
        request_timeout=0.01,
        account_timeout=0.05,
        max_tries=1,
    )

    class PartlySlowLedger(fake_ledger_cls):
        async def fetch_holdings(self, account):
            if account == ACCOUNT_A:
                await asyncio.sleep(1)
            return await super().fetch_holdings(account)

    aggregator = BalanceAggregator(
        AppState(settings=settings, logger=logging.getLogger("test")),
        ledger_adapter=PartlySlowLedger(settings, two_account_holdings),
        price_adapters=[fake_price_cls(settings, prices)],
    )

    result = await aggregator.get_total_usd_value()

    assert result.per_account[ACCOUNT_A] == 0.0
    assert result.total == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_shared_asset_priced_once(
    state, config, fake_ledger_cls, fake_price_cls, two_account_holdings, prices
):
    source = fake_price_cls(config, prices)
    aggregator = BalanceAggregator(
        state,
        ledger_adapter=fake_ledger_cls(config, two_account_holdings),
        price_adapters=[source],
    )

    await aggregator.get_total_usd_value()

    assert source.calls.count(SOL_MINT) == 1


@pytest.mark.asyncio
async def test_end_to_end_with_public_payload(monkeypatch, state):
    payloads = {
        ACCOUNT_A: {
            "lamports": 1_000_000_000,
            "tokens": [
                {
                    "tokenAddress": TOKEN,
                    "tokenAmount": {"amount": "150000", "decimals": 4},
                    "price": 2.0,
                }
            ],
        },
        ACCOUNT_B: {"lamports": 0, "tokens": []},
    }

    async def _ledger_get_json(url, **kwargs):
        return payloads[url.rsplit("/", 1)[-1]]

    async def _jupiter_get_json(url, **kwargs):
        return {SOL_MINT: {"usdPrice": 20.0}}

    monkeypatch.setattr(
        "wallet_balances.adapters.ledger_adapters.base.get_json", _ledger_get_json
    )
    monkeypatch.setattr(
        "wallet_balances.adapters.price_adapters.jupiter.get_json", _jupiter_get_json
    )

    result = await BalanceAggregator(state).get_total_usd_value()

    assert result.per_account[ACCOUNT_A] == pytest.approx(20.0 + 30.0)
    assert result.per_account[ACCOUNT_B] == 0.0
    assert result.total == pytest.approx(50.0)
