from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import pytest

from wallet_balances.adapters.ledger_adapters.base import BaseLedgerAdapter
from wallet_balances.adapters.price_adapters.base import BasePriceAdapter
from wallet_balances.domain import HoldingResult
from wallet_balances.settings import BalanceSettings
from wallet_balances.state import AppState

ACCOUNT_A = "akgSyoqae5tWyiuAxZJv5VKzthtHruUkQxgSuPmhWRa"
ACCOUNT_B = "Fqi2c66QRr4wLghXNnhNg4Dr9u4LV4Djy3aL9jcsM5fi"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep developer credentials and config files out of the tests."""
    for name in (
        "SOLSCAN_API_KEY",
        "API_KEY",
        "WALLET_BALANCES_API_KEY",
        "WALLET_BALANCES_CONFIG",
        "WALLET_BALANCES_ACCOUNTS",
        "WALLET_BALANCES_LEDGER_API",
        "WALLET_BALANCES_COINGECKO_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config():
    return BalanceSettings(
        api_key="test-key",
        accounts=[ACCOUNT_A, ACCOUNT_B],
        max_tries=1,
    )


@pytest.fixture
def state(config):
    return AppState(settings=config, logger=logging.getLogger("test"))


class FakeLedgerAdapter(BaseLedgerAdapter):
    """Serves canned holdings per account and records every call."""

    def __init__(
        self,
        config: BalanceSettings,
        holdings: Mapping[str, list[HoldingResult] | BaseException],
        delay: float = 0.0,
    ):
        super().__init__(config)
        self.holdings = holdings
        self.delay = delay
        self.calls: list[str] = []

    @property
    def adapter_name(self) -> str:
        return "fake_ledger"

    @property
    def base_url(self) -> str:
        return "https://ledger.invalid"

    async def fetch_holdings(self, account: str) -> list[HoldingResult]:
        self.calls.append(account)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.holdings.get(account, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)


class FakePriceAdapter(BasePriceAdapter):
    """Returns canned quotes; ``raises`` makes every lookup blow up."""

    def __init__(
        self,
        config: BalanceSettings,
        prices: Mapping[str, float | None],
        name: str = "fake_price",
        raises: BaseException | None = None,
    ):
        super().__init__(config)
        self.prices = prices
        self.name = name
        self.raises = raises
        self.calls: list[str] = []

    @property
    def adapter_name(self) -> str:
        return self.name

    async def fetch_price(self, asset_id: str) -> float | None:
        self.calls.append(asset_id)
        if self.raises is not None:
            raise self.raises
        return self.prices.get(asset_id)


@pytest.fixture
def fake_ledger_cls():
    return FakeLedgerAdapter


@pytest.fixture
def fake_price_cls():
    return FakePriceAdapter


