from __future__ import annotations

import requests

from ...clients import UpstreamPayloadError, get_json
from ...constants import SOL_COINGECKO_ID, SOL_MINT
from ...logger import get_logger
from ...settings import BalanceSettings
from .base import BasePriceAdapter

logger = get_logger(__name__)


class CoinGeckoAdapter(BasePriceAdapter):
    """Secondary price source: CoinGecko simple price endpoints.

    Native SOL is looked up by coin id; SPL tokens by contract address on the
    ``solana`` platform.
    """

    def __init__(self, config: BalanceSettings):
        super().__init__(config)
        self.api_url = config.coingecko_api_url.rstrip("/")

    @property
    def adapter_name(self) -> str:
        return "coingecko"

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self.config.coingecko_api_key is not None:
            headers["x-cg-demo-api-key"] = (
                self.config.coingecko_api_key.get_secret_value()
            )
        return headers

    async def fetch_price(self, asset_id: str) -> float | None:
        if asset_id == SOL_MINT:
            url = f"{self.api_url}/simple/price"
            params = {"ids": SOL_COINGECKO_ID, "vs_currencies": "usd"}
            keys = [SOL_COINGECKO_ID]
        else:
            url = f"{self.api_url}/simple/token_price/solana"
            params = {"contract_addresses": asset_id, "vs_currencies": "usd"}
            keys = [asset_id, asset_id.lower()]

        try:
            data = await get_json(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.config.request_timeout,
                max_tries=self.config.max_tries,
            )
        except (requests.exceptions.RequestException, UpstreamPayloadError) as e:
            logger.warning(
                " Network error fetching CoinGecko price for %s: %s", asset_id, e
            )
            return None

        if not isinstance(data, dict):
            logger.warning(
                " Invalid CoinGecko price payload for %s: %s", asset_id, data
            )
            return None

        entry = next(
            (data[key] for key in keys if isinstance(data.get(key), dict)), None
        )
        if entry is None:
            logger.debug(" CoinGecko has no quote for %s", asset_id)
            return None

        return self.normalize_price(entry.get("usd"))
