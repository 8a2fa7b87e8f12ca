from __future__ import annotations

import requests

from ...clients import UpstreamPayloadError, get_json
from ...logger import get_logger
from ...settings import BalanceSettings
from .base import BasePriceAdapter

logger = get_logger(__name__)


class JupiterAdapter(BasePriceAdapter):
    """Primary price source: the Jupiter price API.

    Responses are keyed by mint, e.g. ``{"<mint>": {"usdPrice": 1.23}}``.
    Older API versions use ``price`` (as a string) instead of ``usdPrice``.
    """

    def __init__(self, config: BalanceSettings):
        super().__init__(config)
        self.api_url = config.jupiter_price_url

    @property
    def adapter_name(self) -> str:
        return "jupiter"

    async def fetch_price(self, asset_id: str) -> float | None:
        try:
            data = await get_json(
                self.api_url,
                params={"ids": asset_id},
                headers={"accept": "application/json"},
                timeout=self.config.request_timeout,
                max_tries=self.config.max_tries,
            )
        except (requests.exceptions.RequestException, UpstreamPayloadError) as e:
            logger.warning(
                " Network error fetching Jupiter price for %s: %s", asset_id, e
            )
            return None

        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            logger.warning(" Invalid Jupiter price payload for %s: %s", asset_id, data)
            return None

        entry = data.get(asset_id)
        if not isinstance(entry, dict):
            logger.debug(" Jupiter has no quote for %s", asset_id)
            return None

        price = self.normalize_price(entry.get("usdPrice", entry.get("price")))
        if price is None:
            logger.debug(" Jupiter quote for %s is unusable: %s", asset_id, entry)
        return price
