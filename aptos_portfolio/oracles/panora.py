"""Panora price API client."""
from __future__ import annotations

import logging
from typing import Any

from ..config import PriceConfig
from ..http import UpstreamError, request_json

logger = logging.getLogger(__name__)


class PanoraOracle:
    """Fetch USD prices for Aptos assets from the Panora prices endpoint."""

    def __init__(self, config: PriceConfig) -> None:
        self.base_url = config.base_url
        self.api_key = config.api_key
        self.chain_id = config.chain_id
        self.batch_size = config.batch_size
        self.timeout = config.timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def fetch_prices(self, addresses: list[str]) -> list[dict[str, Any]]:
        """Fetch price records for the given coin paths / FA addresses.

        Addresses are sent in chunks of ``batch_size``. Each record looks like
        ``{tokenAddress, faAddress, symbol, name, decimals, usdPrice}``.

        Raises:
            UpstreamError: if any chunk fails or the body has an unknown shape.
        """
        records: list[dict[str, Any]] = []
        if not addresses:
            return records

        url = f"{self.base_url}/prices"
        for start in range(0, len(addresses), self.batch_size):
            chunk = addresses[start : start + self.batch_size]
            params = {
                "chainId": str(self.chain_id),
                "tokenAddress": ",".join(chunk),
            }
            data = await request_json(
                "GET", url, params=params, headers=self._headers(), timeout=self.timeout
            )

            if isinstance(data, dict):
                data = data.get("data")
            if not isinstance(data, list):
                raise UpstreamError(f"Unexpected price response shape from {url}", url=url)

            records.extend(item for item in data if isinstance(item, dict))

        logger.debug(
            "Fetched %d price records for %d addresses", len(records), len(addresses)
        )
        return records
