"""Batched USD price lookup with a short-lived cache."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from ..addresses import canonicalize
from ..cache import PriceCache
from ..interfaces.price_oracle import PriceOracle
from ..models import PriceInfo
from ..protocols.fields import to_float

logger = logging.getLogger(__name__)

PriceMap = dict[str, PriceInfo]


def parse_price_record(record: Any) -> PriceInfo:
    """Turn one upstream record into a PriceInfo.

    Raises:
        ValueError: the record is not an object, has no usable address or
            carries no finite USD price.
    """
    if not isinstance(record, dict):
        raise ValueError(f"price record is not an object: {record!r}")
    token_address = record.get("tokenAddress") or ""
    fa_address = record.get("faAddress") or ""
    if not token_address and not fa_address:
        raise ValueError("price record has no address")
    usd_price = to_float(record.get("usdPrice"), default=math.nan)
    if math.isnan(usd_price):
        raise ValueError(f"price record has no usable usdPrice: {record.get('usdPrice')!r}")
    symbol = record.get("symbol") or ""
    return PriceInfo(
        usd_price=usd_price,
        decimals=int(record.get("decimals", 8)),
        symbol=symbol,
        name=record.get("name") or symbol,
        token_address=token_address,
        fa_address=fa_address,
    )


class PriceResolver:
    """Resolve USD prices for many assets in one upstream call.

    Results are keyed by canonical asset id. Each record is reachable under
    both its coin-path and its fungible-asset address, whichever form the
    caller asked with.
    """

    def __init__(self, oracle: PriceOracle, cache: PriceCache[PriceMap]) -> None:
        self._oracle = oracle
        self._cache = cache

    @staticmethod
    def cache_key(asset_ids: Iterable[str]) -> str:
        return ",".join(sorted({c for c in map(canonicalize, asset_ids) if c}))

    async def get_prices(self, asset_ids: Iterable[str]) -> PriceMap:
        """Prices for ``asset_ids``; ``{}`` when the upstream is unavailable.

        Only successful lookups are cached, so a failed batch is retried on
        the next call.
        """
        requested: dict[str, str] = {}
        for asset_id in asset_ids:
            key = canonicalize(asset_id)
            if key and key not in requested:
                requested[key] = asset_id
        if not requested:
            return {}

        key = self.cache_key(requested)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Price cache hit for %d assets", len(requested))
            return cached

        try:
            records = await self._oracle.fetch_prices(list(requested.values()))
        except Exception as e:
            logger.error("Price lookup failed for %d assets: %s", len(requested), e)
            return {}

        prices: PriceMap = {}
        for index, record in enumerate(records or []):
            try:
                info = parse_price_record(record)
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed price record #%d: %s", index, e)
                continue
            for address in (info.token_address, info.fa_address):
                canonical = canonicalize(address)
                if canonical:
                    prices[canonical] = info

        self._cache.set(key, prices)
        logger.info("Resolved %d/%d prices", len(prices), len(requested))
        return prices
