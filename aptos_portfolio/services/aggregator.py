"""Portfolio aggregation: wallet balances plus every protocol, one price batch."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..cache import PriceCache
from ..chains.aptos import AptosClient, AptosIndexerClient
from ..config import AppConfig
from ..interfaces import BalanceSource, PositionSource
from ..models import Portfolio, ProtocolPortfolio, RawBalance
from ..oracles import PanoraOracle
from ..protocols.base import AdapterContext, ProtocolSpec
from ..protocols.registry import REGISTRY
from ..protocols.sources import build_source
from ..tokens import TokenRegistry
from .price_resolver import PriceResolver
from .wallet import normalize_balances, wallet_value

logger = logging.getLogger(__name__)

# Marks a protocol whose raw data could not be fetched.
_FAILED = object()


@dataclass(frozen=True)
class BoundProtocol:
    """A registered protocol wired to the source of its raw data."""

    spec: ProtocolSpec
    source: PositionSource


class PortfolioAggregator:
    """Builds a :class:`Portfolio` for one wallet.

    Wallet balances are required: if they cannot be fetched the whole call
    fails. Each protocol is optional: a protocol that fails to fetch or parse
    shows up empty with a zero total and never affects the others.
    """

    def __init__(
        self,
        balance_source: BalanceSource,
        resolver: PriceResolver,
        protocols: list[BoundProtocol],
        registry: TokenRegistry | None = None,
    ) -> None:
        self._balances = balance_source
        self._resolver = resolver
        self._protocols = list(protocols)
        self._registry = registry or TokenRegistry()

    @classmethod
    def from_config(cls, config: AppConfig) -> PortfolioAggregator:
        """Wire the default upstreams; enabled protocols keep registry order."""
        aptos_client = AptosClient(config.fullnode)
        protocols: list[BoundProtocol] = []
        for key, spec in REGISTRY.items():
            proto_cfg = config.protocols.get(key)
            if proto_cfg is None or not proto_cfg.enabled:
                continue
            protocols.append(
                BoundProtocol(spec, build_source(key, proto_cfg, aptos_client))
            )

        resolver = PriceResolver(
            PanoraOracle(config.prices),
            PriceCache(
                ttl=config.prices.cache_ttl_seconds,
                maxsize=config.prices.cache_max_entries,
            ),
        )
        logger.info(
            "Aggregator ready with %d protocols: %s",
            len(protocols),
            ", ".join(p.spec.key for p in protocols) or "none",
        )
        return cls(
            AptosIndexerClient(config.indexer),
            resolver,
            protocols,
            TokenRegistry.from_config(config.tokens),
        )

    @property
    def protocol_keys(self) -> list[str]:
        return [p.spec.key for p in self._protocols]

    async def _fetch_raw(self, protocol: BoundProtocol, address: str) -> Any:
        try:
            return await protocol.source.fetch(address)
        except Exception as e:
            logger.warning("Protocol %s fetch failed: %s", protocol.spec.key, e)
            return _FAILED

    @staticmethod
    def _needed_assets(spec: ProtocolSpec, raw: Any) -> list[str]:
        try:
            return [a for a in spec.assets(raw) if a]
        except Exception as e:
            logger.warning("Protocol %s asset scan failed: %s", spec.key, e)
            return []

    @staticmethod
    def _adapt(spec: ProtocolSpec, raw: Any, ctx: AdapterContext) -> ProtocolPortfolio:
        if raw is _FAILED:
            return ProtocolPortfolio.empty(spec.key, spec.name)
        try:
            positions = spec.adapt(raw, ctx)
        except Exception as e:
            logger.error("Protocol %s adapter failed: %s", spec.key, e)
            return ProtocolPortfolio.empty(spec.key, spec.name)
        return ProtocolPortfolio.from_positions(spec.key, spec.name, positions)

    async def build_portfolio(self, address: str) -> Portfolio:
        fetches = asyncio.gather(*(self._fetch_raw(p, address) for p in self._protocols))
        try:
            balances: list[RawBalance] = await self._balances.fetch_balances(address)
        except BaseException:
            # no portfolio without balances; stop the in-flight protocol calls
            fetches.cancel()
            raise
        raws = await fetches

        asset_ids = [b.asset_address for b in balances]
        for protocol, raw in zip(self._protocols, raws):
            if raw is not _FAILED:
                asset_ids.extend(self._needed_assets(protocol.spec, raw))
        prices = await self._resolver.get_prices(asset_ids)

        tokens = normalize_balances(balances, prices)
        ctx = AdapterContext(address=address, prices=prices, registry=self._registry)
        protocols = {
            p.spec.key: self._adapt(p.spec, raw, ctx)
            for p, raw in zip(self._protocols, raws)
        }

        wallet_total = wallet_value(tokens)
        protocols_total = sum((p.total_value_usd for p in protocols.values()), 0.0)
        logger.info(
            "Portfolio %s: %d tokens, wallet $%.2f, protocols $%.2f",
            address, len(tokens), wallet_total, protocols_total,
        )
        return Portfolio(
            address=address,
            tokens=tuple(tokens),
            protocols=protocols,
            wallet_value_usd=wallet_total,
            protocols_value_usd=protocols_total,
            total_value_usd=wallet_total + protocols_total,
        )
