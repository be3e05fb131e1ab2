"""Integration tests for PortfolioAggregator: fault isolation and totals."""
from __future__ import annotations

import asyncio
import math
from typing import Any
from unittest.mock import AsyncMock

import pytest

from aptos_portfolio.cache import PriceCache
from aptos_portfolio.config import AppConfig, PriceConfig, ProtocolConfig
from aptos_portfolio.http import UpstreamError
from aptos_portfolio.models import Position, PositionKind, RawBalance
from aptos_portfolio.protocols.base import ProtocolSpec
from aptos_portfolio.protocols.registry import REGISTRY
from aptos_portfolio.protocols.sources import HttpJsonSource, ViewSource
from aptos_portfolio.services import BoundProtocol, PortfolioAggregator, PriceResolver
from conftest import APT, WALLET


class StaticSource:
    def __init__(self, raw: Any = None, error: Exception | None = None) -> None:
        self.raw = raw
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, address: str) -> Any:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.raw


class StaticBalances:
    def __init__(self, balances: list[RawBalance] | None = None, error: Exception | None = None) -> None:
        self.balances = balances or []
        self.error = error

    async def fetch_balances(self, address: str) -> list[RawBalance]:
        if self.error is not None:
            raise self.error
        return self.balances


class BlockingSource:
    """A protocol source that never answers until cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = asyncio.Event()

    async def fetch(self, address: str) -> Any:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.set()
            raise


class FailsOnceProtocolsStart:
    def __init__(self, source: BlockingSource) -> None:
        self.source = source

    async def fetch_balances(self, address: str) -> list[RawBalance]:
        await self.source.started.wait()
        raise UpstreamError("indexer down")


def _supply_spec(key: str, value: float) -> ProtocolSpec:
    def adapt(raw: Any, ctx: Any) -> list[Position]:
        return [Position(protocol_key=key, kind=PositionKind.SUPPLY, symbol="X", value_usd=value)]

    return ProtocolSpec(key=key, name=key.title(), adapt=adapt)


def _failing_spec(key: str) -> ProtocolSpec:
    def adapt(raw: Any, ctx: Any) -> list[Position]:
        raise KeyError("unexpected shape")

    return ProtocolSpec(key=key, name=key.title(), adapt=adapt)


@pytest.fixture()
def price_records() -> list[dict[str, Any]]:
    return [{"tokenAddress": APT, "faAddress": "0xa", "symbol": "APT", "decimals": 8, "usdPrice": "5"}]


@pytest.fixture()
def oracle(price_records: list[dict[str, Any]]) -> AsyncMock:
    mock = AsyncMock()
    mock.fetch_prices = AsyncMock(return_value=price_records)
    return mock


def _aggregator(protocols: list[BoundProtocol], oracle: AsyncMock, balances=None) -> PortfolioAggregator:
    return PortfolioAggregator(
        balances or StaticBalances([RawBalance(asset_address=APT, raw_amount="200000000")]),
        PriceResolver(oracle, PriceCache(ttl=60.0)),
        protocols,
    )


class TestFaultIsolation:
    @pytest.mark.asyncio
    async def test_one_failing_protocol_of_five(self, oracle: AsyncMock) -> None:
        protocols = [
            BoundProtocol(_supply_spec("p1", 1.0), StaticSource({})),
            BoundProtocol(_supply_spec("p2", 2.0), StaticSource({})),
            BoundProtocol(_supply_spec("p3", 3.0), StaticSource(error=UpstreamError("HTTP 502", status=502))),
            BoundProtocol(_supply_spec("p4", 4.0), StaticSource({})),
            BoundProtocol(_supply_spec("p5", 5.0), StaticSource({})),
        ]
        portfolio = await _aggregator(protocols, oracle).build_portfolio(WALLET)

        assert list(portfolio.protocols) == ["p1", "p2", "p3", "p4", "p5"]
        assert portfolio.protocols["p3"].positions == ()
        assert portfolio.protocols["p3"].total_value_usd == 0.0
        assert portfolio.protocols_value_usd == pytest.approx(12.0)

    @pytest.mark.asyncio
    async def test_adapter_exception_isolated(self, oracle: AsyncMock) -> None:
        protocols = [
            BoundProtocol(_failing_spec("broken"), StaticSource({})),
            BoundProtocol(_supply_spec("ok", 7.0), StaticSource({})),
        ]
        portfolio = await _aggregator(protocols, oracle).build_portfolio(WALLET)

        assert portfolio.protocols["broken"].total_value_usd == 0.0
        assert portfolio.protocols["ok"].total_value_usd == 7.0

    @pytest.mark.asyncio
    async def test_asset_scan_failure_isolated(self, oracle: AsyncMock) -> None:
        def bad_assets(raw: Any) -> list[str]:
            raise TypeError("no")

        spec = ProtocolSpec(key="p", name="P", adapt=lambda raw, ctx: [], assets=bad_assets)
        portfolio = await _aggregator(
            [BoundProtocol(spec, StaticSource({}))], oracle
        ).build_portfolio(WALLET)
        assert portfolio.protocols["p"].total_value_usd == 0.0

    @pytest.mark.asyncio
    async def test_balance_failure_propagates(self, oracle: AsyncMock) -> None:
        aggregator = _aggregator([], oracle, balances=StaticBalances(error=UpstreamError("down")))
        with pytest.raises(UpstreamError):
            await aggregator.build_portfolio(WALLET)

    @pytest.mark.asyncio
    async def test_balance_failure_cancels_protocol_fetches(self, oracle: AsyncMock) -> None:
        source = BlockingSource()
        aggregator = _aggregator(
            [BoundProtocol(_supply_spec("slow", 1.0), source)],
            oracle,
            balances=FailsOnceProtocolsStart(source),
        )

        with pytest.raises(UpstreamError):
            await aggregator.build_portfolio(WALLET)

        await asyncio.wait_for(source.cancelled.wait(), timeout=1.0)
        oracle.fetch_prices.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_price_outage_keeps_balances(self, oracle: AsyncMock) -> None:
        oracle.fetch_prices.side_effect = ConnectionError("down")
        portfolio = await _aggregator([], oracle).build_portfolio(WALLET)

        (token,) = portfolio.tokens
        assert token.value_usd is None
        assert portfolio.total_value_usd == 0.0


class TestTotals:
    @pytest.mark.asyncio
    async def test_wallet_plus_protocols(self, oracle: AsyncMock) -> None:
        protocols = [
            BoundProtocol(REGISTRY["echelon"], StaticSource(
                {"data": [{"coin": APT, "supply": "2000000000", "borrow": "600000000"}]}
            )),
        ]
        portfolio = await _aggregator(protocols, oracle).build_portfolio(WALLET)

        assert portfolio.wallet_value_usd == pytest.approx(10.0)
        assert portfolio.protocols["echelon"].total_value_usd == pytest.approx(70.0)
        assert portfolio.total_value_usd == pytest.approx(80.0)

    @pytest.mark.asyncio
    async def test_all_zero_portfolio(self, oracle: AsyncMock) -> None:
        oracle.fetch_prices.return_value = []
        aggregator = _aggregator(
            [BoundProtocol(REGISTRY["hyperion"], StaticSource({"data": []}))],
            oracle,
            balances=StaticBalances([]),
        )
        portfolio = await aggregator.build_portfolio(WALLET)

        for value in (portfolio.wallet_value_usd, portfolio.protocols_value_usd, portfolio.total_value_usd):
            assert value == 0.0
            assert not math.isnan(value)

    @pytest.mark.asyncio
    async def test_one_price_call_covers_protocol_assets(self, oracle: AsyncMock) -> None:
        protocols = [
            BoundProtocol(REGISTRY["amnis"], StaticSource(
                {"positions": [{"token": "0xfeed::st::St", "stakedAmount": "1"}]}
            )),
        ]
        await _aggregator(protocols, oracle).build_portfolio(WALLET)

        oracle.fetch_prices.assert_awaited_once()
        (requested,) = oracle.fetch_prices.call_args.args
        assert set(requested) == {APT, "0xfeed::st::St"}

    @pytest.mark.asyncio
    async def test_idempotent(self, oracle: AsyncMock) -> None:
        protocols = [BoundProtocol(_supply_spec("p1", 1.0), StaticSource({}))]
        aggregator = _aggregator(protocols, oracle)

        first = (await aggregator.build_portfolio(WALLET)).to_dict()
        second = (await aggregator.build_portfolio(WALLET)).to_dict()
        first.pop("dateTime")
        second.pop("dateTime")

        assert first == second
        # second call served from the price cache
        assert oracle.fetch_prices.await_count == 1


class TestFromConfig:
    def test_wires_enabled_protocols_in_registry_order(self) -> None:
        config = AppConfig(
            protocols={
                "thala": ProtocolConfig(url="https://x/{address}"),
                "meso": ProtocolConfig(source="view", functions={"asset_amounts": "0x1::m::f"}),
                "echelon": ProtocolConfig(url="https://y/{address}"),
                "aries": ProtocolConfig(enabled=False),
            }
        )
        aggregator = PortfolioAggregator.from_config(config)

        assert aggregator.protocol_keys == ["echelon", "meso", "thala"]
        sources = {p.spec.key: p.source for p in aggregator._protocols}
        assert isinstance(sources["meso"], ViewSource)
        assert isinstance(sources["echelon"], HttpJsonSource)

    def test_price_cache_is_bounded(self) -> None:
        config = AppConfig(prices=PriceConfig(cache_max_entries=16))
        aggregator = PortfolioAggregator.from_config(config)
        assert aggregator._resolver._cache.maxsize == 16
