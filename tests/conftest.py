"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from aptos_portfolio.config import PriceConfig
from aptos_portfolio.models import PriceInfo, RawBalance, TokenInfo
from aptos_portfolio.protocols.base import AdapterContext
from aptos_portfolio.tokens import TokenRegistry

WALLET = "0x5fabd1b5e6f2b1f1a4f7e6d7c8b9a0e1f2d3c4b5a6978877665544332211aabb"
APT = "0x1::aptos_coin::AptosCoin"
APT_FA = "0xa"
USDC_FA = "0xbae207659db88bea0cbead6da0ed00aac12edcdda169e591cd41c94180b46f3b"
USDT_FA = "0x357b0b74bc833e95a115ad22604854d6b0fca151cecd94111770e5d6ffc9dc2b"


# ---------------------------------------------------------------------------
# Price fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def apt_price() -> PriceInfo:
    return PriceInfo(
        usd_price=5.0,
        decimals=8,
        symbol="APT",
        name="Aptos Coin",
        token_address=APT,
        fa_address=APT_FA,
    )


@pytest.fixture()
def usdc_price() -> PriceInfo:
    return PriceInfo(
        usd_price=1.0, decimals=6, symbol="USDC", name="USD Coin", fa_address=USDC_FA
    )


@pytest.fixture()
def sample_prices(apt_price: PriceInfo, usdc_price: PriceInfo) -> dict[str, PriceInfo]:
    """Price map keyed the way PriceResolver returns it."""
    return {
        "0x1::aptos_coin::aptoscoin": apt_price,
        "0xa": apt_price,
        USDC_FA: usdc_price,
    }


@pytest.fixture()
def sample_price_records() -> list[dict[str, Any]]:
    """Raw records as returned by the Panora prices endpoint."""
    return [
        {
            "chainId": 1,
            "tokenAddress": APT,
            "faAddress": APT_FA,
            "name": "Aptos Coin",
            "symbol": "APT",
            "decimals": 8,
            "usdPrice": "5.00",
        },
        {
            "chainId": 1,
            "tokenAddress": None,
            "faAddress": USDC_FA,
            "name": "USDC",
            "symbol": "USDC",
            "decimals": 6,
            "usdPrice": "0.9998",
        },
    ]


@pytest.fixture()
def price_config() -> PriceConfig:
    return PriceConfig(
        base_url="https://prices.example.com",
        api_key="panora-key",
        batch_size=2,
        cache_ttl_seconds=60.0,
    )


# ---------------------------------------------------------------------------
# Adapter fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def token_registry() -> TokenRegistry:
    return TokenRegistry(
        [TokenInfo(symbol="USDt", name="Tether USD", decimals=6, fa_address=USDT_FA)]
    )


@pytest.fixture()
def ctx(sample_prices: dict[str, PriceInfo], token_registry: TokenRegistry) -> AdapterContext:
    return AdapterContext(address=WALLET, prices=sample_prices, registry=token_registry)


@pytest.fixture()
def sample_balances() -> list[RawBalance]:
    return [
        RawBalance(asset_address=APT, raw_amount="100000000"),
        RawBalance(asset_address="0x" + "0" + USDC_FA[2:], raw_amount="2500000"),
        RawBalance(asset_address="0xdead::meme::MEME", raw_amount="42"),
    ]


# ---------------------------------------------------------------------------
# HTTP mocking
# ---------------------------------------------------------------------------


def mock_http_session(
    response_data: Any = None, status: int = 200, error: Exception | None = None
) -> MagicMock:
    """Mock aiohttp.ClientSession whose ``request`` yields one canned response."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=response_data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    if error:
        mock_session.request = MagicMock(side_effect=error)
    else:
        mock_session.request = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    server:
      host: 127.0.0.1
      port: 9000
    indexer:
      graphql_url: "https://indexer.example.com/v1/graphql"
      api_key: "${TEST_APTOS_KEY}"
    fullnode:
      url: "https://fullnode.example.com/v1/"
      poll_interval: 0.5
      max_attempts: 3
    prices:
      base_url: "https://prices.example.com/"
      api_key: "${TEST_PANORA_KEY}"
      cache_ttl_seconds: 30
    protocols:
      positions_api_url: "https://positions.example.com"
      echelon: {}
      aries:
        enabled: false
      meso:
        source: view
      tapp:
        url: "https://tapp.example.com/api/v1"
        method: post
        body:
          params:
            query:
              userAddr: "{address}"
    tokens:
      - symbol: APT
        name: Aptos Coin
        decimals: 8
        token_address: "0x1::aptos_coin::AptosCoin"
        fa_address: "0xa"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
