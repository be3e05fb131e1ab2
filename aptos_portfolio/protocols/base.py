"""Adapter contract: the context handed to every adapter and the ProtocolSpec record."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from ..addresses import canonicalize, equals, symbol_from_path
from ..models import Position, PositionKind, PriceInfo, TokenInfo
from ..tokens import TokenRegistry
from .fields import dig, human_to_raw, scale_amount, to_float, to_raw_amount

DEFAULT_DECIMALS = 8


@dataclass(frozen=True)
class AdapterContext:
    """Read-only inputs an adapter may consult besides the raw response."""

    address: str
    prices: dict[str, PriceInfo] = field(default_factory=dict)
    registry: TokenRegistry = field(default_factory=TokenRegistry)

    def owns(self, owner: str) -> bool:
        return equals(owner, self.address)

    def price(self, asset_id: str) -> PriceInfo | None:
        key = canonicalize(asset_id)
        return self.prices.get(key) if key else None

    def token(self, asset_id: str) -> TokenInfo:
        """Token metadata from prices, then the registry, then defaults."""
        price = self.price(asset_id)
        if price is not None:
            return TokenInfo(
                symbol=price.symbol or symbol_from_path(asset_id),
                name=price.name or price.symbol or symbol_from_path(asset_id),
                decimals=price.decimals,
                fa_address=price.fa_address,
                token_address=price.token_address,
            )
        known = self.registry.get(asset_id)
        if known is not None:
            return known
        symbol = symbol_from_path(asset_id) or "Unknown"
        return TokenInfo(symbol=symbol, name=symbol, decimals=DEFAULT_DECIMALS)

    def usd_value(self, asset_id: str, raw_amount: str, decimals: int) -> float:
        """Value of a raw amount at the resolved price; 0.0 when unpriced."""
        price = self.price(asset_id)
        if price is None:
            return 0.0
        return to_float(abs(scale_amount(raw_amount, decimals)) * price.usd_price)


def priced_position(
    ctx: AdapterContext,
    protocol_key: str,
    kind: PositionKind,
    asset_id: str,
    raw_amount: Any,
    metadata: dict[str, Any] | None = None,
) -> Position:
    """Build a position for a raw on-chain amount valued via the price map."""
    token = ctx.token(asset_id)
    raw = to_raw_amount(raw_amount).lstrip("-")
    return Position(
        protocol_key=protocol_key,
        kind=kind,
        symbol=token.symbol,
        raw_amount=raw,
        decimals=token.decimals,
        value_usd=ctx.usd_value(asset_id, raw, token.decimals),
        metadata={"asset": asset_id, **(metadata or {})},
    )


def reported_position(
    ctx: AdapterContext,
    protocol_key: str,
    kind: PositionKind,
    asset_id: str,
    human_amount: Any,
    value_usd: Any,
    metadata: dict[str, Any] | None = None,
) -> Position:
    """Build a position from an amount in whole units and a reported USD value."""
    token = ctx.token(asset_id)
    return Position(
        protocol_key=protocol_key,
        kind=kind,
        symbol=token.symbol,
        raw_amount=human_to_raw(abs(to_float(human_amount)), token.decimals),
        decimals=token.decimals,
        value_usd=abs(to_float(value_usd)),
        metadata={"asset": asset_id, **(metadata or {})},
    )


def pool_positions(
    protocol_key: str,
    symbol: str,
    value_usd: Any,
    rewards: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> list[Position]:
    """One liquidity position for a pool plus one reward position per source.

    ``rewards`` maps a reward source (``farm``, ``fees``) to its summed USD
    value; sources worth nothing are dropped.
    """
    metadata = metadata or {}
    positions = [
        Position(
            protocol_key=protocol_key,
            kind=PositionKind.LIQUIDITY,
            symbol=symbol,
            value_usd=abs(to_float(value_usd)),
            metadata=dict(metadata),
        )
    ]
    for source, amount in (rewards or {}).items():
        usd = abs(to_float(amount))
        if usd > 0:
            positions.append(
                Position(
                    protocol_key=protocol_key,
                    kind=PositionKind.REWARD,
                    symbol=symbol,
                    value_usd=usd,
                    metadata={**metadata, "source": source},
                )
            )
    return positions


def sum_usd(items: Iterable[Any], field_name: str) -> float:
    """Sum one USD field over an itemized list, ignoring garbage entries."""
    return sum((to_float(dig(item, field_name)) for item in items), 0.0)


Adapter = Callable[[Any, AdapterContext], list[Position]]


def _no_assets(raw: Any) -> Iterable[str]:
    return ()


@dataclass(frozen=True)
class ProtocolSpec:
    """A registered protocol: its adapter and the assets it needs priced."""

    key: str
    name: str
    adapt: Adapter
    assets: Callable[[Any], Iterable[str]] = _no_assets
