"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class PositionKind(str, Enum):
    SUPPLY = "supply"
    BORROW = "borrow"
    LIQUIDITY = "liquidity"
    STAKING = "staking"
    REWARD = "reward"


@dataclass(frozen=True)
class RawBalance:
    """One non-zero balance row as reported by the indexer."""

    asset_address: str
    raw_amount: str
    last_transaction_timestamp: str = ""


@dataclass(frozen=True)
class PriceInfo:
    """USD price and token metadata for one asset."""

    usd_price: float
    decimals: int
    symbol: str
    name: str
    token_address: str = ""
    fa_address: str = ""


@dataclass(frozen=True)
class TokenInfo:
    """Static token registry entry."""

    symbol: str
    name: str
    decimals: int = 8
    fa_address: str = ""
    token_address: str = ""


@dataclass(frozen=True)
class TokenLineItem:
    """A valued wallet balance. Price and value are None when unknown."""

    asset_id: str
    symbol: str
    name: str
    decimals: int
    raw_amount: str
    unit_price_usd: float | None = None
    value_usd: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.asset_id,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "amount": self.raw_amount,
            "price": self.unit_price_usd,
            "value": self.value_usd,
        }


@dataclass(frozen=True)
class Position:
    """One unit of exposure to a protocol.

    ``value_usd`` is always a finite, non-negative magnitude; borrow positions
    are subtracted only when protocol totals are computed.
    """

    protocol_key: str
    kind: PositionKind
    symbol: str
    raw_amount: str = "0"
    decimals: int = 8
    value_usd: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_debt(self) -> bool:
        return self.kind is PositionKind.BORROW

    @property
    def signed_value_usd(self) -> float:
        return -self.value_usd if self.is_debt else self.value_usd

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocol": self.protocol_key,
            "kind": self.kind.value,
            "symbol": self.symbol,
            "amount": self.raw_amount,
            "decimals": self.decimals,
            "valueUsd": self.value_usd,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ProtocolPortfolio:
    protocol_key: str
    name: str = ""
    positions: tuple[Position, ...] = ()
    total_value_usd: float = 0.0

    @classmethod
    def from_positions(
        cls, protocol_key: str, name: str, positions: list[Position] | tuple[Position, ...]
    ) -> ProtocolPortfolio:
        """Build a protocol entry; the total subtracts debt and adds the rest."""
        positions = tuple(positions)
        total = sum((p.signed_value_usd for p in positions), 0.0)
        return cls(
            protocol_key=protocol_key,
            name=name,
            positions=positions,
            total_value_usd=total,
        )

    @classmethod
    def empty(cls, protocol_key: str, name: str = "") -> ProtocolPortfolio:
        return cls(protocol_key=protocol_key, name=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocol": self.protocol_key,
            "name": self.name,
            "positions": [p.to_dict() for p in self.positions],
            "totalValueUsd": self.total_value_usd,
        }


@dataclass(frozen=True)
class Portfolio:
    """Everything known about one wallet at one point in time."""

    address: str
    tokens: tuple[TokenLineItem, ...] = ()
    protocols: dict[str, ProtocolPortfolio] = field(default_factory=dict)
    wallet_value_usd: float = 0.0
    protocols_value_usd: float = 0.0
    total_value_usd: float = 0.0
    generated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "tokens": [t.to_dict() for t in self.tokens],
            "protocols": {k: p.to_dict() for k, p in self.protocols.items()},
            "totals": {
                "walletValueUsd": self.wallet_value_usd,
                "protocolsValueUsd": self.protocols_value_usd,
                "totalValueUsd": self.total_value_usd,
            },
            "dateTime": self.generated_at.isoformat(),
        }
