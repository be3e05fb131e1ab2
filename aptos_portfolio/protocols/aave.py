"""Aave (Aptos deployment): per-reserve deposit and variable debt."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec
from .fields import dig, dig_list, each_item, human_to_raw, to_float

KEY = "aave"
NAME = "Aave"

_LEGS = (
    (PositionKind.SUPPLY, "deposit_amount", "deposit_value_usd"),
    (PositionKind.BORROW, "borrow_amount", "borrow_value_usd"),
)


def _entries(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return dig_list(raw, "data")


def assets(raw: Any) -> Iterable[str]:
    return [
        str(dig(e, "underlying_asset"))
        for e in _entries(raw)
        if dig(e, "underlying_asset")
    ]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """Amounts arrive in whole units, already index-adjusted.

    A reserve priced by the oracle is valued at that price; otherwise the
    upstream's market-reference valuation is used.
    """

    def parse(entry: Any) -> list[Position]:
        asset = str(dig(entry, "underlying_asset", default=""))
        if not asset:
            raise ValueError("reserve has no underlying asset")
        token = ctx.token(asset)
        decimals = dig(entry, "decimals")
        decimals = int(decimals) if decimals is not None else token.decimals
        price = ctx.price(asset)

        positions = []
        for kind, amount_field, value_field in _LEGS:
            amount = abs(to_float(dig(entry, amount_field)))
            if amount <= 0:
                continue
            if price is not None:
                value = to_float(amount * price.usd_price)
            else:
                value = abs(to_float(dig(entry, value_field)))
            positions.append(
                Position(
                    protocol_key=KEY,
                    kind=kind,
                    symbol=str(dig(entry, "symbol", default="")) or token.symbol,
                    raw_amount=human_to_raw(amount, decimals),
                    decimals=decimals,
                    value_usd=value,
                    metadata={
                        "asset": asset,
                        "collateral": bool(dig(entry, "usage_as_collateral_enabled", default=False)),
                    },
                )
            )
        return positions

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
