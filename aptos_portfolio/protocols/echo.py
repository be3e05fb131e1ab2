"""Echo lending: positions arrive already valued by the upstream."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec
from .fields import dig, dig_list, each_item, to_float, to_raw_amount

KEY = "echo"
NAME = "Echo Protocol"


def _entries(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return dig_list(raw, "data")


def assets(raw: Any) -> Iterable[str]:
    return [
        str(dig(e, "underlyingAddress"))
        for e in _entries(raw)
        if dig(e, "underlyingAddress")
    ]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    def parse(entry: Any) -> list[Position]:
        asset = str(dig(entry, "underlyingAddress", default=""))
        amount = to_raw_amount(dig(entry, "amountRaw", default="0")).lstrip("-")
        if amount == "0":
            return []
        token = ctx.token(asset)
        kind = (
            PositionKind.BORROW
            if str(dig(entry, "type", default="")).lower() in ("borrow", "debt")
            else PositionKind.SUPPLY
        )
        decimals = dig(entry, "decimals")
        return [
            Position(
                protocol_key=KEY,
                kind=kind,
                symbol=str(dig(entry, "symbol", default="")) or token.symbol,
                raw_amount=amount,
                decimals=int(decimals) if decimals is not None else token.decimals,
                value_usd=abs(to_float(dig(entry, "valueUSD"))),
                metadata={
                    "asset": asset,
                    "a_token": dig(entry, "aTokenAddress", default=""),
                },
            )
        ]

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
