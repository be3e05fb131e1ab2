"""Moar Market lending: per-pool deposits valued by the upstream."""
from __future__ import annotations

from typing import Any

from ..models import Position, PositionKind
from .base import DEFAULT_DECIMALS, AdapterContext, ProtocolSpec
from .fields import dig, dig_list, each_item, to_float, to_raw_amount

KEY = "moar"
NAME = "Moar Market"


def _entries(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return dig_list(raw, "data")


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    def parse(entry: Any) -> list[Position]:
        amount = to_raw_amount(dig(entry, "balance", default="0")).lstrip("-")
        if amount == "0":
            return []
        symbol = (
            dig(entry, "assetInfo", "symbol", default="")
            or dig(entry, "assetName", default="")
            or "Unknown"
        )
        decimals = dig(entry, "assetInfo", "decimals")
        return [
            Position(
                protocol_key=KEY,
                kind=PositionKind.SUPPLY,
                symbol=str(symbol),
                raw_amount=amount,
                decimals=int(decimals) if decimals is not None else DEFAULT_DECIMALS,
                value_usd=abs(to_float(dig(entry, "value"))),
                metadata={"pool_id": dig(entry, "poolId")},
            )
        ]

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt)
