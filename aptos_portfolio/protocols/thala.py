"""Thala v2 liquidity: two-token positions with itemized rewards."""
from __future__ import annotations

from typing import Any

from ..models import Position
from .base import AdapterContext, ProtocolSpec, pool_positions, sum_usd
from .fields import dig, dig_list, each_item

KEY = "thala"
NAME = "Thala"


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    entries = raw if isinstance(raw, list) else dig_list(raw, "data")

    def parse(entry: Any) -> list[Position]:
        if not isinstance(entry, dict):
            raise ValueError("position entry is not an object")
        symbols = [
            str(dig(entry, side, "symbol", default=""))
            for side in ("token0", "token1")
        ]
        return pool_positions(
            KEY,
            "/".join(s for s in symbols if s) or "LP",
            dig(entry, "positionValueUSD", default="0"),
            rewards={"farm": sum_usd(dig_list(entry, "rewards"), "valueUSD")},
            metadata={
                "position_id": dig(entry, "positionId", default=""),
                "pool_address": dig(entry, "poolAddress", default=""),
                "in_range": bool(dig(entry, "inRange", default=False)),
            },
        )

    return each_item(entries, parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt)
