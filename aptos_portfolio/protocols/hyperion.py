"""Hyperion concentrated liquidity: pool value plus farm and fee rewards."""
from __future__ import annotations

from typing import Any

from ..models import Position
from .base import AdapterContext, ProtocolSpec, pool_positions, sum_usd
from .fields import dig, dig_list, each_item

KEY = "hyperion"
NAME = "Hyperion"


def _pool_symbol(entry: Any) -> str:
    pool = dig(entry, "position", "pool", default={})
    first = dig(pool, "token1Info", "symbol", default="") or dig(pool, "token1", default="")
    second = dig(pool, "token2Info", "symbol", default="") or dig(pool, "token2", default="")
    return "/".join(s for s in (str(first), str(second)) if s) or "LP"


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """Farm and fee rewards each sum ``amountUSD`` over every unclaimed token."""
    entries = raw if isinstance(raw, list) else dig_list(raw, "data")

    def parse(entry: Any) -> list[Position]:
        if not isinstance(entry, dict):
            raise ValueError("position entry is not an object")
        return pool_positions(
            KEY,
            _pool_symbol(entry),
            dig(entry, "value", default="0"),
            rewards={
                "farm": sum_usd(dig_list(entry, "farm", "unclaimed"), "amountUSD"),
                "fees": sum_usd(dig_list(entry, "fees", "unclaimed"), "amountUSD"),
            },
            metadata={
                "position_id": dig(entry, "position", "objectId", default=""),
                "pool_id": dig(entry, "position", "poolId", default=""),
                "active": bool(dig(entry, "isActive", default=False)),
            },
        )

    return each_item(entries, parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt)
