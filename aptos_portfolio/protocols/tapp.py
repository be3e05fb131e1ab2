"""Tapp Exchange: JSON-RPC position list with estimated withdrawals."""
from __future__ import annotations

from typing import Any

from ..models import Position
from .base import AdapterContext, ProtocolSpec, pool_positions, sum_usd
from .fields import dig, dig_list, each_item

KEY = "tapp"
NAME = "Tapp Exchange"


def _entries(raw: Any) -> list[Any]:
    return dig_list(raw, "result", "data") or dig_list(raw, "data")


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    def parse(entry: Any) -> list[Position]:
        if not isinstance(entry, dict):
            raise ValueError("position entry is not an object")
        withdrawals = dig_list(entry, "estimatedWithdrawals")
        symbol = "/".join(
            str(dig(w, "symbol", default="")) for w in withdrawals if dig(w, "symbol")
        )
        return pool_positions(
            KEY,
            symbol or "LP",
            sum_usd(withdrawals, "usd"),
            rewards={"farm": sum_usd(dig_list(entry, "estimatedIncentives"), "usd")},
            metadata={
                "position_id": dig(entry, "positionAddr", default=""),
                "pool_id": dig(entry, "poolId", default=""),
                "pool_type": dig(entry, "poolType", default=""),
            },
        )

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt)
