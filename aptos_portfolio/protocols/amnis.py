"""Amnis Finance liquid staking."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec
from .fields import dig, dig_list, each_item, to_raw_amount

KEY = "amnis"
NAME = "Amnis Finance"


def _entries(raw: Any) -> list[Any]:
    return dig_list(raw, "positions") or dig_list(raw, "data")


def assets(raw: Any) -> Iterable[str]:
    return [str(dig(e, "token")) for e in _entries(raw) if dig(e, "token")]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """One staking position per pool.

    The amount is the staked principal only, but the value covers principal
    plus pending rewards, both in raw units of the staked token.
    """

    def parse(entry: Any) -> list[Position]:
        token_address = str(dig(entry, "token", default=""))
        if not token_address:
            raise ValueError("position has no token")
        staked = to_raw_amount(dig(entry, "stakedAmount", default="0")).lstrip("-")
        rewards = to_raw_amount(dig(entry, "rewards", default="0")).lstrip("-")
        if staked == "0" and rewards == "0":
            return []
        token = ctx.token(token_address)
        gross = str(int(staked) + int(rewards))
        return [
            Position(
                protocol_key=KEY,
                kind=PositionKind.STAKING,
                symbol=token.symbol,
                raw_amount=staked,
                decimals=token.decimals,
                value_usd=ctx.usd_value(token_address, gross, token.decimals),
                metadata={
                    "asset": token_address,
                    "pool": dig(entry, "poolName", default=""),
                    "rewards": rewards,
                },
            )
        ]

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
