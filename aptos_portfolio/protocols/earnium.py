"""Earnium premium staking pools: staked LP plus claimable rewards."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import DEFAULT_DECIMALS, AdapterContext, ProtocolSpec
from .fields import dig, dig_list, each_item, to_raw_amount

KEY = "earnium"
NAME = "Earnium"


def _entries(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return dig_list(raw, "data")


def assets(raw: Any) -> Iterable[str]:
    return [
        str(dig(r, "tokenKey"))
        for e in _entries(raw)
        for r in dig_list(e, "rewards")
        if dig(r, "tokenKey")
    ]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """One staking position per pool with a stake, one reward per token.

    Staked LP shares carry no price of their own, so the stake is reported
    by amount with a zero value; pending rewards are valued at oracle prices.
    """

    def parse(entry: Any) -> list[Position]:
        pool = dig(entry, "pool", default="")
        staked = to_raw_amount(dig(entry, "stakedRaw", default="0")).lstrip("-")
        if staked == "0":
            return []
        metadata = {"pool": pool, "unlock_time": dig(entry, "unlockTime", default=0)}
        positions = [
            Position(
                protocol_key=KEY,
                kind=PositionKind.STAKING,
                symbol=f"Earnium LP #{pool}",
                raw_amount=staked,
                decimals=DEFAULT_DECIMALS,
                metadata=dict(metadata),
            )
        ]
        for reward in dig_list(entry, "rewards"):
            asset = str(dig(reward, "tokenKey", default=""))
            amount = to_raw_amount(dig(reward, "amountRaw", default="0")).lstrip("-")
            if not asset or amount == "0":
                continue
            token = ctx.token(asset)
            decimals = dig(reward, "decimals")
            decimals = int(decimals) if decimals is not None else token.decimals
            positions.append(
                Position(
                    protocol_key=KEY,
                    kind=PositionKind.REWARD,
                    symbol=str(dig(reward, "symbol", default="")) or token.symbol,
                    raw_amount=amount,
                    decimals=decimals,
                    value_usd=ctx.usd_value(asset, amount, decimals),
                    metadata={**metadata, "asset": asset},
                )
            )
        return positions

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
