"""Echelon lending markets: supply/borrow pairs keyed by market."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec, priced_position
from .fields import dig, dig_list, each_item, to_raw_amount

KEY = "echelon"
NAME = "Echelon"


def _entries(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    return dig_list(raw, "data") or dig_list(raw, "userPositions")


def assets(raw: Any) -> Iterable[str]:
    return [str(dig(e, "coin", default="")) for e in _entries(raw) if dig(e, "coin")]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """One position per non-zero side of every market entry.

    Amounts are raw coin units (``accountCoins`` / ``accountLiability``).
    """

    def parse(entry: Any) -> list[Position]:
        coin = str(dig(entry, "coin", default=""))
        if not coin:
            raise ValueError("entry has no coin")
        metadata = {"market": dig(entry, "market", default="")}

        positions: list[Position] = []
        for kind, field_name in (
            (PositionKind.SUPPLY, "supply"),
            (PositionKind.BORROW, "borrow"),
        ):
            amount = to_raw_amount(dig(entry, field_name, default="0"))
            if amount.lstrip("-") != "0":
                positions.append(priced_position(ctx, KEY, kind, coin, amount, metadata))
        return positions

    return each_item(_entries(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
