"""Joule lending: named sub-positions, each with lend and borrow lists."""
from __future__ import annotations

from typing import Any, Iterable

from ..addresses import clean_asset_key
from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec, priced_position
from .fields import dig, dig_list, each_item, to_raw_amount

KEY = "joule"
NAME = "Joule"


def _sub_positions(raw: Any) -> list[Any]:
    sub_positions: list[Any] = []
    for user_position in dig_list(raw, "userPositions"):
        sub_positions.extend(dig_list(user_position, "positions_map", "data"))
    return sub_positions


def assets(raw: Any) -> Iterable[str]:
    found: list[str] = []
    for sub in _sub_positions(raw):
        for lend in dig_list(sub, "value", "lend_positions", "data"):
            found.append(clean_asset_key(str(dig(lend, "key", default=""))))
        for borrow in dig_list(sub, "value", "borrow_positions", "data"):
            found.append(
                clean_asset_key(str(dig(borrow, "value", "coin_name", default="")))
            )
    return [a for a in found if a]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """Flatten every sub-position's lend and borrow entries.

    Coin keys may carry a ``@`` marker and lack ``0x``.
    """

    def parse_sub(sub: Any) -> list[Position]:
        position_name = dig(sub, "value", "position_name", default="")
        metadata = {"position": position_name, "position_id": dig(sub, "key", default="")}

        def parse_lend(lend: Any) -> list[Position]:
            asset = clean_asset_key(str(dig(lend, "key", default="")))
            amount = to_raw_amount(dig(lend, "value", default="0"))
            if not asset or amount == "0":
                return []
            return [priced_position(ctx, KEY, PositionKind.SUPPLY, asset, amount, metadata)]

        def parse_borrow(borrow: Any) -> list[Position]:
            asset = clean_asset_key(str(dig(borrow, "value", "coin_name", default="")))
            amount = to_raw_amount(dig(borrow, "value", "borrow_amount", default="0"))
            if not asset or amount == "0":
                return []
            interest = to_raw_amount(
                dig(borrow, "value", "interest_accumulated", default="0")
            )
            return [
                priced_position(
                    ctx, KEY, PositionKind.BORROW, asset, amount,
                    {**metadata, "interest_accumulated": interest},
                )
            ]

        return each_item(
            dig_list(sub, "value", "lend_positions", "data"), parse_lend, KEY
        ) + each_item(
            dig_list(sub, "value", "borrow_positions", "data"), parse_borrow, KEY
        )

    return each_item(_sub_positions(raw), parse_sub, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
