"""Auro Finance CDP positions: collateral in, USDA debt out.

Each position is an NFT owned by the wallet. The upstream pairs the
indexer ownership rows (``positions``) with the ``multiple_position_info``
view result (``rawPositionInfo``) by index. Amounts are 8-decimal integers.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec
from .fields import dig, dig_list, scale_amount, to_raw_amount

logger = logging.getLogger(__name__)

KEY = "auro"
NAME = "Auro Finance"

AMOUNT_DECIMALS = 8
DEBT_SYMBOL = "USDA"


def _infos(raw: Any) -> list[Any]:
    infos = dig_list(raw, "rawPositionInfo")
    if infos and isinstance(infos[0], list):
        return infos[0]
    return infos


def _collateral_asset(info: Any) -> str:
    token = dig(info, "collateral_token")
    if isinstance(token, dict):
        token = token.get("inner")
    return str(token or "")


def assets(raw: Any) -> Iterable[str]:
    return [a for a in map(_collateral_asset, _infos(raw)) if a]


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """Collateral as a supply position, debt as a borrow.

    Collateral is valued at the oracle price of its token when the view
    names one. USDA debt is valued at face, one dollar per unit.
    """
    ownerships = dig_list(raw, "positions")
    positions: list[Position] = []
    for index, info in enumerate(_infos(raw)):
        if not isinstance(info, dict):
            logger.warning("Skipping malformed %s item #%d: %r", KEY, index, info)
            continue
        metadata = {
            "position": dig(ownerships, index, "storage_id", default=""),
            "liquidate_price": scale_amount(
                to_raw_amount(dig(info, "liquidate_price", default="0")), AMOUNT_DECIMALS
            ),
        }

        collateral = to_raw_amount(dig(info, "asset_amount", default="0")).lstrip("-")
        if collateral != "0":
            asset = _collateral_asset(info)
            token = ctx.token(asset) if asset else None
            positions.append(
                Position(
                    protocol_key=KEY,
                    kind=PositionKind.SUPPLY,
                    symbol=token.symbol if token else "Collateral",
                    raw_amount=collateral,
                    decimals=AMOUNT_DECIMALS,
                    value_usd=ctx.usd_value(asset, collateral, AMOUNT_DECIMALS) if asset else 0.0,
                    metadata={**metadata, "asset": asset},
                )
            )

        debt = to_raw_amount(dig(info, "debt_amount", default="0")).lstrip("-")
        if debt != "0":
            positions.append(
                Position(
                    protocol_key=KEY,
                    kind=PositionKind.BORROW,
                    symbol=DEBT_SYMBOL,
                    raw_amount=debt,
                    decimals=AMOUNT_DECIMALS,
                    value_usd=scale_amount(debt, AMOUNT_DECIMALS),
                    metadata=dict(metadata),
                )
            )
    return positions


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
