"""Meso Finance: deposits read from the ``asset_amounts``/``asset_values`` views."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec
from .fields import dig, each_item, to_float, to_raw_amount

KEY = "meso"
NAME = "Meso Finance"

# asset_values reports USD with 16 implied decimals
USD_SCALE = 10**16


def _key_values(result: Any) -> list[Any]:
    """Unwrap the shapes a view result comes back in.

    ``[{key, value}, ...]``, ``[{"data": [...]}]`` and ``{"data": [...]}``.
    """
    if isinstance(result, dict):
        data = result.get("data")
        return data if isinstance(data, list) else []
    if not isinstance(result, list) or not result:
        return []
    first = result[0]
    if isinstance(first, dict) and "key" in first and "value" in first:
        return result
    if isinstance(first, dict) and isinstance(first.get("data"), list):
        return first["data"]
    return []


def _as_map(result: Any) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for item in _key_values(result):
        key = dig(item, "key")
        if isinstance(key, str) and key:
            mapping[key] = dig(item, "value", default="0")
    return mapping


def _maps(raw: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    return _as_map(dig(raw, "asset_amounts")), _as_map(dig(raw, "asset_values"))


def assets(raw: Any) -> Iterable[str]:
    amounts, values = _maps(raw)
    return list(dict.fromkeys([*amounts, *values]))


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    amounts, values = _maps(raw)

    def parse(asset: str) -> list[Position]:
        amount = to_raw_amount(amounts.get(asset, "0")).lstrip("-")
        usd = abs(to_float(values.get(asset, "0"))) / USD_SCALE
        if amount == "0" and usd == 0:
            return []
        token = ctx.token(asset)
        return [
            Position(
                protocol_key=KEY,
                kind=PositionKind.SUPPLY,
                symbol=token.symbol,
                raw_amount=amount,
                decimals=token.decimals,
                value_usd=usd,
                metadata={"asset": asset},
            )
        ]

    return each_item(assets(raw), parse, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
