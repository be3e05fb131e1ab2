"""Wallet balances → valued token line items."""
from __future__ import annotations

from typing import Iterable

from ..addresses import canonicalize, symbol_from_path
from ..models import PriceInfo, RawBalance, TokenLineItem
from ..protocols.base import DEFAULT_DECIMALS
from ..protocols.fields import scale_amount, to_float


def normalize_balances(
    balances: Iterable[RawBalance], prices: dict[str, PriceInfo]
) -> list[TokenLineItem]:
    """Value every balance and sort by USD value, highest first.

    Unpriced balances keep ``None`` for price and value, default to 8
    decimals and take their symbol from the asset path.
    """
    items: list[TokenLineItem] = []
    for balance in balances:
        price = prices.get(canonicalize(balance.asset_address))
        if price is None:
            fallback = symbol_from_path(balance.asset_address)
            items.append(
                TokenLineItem(
                    asset_id=balance.asset_address,
                    symbol=fallback,
                    name=fallback,
                    decimals=DEFAULT_DECIMALS,
                    raw_amount=balance.raw_amount,
                )
            )
            continue

        value = to_float(scale_amount(balance.raw_amount, price.decimals) * price.usd_price)
        items.append(
            TokenLineItem(
                asset_id=balance.asset_address,
                symbol=price.symbol or symbol_from_path(balance.asset_address),
                name=price.name or price.symbol,
                decimals=price.decimals,
                raw_amount=balance.raw_amount,
                unit_price_usd=price.usd_price,
                value_usd=value,
            )
        )

    items.sort(key=lambda item: item.value_usd or 0.0, reverse=True)
    return items


def wallet_value(tokens: Iterable[TokenLineItem]) -> float:
    return sum((t.value_usd or 0.0 for t in tokens), 0.0)
