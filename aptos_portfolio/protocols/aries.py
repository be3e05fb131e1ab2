"""Aries Markets: profiles of deposits/borrows as maps keyed by coin."""
from __future__ import annotations

from typing import Any, Iterable

from ..models import Position, PositionKind
from .base import AdapterContext, ProtocolSpec, reported_position
from .fields import dig, dig_dict, each_item, to_float

KEY = "aries"
NAME = "Aries Markets"


def _profiles(raw: Any) -> dict[str, Any]:
    return dig_dict(raw, "profiles", "profiles") or dig_dict(raw, "profiles")


def assets(raw: Any) -> Iterable[str]:
    found: list[str] = []
    for profile in _profiles(raw).values():
        found.extend(dig_dict(profile, "deposits"))
        found.extend(dig_dict(profile, "borrows"))
    return found


def adapt(raw: Any, ctx: AdapterContext) -> list[Position]:
    """Flatten deposits and borrows of the profiles owned by ``ctx.address``.

    A profile whose ``meta.owner`` is not the queried wallet is skipped
    entirely; its balances belong to someone else. Coin amounts are in whole
    units and USD values are reported by the API.
    """

    def parse_profile(item: tuple[str, Any]) -> list[Position]:
        profile_name, profile = item
        owner = str(dig(profile, "meta", "owner", default=""))
        if not ctx.owns(owner):
            return []

        metadata = {
            "profile": dig(profile, "profileName", default=profile_name),
            "profile_address": dig(profile, "profileAddress", default=""),
        }

        def parse_deposit(entry: tuple[str, Any]) -> list[Position]:
            coin, deposit = entry
            coins = to_float(dig(deposit, "collateral_coins", default="0"))
            if coins == 0:
                return []
            return [
                reported_position(
                    ctx, KEY, PositionKind.SUPPLY, coin, coins,
                    dig(deposit, "collateral_value", default="0"), metadata,
                )
            ]

        def parse_borrow(entry: tuple[str, Any]) -> list[Position]:
            coin, borrow = entry
            coins = to_float(dig(borrow, "borrowed_coins", default="0"))
            if coins == 0:
                return []
            return [
                reported_position(
                    ctx, KEY, PositionKind.BORROW, coin, coins,
                    dig(borrow, "borrowed_value", default="0"), metadata,
                )
            ]

        return each_item(
            dig_dict(profile, "deposits").items(), parse_deposit, KEY
        ) + each_item(dig_dict(profile, "borrows").items(), parse_borrow, KEY)

    return each_item(_profiles(raw).items(), parse_profile, KEY)


SPEC = ProtocolSpec(key=KEY, name=NAME, adapt=adapt, assets=assets)
