"""Canonical asset identifiers: pure functions, no I/O.

Aptos assets show up in two forms: fungible-asset addresses
(``0x05fabd...`` vs ``0x5fabd...``, padding varies by source) and legacy coin
paths (``0x1::aptos_coin::AptosCoin``). Balances, prices and protocol
positions each use whichever form their upstream prefers, so every key is
canonicalized before it is compared.

Coin paths are lower-cased as a whole. Module and type names are case
sensitive on chain, so this is an equality relaxation: two paths differing
only in case are treated as the same asset.
"""
from __future__ import annotations

import re

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_ACCOUNT_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


class InvalidAddressError(ValueError):
    """Raised for a wallet address that is not a hex account address."""


def _strip_hex(value: str) -> str:
    body = value[2:] if value[:2].lower() == "0x" else value
    if not body or not _HEX_RE.match(body):
        return value.lower()
    return "0x" + (body.lstrip("0").lower() or "0")


def canonicalize(raw: str) -> str:
    """Return the canonical form of an asset identifier.

    Examples:
        "0x0bae20...46f3b"            → "0xbae20...46f3b"
        "0x01::aptos_coin::AptosCoin" → "0x1::aptos_coin::aptoscoin"
        "0x0000"                      → "0x0"
        ""                            → ""
    """
    if not raw:
        return raw
    if "::" in raw:
        account, _, path = raw.partition("::")
        return f"{_strip_hex(account)}::{path}".lower()
    return _strip_hex(raw)


def equals(a: str, b: str) -> bool:
    """True when both identifiers name the same asset. Empty never matches."""
    ca = canonicalize(a)
    return bool(ca) and ca == canonicalize(b)


def clean_asset_key(raw: str) -> str:
    """Drop a leading ``@`` marker and add a missing ``0x``.

    The result keeps its original casing and padding so it can still be sent
    to upstream APIs; compare it with :func:`equals`.
    """
    if not raw:
        return raw
    key = raw[1:] if raw.startswith("@") else raw
    if key and not key.lower().startswith("0x"):
        key = "0x" + key
    return key


def symbol_from_path(raw: str) -> str:
    """Suffix after the last ``::``, or the identifier itself."""
    if "::" in raw:
        return raw.split("::")[-1] or raw
    return raw


def long_form(address: str) -> str:
    """Zero-pad an account address to 64 hex digits, as the indexer stores it."""
    canonical = _strip_hex(address)
    if not _ACCOUNT_RE.match(canonical):
        return address
    return "0x" + canonical[2:].zfill(64)


def validate_address(address: str | None) -> str:
    """Validate a wallet address and return it stripped of whitespace."""
    if not address or not address.strip():
        raise InvalidAddressError("Address parameter is required")
    address = address.strip()
    if not _ACCOUNT_RE.match(address):
        raise InvalidAddressError(f"Invalid Aptos address: {address}")
    return address
