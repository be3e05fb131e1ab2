"""Static token registry keyed by canonical address."""
from __future__ import annotations

from typing import Iterable

from .addresses import canonicalize
from .config import TokenConfig
from .models import TokenInfo


class TokenRegistry:
    """Look up token metadata by either its coin path or its FA address."""

    def __init__(self, tokens: Iterable[TokenInfo] = ()) -> None:
        self._by_id: dict[str, TokenInfo] = {}
        for token in tokens:
            self.add(token)

    @classmethod
    def from_config(cls, tokens: Iterable[TokenConfig]) -> TokenRegistry:
        return cls(
            TokenInfo(
                symbol=t.symbol,
                name=t.name or t.symbol,
                decimals=t.decimals,
                fa_address=t.fa_address,
                token_address=t.token_address,
            )
            for t in tokens
        )

    def add(self, token: TokenInfo) -> None:
        for address in (token.token_address, token.fa_address):
            key = canonicalize(address)
            if key:
                self._by_id[key] = token

    def get(self, asset_id: str) -> TokenInfo | None:
        key = canonicalize(asset_id)
        if not key:
            return None
        return self._by_id.get(key)

    def __len__(self) -> int:
        return len(self._by_id)
