"""Position source protocol: one protocol's raw position data."""
from typing import Any, Protocol


class PositionSource(Protocol):
    """Abstract interface for fetching a protocol's raw response for a wallet."""

    async def fetch(self, address: str) -> Any: ...
