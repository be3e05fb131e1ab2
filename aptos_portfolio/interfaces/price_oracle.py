"""Price oracle protocol: price feed abstraction."""
from typing import Any, Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching raw USD price records by address."""

    async def fetch_prices(self, addresses: list[str]) -> list[dict[str, Any]]: ...
