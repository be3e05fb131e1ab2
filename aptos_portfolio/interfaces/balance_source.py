"""Balance source protocol: wallet balance indexer abstraction."""
from typing import Protocol

from ..models import RawBalance


class BalanceSource(Protocol):
    """Abstract interface for fetching raw wallet balances."""

    async def fetch_balances(self, address: str) -> list[RawBalance]: ...
