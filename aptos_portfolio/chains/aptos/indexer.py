"""Aptos indexer GraphQL client: fungible asset balances."""
import logging

from ...addresses import long_form
from ...config import IndexerConfig
from ...http import UpstreamError, request_json
from ...models import RawBalance

logger = logging.getLogger(__name__)

BALANCES_QUERY = """
query GetAccountBalances($address: String!) {
  current_fungible_asset_balances(
    where: {owner_address: {_eq: $address}, amount: {_gt: "0"}}
  ) {
    asset_type
    amount
    last_transaction_timestamp
  }
}
"""


class AptosIndexerClient:
    """Read non-zero balances for an account from the Aptos indexer."""

    def __init__(self, config: IndexerConfig) -> None:
        self.graphql_url = config.graphql_url
        self.api_key = config.api_key
        self.timeout = config.timeout

    async def query(self, query: str, variables: dict) -> dict:
        """Run a GraphQL query and return its ``data`` object."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        result = await request_json(
            "POST",
            self.graphql_url,
            json_body={"query": query, "variables": variables},
            headers=headers,
            timeout=self.timeout,
        )
        if not isinstance(result, dict):
            raise UpstreamError("Indexer returned a non-object body", url=self.graphql_url)
        if result.get("errors"):
            raise UpstreamError(
                f"Indexer GraphQL error: {result['errors']}", url=self.graphql_url
            )
        return result.get("data") or {}

    async def fetch_balances(self, address: str) -> list[RawBalance]:
        """Fetch every non-zero fungible asset balance owned by ``address``."""
        data = await self.query(BALANCES_QUERY, {"address": long_form(address)})
        rows = data.get("current_fungible_asset_balances") or []

        balances: list[RawBalance] = []
        for row in rows:
            asset_type = row.get("asset_type") or ""
            if not asset_type:
                continue
            balances.append(
                RawBalance(
                    asset_address=asset_type,
                    raw_amount=str(row.get("amount") or "0"),
                    last_transaction_timestamp=row.get("last_transaction_timestamp") or "",
                )
            )

        logger.info("Found %d non-zero balances for %s", len(balances), address)
        return balances
