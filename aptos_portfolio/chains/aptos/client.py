"""Aptos fullnode REST client: view functions and transaction status."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from ...config import FullnodeConfig
from ...http import UpstreamError, request_json

logger = logging.getLogger(__name__)


class TransactionFailedError(RuntimeError):
    """A submitted transaction was committed with ``success: false``."""

    def __init__(self, tx_hash: str, vm_status: str) -> None:
        super().__init__(f"Transaction {tx_hash} failed: {vm_status}")
        self.tx_hash = tx_hash
        self.vm_status = vm_status


class AptosClient:
    """Thin client over the Aptos fullnode REST API."""

    def __init__(self, config: FullnodeConfig) -> None:
        self.url = config.url
        self.api_key = config.api_key
        self.timeout = config.timeout
        self.poll_interval = config.poll_interval
        self.max_attempts = config.max_attempts

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def view(
        self,
        function: str,
        arguments: list[Any],
        type_arguments: list[str] | None = None,
    ) -> Any:
        """Call a Move view function and return its decoded result list."""
        payload = {
            "function": function,
            "type_arguments": type_arguments or [],
            "arguments": arguments,
        }
        return await request_json(
            "POST",
            f"{self.url}/view",
            json_body=payload,
            headers=self._headers(),
            timeout=self.timeout,
        )

    async def get_transaction_by_hash(self, tx_hash: str) -> dict[str, Any]:
        return await request_json(
            "GET",
            f"{self.url}/transactions/by_hash/{tx_hash}",
            headers=self._headers(),
            timeout=self.timeout,
        )

    async def wait_for_transaction(self, tx_hash: str) -> dict[str, Any]:
        """Poll until the transaction is committed.

        Not-found and pending responses are retried every ``poll_interval``
        seconds, up to ``max_attempts`` polls.

        Raises:
            TransactionFailedError: the transaction committed unsuccessfully.
            TimeoutError: still not committed after the last attempt.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                tx = await self.get_transaction_by_hash(tx_hash)
            except UpstreamError as e:
                if e.status != 404:
                    raise
                logger.debug(
                    "Transaction %s not found yet (attempt %d/%d)",
                    tx_hash, attempt, self.max_attempts,
                )
            else:
                if tx.get("type") != "pending_transaction" and "success" in tx:
                    if not tx["success"]:
                        raise TransactionFailedError(tx_hash, tx.get("vm_status", ""))
                    logger.info("Transaction %s confirmed", tx_hash)
                    return tx
                logger.debug(
                    "Transaction %s pending (attempt %d/%d)",
                    tx_hash, attempt, self.max_attempts,
                )

            if attempt < self.max_attempts:
                await asyncio.sleep(self.poll_interval)

        raise TimeoutError(
            f"Transaction {tx_hash} not confirmed after {self.max_attempts} attempts"
        )
