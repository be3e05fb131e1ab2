"""Where each protocol's raw position data comes from."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..chains.aptos.client import AptosClient
from ..config import ProtocolConfig
from ..http import request_json
from ..interfaces import PositionSource

logger = logging.getLogger(__name__)


def substitute_address(value: Any, address: str) -> Any:
    """Replace ``{address}`` in every string inside ``value``."""
    if isinstance(value, str):
        return value.replace("{address}", address)
    if isinstance(value, dict):
        return {k: substitute_address(v, address) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_address(item, address) for item in value]
    return value


class HttpJsonSource:
    """A JSON endpoint keyed by wallet address (GET, or POST with a body)."""

    def __init__(
        self,
        url: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
        timeout: float = 20,
    ) -> None:
        self.url = url
        self.method = method.upper()
        self.body = body
        self.timeout = timeout

    async def fetch(self, address: str) -> Any:
        json_body = None
        if self.method != "GET" and self.body is not None:
            json_body = substitute_address(self.body, address)
        return await request_json(
            self.method,
            substitute_address(self.url, address),
            json_body=json_body,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )


class ViewSource:
    """Calls Move view functions with the wallet as the only argument.

    The result maps each configured name to that function's raw output.
    """

    def __init__(self, client: AptosClient, functions: dict[str, str]) -> None:
        self._client = client
        self.functions = dict(functions)

    async def fetch(self, address: str) -> dict[str, Any]:
        names = list(self.functions)
        results = await asyncio.gather(
            *(self._client.view(self.functions[name], [address]) for name in names)
        )
        return dict(zip(names, results))


def build_source(
    key: str, config: ProtocolConfig, aptos_client: AptosClient
) -> PositionSource:
    """Build the configured source for protocol ``key``."""
    if config.source == "view":
        logger.debug("Protocol %s reads %d view functions", key, len(config.functions))
        return ViewSource(aptos_client, config.functions)
    if config.source == "http":
        return HttpJsonSource(
            config.url, method=config.method, body=config.body, timeout=config.timeout
        )
    raise ValueError(f"Protocol '{key}' has unknown source '{config.source}'")
