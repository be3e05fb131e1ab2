"""Shared outbound HTTP helper: one short-lived aiohttp session per call."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """An external service answered with a non-200 status or unusable body."""

    def __init__(self, message: str, status: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


async def request_json(
    method: str,
    url: str,
    *,
    params: dict[str, str] | None = None,
    json_body: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float = 30,
) -> Any:
    """Send a request and return the decoded JSON body.

    Raises:
        UpstreamError: on a non-200 status or a body that is not JSON.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    async with aiohttp.ClientSession(connector=connector) as session:
        async with session.request(
            method,
            url,
            params=params,
            json=json_body,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if response.status != 200:
                raise UpstreamError(
                    f"{method} {url} returned HTTP {response.status}",
                    status=response.status,
                    url=url,
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise UpstreamError(
                    f"{method} {url} returned invalid JSON: {e}",
                    status=response.status,
                    url=url,
                ) from e
