"""HTTP API: ``GET /portfolio?address=...`` and ``GET /health``."""
from __future__ import annotations

import logging

from aiohttp import web

from .addresses import InvalidAddressError, validate_address
from .config import AppConfig
from .services import PortfolioAggregator

logger = logging.getLogger(__name__)

AGGREGATOR_KEY = web.AppKey("aggregator", PortfolioAggregator)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def get_portfolio(request: web.Request) -> web.Response:
    try:
        address = validate_address(request.query.get("address"))
    except InvalidAddressError as e:
        return _error(str(e), 400)

    aggregator = request.app[AGGREGATOR_KEY]
    try:
        portfolio = await aggregator.build_portfolio(address)
    except Exception:
        logger.exception("Portfolio build failed for %s", address)
        return _error("Internal server error", 500)

    body = portfolio.to_dict()
    body.pop("address", None)
    return web.json_response(body)


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(
    config: AppConfig | None = None,
    aggregator: PortfolioAggregator | None = None,
) -> web.Application:
    """Build the application around one long-lived aggregator.

    The aggregator owns the price cache, so it is shared by every request.
    """
    if aggregator is None:
        aggregator = PortfolioAggregator.from_config(config or AppConfig())
    app = web.Application()
    app[AGGREGATOR_KEY] = aggregator
    app.router.add_get("/portfolio", get_portfolio)
    app.router.add_get("/health", health)
    return app


def run_server(config: AppConfig, host: str | None = None, port: int | None = None) -> None:
    app = create_app(config)
    host = host or config.server.host
    port = port or config.server.port
    logger.info("Serving portfolio API on %s:%d", host, port)
    web.run_app(app, host=host, port=port, print=None)
