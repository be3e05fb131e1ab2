"""Logging configuration for the CLI and the web server."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric_level)

    if not any(getattr(h, "_aptos_portfolio", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._aptos_portfolio = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # aiohttp access and client logs are noisy at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
