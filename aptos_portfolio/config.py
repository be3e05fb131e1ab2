"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_POSITIONS_API = "https://yield-a.vercel.app"

MESO_PACKAGE = "0x68476f9d437e3f32fd262ba898b5e3ee0a23a1d586a6cf29a28add35f253f6f7"

# Protocols read straight from chain unless configured otherwise.
DEFAULT_VIEW_FUNCTIONS: dict[str, dict[str, str]] = {
    "meso": {
        "asset_amounts": f"{MESO_PACKAGE}::meso::asset_amounts",
        "asset_values": f"{MESO_PACKAGE}::meso::asset_values",
    },
}

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class IndexerConfig:
    graphql_url: str = "https://api.mainnet.aptoslabs.com/v1/graphql"
    api_key: str = ""
    timeout: int = 30


@dataclass(frozen=True)
class FullnodeConfig:
    url: str = "https://fullnode.mainnet.aptoslabs.com/v1"
    api_key: str = ""
    timeout: int = 30
    poll_interval: float = 2.0
    max_attempts: int = 10


@dataclass(frozen=True)
class PriceConfig:
    base_url: str = "https://api.panora.exchange"
    api_key: str = ""
    chain_id: int = 1
    batch_size: int = 100
    cache_ttl_seconds: float = 60.0
    cache_max_entries: int = 1024
    timeout: int = 30


@dataclass(frozen=True)
class ProtocolConfig:
    enabled: bool = True
    source: str = "http"
    url: str = ""
    method: str = "GET"
    body: dict[str, Any] | None = None
    functions: dict[str, str] = field(default_factory=dict)
    timeout: int = 20


@dataclass(frozen=True)
class TokenConfig:
    symbol: str = ""
    name: str = ""
    decimals: int = 8
    fa_address: str = ""
    token_address: str = ""


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    fullnode: FullnodeConfig = field(default_factory=FullnodeConfig)
    prices: PriceConfig = field(default_factory=PriceConfig)
    protocols: dict[str, ProtocolConfig] = field(default_factory=dict)
    tokens: tuple[TokenConfig, ...] = ()


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=raw.get("host", ServerConfig.host),
        port=int(raw.get("port", ServerConfig.port)),
    )


def _build_indexer(raw: dict[str, Any]) -> IndexerConfig:
    return IndexerConfig(
        graphql_url=raw.get("graphql_url", IndexerConfig.graphql_url),
        api_key=raw.get("api_key", ""),
        timeout=int(raw.get("timeout", 30)),
    )


def _build_fullnode(raw: dict[str, Any]) -> FullnodeConfig:
    return FullnodeConfig(
        url=raw.get("url", FullnodeConfig.url).rstrip("/"),
        api_key=raw.get("api_key", ""),
        timeout=int(raw.get("timeout", 30)),
        poll_interval=float(raw.get("poll_interval", 2.0)),
        max_attempts=int(raw.get("max_attempts", 10)),
    )


def _build_prices(raw: dict[str, Any]) -> PriceConfig:
    return PriceConfig(
        base_url=raw.get("base_url", PriceConfig.base_url).rstrip("/"),
        api_key=raw.get("api_key", ""),
        chain_id=int(raw.get("chain_id", 1)),
        batch_size=int(raw.get("batch_size", 100)),
        cache_ttl_seconds=float(raw.get("cache_ttl_seconds", 60.0)),
        cache_max_entries=int(raw.get("cache_max_entries", 1024)),
        timeout=int(raw.get("timeout", 30)),
    )


def default_protocol_url(key: str, base_url: str = DEFAULT_POSITIONS_API) -> str:
    return f"{base_url.rstrip('/')}/api/{key}/userPositions?address={{address}}"


def _build_protocols(raw: dict[str, Any]) -> dict[str, ProtocolConfig]:
    base_url = raw.pop("positions_api_url", None) or DEFAULT_POSITIONS_API
    protocols: dict[str, ProtocolConfig] = {}
    for name, cfg in raw.items():
        cfg = cfg or {}
        source = cfg.get("source") or (
            "view" if name in DEFAULT_VIEW_FUNCTIONS else "http"
        )
        url = cfg.get("url", "")
        if source == "http" and not url:
            url = default_protocol_url(name, base_url)
        functions = dict(cfg.get("functions") or {})
        if source == "view" and not functions:
            functions = dict(DEFAULT_VIEW_FUNCTIONS.get(name, {}))
        protocols[name] = ProtocolConfig(
            enabled=bool(cfg.get("enabled", True)),
            source=source,
            url=url,
            method=str(cfg.get("method", "GET")).upper(),
            body=cfg.get("body"),
            functions=functions,
            timeout=int(cfg.get("timeout", 20)),
        )
    return protocols


def default_protocols(base_url: str = DEFAULT_POSITIONS_API) -> dict[str, ProtocolConfig]:
    """Every registered protocol with its default source."""
    from .protocols.registry import REGISTRY

    return _build_protocols({"positions_api_url": base_url, **{k: {} for k in REGISTRY}})


def _build_tokens(raw: list[dict[str, Any]]) -> tuple[TokenConfig, ...]:
    tokens: list[TokenConfig] = []
    for t in raw:
        tokens.append(
            TokenConfig(
                symbol=t.get("symbol", ""),
                name=t.get("name", t.get("symbol", "")),
                decimals=int(t.get("decimals", 8)),
                fa_address=t.get("fa_address", "") or "",
                token_address=t.get("token_address", "") or "",
            )
        )
    return tuple(tokens)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    protocols_raw = raw.get("protocols")
    if protocols_raw is None:
        protocols = default_protocols()
    else:
        protocols = _build_protocols(dict(protocols_raw or {}))

    cfg = AppConfig(
        server=_build_server(raw.get("server", {}) or {}),
        indexer=_build_indexer(raw.get("indexer", {}) or {}),
        fullnode=_build_fullnode(raw.get("fullnode", {}) or {}),
        prices=_build_prices(raw.get("prices", {}) or {}),
        protocols=protocols,
        tokens=_build_tokens(raw.get("tokens", []) or []),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    # Imported here: the registry pulls in every adapter module.
    from .protocols.registry import REGISTRY

    if cfg.prices.cache_ttl_seconds <= 0:
        raise ValueError("prices.cache_ttl_seconds must be positive")
    if cfg.prices.cache_max_entries <= 0:
        raise ValueError("prices.cache_max_entries must be positive")
    if cfg.prices.batch_size <= 0:
        raise ValueError("prices.batch_size must be positive")

    for name, proto in cfg.protocols.items():
        if name not in REGISTRY:
            raise ValueError(f"Unknown protocol '{name}'")
        if proto.source not in ("http", "view"):
            raise ValueError(
                f"Protocol '{name}' has unknown source '{proto.source}'"
            )
        if proto.source == "view" and not proto.functions:
            raise ValueError(f"Protocol '{name}' has no view functions")

    for token in cfg.tokens:
        if not token.fa_address and not token.token_address:
            raise ValueError(f"Token '{token.symbol}' has no address")
