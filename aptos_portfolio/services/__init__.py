"""Service modules"""
from .aggregator import BoundProtocol, PortfolioAggregator
from .price_resolver import PriceResolver
from .wallet import normalize_balances, wallet_value

__all__ = [
    "BoundProtocol",
    "PortfolioAggregator",
    "PriceResolver",
    "normalize_balances",
    "wallet_value",
]
