"""Protocol interfaces for the portfolio aggregator."""
from .balance_source import BalanceSource
from .position_source import PositionSource
from .price_oracle import PriceOracle

__all__ = ["BalanceSource", "PositionSource", "PriceOracle"]
