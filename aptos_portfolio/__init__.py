"""Multi-protocol portfolio aggregation for Aptos wallets."""

__version__ = "0.1.0"
