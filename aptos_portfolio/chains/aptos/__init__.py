"""Aptos indexer and fullnode clients."""
from .client import AptosClient, TransactionFailedError
from .indexer import AptosIndexerClient

__all__ = ["AptosClient", "AptosIndexerClient", "TransactionFailedError"]
