"""Price oracle clients."""
from .panora import PanoraOracle

__all__ = ["PanoraOracle"]
