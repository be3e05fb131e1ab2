"""Protocol adapters: raw upstream responses → normalized positions."""
from .base import AdapterContext, ProtocolSpec
from .registry import REGISTRY, get_spec
from .sources import HttpJsonSource, ViewSource, build_source

__all__ = [
    "AdapterContext",
    "ProtocolSpec",
    "REGISTRY",
    "get_spec",
    "HttpJsonSource",
    "ViewSource",
    "build_source",
]
