"""Provider adapters for hosted language model APIs"""

from .base import Provider, Request, Response, StreamDelta
from .router import ProviderRegistry, build_registry

__all__ = [
    "Provider",
    "Request",
    "Response",
    "StreamDelta",
    "ProviderRegistry",
    "build_registry",
]
