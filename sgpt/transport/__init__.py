"""Shared HTTP transport"""

from .client import TransportClient

__all__ = ["TransportClient"]
