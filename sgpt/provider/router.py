"""Provider registry and selection"""

import logging
from typing import TextIO

from sgpt.config import Config
from sgpt.errors import InvalidConfiguration
from sgpt.transport import TransportClient
from .anthropic import AnthropicProvider
from .base import Provider
from .gemini import GeminiProvider
from .openai import OpenAIProvider


class ProviderRegistry:
    """Maps provider names to adapter instances; filled once at startup"""

    PROVIDERS: dict[str, type[Provider]] = {
        "openai": OpenAIProvider,
        "anthropic": AnthropicProvider,
        "google": GeminiProvider,
    }

    def __init__(self):
        self._providers: dict[str, Provider] = {}

    def register(self, name: str, provider: Provider):
        self._providers[name] = provider

    def get(self, name: str) -> Provider:
        provider = self._providers.get(name)
        if provider is None:
            raise InvalidConfiguration(
                f"provider {name} not found. "
                f"Available: {', '.join(self.names())}"
            )
        return provider

    def names(self) -> list[str]:
        return list(self._providers)


def build_registry(
    client: TransportClient,
    config: Config,
    logger: logging.Logger | None = None,
    output: TextIO | None = None,
) -> ProviderRegistry:
    """Register every known adapter, sharing one transport client"""
    registry = ProviderRegistry()
    for name, provider_class in ProviderRegistry.PROVIDERS.items():
        registry.register(
            name,
            provider_class(client, config.api_key, logger=logger, output=output),
        )
    return registry
