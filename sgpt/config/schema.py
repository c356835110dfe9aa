"""Static model capability table and provider defaults"""

from pydantic import BaseModel, ConfigDict


class ModelCapabilities(BaseModel):
    """What a model accepts and how it can answer"""
    model_config = ConfigDict(frozen=True)

    provider: str
    multimodal: bool = False
    streaming: bool = False


PROVIDERS = ("openai", "anthropic", "google")

DEFAULT_MODELS = {
    "openai": "gpt-3.5-turbo",
    "anthropic": "claude-v1",
    "google": "gemini-medium",
}

# Single source of truth for multimodal input and streaming output.
MODEL_CAPABILITIES: dict[str, ModelCapabilities] = {
    # OpenAI
    "gpt-4o": ModelCapabilities(provider="openai", multimodal=True, streaming=True),
    "gpt-4": ModelCapabilities(provider="openai", streaming=True),
    "gpt-4-0314": ModelCapabilities(provider="openai", streaming=True),
    "gpt-4-32k": ModelCapabilities(provider="openai", streaming=True),
    "gpt-4-32k-0314": ModelCapabilities(provider="openai", streaming=True),
    "gpt-3.5-turbo": ModelCapabilities(provider="openai", streaming=True),
    "text-davinci-003": ModelCapabilities(provider="openai"),
    "text-davinci-002": ModelCapabilities(provider="openai"),
    "text-curie-001": ModelCapabilities(provider="openai"),
    "text-babbage-001": ModelCapabilities(provider="openai"),
    "text-ada-001": ModelCapabilities(provider="openai"),
    # Anthropic
    "claude-v1": ModelCapabilities(provider="anthropic", streaming=True),
    "claude-v1.2": ModelCapabilities(provider="anthropic", streaming=True),
    # Google
    "gemini-medium": ModelCapabilities(provider="google", multimodal=True, streaming=True),
    "gemini-large": ModelCapabilities(provider="google", multimodal=True, streaming=True),
}


def get_capabilities(model: str) -> ModelCapabilities | None:
    return MODEL_CAPABILITIES.get(model)


def models_for(provider: str) -> list[str]:
    """Known model identifiers for a provider, in table order"""
    return [name for name, caps in MODEL_CAPABILITIES.items() if caps.provider == provider]
