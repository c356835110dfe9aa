"""Configuration loading and validation"""

from .config import Config, load_config, find_config_file
from .schema import MODEL_CAPABILITIES, ModelCapabilities, DEFAULT_MODELS, PROVIDERS

__all__ = [
    "Config",
    "load_config",
    "find_config_file",
    "MODEL_CAPABILITIES",
    "ModelCapabilities",
    "DEFAULT_MODELS",
    "PROVIDERS",
]
