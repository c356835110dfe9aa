"""Configuration management

Values are merged per field with the precedence
flag > SGPT_* environment variable > YAML file > built-in default,
then validated once by Config.validated() before any request is made.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from sgpt.errors import InvalidConfiguration
from .schema import DEFAULT_MODELS, PROVIDERS, ModelCapabilities, get_capabilities

logger = logging.getLogger(__name__)

ENV_PREFIX = "SGPT_"
CONFIG_FILE_NAMES = ("sgpt.yaml", "sgpt.yml")

# Setting name (as used in YAML and env) -> Config field
SETTINGS = {
    "api_key": "api_key",
    "provider": "provider",
    "model": "model",
    "instruction": "instruction",
    "temperature": "temperature",
    "separator": "separator",
    "debug": "debug",
    "image": "image_path",
    "audio": "audio_path",
}


class Config(BaseModel):
    """Resolved run parameters, immutable once built"""
    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    provider: str = "openai"
    model: str = ""
    instruction: str = ""
    temperature: float = 0.5
    separator: str = "\n"
    image_path: str = ""
    audio_path: str = ""
    debug: bool = False
    capabilities: ModelCapabilities | None = None

    @property
    def has_media(self) -> bool:
        return bool(self.image_path or self.audio_path)

    def validated(self) -> "Config":
        """Check the configuration and return a copy with defaults resolved.

        Checks run in a fixed order and stop at the first failure so error
        messages are deterministic.
        """
        if not self.api_key:
            raise InvalidConfiguration(
                "API key is required",
                hint="Provide it via --api_key, the SGPT_API_KEY environment variable, or the config file",
            )

        if self.provider not in PROVIDERS:
            raise InvalidConfiguration(f"unsupported provider: {self.provider}")

        model = self.model or DEFAULT_MODELS[self.provider]

        caps = get_capabilities(model)
        if caps is None:
            raise InvalidConfiguration(f"unsupported model: {model}")

        if self.has_media and not caps.multimodal:
            raise InvalidConfiguration(
                f"model {model} does not support multimodal inputs (image/audio)"
            )

        if not 0.0 <= self.temperature <= 1.0:
            raise InvalidConfiguration(
                f"temperature must be between 0 and 1, got {self.temperature:f}"
            )

        return self.model_copy(update={"model": model, "capabilities": caps})


def find_config_file(search_dirs: list[Path] | None = None) -> Path | None:
    """Look for sgpt.yaml in the working directory, then the home directory"""
    if search_dirs is None:
        search_dirs = [Path.cwd(), Path.home()]
    for directory in search_dirs:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise InvalidConfiguration(f"error reading config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"error reading config file {path}: expected a mapping")

    unknown = set(data) - set(SETTINGS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return {
        key: value for key, value in data.items()
        if key in SETTINGS and value is not None
    }


def read_env(env: Mapping[str, str]) -> dict[str, str]:
    values = {}
    for name in SETTINGS:
        value = env.get(ENV_PREFIX + name.upper())
        if value:
            values[name] = value
    return values


def load_config(
    flags: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_file: Path | None = None,
    search: bool = True,
) -> Config:
    """Merge flags, environment and config file into an unvalidated Config.

    flags maps setting names to explicitly given values; None entries count as
    unset. When config_file is None and search is true the default locations
    are searched.
    """
    if env is None:
        env = os.environ

    if config_file is not None:
        if not config_file.is_file():
            raise InvalidConfiguration(f"config file not found: {config_file}")
    elif search:
        config_file = find_config_file()

    merged: dict[str, Any] = {}
    if config_file is not None:
        logger.debug(f"Using config file {config_file}")
        merged.update(read_config_file(config_file))
    merged.update(read_env(env))
    merged.update({
        name: value
        for name, value in (flags or {}).items()
        if value is not None and name in SETTINGS
    })

    fields = {SETTINGS[name]: value for name, value in merged.items()}
    try:
        return Config(**fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidConfiguration(f"invalid configuration value: {problems}") from e
