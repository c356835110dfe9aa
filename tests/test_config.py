"""Tests for configuration loading and validation"""

import pytest

from sgpt.config import Config, load_config, find_config_file
from sgpt.config.schema import MODEL_CAPABILITIES, DEFAULT_MODELS, models_for
from sgpt.errors import InvalidConfiguration


def valid(**overrides) -> Config:
    fields = {"api_key": "test-key", "provider": "openai", "model": "gpt-4", "temperature": 0.5}
    fields.update(overrides)
    return Config(**fields)


class TestValidation:
    def test_valid_config(self):
        config = valid().validated()

        assert config.model == "gpt-4"
        assert config.capabilities == MODEL_CAPABILITIES["gpt-4"]

    def test_missing_api_key(self):
        with pytest.raises(InvalidConfiguration, match="API key is required"):
            valid(api_key="").validated()

    def test_invalid_provider(self):
        with pytest.raises(InvalidConfiguration, match="unsupported provider: invalid"):
            valid(provider="invalid").validated()

    def test_unknown_model(self):
        with pytest.raises(InvalidConfiguration, match="unsupported model: invalid-model"):
            valid(model="invalid-model").validated()

    @pytest.mark.parametrize("temperature", [-0.1, 1.01, 1.5, 2.0, float("nan"), float("inf")])
    def test_temperature_out_of_range(self, temperature):
        with pytest.raises(InvalidConfiguration, match="temperature must be between 0 and 1"):
            valid(temperature=temperature).validated()

    @pytest.mark.parametrize("temperature", [0.0, 0.25, 0.5, 1.0])
    def test_temperature_in_range(self, temperature):
        assert valid(temperature=temperature).validated().temperature == temperature

    def test_image_with_non_multimodal_model(self):
        with pytest.raises(InvalidConfiguration, match="does not support multimodal"):
            valid(model="text-davinci-003", image_path="image.png").validated()

    def test_audio_with_non_multimodal_model(self):
        with pytest.raises(InvalidConfiguration, match="does not support multimodal"):
            valid(model="claude-v1", provider="anthropic", audio_path="a.wav").validated()

    def test_image_with_multimodal_model(self):
        config = valid(model="gpt-4o", image_path="https://example.com/a.jpg").validated()
        assert config.capabilities.multimodal

    @pytest.mark.parametrize("provider", ["openai", "anthropic", "google"])
    def test_default_model_per_provider(self, provider):
        config = valid(provider=provider, model="").validated()
        assert config.model == DEFAULT_MODELS[provider]

    def test_checks_run_in_order(self):
        # Missing key is reported before the bad provider, model and temperature
        config = Config(api_key="", provider="nope", model="nope", temperature=9)
        with pytest.raises(InvalidConfiguration, match="API key"):
            config.validated()

        config = Config(api_key="k", provider="nope", model="nope", temperature=9)
        with pytest.raises(InvalidConfiguration, match="provider"):
            config.validated()

        config = Config(api_key="k", model="nope", temperature=9)
        with pytest.raises(InvalidConfiguration, match="model"):
            config.validated()

        config = Config(api_key="k", model="gpt-4", image_path="x.png", temperature=9)
        with pytest.raises(InvalidConfiguration, match="multimodal"):
            config.validated()

    def test_validated_returns_new_frozen_copy(self):
        original = valid(model="")
        config = original.validated()

        assert original.model == ""
        assert config.model == "gpt-3.5-turbo"
        with pytest.raises(Exception):
            config.model = "gpt-4"

    def test_streaming_capability(self):
        assert valid(model="gpt-3.5-turbo").validated().capabilities.streaming
        assert not valid(model="text-ada-001").validated().capabilities.streaming


class TestSchema:
    def test_every_default_model_is_known(self):
        for provider, model in DEFAULT_MODELS.items():
            assert MODEL_CAPABILITIES[model].provider == provider

    def test_models_for(self):
        assert models_for("anthropic") == ["claude-v1", "claude-v1.2"]
        assert models_for("google") == ["gemini-medium", "gemini-large"]
        assert "gpt-4o" in models_for("openai")


class TestPrecedence:
    def write_config(self, tmp_path, text: str):
        path = tmp_path / "sgpt.yaml"
        path.write_text(text)
        return path

    def test_flag_beats_env_beats_file(self, tmp_path):
        path = self.write_config(tmp_path, "temperature: 0.7\n")
        env = {"SGPT_TEMPERATURE": "0.8"}

        config = load_config({"temperature": 0.9}, env=env, config_file=path)
        assert config.temperature == 0.9

        config = load_config({"temperature": None}, env=env, config_file=path)
        assert config.temperature == 0.8

        config = load_config({}, env={}, config_file=path)
        assert config.temperature == 0.7

    def test_builtin_defaults(self):
        config = load_config({}, env={}, search=False)

        assert config.temperature == 0.5
        assert config.provider == "openai"
        assert config.separator == "\n"
        assert config.debug is False

    def test_full_file(self, tmp_path):
        path = self.write_config(tmp_path, (
            "api_key: yaml-key\n"
            "model: gpt-4\n"
            "instruction: yaml-instruction\n"
            "temperature: 0.7\n"
            "separator: '|'\n"
            "debug: true\n"
            "provider: openai\n"
            "image: cat.png\n"
        ))
        config = load_config({}, env={}, config_file=path)

        assert config.api_key == "yaml-key"
        assert config.instruction == "yaml-instruction"
        assert config.separator == "|"
        assert config.debug is True
        assert config.image_path == "cat.png"

    def test_env_over_file(self, tmp_path):
        path = self.write_config(tmp_path, "api_key: yaml-key\nmodel: yaml-model\n")
        env = {"SGPT_API_KEY": "env-key", "SGPT_MODEL": "gpt-3.5-turbo", "SGPT_DEBUG": "true"}

        config = load_config({}, env=env, config_file=path)

        assert config.api_key == "env-key"
        assert config.model == "gpt-3.5-turbo"
        assert config.debug is True

    def test_uses_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("SGPT_PROVIDER", "anthropic")
        assert load_config({}).provider == "anthropic"

    def test_config_file_found_in_working_directory(self, tmp_path):
        self.write_config(tmp_path, "provider: google\n")

        assert find_config_file().resolve() == (tmp_path / "sgpt.yaml").resolve()
        assert load_config({}, env={}).provider == "google"

    def test_missing_explicit_config_file(self, tmp_path):
        with pytest.raises(InvalidConfiguration, match="config file not found"):
            load_config({}, env={}, config_file=tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = self.write_config(tmp_path, "temperature: [0.7\n")
        with pytest.raises(InvalidConfiguration, match="error reading config file"):
            load_config({}, env={}, config_file=path)

    def test_non_mapping_yaml(self, tmp_path):
        path = self.write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(InvalidConfiguration, match="expected a mapping"):
            load_config({}, env={}, config_file=path)

    def test_empty_yaml(self, tmp_path):
        path = self.write_config(tmp_path, "")
        assert load_config({}, env={}, config_file=path).provider == "openai"

    def test_bad_env_value(self):
        with pytest.raises(InvalidConfiguration, match="temperature"):
            load_config({}, env={"SGPT_TEMPERATURE": "warm"}, search=False)

    def test_nan_temperature_from_env_rejected(self):
        env = {"SGPT_API_KEY": "k", "SGPT_TEMPERATURE": "nan"}
        config = load_config({}, env=env, search=False)

        with pytest.raises(InvalidConfiguration, match="temperature must be between 0 and 1"):
            config.validated()

    def test_empty_env_values_fall_through_to_file(self, tmp_path):
        path = self.write_config(tmp_path, "api_key: file-key\ntemperature: 0.7\n")
        env = {"SGPT_API_KEY": "", "SGPT_TEMPERATURE": ""}

        config = load_config({}, env=env, config_file=path)

        assert config.api_key == "file-key"
        assert config.temperature == 0.7
