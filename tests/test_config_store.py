"""Tests for the JSON config store and config schemas."""

from __future__ import annotations

import json
import os
import sys

import pytest

from aichat.config.store import CONFIG_FILE, ConfigStore, get_config_dir
from aichat.errors import ConfigError
from aichat.schemas.config import (
    DEFAULT_MODEL_PROFILE,
    DEFAULT_PROMPT_PROFILE,
    AppConfig,
    ModelProfile,
    PromptProfile,
)
from aichat.schemas.render import OutputUnit


class TestConfigDir:
    def test_env_override(self, config_dir):
        assert get_config_dir() == config_dir

    def test_store_uses_config_dir(self, config_dir):
        assert ConfigStore().path == config_dir / CONFIG_FILE


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = ConfigStore(tmp_path).load()

        assert config.default_model == DEFAULT_MODEL_PROFILE
        assert config.default_prompt == DEFAULT_PROMPT_PROFILE
        sample = config.models[DEFAULT_MODEL_PROFILE]
        assert sample.model_name == "gpt-5-mini"
        assert sample.base_url == "https://api.openai.com/v1"
        assert config.prompts[DEFAULT_PROMPT_PROFILE].content

    def test_reads_kebab_case_keys(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text(json.dumps({
            "models": {"local": {"model_name": "llama3", "base_url": "http://localhost:11434/v1"}},
            "prompts": {"terse": {"content": "Be brief."}},
            "default-model": "local",
            "default-prompt": "terse",
            "disable-stream": True,
            "type-speed": 12.5,
            "output-unit": "character",
        }))

        config = ConfigStore(tmp_path).load()

        assert config.default_model == "local"
        assert config.disable_stream is True
        assert config.type_speed == 12.5
        assert config.output_unit is OutputUnit.CHARACTER
        assert config.models["local"].model_name == "llama3"

    def test_invalid_json_raises_config_error(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid config file"):
            ConfigStore(tmp_path).load()

    def test_invalid_values_raise_config_error(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text(json.dumps({"type-speed": 0}))
        with pytest.raises(ConfigError):
            ConfigStore(tmp_path).load()


class TestSave:
    def test_round_trip_uses_aliases(self, tmp_path):
        store = ConfigStore(tmp_path / "nested")
        store.save(AppConfig.with_defaults())

        raw = json.loads(store.path.read_text())
        assert raw["default-model"] == DEFAULT_MODEL_PROFILE
        assert "type-speed" in raw
        assert store.load() == AppConfig.with_defaults()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.save(AppConfig())
        assert os.stat(store.path).st_mode & 0o777 == 0o600


class TestProfiles:
    def test_set_model_merges_fields(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.set_model("work", ModelProfile(model_name="gpt-a", base_url="https://x/v1"))
        config = store.set_model("work", ModelProfile(api_key="sk-secret", temperature=0.3))

        profile = config.models["work"]
        assert profile.model_name == "gpt-a"
        assert profile.base_url == "https://x/v1"
        assert profile.api_key == "sk-secret"
        assert profile.temperature == 0.3

    def test_first_profile_becomes_default(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.save(AppConfig())

        config = store.set_model("first", ModelProfile(model_name="m1"))
        assert config.default_model == "first"
        config = store.set_model("second", ModelProfile(model_name="m2"))
        assert config.default_model == "first"

        config = store.set_prompt("p", PromptProfile(content="hi"))
        assert config.default_prompt == "p"

    def test_set_prompt_replaces_content(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.set_prompt("p", PromptProfile(content="old"))
        config = store.set_prompt("p", PromptProfile(content="new"))
        assert config.prompts["p"].content == "new"

    def test_use_model_and_prompt(self, tmp_path):
        store = ConfigStore(tmp_path)
        store.set_model("other", ModelProfile(model_name="m"))
        store.set_prompt("other", PromptProfile(content="c"))

        store.use_model("other")
        config = store.use_prompt("other")

        assert config.default_model == "other"
        assert config.default_prompt == "other"
        assert store.load().default_model == "other"

    def test_use_unknown_raises(self, tmp_path):
        store = ConfigStore(tmp_path)
        with pytest.raises(ConfigError, match="Model configuration 'nope' not found"):
            store.use_model("nope")
        with pytest.raises(ConfigError, match="Prompt configuration 'nope' not found"):
            store.use_prompt("nope")

    def test_delete_default_clears_it(self, tmp_path):
        store = ConfigStore(tmp_path)
        config = store.delete_model(DEFAULT_MODEL_PROFILE)
        assert DEFAULT_MODEL_PROFILE not in config.models
        assert config.default_model is None

        config = store.delete_prompt(DEFAULT_PROMPT_PROFILE)
        assert config.default_prompt is None

    def test_delete_unknown_raises(self, tmp_path):
        store = ConfigStore(tmp_path)
        with pytest.raises(ConfigError):
            store.delete_model("ghost")
        with pytest.raises(ConfigError):
            store.delete_prompt("ghost")


class TestModelProfile:
    def test_merge_prefers_self(self):
        base = ModelProfile(model_name="a", base_url="u", api_key="k", temperature=1.0)
        merged = ModelProfile(model_name="b").merge_with(base)
        assert merged == ModelProfile(model_name="b", base_url="u", api_key="k", temperature=1.0)

    def test_temperature_bounds(self):
        with pytest.raises(ValueError):
            ModelProfile(temperature=2.5)
