"""Tests for API key loading, resolution and masking."""

from __future__ import annotations

import os

from aichat.keys import API_KEY_ENV, load_keys_env, mask_key, resolve_api_key
from aichat.schemas.config import ModelProfile


class TestLoadKeysEnv:
    def test_loads_unset_vars(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("AICHAT_TEST_KEY", raising=False)
        (tmp_path / "keys.env").write_text(
            "# comment\n\nAICHAT_TEST_KEY='from-file'\nnot a pair\n"
        )

        load_keys_env(tmp_path)

        assert os.environ["AICHAT_TEST_KEY"] == "from-file"

    def test_does_not_overwrite(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("AICHAT_TEST_KEY", "from-shell")
        (tmp_path / "keys.env").write_text("AICHAT_TEST_KEY=from-file\n")

        load_keys_env(tmp_path)

        assert os.environ["AICHAT_TEST_KEY"] == "from-shell"

    def test_missing_files_are_fine(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        load_keys_env(tmp_path / "absent")


class TestResolveApiKey:
    def test_env_overrides_profile(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "sk-env")
        assert resolve_api_key(ModelProfile(api_key="sk-stored")) == "sk-env"

    def test_falls_back_to_profile(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        assert resolve_api_key(ModelProfile(api_key="sk-stored")) == "sk-stored"
        assert resolve_api_key(ModelProfile()) == ""


class TestMaskKey:
    def test_long_key(self):
        assert mask_key("sk-abcdefghijklmnop") == "sk-a***mnop"

    def test_short_key(self):
        assert mask_key("12345678") == "********"

    def test_empty(self):
        assert mask_key("") == ""
