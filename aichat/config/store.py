"""JSON-backed storage for model and prompt profiles.

The config file lives in the per-user application directory reported
by ``typer.get_app_dir`` (``~/.config/terminal-aichat`` on Linux) unless
AICHAT_CONFIG_DIR points somewhere else. A missing file is not an
error: the built-in sample profiles are returned instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import typer
from pydantic import ValidationError

from aichat.errors import ConfigError
from aichat.schemas.config import AppConfig, ModelProfile, PromptProfile

logger = logging.getLogger(__name__)

APP_NAME = "terminal-aichat"
CONFIG_DIR_ENV = "AICHAT_CONFIG_DIR"
CONFIG_FILE = "config.json"


def get_config_dir() -> Path:
    """Directory holding config.json and keys.env."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path(typer.get_app_dir(APP_NAME))


class ConfigStore:
    """Loads, edits and saves the aichat configuration file.

    Every mutating method loads the current file, applies the change and
    writes it back, so concurrent invocations only race on the write.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._dir = config_dir or get_config_dir()
        self._path = self._dir / CONFIG_FILE

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config_dir(self) -> Path:
        return self._dir

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> AppConfig:
        """Read config.json, or return the default sample configuration.

        Raises:
            ConfigError: If the file exists but is unreadable or invalid.
        """
        if not self.exists():
            logger.debug("No config at %s, using defaults", self._path)
            return AppConfig.with_defaults()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {self._path}: {e}") from e
        try:
            return AppConfig.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {self._path}: {e}") from e

    def save(self, config: AppConfig) -> Path:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                config.model_dump_json(by_alias=True, indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise ConfigError(f"Cannot write {self._path}: {e}") from e

        # Profiles may carry API keys (best-effort on non-Unix)
        try:
            self._path.chmod(0o600)
        except OSError:
            pass

        logger.debug("Saved config to %s", self._path)
        return self._path

    # ── Profiles ──────────────────────────────────────────────────

    def set_model(self, name: str, profile: ModelProfile) -> AppConfig:
        """Create or update a model profile; given fields override stored ones."""
        config = self.load()
        existing = config.models.get(name)
        config.models[name] = profile.merge_with(existing) if existing else profile
        if config.default_model is None:
            config.default_model = name
        self.save(config)
        return config

    def set_prompt(self, name: str, profile: PromptProfile) -> AppConfig:
        config = self.load()
        existing = config.prompts.get(name)
        config.prompts[name] = profile.merge_with(existing) if existing else profile
        if config.default_prompt is None:
            config.default_prompt = name
        self.save(config)
        return config

    def use_model(self, name: str) -> AppConfig:
        config = self.load()
        if name not in config.models:
            raise ConfigError(f"Model configuration '{name}' not found.")
        config.default_model = name
        self.save(config)
        return config

    def use_prompt(self, name: str) -> AppConfig:
        config = self.load()
        if name not in config.prompts:
            raise ConfigError(f"Prompt configuration '{name}' not found.")
        config.default_prompt = name
        self.save(config)
        return config

    def delete_model(self, name: str) -> AppConfig:
        config = self.load()
        if config.models.pop(name, None) is None:
            raise ConfigError(f"Model configuration '{name}' not found.")
        if config.default_model == name:
            config.default_model = None
        self.save(config)
        return config

    def delete_prompt(self, name: str) -> AppConfig:
        config = self.load()
        if config.prompts.pop(name, None) is None:
            raise ConfigError(f"Prompt configuration '{name}' not found.")
        if config.default_prompt == name:
            config.default_prompt = None
        self.save(config)
        return config
