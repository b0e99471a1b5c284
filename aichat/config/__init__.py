"""Stored configuration: profiles on disk and their merge with CLI options."""

from aichat.config.resolver import resolve_chat_profiles, resolve_settings
from aichat.config.store import ConfigStore, get_config_dir

__all__ = [
    "ConfigStore",
    "get_config_dir",
    "resolve_chat_profiles",
    "resolve_settings",
]
