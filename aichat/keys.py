"""API key handling for aichat.

The key used for a chat request is resolved with this priority:
  1. OPENAI_API_KEY in the environment (highest, already set in shell)
  2. <app dir>/keys.env or .env in the current directory, loaded into
     the environment without overwriting existing variables
  3. The api_key stored in the selected model profile
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from aichat.schemas.config import ModelProfile

logger = logging.getLogger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"


def load_keys_env(app_dir: Path) -> None:
    """Load KEY=VALUE pairs from keys.env and ./.env into os.environ.

    Existing environment variables are NOT overwritten, and the first
    file to define a variable wins.
    """
    for env_file in (app_dir / "keys.env", Path.cwd() / ".env"):
        if not env_file.is_file():
            continue
        for name, value in _parse_env_file(env_file).items():
            if not os.environ.get(name):
                os.environ[name] = value
                logger.debug("Loaded %s from %s", name, env_file)


def _parse_env_file(path: Path) -> dict[str, str]:
    """Pairs from a dotenv-style file; comments and malformed lines are skipped."""
    pairs: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Could not read %s", path)
        return pairs

    for raw in text.splitlines():
        raw = raw.strip()
        if raw.startswith("#") or "=" not in raw:
            continue
        name, _, value = raw.partition("=")
        name = name.strip()
        if name:
            pairs[name] = value.strip().strip("'\"")
    return pairs


def resolve_api_key(profile: ModelProfile) -> str:
    """Return the key to send: the environment override, else the stored key."""
    env_key = os.environ.get(API_KEY_ENV, "")
    if env_key:
        logger.debug("Using %s to override the stored api key", API_KEY_ENV)
        return env_key
    return profile.api_key or ""


def mask_key(key: str) -> str:
    """Mask a secret for display: ``sk-a***wxyz``, or all ``*`` when short."""
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}***{key[-4:]}"
