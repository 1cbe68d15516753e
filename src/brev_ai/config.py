"""Configuration for the brev-ai client.

Config discovery (first match wins):
  1. Explicit path (``--config`` flag)
  2. ``./brev_ai.yaml``
  3. ``~/.config/brev-ai/config.yaml``
  4. Built-in defaults

``ZAI_AUTH_TOKEN`` / ``ZAI_BASE_URL`` in the environment override the file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

_logger = logging.getLogger(__name__)

TOKEN_ENV = "ZAI_AUTH_TOKEN"
BASE_URL_ENV = "ZAI_BASE_URL"

# Monday first, matching ``datetime.weekday()``
_WEEKDAYS_RU = [
    "понедельник",
    "вторник",
    "среда",
    "четверг",
    "пятница",
    "суббота",
    "воскресенье",
]


class ClientConfig(BaseModel):
    # Provider
    base_url: str = "https://chat.z.ai/api"
    auth_token: str = ""
    default_model: str = "0727-360B-API"
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64; rv:140.0) Gecko/20100101 Firefox/140.0"
    )
    origin: str = "https://chat.z.ai"
    frontend_version: str = "prod-fe-1.0.57"
    chat_title: str = "BrevX Chat"
    hidden_mcp_servers: list[str] = Field(
        default_factory=lambda: ["vibe-coding", "ppt-maker", "image-search"]
    )

    # Sampling defaults
    temperature: float = 0.8
    max_tokens: int = 4000
    top_p: float = 0.95

    # Retry
    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)
    max_retry_delay: float = Field(default=30.0, ge=0)

    # Liveness deadlines (seconds)
    first_content_timeout: float = Field(default=3.0, gt=0)
    completion_timeout: float = Field(default=30.0, gt=0)

    # HTTP transport
    connect_timeout: float = 30.0
    request_timeout: float = 120.0

    # History bounds
    max_history_messages: int = Field(default=30, ge=1)
    max_user_input_length: int = Field(default=3500, ge=1)

    # Template context
    timezone_name: str = "Europe/Moscow"
    utc_offset_hours: float = 3
    default_location: str = "Russia"
    language: str = "ru-RU"
    weekday_names: list[str] = Field(default_factory=lambda: list(_WEEKDAYS_RU))

    @field_validator("weekday_names")
    @classmethod
    def _seven_weekdays(cls, value: list[str]) -> list[str]:
        if len(value) != 7:
            raise ValueError("weekday_names must list 7 days, Monday first")
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_SEARCH_PATHS = [
    Path("./brev_ai.yaml"),
    Path.home() / ".config" / "brev-ai" / "config.yaml",
]


def _apply_env(raw: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    if env.get(TOKEN_ENV):
        raw["auth_token"] = env[TOKEN_ENV]
    if env.get(BASE_URL_ENV):
        raw["base_url"] = env[BASE_URL_ENV]
    return raw


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Load configuration from YAML plus environment overrides.

    Parameters
    ----------
    path:
        Explicit config path.  If *None*, search default locations.
    env:
        Environment mapping (defaults to ``os.environ``).

    Raises
    ------
    FileNotFoundError
        An explicit *path* was given but does not exist.
    """
    env = os.environ if env is None else env
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        for candidate in _SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    raw: dict[str, Any] = {}
    if config_path is None:
        _logger.info("No config file found, using defaults")
    else:
        _logger.info("Loading config from %s", config_path)
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    return ClientConfig.model_validate(_apply_env(raw, env))
