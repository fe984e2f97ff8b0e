"""mentionhook configuration, loaded from mentionhook.yaml + .env."""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from mentionhook.dispatch.models import ActionKind

DEFAULT_BOT_NAMES = ["ai_deepseek", "ai_qwen"]


def _load_yaml_config() -> dict[str, Any]:
    """Load mentionhook.yaml from MENTIONHOOK_CONFIG_PATH or default locations."""
    config_path = os.getenv("MENTIONHOOK_CONFIG_PATH")
    search_paths = (
        [Path(config_path)]
        if config_path
        else [
            Path("/etc/mentionhook/mentionhook.yaml"),
            Path("mentionhook.yaml"),
        ]
    )
    for path in search_paths:
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    return {}


def _item_text(item: Any) -> str:
    # str() of a str-mixin Enum is "Class.MEMBER", not its value
    if isinstance(item, Enum):
        item = item.value
    return str(item).strip()


def _parse_str_list(value: Any) -> list[str]:
    """Accept a list, a JSON list string, or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [_item_text(item) for item in parsed if _item_text(item)]
        return [item.strip() for item in text.split(",") if item.strip()]
    if isinstance(value, (list, tuple, set)):
        return [_item_text(item) for item in value if _item_text(item)]
    return [_item_text(value)] if _item_text(value) else []


class RocketChatConfig(BaseSettings):
    """Rocket.Chat host binding configuration."""

    url: str = Field(default="", description="Rocket.Chat server URL, e.g. https://chat.example.com")
    user_id: str = Field(default="", description="Bot user id used for the REST API")
    auth_token: str = Field(default="", description="Personal access token of the bot user")
    webhook_token: str = Field(
        default="",
        description="Token expected in outgoing webhook payloads. Empty = not checked",
    )
    tls_verify: bool = True
    timeout_s: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="MENTIONHOOK_ROCKETCHAT_")

    @property
    def configured(self) -> bool:
        return bool(self.url.strip() and self.user_id.strip() and self.auth_token.strip())


class MentionhookConfig(BaseSettings):
    """Root mentionhook configuration."""

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8000, description="Server bind port")

    # Dispatch
    bot_names: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_BOT_NAMES),
        description="Bot identifiers that trigger actions when @-mentioned",
    )
    actions: Annotated[list[ActionKind], NoDecode] = Field(
        default_factory=lambda: list(ActionKind),
        description="Action kinds to run for each mention, in relay order",
    )
    settings_backend: Literal["env", "file"] = Field(
        default="env",
        description="Where GitLab action settings are read from",
    )
    settings_path: str = Field(default="mentionhook-settings.yaml")
    request_timeout_s: float = Field(default=15.0, gt=0)

    rocketchat: RocketChatConfig = Field(default_factory=RocketChatConfig)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    model_config = SettingsConfigDict(
        env_prefix="MENTIONHOOK_",
        env_nested_delimiter="__",
    )

    @field_validator("bot_names", mode="before")
    @classmethod
    def _parse_bot_names(cls, value: Any) -> list[str]:
        return _parse_str_list(value)

    @field_validator("actions", mode="before")
    @classmethod
    def _parse_actions(cls, value: Any) -> list[str]:
        seen: list[str] = []
        for item in _parse_str_list(value):
            normalized = item.lower().replace("-", "_")
            if normalized not in seen:
                seen.append(normalized)
        return seen

    @classmethod
    def load(cls) -> MentionhookConfig:
        """Load config from YAML, with env vars filling in whatever YAML leaves out."""
        yaml_cfg = _load_yaml_config()
        rocketchat_data = yaml_cfg.pop("rocketchat", {})

        # Only pass the sub-config if YAML has data;
        # otherwise let pydantic-settings pick up env vars
        kwargs: dict[str, Any] = {**yaml_cfg}
        if rocketchat_data:
            kwargs["rocketchat"] = RocketChatConfig(**rocketchat_data)

        return cls(**kwargs)


# Singleton
_config: MentionhookConfig | None = None


def get_config() -> MentionhookConfig:
    """Get or create the global config."""
    global _config
    if _config is None:
        _config = MentionhookConfig.load()
    return _config
