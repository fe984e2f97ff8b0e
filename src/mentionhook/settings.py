"""Action settings and the backends they are read from.

GitLab action settings are looked up through a :class:`ConfigProvider` on
every dispatch. Two kinds of backend are supported:

- process environment variables (``EnvConfigProvider``), named after the
  upper-cased setting id, e.g. ``GITLAB_URL``;
- a settings store (``MappingConfigProvider`` for in-memory values,
  ``YamlFileConfigProvider`` for a YAML file re-read on each lookup).
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
import yaml

from mentionhook.dispatch.models import ActionConfig, ActionKind

if TYPE_CHECKING:
    from mentionhook.config import MentionhookConfig

logger = structlog.get_logger()

_TRUE_VALUES = {"true", "1", "yes", "on"}


class SettingType(str, Enum):
    BOOLEAN = "boolean"
    STRING = "string"
    SECRET = "secret"


class SettingId(str, Enum):
    GITLAB_CREATE_ISSUE_ENABLED = "gitlab_create_issue_enabled"
    GITLAB_PROJECT_ID = "gitlab_project_id"
    GITLAB_ACCESS_TOKEN = "gitlab_access_token"
    GITLAB_URL = "gitlab_url"
    GITLAB_TLS_VERIFY = "gitlab_tls_verify"
    GITLAB_ASSIGN_MENTIONED_BOT = "gitlab_assign_mentioned_bot"
    GITLAB_PIPELINE_TRIGGER = "gitlab_pipeline_trigger"
    GITLAB_PIPELINE_TRIGGER_PROJECT_ID = "gitlab_pipeline_trigger_project_id"
    GITLAB_PIPELINE_TRIGGER_TOKEN = "gitlab_pipeline_trigger_token"
    GITLAB_PIPELINE_TRIGGER_REF = "gitlab_pipeline_trigger_ref"
    GITLAB_PIPELINE_TRIGGER_URL = "gitlab_pipeline_trigger_url"
    GITLAB_PIPELINE_TRIGGER_NOTIFY = "gitlab_pipeline_trigger_notify"
    ECHO_REPLY_ENABLED = "echo_reply_enabled"


@dataclass(frozen=True)
class Setting:
    id: SettingId
    type: SettingType
    default: Any
    label: str
    description: str

    @property
    def env_var(self) -> str:
        return self.id.value.upper()


SETTINGS: list[Setting] = [
    Setting(
        SettingId.GITLAB_CREATE_ISSUE_ENABLED,
        SettingType.BOOLEAN,
        False,
        "Enable GitLab Issue Creation",
        "Enable creating GitLab issues when a bot is mentioned",
    ),
    Setting(
        SettingId.GITLAB_PROJECT_ID,
        SettingType.STRING,
        "",
        "GitLab Project ID for Issues",
        "The GitLab project ID (or URL-encoded path) for creating issues",
    ),
    Setting(
        SettingId.GITLAB_ACCESS_TOKEN,
        SettingType.SECRET,
        "",
        "GitLab Access Token",
        "The access token for GitLab API operations",
    ),
    Setting(
        SettingId.GITLAB_URL,
        SettingType.STRING,
        "",
        "GitLab URL for Issues",
        "The GitLab instance URL for issue creation (e.g., https://gitlab.com)",
    ),
    Setting(
        SettingId.GITLAB_TLS_VERIFY,
        SettingType.BOOLEAN,
        False,
        "GitLab TLS Certificate Verification",
        "Enable TLS certificate verification for GitLab API requests. "
        "Disable for self-signed certificates.",
    ),
    Setting(
        SettingId.GITLAB_ASSIGN_MENTIONED_BOT,
        SettingType.BOOLEAN,
        True,
        "Assign Issues to the Mentioned Bot",
        "Look up the mentioned bot as a GitLab user and assign the new issue to it",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER,
        SettingType.BOOLEAN,
        False,
        "Enable GitLab Pipeline Trigger",
        "Trigger a GitLab pipeline when a bot is mentioned",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER_PROJECT_ID,
        SettingType.STRING,
        "",
        "GitLab Project ID for Pipelines",
        "The GitLab project ID whose pipeline is triggered",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER_TOKEN,
        SettingType.SECRET,
        "",
        "GitLab Pipeline Trigger Token",
        "The pipeline trigger token",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER_REF,
        SettingType.STRING,
        "",
        "GitLab Pipeline Ref",
        "Branch or tag the pipeline runs on",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER_URL,
        SettingType.STRING,
        "",
        "GitLab URL for Pipelines",
        "The GitLab instance URL for pipeline triggers",
    ),
    Setting(
        SettingId.GITLAB_PIPELINE_TRIGGER_NOTIFY,
        SettingType.BOOLEAN,
        False,
        "Announce Triggered Pipelines",
        "Post the triggered pipeline URL back into the room",
    ),
    Setting(
        SettingId.ECHO_REPLY_ENABLED,
        SettingType.BOOLEAN,
        False,
        "Enable Echo Reply",
        "Reply in the room with the mentioning message and its ID",
    ),
]

_BY_ID: dict[SettingId, Setting] = {setting.id: setting for setting in SETTINGS}


def get_setting(setting_id: SettingId | str) -> Setting:
    return _BY_ID[SettingId(setting_id)]


class ConfigProvider(ABC):
    """Source of raw setting values."""

    name: str = "provider"

    @abstractmethod
    def get_value(self, key: str) -> Any | None:
        """Return the raw value stored for ``key``, or None if absent."""
        ...


class EnvConfigProvider(ConfigProvider):
    """Reads settings from environment variables (``gitlab_url`` -> ``GITLAB_URL``)."""

    name = "env"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get_value(self, key: str) -> str | None:
        environ = self._environ if self._environ is not None else os.environ
        return environ.get(key.upper())


class MappingConfigProvider(ConfigProvider):
    """In-memory settings store keyed by setting id."""

    name = "store"

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def get_value(self, key: str) -> Any | None:
        return self.values.get(key)


class YamlFileConfigProvider(ConfigProvider):
    """Settings store backed by a flat YAML mapping of setting id -> value.

    The file is read on every lookup, so edits apply to the next dispatch
    without a restart.
    """

    name = "file"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get_value(self, key: str) -> Any | None:
        return self._load().get(key)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("settings.file.unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("settings.file.not_a_mapping", path=str(self.path))
            return {}
        return data


def _coerce(setting: Setting, raw: Any) -> Any:
    if setting.type is SettingType.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _TRUE_VALUES
    return str(raw).strip()


def read_setting(provider: ConfigProvider, setting_id: SettingId | str) -> Any:
    """Read one setting, coerced to its declared type, falling back to its default."""
    setting = get_setting(setting_id)
    raw = provider.get_value(setting.id.value)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return setting.default
    return _coerce(setting, raw)


def resolve_action_config(provider: ConfigProvider, kind: ActionKind) -> ActionConfig:
    """Build the :class:`ActionConfig` for ``kind`` from current setting values."""
    if kind is ActionKind.CREATE_ISSUE:
        return ActionConfig(
            kind=kind,
            enabled=read_setting(provider, SettingId.GITLAB_CREATE_ISSUE_ENABLED),
            endpoint_base=read_setting(provider, SettingId.GITLAB_URL),
            credential=read_setting(provider, SettingId.GITLAB_ACCESS_TOKEN),
            project_id=read_setting(provider, SettingId.GITLAB_PROJECT_ID),
            tls_verify=read_setting(provider, SettingId.GITLAB_TLS_VERIFY),
            notify=True,
            assign_mentioned_bot=read_setting(provider, SettingId.GITLAB_ASSIGN_MENTIONED_BOT),
        )
    if kind is ActionKind.TRIGGER_PIPELINE:
        return ActionConfig(
            kind=kind,
            enabled=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER),
            endpoint_base=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER_URL),
            credential=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER_TOKEN),
            project_id=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER_PROJECT_ID),
            ref=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER_REF),
            tls_verify=read_setting(provider, SettingId.GITLAB_TLS_VERIFY),
            notify=read_setting(provider, SettingId.GITLAB_PIPELINE_TRIGGER_NOTIFY),
        )
    return ActionConfig(
        kind=kind,
        enabled=read_setting(provider, SettingId.ECHO_REPLY_ENABLED),
        notify=True,
    )


def build_config_provider(config: MentionhookConfig) -> ConfigProvider:
    """Select the settings backend named by ``config.settings_backend``."""
    if config.settings_backend == "file":
        return YamlFileConfigProvider(config.settings_path)
    return EnvConfigProvider()
