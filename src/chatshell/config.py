"""Configuration loading for chatshell."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from chatshell.errors import ConfigError
from chatshell.pipeline.models import PipelineConfig
from chatshell.sandbox.models import SandboxConfig

if TYPE_CHECKING:
    from pathlib import Path


class SlackConfig(BaseModel):
    """Slack credentials and delivery defaults."""

    bot_token: str = ""
    default_channel: str = ""


class BotConfig(BaseModel):
    """Top-level configuration file schema."""

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)


def load_config(path: Path | None = None) -> BotConfig:
    """Read YAML, interpolate env vars, and validate.

    Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
    with :func:`os.path.expandvars` before parsing, so tokens can stay out
    of the file.  Without *path* the defaults are returned.

    Raises:
        ConfigError: On read errors, YAML errors or schema violations.
    """
    if path is None:
        return BotConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return BotConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")

    try:
        return BotConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
