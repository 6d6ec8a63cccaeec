"""Configuration loading from YAML and environment.

Secrets (app private key, webhook secret) are taken from environment
variables or from files (Docker secrets). Never put real secrets in config
files committed to the repo.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when configuration is missing or invalid at startup."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


def _read_secret(env: Dict[str, str], env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = env.get(env_key)
    if value:
        return value.strip()
    file_path = env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${")


class GitHubConfig(BaseSettings):
    """GitHub App credentials and API endpoint."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    app_id: str = Field(default="", description="Numeric GitHub App id")
    private_key: str | None = Field(default=None, description="App PEM key; prefer env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")


class WebhookConfig(BaseSettings):
    """Webhook server settings."""

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")
    path: str = Field(default="/", description="Webhook URL path")
    secret: str | None = Field(default=None, description="Webhook HMAC secret; prefer env or secret file")


class WorkflowConfig(BaseSettings):
    """Labels, branches and dispatch settings for managed issues and PRs."""

    model_config = SettingsConfigDict(env_prefix="WORKFLOW_", extra="ignore")

    target_label: str = Field(default="", description="Label that marks an issue/PR as automation-managed")
    default_branch: str = Field(default="main", description="Base branch for new work branches and PRs")
    branch_prefix: str = Field(default="claude/issue-", description="Prefix of generated branch names")
    dispatch_event: str = Field(default="claude_copilot", description="repository_dispatch event_type")
    pr_title_prefix: str = Field(default="[WIP] ", description="Title prefix of draft PRs")
    reaction: str = Field(default="eyes", description="Acknowledgment reaction content")

    @field_validator("branch_prefix")
    @classmethod
    def _check_branch_prefix(cls, v: str) -> str:
        if " " in v or ".." in v:
            raise ValueError("branch_prefix must be a valid git branch prefix")
        return v


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env.

    Built once at process start by load_config and passed explicitly to
    the server, router and handlers.
    """

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    _env: Dict[str, str] = PrivateAttr(default_factory=lambda: dict(os.environ))

    @property
    def private_key_resolved(self) -> str | None:
        """Resolve the App private key from config, env or Docker secret
        file.

        Literal ``\\n`` sequences (single-line env values) become newlines.
        """
        key = self.github.private_key
        if _is_placeholder(key):
            key = _read_secret(self._env, "GITHUB_PRIVATE_KEY", "GITHUB_PRIVATE_KEY_FILE")
        if not key:
            return None
        return key.replace("\\n", "\n")

    @property
    def webhook_secret_resolved(self) -> str:
        """Resolve webhook secret from config, env or Docker secret file."""
        secret = self.webhook.secret
        if not _is_placeholder(secret):
            return secret or ""
        return _read_secret(self._env, "WEBHOOK_SECRET", "WEBHOOK_SECRET_FILE") or ""

    def validate_startup(self) -> None:
        """Check required values; raise ConfigError listing every problem."""
        problems: List[str] = []
        if not re.fullmatch(r"\d+", self.github.app_id or ""):
            problems.append("github.app_id must be a valid number")
        key = self.private_key_resolved or ""
        if "BEGIN" not in key or "END" not in key:
            problems.append("github.private_key must be a valid PEM format private key")
        if len(self.webhook_secret_resolved) < 8:
            problems.append("webhook.secret must be at least 8 characters long")
        if not self.workflow.target_label.strip():
            problems.append("workflow.target_label cannot be empty")
        if not self.workflow.default_branch.strip():
            problems.append("workflow.default_branch cannot be empty")
        if not self.workflow.pr_title_prefix.strip():
            problems.append("workflow.pr_title_prefix cannot be empty")
        if problems:
            raise ConfigError(problems)

    def summary(self) -> Dict[str, Any]:
        """Configuration without secrets, for the startup log."""
        return {
            "app_id": self.github.app_id,
            "api_url": self.github.api_url,
            "webhook_path": self.webhook.path,
            "target_label": self.workflow.target_label,
            "default_branch": self.workflow.default_branch,
            "branch_prefix": self.workflow.branch_prefix,
            "dispatch_event": self.workflow.dispatch_event,
            "pr_title_prefix": self.workflow.pr_title_prefix,
            "reaction": self.workflow.reaction,
            "log_level": self.logging.level,
        }


def _substitute_env(value: Any, env: Dict[str, str]) -> Any:
    """Replace ${VAR} and $VAR in strings with environment values."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v, env) for v in value]
    return value


def load_config(config_path: Path | None = None, env: Dict[str, str] | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_FILE, WEBHOOK_SECRET or
    WEBHOOK_SECRET_FILE.
    """
    current_env = dict(os.environ) if env is None else dict(env)

    path = config_path or Path("config.yaml")
    raw: Dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw, current_env)

    config = AppConfig(
        github=GitHubConfig(**(raw.get("github") or {})),
        webhook=WebhookConfig(**(raw.get("webhook") or {})),
        workflow=WorkflowConfig(**(raw.get("workflow") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
    config._env = current_env
    return config
