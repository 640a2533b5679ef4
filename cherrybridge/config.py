"""Configuration loading from YAML and environment.

Looked up at --config, else .cherrybridge.yaml in the current directory;
defaults apply when no file exists. Tokens come from the environment or a
secret file, never from a committed config file.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = ".cherrybridge.yaml"


def _read_secret(env_keys: tuple[str, ...], file_env_key: str) -> str | None:
    """Read secret from the first set env var or from a file path in env."""
    for key in env_keys:
        value = _current_env.get(key)
        if value:
            return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so secrets and ${VAR} substitution read one snapshot
_current_env: dict[str, str] = {}


class PromotionDefaultsConfig(BaseSettings):
    """Defaults offered when --from/--to/--branch are not given."""

    model_config = SettingsConfigDict(env_prefix="PROMOTION_", extra="ignore")

    from_branch: str = Field(default="development", description="Base branch PRs were merged into")
    to_branch: str = Field(default="staging", description="Base branch to promote into")
    branch_prefix: str = Field(default="promote/", description="Prefix of default promotion branch names")


class HostConfig(BaseSettings):
    """Which code host client lists merged PRs."""

    model_config = SettingsConfigDict(env_prefix="HOST_", extra="ignore")

    provider: Literal["gh", "github_api"] = Field(default="gh", description="gh CLI or GitHub REST API")
    command: str = Field(default="gh", description="gh executable")
    limit: int = Field(default=1000, ge=1, description="Max PRs requested from gh pr list")


class GitHubConfig(BaseSettings):
    """GitHub API settings (github_api provider only)."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT; prefer env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")


class StoreConfig(BaseSettings):
    """Where promotion sessions are kept."""

    model_config = SettingsConfigDict(env_prefix="STORE_", extra="ignore")

    backend: Literal["session", "branch"] = Field(
        default="session",
        description="session: JSON files under state_dir; branch: git config on the promotion branch",
    )
    state_dir: Path = Field(default=Path("~/.cherrybridge"), description="Root for session files")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="%(message)s", description="Log format")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    promotion: PromotionDefaultsConfig = Field(default_factory=PromotionDefaultsConfig)
    host: HostConfig = Field(default_factory=HostConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret(("GITHUB_TOKEN", "GH_TOKEN"), "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with the environment snapshot."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN, GH_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path(DEFAULT_CONFIG_FILE)
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        promotion=PromotionDefaultsConfig(**(raw.get("promotion") or {})),
        host=HostConfig(**(raw.get("host") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        store=StoreConfig(**(raw.get("store") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
