import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CONFIG_PATH = Path("gcptables.config.yaml")
DEFAULT_API_ENDPOINT = "https://cloudfunctions.googleapis.com/v1/"

# Checked in order; the first non-empty value wins.
PROJECT_ENV_VARS = ("GCPTABLES_PROJECT", "GOOGLE_CLOUD_PROJECT", "CLOUDSDK_CORE_PROJECT")
ACCESS_TOKEN_ENV_VAR = "GCPTABLES_ACCESS_TOKEN"


class Settings(BaseModel):
    """Resolved runtime settings for the API client and query executor."""

    model_config = ConfigDict(extra="forbid")

    project: Optional[str] = None
    api_endpoint: str = DEFAULT_API_ENDPOINT
    timeout_seconds: float = Field(default=30.0, gt=0)
    page_size: Optional[int] = Field(default=None, gt=0)
    max_workers: int = Field(default=8, ge=1)
    user_agent: str = "gcptables/0.1"
    access_token: Optional[str] = None
    on_row_error: Literal["raise", "skip"] = "raise"
    log_level: str = "WARNING"

    @field_validator("api_endpoint")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the YAML config file.

    Args:
        path: Optional path to the config file. Defaults to gcptables.config.yaml

    Returns:
        Config dictionary (empty when the default file is absent)

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If the file does not hold a mapping
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    return config


def resolve_settings(
    config: Dict[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """
    Merge file config, environment and explicit overrides into Settings.

    Precedence (highest first): overrides, environment, config file.
    Overrides set to None are ignored so CLI flags can be passed through as-is.
    """
    env = os.environ if env is None else env
    merged: Dict[str, Any] = dict(config or {})

    for var in PROJECT_ENV_VARS:
        if env.get(var):
            merged["project"] = env[var]
            break
    if env.get(ACCESS_TOKEN_ENV_VAR):
        merged["access_token"] = env[ACCESS_TOKEN_ENV_VAR]

    merged.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**merged)


def require_project(settings: Settings) -> str:
    if not settings.project:
        raise ValueError(
            "No project configured. Set 'project' in the config file, "
            f"one of {', '.join(PROJECT_ENV_VARS)}, or pass --project"
        )
    return settings.project
