"""Configuration for adaptbeat.

Settings live in ~/.adaptbeat/config.yaml under a `heartbeat:` section:

    heartbeat:
      state_dir: ~/agents/state
      default_agent: main
      log_level: INFO
      workspace_dir: ~/agents/workspace

Every key is optional. The state root can also be overridden per process
with the ADAPTBEAT_STATE_DIR environment variable.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

STATE_DIR_ENV = "ADAPTBEAT_STATE_DIR"


class Settings(BaseModel):
    """Typed view of the `heartbeat:` config section."""
    state_dir: str | None = None
    default_agent: str = "default"
    log_level: str = "WARNING"
    workspace_dir: str | None = None


def get_config_dir() -> Path:
    """Get the adaptbeat config directory."""
    return Path.home() / ".adaptbeat"


def get_config_path() -> Path:
    """Get the config file path."""
    return get_config_dir() / "config.yaml"


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load the raw configuration mapping."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to file."""
    config_path = config_path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False)


def get_settings(config_path: Path | None = None) -> Settings:
    """Load and validate the heartbeat settings."""
    section = load_config(config_path).get("heartbeat") or {}
    return Settings(**section)


def resolve_state_dir(
    state_dir: Path | str | None = None,
    settings: Settings | None = None,
) -> Path:
    """Resolve the process-wide state root.

    Order: explicit argument, ADAPTBEAT_STATE_DIR, config file, ~/.adaptbeat.
    A config file that cannot be read or validated is skipped.
    """
    if state_dir:
        return Path(state_dir).expanduser()

    env_dir = os.environ.get(STATE_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()

    if settings is None:
        try:
            settings = get_settings()
        except (yaml.YAMLError, ValidationError, OSError, AttributeError, TypeError) as e:
            logger.warning(f"Ignoring unreadable config {get_config_path()}: {e}")
            settings = Settings()
    if settings.state_dir:
        return Path(settings.state_dir).expanduser()

    return get_config_dir()
