"""Environment variable and configuration file loading."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR_NAME = ".sentinelscan"


def global_config_path() -> Path:
    """Return the path of the global ~/.sentinelscan/config.yml file."""
    return Path.home() / CONFIG_DIR_NAME / "config.yml"


def project_env_path(project_dir: Path | None = None) -> Path:
    """Return the project .env path (defaults to the working directory)."""
    base = project_dir if project_dir is not None else Path.cwd()
    return base / CONFIG_DIR_NAME / ".env"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.sentinelscan/config.yml."""
    config_path = global_config_path()
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return data if isinstance(data, dict) else {}
    return {}


def load_project_config(project_dir: Path | None = None) -> dict[str, str]:
    """Load project-specific configuration from .sentinelscan/.env."""
    return load_env_file(project_env_path(project_dir))
