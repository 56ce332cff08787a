"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from maintctl.config.models import MaintctlConfig
from maintctl.config.paths import get_config_path

# (section, key, env var) overrides applied when the env var is set
ENV_OVERRIDES = [
    ("readiness", "url", "MAINTCTL_READINESS_URL"),
    ("logging", "level", "MAINTCTL_LOG_LEVEL"),
    ("service", "name", "MAINTCTL_SERVICE_NAME"),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("maintctl.toml"),  # Current directory
        get_config_path(),  # ~/.maintctl/config.toml (or MAINTCTL_HOME)
        Path("/etc/maintctl/config.toml"),  # System-wide
    ]


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Overlay environment variables onto the raw config dict."""
    for section, key, env_var in ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value:
            target = config.setdefault(section, {})
            if key == "level":
                value = value.upper()
            target[key] = value
    return config


def load_config(path: Path | None = None) -> MaintctlConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated MaintctlConfig instance.

    Raises:
        FileNotFoundError: If no config file is found.
        pydantic.ValidationError: If the config file is invalid.
    """
    config_path: Path | None = None

    default_paths = _get_default_config_paths()

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in default_paths:
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        raise FileNotFoundError(
            f"No config file found. Searched: {', '.join(str(p) for p in default_paths)}"
        )

    with config_path.open("rb") as f:
        raw_config = tomllib.load(f)

    raw_config = _apply_env_overrides(raw_config)

    return MaintctlConfig.model_validate(raw_config)
