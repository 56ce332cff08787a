"""Centralized path management for maintctl.

All local state (config, audit trail, archives) lives under a single base
directory. The base directory can be overridden with the MAINTCTL_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.maintctl
- Windows: %USERPROFILE%\\.maintctl
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "MAINTCTL_HOME"


@lru_cache(maxsize=1)
def get_maintctl_home() -> Path:
    """Get the base directory for all maintctl data.

    Resolution order:
    1. MAINTCTL_HOME environment variable (if set)
    2. Platform default (~/.maintctl)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".maintctl"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_maintctl_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the JSONL logs directory path."""
    return get_maintctl_home() / "logs"


def get_audit_log_path() -> Path:
    """Get the default CSV audit trail path."""
    return get_logs_path() / "audit.csv"


def get_backups_path() -> Path:
    """Get the default database archive directory."""
    return get_maintctl_home() / "backups"


def get_diagnostics_path() -> Path:
    """Get the default diagnostics bundle directory."""
    return get_maintctl_home() / "diagnostics"

