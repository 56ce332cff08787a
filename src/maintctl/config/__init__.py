"""Configuration module."""

from maintctl.config.loader import load_config
from maintctl.config.models import (
    BackupConfig,
    ConfigError,
    DiagnosticsConfig,
    DnsConfig,
    LoggingConfig,
    MaintctlConfig,
    PollingConfig,
    ReadinessConfig,
    RewriteConfig,
    ServiceConfig,
    StopConfig,
)
from maintctl.config.paths import get_config_path, get_maintctl_home

__all__ = [
    "BackupConfig",
    "ConfigError",
    "DiagnosticsConfig",
    "DnsConfig",
    "LoggingConfig",
    "MaintctlConfig",
    "PollingConfig",
    "ReadinessConfig",
    "RewriteConfig",
    "ServiceConfig",
    "StopConfig",
    "get_config_path",
    "get_maintctl_home",
    "load_config",
]
