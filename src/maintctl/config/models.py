"""Configuration models using Pydantic."""

import math
from pathlib import Path
from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator

from maintctl.config.paths import (
    get_audit_log_path,
    get_backups_path,
    get_diagnostics_path,
)


def _ceil_ratio(total: float, step: float) -> int:
    # Rounding first keeps 0.3 / 0.1 from landing on 4
    return math.ceil(round(total / step, 9))


class ConfigError(Exception):
    """Configuration error."""

    pass


class ServiceConfig(BaseModel):
    """The OS service under maintenance and its backing process."""

    name: str
    process: str
    # None = detect from the current platform
    backend: Literal["windows", "systemd"] | None = None


class PollingConfig(BaseModel):
    """Duration-based polling policy.

    Iteration bounds are derived at runtime so that changing the poll
    interval keeps the overall wait time the same. Each probe accounts for
    one poll interval: ``ceil(duration / interval)`` probes are made, with a
    sleep only between probes. The defaults (330s every 15s) therefore mean
    22 probes and 21 sleeps, 315s of actual waiting, and escalation on the
    20th probe, 285s after the first.
    """

    poll_interval_seconds: float = Field(default=15.0, gt=0)
    escalate_after_seconds: float = Field(default=300.0, ge=0)
    max_wait_seconds: float = Field(default=330.0, gt=0)

    @model_validator(mode="after")
    def check_bounds(self) -> Self:
        if self.escalate_after_seconds >= self.max_wait_seconds:
            raise ValueError(
                "escalate_after_seconds must be less than max_wait_seconds"
            )
        if self.soft_limit >= self.hard_limit:
            raise ValueError(
                "poll_interval_seconds is too coarse to separate escalation "
                "from giving up"
            )
        return self

    @property
    def soft_limit(self) -> int:
        """Attempt number at which escalation (or an advisory) happens."""
        return max(1, _ceil_ratio(self.escalate_after_seconds, self.poll_interval_seconds))

    @property
    def hard_limit(self) -> int:
        """Attempt number at which polling is abandoned."""
        return max(1, _ceil_ratio(self.max_wait_seconds, self.poll_interval_seconds))


class StopConfig(PollingConfig):
    """Process wait after stopping the service (20 soft / 22 hard polls)."""


class ReadinessConfig(PollingConfig):
    """Remote readiness endpoint polling (40 soft / 42 hard polls)."""

    url: str | None = None
    poll_interval_seconds: float = Field(default=30.0, gt=0)
    escalate_after_seconds: float = Field(default=1200.0, ge=0)
    max_wait_seconds: float = Field(default=1260.0, gt=0)
    timeout_seconds: float = Field(default=10.0, gt=0)
    verify_tls: bool = True


class BackupConfig(BaseModel):
    """Database dump command and archive retention.

    ``command`` is an argv list; ``{target}`` is replaced with the dump
    directory, e.g. ``["AlteryxService.exe", "emongodump={target}"]``.
    """

    command: list[str] = []
    destination: Path = Field(default_factory=get_backups_path)
    keep: int = Field(default=7, ge=1)
    remove_dump_after_archive: bool = True


class DiagnosticsConfig(BaseModel):
    """Log directories bundled by ``collect-logs``."""

    sources: list[Path] = []
    destination: Path = Field(default_factory=get_diagnostics_path)
    since_days: int | None = Field(default=None, ge=1)


class RewriteConfig(BaseModel):
    """Workflow file patterns touched by server-name rewriting."""

    patterns: list[str] = ["*.yxmd", "*.yxmc", "*.yxwz"]
    backup: bool = True


class DnsConfig(BaseModel):
    """Hostnames checked by ``resolve``."""

    hostnames: list[str] = []
    deadline_seconds: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    """Console level, JSONL file logging and the CSV audit trail."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    jsonl: bool = False
    audit_path: Path = Field(default_factory=get_audit_log_path)
    # Host identifier written to audit records; None = machine hostname
    host: str | None = None


class MaintctlConfig(BaseModel):
    """Root configuration model."""

    service: ServiceConfig
    stop: StopConfig = Field(default_factory=StopConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    rewrite: RewriteConfig = Field(default_factory=RewriteConfig)
    dns: DnsConfig = Field(default_factory=DnsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def require_readiness_url(self) -> str:
        """Return the readiness URL or raise if none is configured."""
        if not self.readiness.url:
            raise ConfigError(
                "No readiness URL configured. Set [readiness].url or "
                "MAINTCTL_READINESS_URL."
            )
        return self.readiness.url

    def require_backup_command(self) -> list[str]:
        """Return the dump command or raise if none is configured."""
        if not self.backup.command:
            raise ConfigError("No dump command configured. Set [backup].command.")
        return self.backup.command
