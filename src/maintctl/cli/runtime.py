"""Shared runtime bootstrap helpers for CLI entrypoints."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import typer
from pydantic import ValidationError

from maintctl.audit import AuditLogger, create_audit_logger
from maintctl.cli.console import console, error
from maintctl.config import ConfigError, MaintctlConfig, load_config
from maintctl.logging import configure_logging
from maintctl.polling import RetryBudget
from maintctl.service import (
    BackendError,
    ServiceHandle,
    ServiceLifecycleController,
    get_backend,
)


@dataclass(slots=True)
class Runtime:
    """Composed dependencies for CLI command handlers."""

    config: MaintctlConfig
    audit: AuditLogger
    controller: ServiceLifecycleController
    service: ServiceHandle

    @property
    def stop_budget(self) -> RetryBudget:
        return RetryBudget.from_config(self.config.stop)

    @property
    def readiness_budget(self) -> RetryBudget:
        return RetryBudget.from_config(self.config.readiness)


def now() -> datetime:
    return datetime.now(UTC)


def host_identifier(config: MaintctlConfig) -> str:
    return config.logging.host or socket.gethostname()


def load_cli_config(path: Path | None) -> MaintctlConfig:
    """Load config for a command, turning failures into exit code 1."""
    try:
        return load_config(path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None
    except Exception as e:
        error(f"Error loading config: {e}")
        raise typer.Exit(1) from None


def setup_command(path: Path | None, verbose: bool = False) -> MaintctlConfig:
    """Load config and configure logging for a command."""
    config = load_cli_config(path)
    configure_logging(
        level="DEBUG" if verbose else config.logging.level,
        use_rich=True,
        log_to_file=config.logging.jsonl,
    )
    return config


def bootstrap_runtime(config: MaintctlConfig) -> Runtime:
    """Wire the audit trail, backend and controller for the configured service."""
    try:
        backend = get_backend(config.service.backend)
    except (BackendError, ValueError) as e:
        error(str(e))
        raise typer.Exit(1) from None

    audit = create_audit_logger(config.logging.audit_path, host_identifier(config))
    return Runtime(
        config=config,
        audit=audit,
        controller=ServiceLifecycleController(backend, audit),
        service=ServiceHandle(
            service_name=config.service.name,
            process_name=config.service.process,
        ),
    )


def require(value_fn, *args):
    """Call a config accessor that may raise ConfigError, exiting on failure."""
    try:
        return value_fn(*args)
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from None
