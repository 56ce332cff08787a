"""Service lifecycle and maintenance window commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import httpx
import typer

from maintctl.cli.console import dim, error, success

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
UrlOption = Annotated[
    str | None,
    typer.Option("--url", "-u", help="Readiness URL (default: [readiness].url)"),
]


def _create_poller(runtime):
    from maintctl.readiness import ReadinessPoller

    readiness = runtime.config.readiness
    return ReadinessPoller(
        runtime.audit,
        timeout=readiness.timeout_seconds,
        verify=readiness.verify_tls,
    )


def _run_window(runtime, payload=None, readiness_url: str | None = None):
    """Run a maintenance window and map aborts to exit code 1."""
    from maintctl.maintenance import MaintenanceAborted, MaintenanceWindow

    try:
        window = MaintenanceWindow(
            runtime.controller,
            runtime.service,
            runtime.stop_budget,
            runtime.audit,
            poller=_create_poller(runtime) if readiness_url else None,
            readiness_url=readiness_url,
            readiness_budget=runtime.readiness_budget if readiness_url else None,
        )
    except httpx.InvalidURL as e:
        error(str(e))
        raise typer.Exit(1) from None
    try:
        report = asyncio.run(window.run(payload))
    except MaintenanceAborted as e:
        error(str(e))
        if e.start is not None and not e.start.ok:
            error(f"Restart after failure also failed: {e.start.message}")
        raise typer.Exit(1) from None

    if not report.start.ok:
        error(f"Start command failed: {report.start.message}")
        raise typer.Exit(1)
    return report


def register(app: typer.Typer) -> None:
    """Register service lifecycle commands."""

    @app.command("stop")
    def stop(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
        """Disable and stop the service, waiting for its process to exit."""
        from maintctl.cli.runtime import bootstrap_runtime, setup_command

        runtime = bootstrap_runtime(setup_command(config, verbose))
        result = asyncio.run(
            runtime.controller.stop(runtime.service, runtime.stop_budget)
        )
        if result.ok:
            success(f"{runtime.service.service_name} stopped")
            return
        error(
            f"{runtime.service.service_name} did not stop after "
            f"{result.attempts} checks; operator intervention required"
        )
        raise typer.Exit(1)

    @app.command("start")
    def start(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
        """Enable and start the service (does not wait for it to come up)."""
        from maintctl.cli.runtime import bootstrap_runtime, setup_command

        runtime = bootstrap_runtime(setup_command(config, verbose))
        result = asyncio.run(runtime.controller.start(runtime.service))
        if result.ok:
            success(f"Start command accepted for {runtime.service.service_name}")
            dim("The service may still be initializing")
            return
        error(f"Start command failed: {result.message}")
        raise typer.Exit(1)

    @app.command("wait-ready")
    def wait_ready(
        url: UrlOption = None,
        config: ConfigOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Poll the readiness endpoint until it returns 200."""
        from maintctl.cli.runtime import bootstrap_runtime, require, setup_command

        runtime = bootstrap_runtime(setup_command(config, verbose))
        target = url or require(runtime.config.require_readiness_url)
        poller = _create_poller(runtime)
        try:
            result = asyncio.run(
                poller.wait_until_ready(target, runtime.readiness_budget)
            )
        except httpx.InvalidURL as e:
            error(str(e))
            raise typer.Exit(1) from None
        if result.ok:
            success(f"{target} is ready ({result.attempts} check(s))")
            return
        error(f"{target} never became ready; manual intervention required")
        raise typer.Exit(1)

    @app.command("backup")
    def backup(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
        """Stop the service, dump and archive the database, start it again."""
        from maintctl.cli.runtime import bootstrap_runtime, now, require, setup_command
        from maintctl.maintenance import run_backup

        runtime = bootstrap_runtime(setup_command(config, verbose))
        require(runtime.config.require_backup_command)
        timestamp = now()

        async def payload():
            result = await run_backup(runtime.config.backup, timestamp)
            runtime.audit.log(
                f"Database archived to {result.archive_path} ({result.files} files)"
            )
            return result

        report = _run_window(runtime, payload)
        result = report.payload_result
        success(f"Backup written to {result.archive_path}")
        for path in result.pruned:
            dim(f"Removed old archive {path.name}")

    @app.command("await-remote")
    def await_remote(
        url: UrlOption = None,
        config: ConfigOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Stop the service and restart it once the remote node reports ready."""
        from maintctl.cli.runtime import bootstrap_runtime, require, setup_command

        runtime = bootstrap_runtime(setup_command(config, verbose))
        target = url or require(runtime.config.require_readiness_url)
        report = _run_window(runtime, readiness_url=target)
        success(
            f"{runtime.service.service_name} restarted after {target} reported ready"
        )
        if report.readiness is not None:
            dim(f"Remote reported ready after {report.readiness.attempts} check(s)")
