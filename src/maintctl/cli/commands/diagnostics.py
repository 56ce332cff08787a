"""Diagnostics commands: log bundles and DNS checks."""

import asyncio
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer

from maintctl.cli.console import console, create_table, error, success, warning
from maintctl.cli.commands.service import ConfigOption, VerboseOption


def register(app: typer.Typer) -> None:
    """Register diagnostics commands."""

    @app.command("collect-logs")
    def collect_logs(
        source: Annotated[
            list[Path] | None,
            typer.Option("--source", "-s", help="Log directory (repeatable)"),
        ] = None,
        output: Annotated[
            Path | None,
            typer.Option("--output", "-o", help="Directory for the ZIP bundle"),
        ] = None,
        since_days: Annotated[
            int | None,
            typer.Option("--since-days", help="Only files modified in the last N days"),
        ] = None,
        config: ConfigOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Bundle diagnostic logs into a ZIP archive."""
        from maintctl.cli.runtime import host_identifier, now, setup_command
        from maintctl.diagnostics import collect_logs as do_collect

        cfg = setup_command(config, verbose)
        sources = source or cfg.diagnostics.sources
        if not sources:
            error("No log sources given. Use --source or set [diagnostics].sources")
            raise typer.Exit(1)

        timestamp = now()
        days = since_days or cfg.diagnostics.since_days
        since = timestamp - timedelta(days=days) if days else None

        bundle = do_collect(
            sources,
            output or cfg.diagnostics.destination,
            host_identifier(cfg),
            timestamp,
            since=since,
        )
        for skipped in bundle.skipped_sources:
            warning(f"Skipped missing source: {skipped}")
        success(f"Collected {bundle.files} file(s) into {bundle.archive_path}")

    @app.command("resolve")
    def resolve(
        hostnames: Annotated[
            list[str] | None,
            typer.Argument(help="Hostnames (default: [dns].hostnames)"),
        ] = None,
        deadline: Annotated[
            float | None,
            typer.Option("--deadline", "-d", help="Seconds to wait for all lookups"),
        ] = None,
        config: ConfigOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Resolve server hostnames concurrently under one deadline."""
        from maintctl.cli.runtime import setup_command
        from maintctl.diagnostics import resolve_hostnames

        cfg = setup_command(config, verbose)
        names = hostnames or cfg.dns.hostnames
        if not names:
            error("No hostnames given. Pass them as arguments or set [dns].hostnames")
            raise typer.Exit(1)

        report = asyncio.run(
            resolve_hostnames(names, deadline or cfg.dns.deadline_seconds)
        )

        table = create_table("DNS Resolution", [("Host", "cyan"), ("Result", "")])
        for host, addresses in report.resolved.items():
            table.add_row(host, f"[green]{', '.join(addresses)}[/green]")
        for host, reason in report.failed.items():
            table.add_row(host, f"[red]{reason}[/red]")
        for host in report.timed_out:
            table.add_row(host, "[yellow]timed out[/yellow]")
        console.print(table)

        if not report.complete:
            raise typer.Exit(1)
