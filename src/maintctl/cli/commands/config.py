"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer

from maintctl.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $MAINTCTL_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        from rich.syntax import Syntax

        from maintctl.cli.console import create_table
        from maintctl.cli.runtime import load_cli_config
        from maintctl.config.paths import get_config_path
        from maintctl.logging import redact

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            content = expanded_path.read_text()
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            config_obj = load_cli_config(expanded_path)

            table = create_table(
                "Configuration Summary", [("Setting", "cyan"), ("Value", "green")]
            )
            table.add_row(
                "Service",
                f"{config_obj.service.name} ({config_obj.service.process})",
            )
            table.add_row("Backend", config_obj.service.backend or "auto-detect")
            stop = config_obj.stop
            table.add_row(
                "Stop wait",
                f"kill at check {stop.soft_limit}, give up at {stop.hard_limit} "
                f"(every {stop.poll_interval_seconds:g}s)",
            )
            readiness = config_obj.readiness
            table.add_row("Readiness URL", readiness.url or "[dim]not configured[/dim]")
            table.add_row(
                "Readiness wait",
                f"advise at check {readiness.soft_limit}, give up at "
                f"{readiness.hard_limit} (every {readiness.poll_interval_seconds:g}s)",
            )
            table.add_row(
                "Backup",
                redact(" ".join(config_obj.backup.command))
                if config_obj.backup.command
                else "[dim]not configured[/dim]",
            )
            table.add_row("Audit trail", str(config_obj.logging.audit_path))

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
