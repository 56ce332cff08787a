"""Workflow server-name rewrite command."""

from pathlib import Path
from typing import Annotated

import typer

from maintctl.cli.console import console, create_table, dim, success, warning


def register(app: typer.Typer) -> None:
    """Register the rewrite command."""

    @app.command("rewrite")
    def rewrite(
        old: Annotated[str, typer.Argument(help="Server name to replace")],
        new: Annotated[str, typer.Argument(help="New server name")],
        path: Annotated[
            Path, typer.Argument(help="Workflow directory or single file")
        ],
        pattern: Annotated[
            list[str] | None,
            typer.Option("--pattern", "-p", help="File glob (repeatable)"),
        ] = None,
        dry_run: Annotated[
            bool, typer.Option("--dry-run", "-n", help="Only report changes")
        ] = False,
        no_backup: Annotated[
            bool, typer.Option("--no-backup", help="Do not write .bak copies")
        ] = False,
    ) -> None:
        """Replace a server name inside workflow files."""
        from maintctl.config.models import RewriteConfig
        from maintctl.rewrite import rewrite_server_name

        if not path.exists():
            warning(f"Path not found: {path}")
            raise typer.Exit(1)

        defaults = RewriteConfig()
        try:
            report = rewrite_server_name(
                path,
                old,
                new,
                pattern or defaults.patterns,
                dry_run=dry_run,
                backup=defaults.backup and not no_backup,
            )
        except ValueError as e:
            warning(str(e))
            raise typer.Exit(1) from None

        if report.changed:
            table = create_table(
                "Dry run" if dry_run else "Rewritten files",
                [("File", "cyan"), ("Replacements", {"justify": "right"})],
            )
            for changed_path, count in report.changed.items():
                table.add_row(str(changed_path), str(count))
            console.print(table)

        for skipped_path, reason in report.skipped.items():
            warning(f"Skipped {skipped_path}: {reason}")

        verb = "Would replace" if dry_run else "Replaced"
        success(
            f"{verb} {report.replacements} occurrence(s) in "
            f"{len(report.changed)} of {report.scanned} file(s)"
        )
        if dry_run:
            dim("Run without --dry-run to write changes")
