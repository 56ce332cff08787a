"""Main CLI application."""

import typer

from maintctl.cli.commands import config, diagnostics, rewrite, service

app = typer.Typer(
    name="maintctl",
    help="maintctl - Maintenance windows for the analytics server service",
    no_args_is_help=True,
)

service.register(app)
diagnostics.register(app)
rewrite.register(app)
config.register(app)


if __name__ == "__main__":
    app()
