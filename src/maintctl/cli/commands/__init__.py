"""CLI command modules."""

from maintctl.cli.commands import config, diagnostics, rewrite, service

__all__ = [
    "config",
    "diagnostics",
    "rewrite",
    "service",
]
