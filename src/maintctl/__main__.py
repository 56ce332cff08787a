"""Allow running as ``python -m maintctl``."""

from maintctl.cli.app import app

app()
