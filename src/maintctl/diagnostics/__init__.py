"""Diagnostics collection: log bundles and DNS checks."""

from maintctl.diagnostics.dns import ResolutionReport, resolve_hostnames
from maintctl.diagnostics.logs import LogBundle, collect_logs

__all__ = ["LogBundle", "ResolutionReport", "collect_logs", "resolve_hostnames"]
