"""Maintenance window orchestration and payloads."""

from maintctl.maintenance.backup import (
    BackupResult,
    DumpError,
    archive_directory,
    dump_database,
    prune_archives,
    run_backup,
)
from maintctl.maintenance.window import (
    MaintenanceAborted,
    MaintenanceReport,
    MaintenanceWindow,
)

__all__ = [
    "BackupResult",
    "DumpError",
    "MaintenanceAborted",
    "MaintenanceReport",
    "MaintenanceWindow",
    "archive_directory",
    "dump_database",
    "prune_archives",
    "run_backup",
]
