"""Database dump and archive, run while the service is stopped."""

import asyncio
import logging
import shutil
import zipfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from maintctl.config.models import BackupConfig
from maintctl.logging import redact

logger = logging.getLogger(__name__)

TARGET_PLACEHOLDER = "{target}"
ARCHIVE_PREFIX = "db-"


class DumpError(Exception):
    """The database dump command failed."""

    pass


@dataclass
class BackupResult:
    """Where a dump ended up."""

    archive_path: Path
    files: int
    pruned: list[Path]


def format_stamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y%m%d-%H%M%S")


def build_dump_command(command: list[str], target: Path) -> list[str]:
    """Substitute the dump directory into the configured argv."""
    return [arg.replace(TARGET_PLACEHOLDER, str(target)) for arg in command]


async def dump_database(command: list[str], target: Path) -> Path:
    """Run the dump command into ``target``.

    Raises:
        DumpError: If the command is missing or exits non-zero.
    """
    if not command:
        raise DumpError("No dump command configured")
    target.mkdir(parents=True, exist_ok=True)
    argv = build_dump_command(command, target)
    logger.info("Running dump: %s", redact(" ".join(argv)))

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        raise DumpError(f"Could not run {argv[0]}: {e}") from e

    stdout, _ = await proc.communicate()
    output = stdout.decode(errors="replace").strip() if stdout else ""
    if output:
        logger.debug("Dump output: %s", redact(output))
    if proc.returncode != 0:
        tail = output.splitlines()[-1] if output else "no output"
        raise DumpError(f"Dump exited with code {proc.returncode}: {redact(tail)}")
    return target


def archive_directory(source: Path, destination: Path) -> tuple[Path, int]:
    """ZIP every file under ``source`` into ``destination``.

    Returns:
        Tuple of (archive path, number of files archived).
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(source.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(source))
                count += 1
    return destination, count


def prune_archives(directory: Path, keep: int) -> list[Path]:
    """Delete the oldest dump archives beyond ``keep``."""
    if not directory.exists():
        return []
    # Names embed a sortable timestamp
    archives = sorted(directory.glob(f"{ARCHIVE_PREFIX}*.zip"))
    stale = archives[:-keep] if len(archives) > keep else []
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


async def run_backup(config: BackupConfig, timestamp: datetime) -> BackupResult:
    """Dump, archive and prune according to ``config``."""
    stamp = format_stamp(timestamp)
    dump_dir = config.destination / f"{ARCHIVE_PREFIX}{stamp}"

    await dump_database(config.command, dump_dir)
    archive_path, files = await asyncio.to_thread(
        archive_directory, dump_dir, config.destination / f"{ARCHIVE_PREFIX}{stamp}.zip"
    )
    logger.info("Archived %d file(s) to %s", files, archive_path)

    if config.remove_dump_after_archive:
        shutil.rmtree(dump_dir, ignore_errors=True)

    pruned = prune_archives(config.destination, config.keep)
    for path in pruned:
        logger.info("Removed old archive %s", path.name)

    return BackupResult(archive_path=archive_path, files=files, pruned=pruned)
