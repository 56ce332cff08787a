"""Bundle diagnostic log directories into a single ZIP for support."""

import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LogBundle:
    """Result of a log collection run."""

    archive_path: Path
    files: int
    skipped_sources: list[Path] = field(default_factory=list)


def _entry_prefix(index: int, source: Path) -> str:
    # Index keeps two sources with the same leaf name apart
    return f"{index:02d}-{source.name or 'root'}"


def _iter_files(source: Path, since: datetime | None):
    if source.is_file():
        candidates = [source]
    else:
        candidates = sorted(p for p in source.rglob("*") if p.is_file())
    for path in candidates:
        if since is not None:
            try:
                mtime = datetime.fromtimestamp(path.stat().st_mtime, since.tzinfo)
            except OSError:
                continue
            if mtime < since:
                continue
        yield path


def collect_logs(
    sources: list[Path],
    destination: Path,
    host: str,
    timestamp: datetime,
    since: datetime | None = None,
) -> LogBundle:
    """Collect log files into ``<destination>/<host>-logs-<timestamp>.zip``.

    Args:
        sources: Log directories (or single files) to include.
        destination: Directory for the archive.
        host: Host identifier used in the archive name.
        timestamp: Timestamp used in the archive name.
        since: Only include files modified at or after this time.

    Returns:
        LogBundle with the archive path and file count. Missing sources are
        listed in ``skipped_sources``.
    """
    destination.mkdir(parents=True, exist_ok=True)
    archive_path = destination / f"{host}-logs-{timestamp.strftime('%Y%m%d-%H%M%S')}.zip"

    count = 0
    skipped: list[Path] = []
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for index, source in enumerate(sources):
            if not source.exists():
                logger.warning("Log source not found, skipping: %s", source)
                skipped.append(source)
                continue
            prefix = _entry_prefix(index, source)
            root = source.parent if source.is_file() else source
            for path in _iter_files(source, since):
                try:
                    zf.write(path, f"{prefix}/{path.relative_to(root).as_posix()}")
                    count += 1
                except OSError as e:
                    # Log files held open with exclusive locks on Windows
                    logger.warning("Could not read %s: %s", path, e)

    logger.info("Collected %d log file(s) into %s", count, archive_path)
    return LogBundle(archive_path=archive_path, files=count, skipped_sources=skipped)
