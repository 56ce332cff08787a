"""Rewrite server-name references inside workflow files.

Used after moving workflows to a new server: every occurrence of the old
host name in matching files is replaced with the new one. Matching is
case-insensitive and bounded so ``srv1`` does not match inside ``srv10``
or ``my-srv1``.
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


@dataclass
class RewriteReport:
    """Files changed (with replacement counts) and files skipped."""

    changed: dict[Path, int] = field(default_factory=dict)
    skipped: dict[Path, str] = field(default_factory=dict)
    scanned: int = 0
    dry_run: bool = False

    @property
    def replacements(self) -> int:
        return sum(self.changed.values())


def compile_server_pattern(old: str) -> re.Pattern[str]:
    """Build a case-insensitive pattern for a literal host name."""
    if not old.strip():
        raise ValueError("Server name to replace must not be empty")
    return re.compile(
        rf"(?<![A-Za-z0-9_.-]){re.escape(old)}(?![A-Za-z0-9_-])",
        re.IGNORECASE,
    )


def find_workflow_files(root: Path, patterns: list[str]) -> list[Path]:
    """List files under ``root`` matching any glob pattern."""
    if root.is_file():
        return [root]
    found: set[Path] = set()
    for pattern in patterns:
        found.update(p for p in root.rglob(pattern) if p.is_file())
    return sorted(found)


def rewrite_text(text: str, pattern: re.Pattern[str], new: str) -> tuple[str, int]:
    # Lambda so backslashes in the replacement are taken literally
    return pattern.subn(lambda _m: new, text)


def rewrite_server_name(
    root: Path,
    old: str,
    new: str,
    patterns: list[str],
    dry_run: bool = False,
    backup: bool = True,
) -> RewriteReport:
    """Replace ``old`` with ``new`` in every matching file under ``root``.

    Args:
        root: Directory to scan (or a single file).
        old: Server name to replace.
        new: Replacement server name.
        patterns: Glob patterns selecting workflow files.
        dry_run: Only count replacements, do not write.
        backup: Copy each file to ``<name>.bak`` before modifying it.
    """
    pattern = compile_server_pattern(old)
    report = RewriteReport(dry_run=dry_run)

    for path in find_workflow_files(root, patterns):
        report.scanned += 1
        try:
            raw = path.read_bytes()
            text = raw.decode("utf-8-sig" if raw.startswith(b"\xef\xbb\xbf") else "utf-8")
        except UnicodeDecodeError:
            report.skipped[path] = "not UTF-8 text"
            logger.warning("Skipping %s: not UTF-8 text", path)
            continue
        except OSError as e:
            report.skipped[path] = str(e)
            logger.warning("Skipping %s: %s", path, e)
            continue

        updated, count = rewrite_text(text, pattern, new)
        if count == 0:
            continue

        if dry_run:
            report.changed[path] = count
            logger.info("Would replace %d occurrence(s) in %s", count, path)
            continue

        encoding = "utf-8-sig" if raw.startswith(b"\xef\xbb\xbf") else "utf-8"
        try:
            if backup:
                shutil.copy2(path, path.with_name(path.name + BACKUP_SUFFIX))
            # newline="" keeps the file's own line endings
            with path.open("w", encoding=encoding, newline="") as f:
                f.write(updated)
        except OSError as e:
            report.skipped[path] = str(e)
            logger.warning("Could not rewrite %s: %s", path, e)
            continue
        report.changed[path] = count
        logger.info("Replaced %d occurrence(s) in %s", count, path)

    return report
