"""Operator audit trail.

Every step of a maintenance run is appended as an AuditRecord
(timestamp, host, message) to a sink. The clock and the host identifier are
passed in explicitly so records are deterministic under test.
"""

from __future__ import annotations

import csv
import logging
import socket
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from maintctl.logging import redact

logger = logging.getLogger(__name__)

CSV_FIELDS = ["timestamp", "host", "message"]


@dataclass(frozen=True)
class AuditRecord:
    """A single audit trail entry."""

    timestamp: datetime
    host: str
    message: str

    def as_row(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "host": self.host,
            "message": self.message,
        }


class AuditSink(Protocol):
    """Append-only destination for audit records."""

    def append(self, record: AuditRecord) -> None: ...


@dataclass
class MemoryAuditSink:
    """Keeps records in memory (tests, dry runs)."""

    records: list[AuditRecord] = field(default_factory=list)

    def append(self, record: AuditRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]


class CsvAuditSink:
    """Appends records to a CSV file, writing the header on first use."""

    def __init__(self, path: Path):
        self.path = path

    def append(self, record: AuditRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_header = not self.path.exists() or self.path.stat().st_size == 0
        with self.path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            if write_header:
                writer.writeheader()
            writer.writerow(record.as_row())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AuditLogger:
    """Builds audit records and forwards them to a sink.

    Messages are also mirrored to the standard ``logging`` tree at the given
    level so console output and the audit trail stay in step.
    """

    def __init__(
        self,
        sink: AuditSink,
        host: str,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._sink = sink
        self._host = host
        self._clock = clock

    @property
    def host(self) -> str:
        return self._host

    def log(self, message: str, level: int = logging.INFO) -> AuditRecord:
        """Append a message to the audit trail."""
        message = redact(message)
        record = AuditRecord(timestamp=self._clock(), host=self._host, message=message)
        try:
            self._sink.append(record)
        except OSError:
            # A locked or full audit file must not interrupt a running stop
            logger.warning("Could not write audit record", exc_info=True)
        logger.log(level, message)
        return record

    def warning(self, message: str) -> AuditRecord:
        return self.log(message, logging.WARNING)

    def error(self, message: str) -> AuditRecord:
        return self.log(message, logging.ERROR)


def create_audit_logger(path: Path, host: str | None = None) -> AuditLogger:
    """Create a CSV-backed audit logger.

    Args:
        path: CSV file to append to.
        host: Host identifier; defaults to this machine's hostname.
    """
    return AuditLogger(CsvAuditSink(path), host=host or socket.gethostname())
