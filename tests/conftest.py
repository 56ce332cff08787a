"""Shared test fixtures and fakes."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from maintctl.audit import AuditLogger, MemoryAuditSink
from maintctl.service.base import (
    BackendError,
    ProcessProbe,
    ProcessState,
    ServiceBackend,
    ServiceHandle,
    StartupMode,
)

FIXED_TIME = datetime(2026, 3, 1, 2, 30, tzinfo=UTC)


def present(*pids: int) -> ProcessProbe:
    return ProcessProbe(state=ProcessState.PRESENT, pids=list(pids or (100,)))


def absent() -> ProcessProbe:
    return ProcessProbe(state=ProcessState.ABSENT)


def unknown(error: str = "access denied") -> ProcessProbe:
    return ProcessProbe(state=ProcessState.UNKNOWN, error=error)


class FakeBackend(ServiceBackend):
    """Scripted backend recording every call.

    ``probes`` are returned in order; once exhausted ``default_probe`` is
    returned forever.
    """

    def __init__(
        self,
        probes: list[ProcessProbe] | None = None,
        default_probe: ProcessProbe | None = None,
        start_code: int = 0,
    ):
        self.probes = list(probes or [])
        self.default_probe = default_probe or absent()
        self.start_code = start_code
        self.terminate_result = True
        self.fail: set[str] = set()
        self.calls: list[tuple] = []
        self.probe_count = 0

    @property
    def name(self) -> str:
        return "fake"

    @property
    def is_available(self) -> bool:
        return True

    async def set_startup_mode(self, service_name: str, mode: StartupMode) -> None:
        self.calls.append(("mode", service_name, mode))
        if "mode" in self.fail:
            raise BackendError("access is denied")

    async def stop(self, service_name: str) -> None:
        self.calls.append(("stop", service_name))
        if "stop" in self.fail:
            raise BackendError("service did not respond")

    async def start(self, service_name: str) -> int:
        self.calls.append(("start", service_name))
        if "start" in self.fail:
            raise BackendError("could not run sc.exe")
        return self.start_code

    async def probe(self, process_name: str) -> ProcessProbe:
        self.probe_count += 1
        if self.probes:
            return self.probes.pop(0)
        return self.default_probe

    async def terminate(self, pid: int) -> bool:
        self.calls.append(("terminate", pid))
        if "terminate" in self.fail:
            raise BackendError(f"Access denied killing PID {pid}")
        return self.terminate_result

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def audit_sink() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture
def audit(audit_sink: MemoryAuditSink) -> AuditLogger:
    return AuditLogger(audit_sink, host="analytics-01", clock=lambda: FIXED_TIME)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def handle() -> ServiceHandle:
    return ServiceHandle(service_name="AlteryxService", process_name="AlteryxService.exe")


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


@pytest.fixture
def config_toml_content(tmp_path: Path) -> str:
    """Valid TOML config with fast polling."""
    return f"""
[service]
name = "AlteryxService"
process = "AlteryxService.exe"
backend = "windows"

[stop]
poll_interval_seconds = 0.01
escalate_after_seconds = 0.02
max_wait_seconds = 0.03

[readiness]
url = "https://controller.example.com/health"
poll_interval_seconds = 0.01
escalate_after_seconds = 0.02
max_wait_seconds = 0.03

[backup]
command = ["dump-tool", "--out={{target}}"]
destination = "{(tmp_path / 'backups').as_posix()}"
keep = 2

[logging]
audit_path = "{(tmp_path / 'audit.csv').as_posix()}"
host = "analytics-01"
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path
