"""Abstract base and result types for service manager backends."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class StartupMode(Enum):
    """Service startup type."""

    AUTOMATIC = "automatic"
    DISABLED = "disabled"


class ProcessState(Enum):
    """Result of looking for the backing process."""

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass
class ProcessProbe:
    """Process existence check result."""

    state: ProcessState
    pids: list[int] = field(default_factory=list)
    error: str | None = None


@dataclass
class ServiceHandle:
    """A named OS service and the process that implements it."""

    service_name: str
    process_name: str
    startup_mode: StartupMode = StartupMode.AUTOMATIC


class BackendError(Exception):
    """A service manager or process call failed."""

    pass


class StopOutcome(Enum):
    STOPPED = "stopped"
    TIMED_OUT = "timed_out"


class StartOutcome(Enum):
    STARTED = "started"
    START_FAILED = "start_failed"


@dataclass
class StopResult:
    """Outcome of stopping a service and waiting for its process."""

    outcome: StopOutcome
    attempts: int
    terminated_pids: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is StopOutcome.STOPPED


@dataclass
class StartResult:
    """Outcome of issuing a start command.

    Only says the start command was accepted, not that the service has
    finished initializing.
    """

    outcome: StartOutcome
    exit_code: int | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is StartOutcome.STARTED


class ServiceBackend(ABC):
    """Abstract interface for OS service managers.

    Backends translate startup mode, stop and start into native calls
    (sc.exe on Windows, systemctl on Linux). Process probing and
    termination go through psutil and are shared by all backends.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'windows', 'systemd')."""
        ...

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if this backend is available on the current system."""
        ...

    @abstractmethod
    async def set_startup_mode(self, service_name: str, mode: StartupMode) -> None:
        """Change the service startup type.

        Raises:
            BackendError: If the service manager rejects the change.
        """
        ...

    @abstractmethod
    async def stop(self, service_name: str) -> None:
        """Ask the service manager to stop the service.

        Returns once the request is accepted; the backing process may
        still be running.

        Raises:
            BackendError: If the request is rejected.
        """
        ...

    @abstractmethod
    async def start(self, service_name: str) -> int:
        """Ask the service manager to start the service.

        Returns:
            The service manager's exit code (0 = accepted).

        Raises:
            BackendError: If the service manager could not be invoked.
        """
        ...

    async def probe(self, process_name: str) -> ProcessProbe:
        """Check whether the backing process exists."""
        from maintctl.service.process import probe_process

        return await asyncio.to_thread(probe_process, process_name)

    async def terminate(self, pid: int) -> bool:
        """Force-kill a process.

        Returns:
            True if killed, False if it had already exited.

        Raises:
            BackendError: If the process exists but cannot be killed.
        """
        from maintctl.service.process import terminate_process

        return await asyncio.to_thread(terminate_process, pid)
