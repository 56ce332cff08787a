"""Stop/start a service, waiting for its backing process to exit.

Stopping is verified: after the stop request the backing process is polled
until it disappears, force-killed at the soft limit, and abandoned at the
hard limit. Starting is not: the start command is issued and its exit code
reported. That asymmetry is part of the contract, callers that need to know
the service is serving must check for themselves (see maintctl.readiness).
"""

import asyncio
from collections.abc import Awaitable, Callable

from maintctl.audit import AuditLogger
from maintctl.polling import RetryBudget
from maintctl.service.base import (
    BackendError,
    ProcessProbe,
    ProcessState,
    ServiceBackend,
    ServiceHandle,
    StartOutcome,
    StartResult,
    StartupMode,
    StopOutcome,
    StopResult,
)

Sleep = Callable[[float], Awaitable[None]]


class ServiceLifecycleController:
    """Drives a service through stop/disable and start/enable transitions.

    Example:
        controller = ServiceLifecycleController(backend, audit)
        result = await controller.stop(handle, RetryBudget(20, 22, 15.0))
        if not result.ok:
            ...  # operator intervention required
    """

    def __init__(
        self,
        backend: ServiceBackend,
        audit: AuditLogger,
        sleep: Sleep = asyncio.sleep,
    ):
        self._backend = backend
        self._audit = audit
        self._sleep = sleep

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def stop(self, service: ServiceHandle, budget: RetryBudget) -> StopResult:
        """Disable and stop the service, then wait for its process to exit.

        Returns:
            STOPPED as soon as the process is gone, TIMED_OUT after
            ``budget.hard_limit`` probes if it never goes away.
        """
        name = service.service_name
        self._audit.log(f"Stopping service {name} via {self.backend_name}")

        try:
            await self._backend.set_startup_mode(name, StartupMode.DISABLED)
            service.startup_mode = StartupMode.DISABLED
            self._audit.log(f"Startup mode of {name} set to disabled")
        except BackendError as e:
            self._audit.warning(f"Could not disable {name}: {e}")

        try:
            await self._backend.stop(name)
            self._audit.log(f"Stop command accepted for {name}")
        except BackendError as e:
            self._audit.warning(f"Stop command for {name} failed: {e}")

        budget.reset()
        kill_attempted: list[int] = []

        while True:
            attempt = budget.next_attempt()
            probe = await self._backend.probe(service.process_name)

            if probe.state is ProcessState.ABSENT:
                self._audit.log(
                    f"Process {service.process_name} has exited after "
                    f"{attempt} check(s); {name} is stopped"
                )
                return StopResult(
                    outcome=StopOutcome.STOPPED,
                    attempts=attempt,
                    terminated_pids=kill_attempted,
                )

            self._report_probe(service, probe, budget)

            if budget.exhausted:
                self._audit.error(
                    f"Process {service.process_name} still present after "
                    f"{attempt} checks; giving up. {name} is NOT confirmed "
                    f"stopped and needs operator attention"
                )
                return StopResult(
                    outcome=StopOutcome.TIMED_OUT,
                    attempts=attempt,
                    terminated_pids=kill_attempted,
                )

            if budget.escalated and probe.state is ProcessState.PRESENT:
                for pid in probe.pids:
                    if pid in kill_attempted:
                        continue
                    kill_attempted.append(pid)
                    await self._force_terminate(service, pid, attempt)

            await self._sleep(budget.poll_interval)

    def _report_probe(
        self, service: ServiceHandle, probe: ProcessProbe, budget: RetryBudget
    ) -> None:
        prefix = f"Attempt {budget.attempt}/{budget.hard_limit}:"
        if probe.state is ProcessState.UNKNOWN:
            self._audit.warning(
                f"{prefix} could not query process {service.process_name} "
                f"({probe.error}); retrying"
            )
        else:
            pids = ", ".join(str(p) for p in probe.pids)
            self._audit.log(
                f"{prefix} process {service.process_name} still running (PID {pids})"
            )

    async def _force_terminate(
        self, service: ServiceHandle, pid: int, attempt: int
    ) -> None:
        self._audit.warning(
            f"Attempt {attempt}: force-terminating {service.process_name} (PID {pid})"
        )
        try:
            killed = await self._backend.terminate(pid)
        except BackendError as e:
            self._audit.warning(f"Force-terminate of PID {pid} failed: {e}")
            return
        if not killed:
            # Exited between the probe and the kill
            self._audit.log(f"PID {pid} had already exited")

    async def start(self, service: ServiceHandle) -> StartResult:
        """Enable and start the service.

        Does not wait for the service to come up; the result only reflects
        whether the start command was accepted.
        """
        name = service.service_name
        self._audit.log(f"Starting service {name} via {self.backend_name}")

        try:
            await self._backend.set_startup_mode(name, StartupMode.AUTOMATIC)
            service.startup_mode = StartupMode.AUTOMATIC
            self._audit.log(f"Startup mode of {name} set to automatic")
        except BackendError as e:
            self._audit.warning(f"Could not enable {name}: {e}")

        try:
            exit_code = await self._backend.start(name)
        except BackendError as e:
            self._audit.error(f"Start command for {name} failed: {e}")
            return StartResult(outcome=StartOutcome.START_FAILED, message=str(e))

        if exit_code != 0:
            self._audit.error(f"Start command for {name} returned exit code {exit_code}")
            return StartResult(
                outcome=StartOutcome.START_FAILED,
                exit_code=exit_code,
                message=f"exit code {exit_code}",
            )

        self._audit.log(f"Start command for {name} returned exit code 0")
        return StartResult(outcome=StartOutcome.STARTED, exit_code=0)
