"""Maintenance window: stop, run a payload, optionally wait, start.

The service is never restarted on an unconfirmed state: a stop timeout
aborts before the payload runs, and a readiness give-up aborts before the
start command is issued.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from maintctl.audit import AuditLogger
from maintctl.polling import RetryBudget
from maintctl.readiness import ReadinessPoller, ReadinessResult, validate_url
from maintctl.service.base import ServiceHandle, StartResult, StopResult
from maintctl.service.controller import ServiceLifecycleController

Payload = Callable[[], Awaitable[Any]]


class MaintenanceAborted(Exception):
    """The maintenance run stopped in a state that needs an operator."""

    def __init__(
        self,
        message: str,
        *,
        stop: StopResult | None = None,
        readiness: ReadinessResult | None = None,
        start: StartResult | None = None,
    ):
        super().__init__(message)
        self.stop = stop
        self.readiness = readiness
        self.start = start


@dataclass
class MaintenanceReport:
    """What happened during a completed maintenance run."""

    stop: StopResult
    start: StartResult
    readiness: ReadinessResult | None = None
    payload_result: Any = None

    @property
    def ok(self) -> bool:
        return self.stop.ok and self.start.ok


class MaintenanceWindow:
    """Runs one maintenance window against a single service."""

    def __init__(
        self,
        controller: ServiceLifecycleController,
        service: ServiceHandle,
        stop_budget: RetryBudget,
        audit: AuditLogger,
        poller: ReadinessPoller | None = None,
        readiness_url: str | None = None,
        readiness_budget: RetryBudget | None = None,
    ):
        if readiness_url and (poller is None or readiness_budget is None):
            raise ValueError("readiness_url requires a poller and a readiness_budget")
        if readiness_url:
            # Reject a bad URL before the service is touched
            validate_url(readiness_url)
        self._controller = controller
        self._service = service
        self._stop_budget = stop_budget
        self._audit = audit
        self._poller = poller
        self._readiness_url = readiness_url
        self._readiness_budget = readiness_budget

    async def run(self, payload: Payload | None = None) -> MaintenanceReport:
        """Execute the window.

        Raises:
            MaintenanceAborted: On stop timeout, payload failure (after the
                service has been started again) or readiness give-up.
        """
        name = self._service.service_name
        self._audit.log(f"Maintenance window for {name} opened")

        stop = await self._controller.stop(self._service, self._stop_budget)
        if not stop.ok:
            raise MaintenanceAborted(
                f"{name} did not stop within {stop.attempts} checks; "
                "payload skipped and service left disabled",
                stop=stop,
            )

        payload_result = None
        if payload is not None:
            try:
                payload_result = await payload()
            except Exception as e:
                self._audit.error(f"Maintenance payload failed: {e}")
                start = await self._controller.start(self._service)
                raise MaintenanceAborted(
                    f"Maintenance payload failed: {e}", stop=stop, start=start
                ) from e

        readiness = None
        if (
            self._readiness_url
            and self._poller is not None
            and self._readiness_budget is not None
        ):
            readiness = await self._poller.wait_until_ready(
                self._readiness_url, self._readiness_budget
            )
            if not readiness.ok:
                self._audit.error(f"{name} left stopped: remote never reported ready")
                raise MaintenanceAborted(
                    f"{self._readiness_url} never reported ready; {name} was not restarted",
                    stop=stop,
                    readiness=readiness,
                )

        start = await self._controller.start(self._service)
        self._audit.log(
            f"Maintenance window for {name} closed ({start.outcome.value})"
        )
        return MaintenanceReport(
            stop=stop, start=start, readiness=readiness, payload_result=payload_result
        )
