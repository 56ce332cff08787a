"""Wait for a remote HTTP endpoint to report healthy.

Used when the authority that decides the service may restart is another
node. While that node is down every failure mode (refused connection, DNS
failure, TLS error, 5xx) is expected and simply means "not ready yet".
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum

import httpx

from maintctl.audit import AuditLogger
from maintctl.polling import RetryBudget

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

READY_SCHEMES = ("http", "https")


class ReadinessOutcome(Enum):
    READY = "ready"
    GAVE_UP = "gave_up"


@dataclass
class ReadinessResult:
    """Outcome of waiting on a readiness endpoint."""

    outcome: ReadinessOutcome
    attempts: int
    last_status: int | None = None
    last_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is ReadinessOutcome.READY


def validate_url(url: str) -> httpx.URL:
    """Parse a readiness URL, rejecting anything but an absolute http(s) URL.

    Raises:
        httpx.InvalidURL: If ``url`` is malformed or has no http(s) scheme.
    """
    parsed = httpx.URL(url)
    if parsed.scheme not in READY_SCHEMES or not parsed.host:
        raise httpx.InvalidURL(f"Readiness URL must be an absolute http(s) URL: {url!r}")
    return parsed


class ReadinessPoller:
    """Polls a URL until it answers 200 or the retry budget runs out."""

    def __init__(
        self,
        audit: AuditLogger,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        verify: bool = True,
        sleep: Sleep = asyncio.sleep,
    ):
        self._audit = audit
        self._client = client
        self._timeout = timeout
        self._verify = verify
        self._sleep = sleep

    @asynccontextmanager
    async def _client_session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            timeout=self._timeout, verify=self._verify, follow_redirects=True
        ) as client:
            yield client

    async def check(
        self, client: httpx.AsyncClient, url: str
    ) -> tuple[int | None, str | None]:
        """Issue one GET.

        Returns:
            Tuple of (status code, error). Exactly one of them is None.
        """
        try:
            response = await client.get(url)
        except (httpx.HTTPError, OSError) as e:
            return None, f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        return response.status_code, None

    async def wait_until_ready(self, url: str, budget: RetryBudget) -> ReadinessResult:
        """Block until ``url`` returns 200, or give up at the hard limit.

        Raises:
            httpx.InvalidURL: If ``url`` is not an absolute http(s) URL.
        """
        validate_url(url)
        self._audit.log(
            f"Waiting for {url} to report ready "
            f"(up to {budget.hard_limit} checks every {budget.poll_interval:g}s)"
        )

        budget.reset()
        advised = False
        status: int | None = None
        error: str | None = None

        async with self._client_session() as client:
            while True:
                attempt = budget.next_attempt()
                status, error = await self.check(client, url)

                if status == 200:
                    self._audit.log(f"{url} is ready after {attempt} check(s)")
                    return ReadinessResult(
                        outcome=ReadinessOutcome.READY,
                        attempts=attempt,
                        last_status=status,
                    )

                reason = f"HTTP {status}" if status is not None else error
                logger.debug("Readiness check %d for %s: %s", attempt, url, reason)
                self._audit.log(
                    f"Attempt {attempt}/{budget.hard_limit}: {url} not ready ({reason})"
                )

                if budget.exhausted:
                    self._audit.error(
                        f"{url} did not become ready after {attempt} checks; "
                        f"giving up. Manual intervention required"
                    )
                    return ReadinessResult(
                        outcome=ReadinessOutcome.GAVE_UP,
                        attempts=attempt,
                        last_status=status,
                        last_error=error,
                    )

                if budget.escalated and not advised:
                    advised = True
                    self._audit.warning(
                        f"{url} still not ready after {attempt} checks; an operator "
                        f"should check on the remote process"
                    )

                await self._sleep(budget.poll_interval)
