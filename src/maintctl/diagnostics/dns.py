"""Resolve server hostnames concurrently under one collective deadline.

Each hostname is resolved in its own task. Whatever has not finished when
the deadline passes is cancelled and reported as timed out, so one hung
lookup cannot stall the whole check.
"""

import asyncio
import logging
import socket
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Awaitable[list[str]]]


@dataclass
class ResolutionReport:
    """Per-hostname resolution results."""

    resolved: dict[str, list[str]] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)
    timed_out: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed and not self.timed_out


def _getaddrinfo_detached(hostname: str) -> asyncio.Future:
    """Run ``socket.getaddrinfo`` on a daemon thread.

    The thread is not tied to the loop's executor, so a lookup that hangs
    past the deadline neither delays loop shutdown nor interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def deliver(result, exc: BaseException | None) -> None:
        if future.done():
            return
        if exc is not None:
            future.set_exception(exc)
        else:
            future.set_result(result)

    def lookup() -> None:
        result, exc = None, None
        try:
            result = socket.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        except Exception as e:
            exc = e
        try:
            loop.call_soon_threadsafe(deliver, result, exc)
        except RuntimeError:
            # Loop already closed; nobody is waiting for this answer
            pass

    threading.Thread(target=lookup, name=f"resolve:{hostname}", daemon=True).start()
    return future


async def system_resolver(hostname: str) -> list[str]:
    """Resolve a hostname with the OS resolver, returning unique addresses."""
    infos = await _getaddrinfo_detached(hostname)
    addresses: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


async def resolve_hostnames(
    hostnames: list[str],
    deadline: float,
    resolver: Resolver | None = None,
) -> ResolutionReport:
    """Resolve all hostnames, reporting partial results at the deadline.

    Args:
        hostnames: Names to resolve; duplicates are resolved once.
        deadline: Seconds to wait for the whole batch.
        resolver: Async callable returning addresses for a hostname.
    """
    resolve = resolver or system_resolver
    report = ResolutionReport()
    unique = list(dict.fromkeys(hostnames))
    if not unique:
        return report

    tasks = {asyncio.create_task(resolve(host), name=f"resolve:{host}"): host for host in unique}
    _done, pending = await asyncio.wait(tasks, timeout=deadline)

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    for task, host in tasks.items():
        if task in pending:
            report.timed_out.append(host)
            logger.warning("DNS lookup for %s did not finish within %.1fs", host, deadline)
            continue
        exc = task.exception()
        if exc is not None:
            report.failed[host] = str(exc) or type(exc).__name__
            logger.warning("DNS lookup for %s failed: %s", host, exc)
        else:
            report.resolved[host] = task.result()

    return report
