"""Process lookup and termination utilities."""

import logging

import psutil

from maintctl.service.base import BackendError, ProcessProbe, ProcessState

logger = logging.getLogger(__name__)


def _normalize(name: str) -> str:
    name = name.lower()
    if name.endswith(".exe"):
        name = name[:-4]
    return name


def matches_process_name(candidate: str | None, process_name: str) -> bool:
    """Compare process names case-insensitively, ignoring a .exe suffix."""
    if not candidate:
        return False
    return _normalize(candidate) == _normalize(process_name)


def probe_process(process_name: str) -> ProcessProbe:
    """Look for running processes with the given executable name.

    Args:
        process_name: Executable name, e.g. "AlteryxService.exe".

    Returns:
        ProcessProbe with PRESENT and matching PIDs, ABSENT, or UNKNOWN when
        the process table could not be read.
    """
    pids: list[int] = []
    try:
        for proc in psutil.process_iter(["name"]):
            try:
                if matches_process_name(proc.info.get("name"), process_name):
                    pids.append(proc.pid)
            except (psutil.NoSuchProcess, psutil.ZombieProcess):
                continue
    except psutil.Error as e:
        logger.debug("Process table query failed: %s", e)
        return ProcessProbe(state=ProcessState.UNKNOWN, error=str(e) or type(e).__name__)
    except OSError as e:
        logger.debug("Process table query failed: %s", e)
        return ProcessProbe(state=ProcessState.UNKNOWN, error=str(e))

    if pids:
        return ProcessProbe(state=ProcessState.PRESENT, pids=sorted(pids))
    return ProcessProbe(state=ProcessState.ABSENT)


def terminate_process(pid: int) -> bool:
    """Force-kill a process by PID.

    Args:
        pid: Process ID to kill.

    Returns:
        True if the kill was delivered, False if the process was already gone.

    Raises:
        BackendError: If the process exists but could not be killed.
    """
    try:
        psutil.Process(pid).kill()
        return True
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied as e:
        raise BackendError(f"Access denied killing PID {pid}") from e
    except psutil.Error as e:
        raise BackendError(f"Failed to kill PID {pid}: {e}") from e
