"""Windows service control manager backend (sc.exe)."""

import asyncio
import logging
import shutil
import sys

from maintctl.service.base import BackendError, ServiceBackend, StartupMode

logger = logging.getLogger(__name__)

SC_EXE = "sc.exe"

START_TYPES = {
    StartupMode.AUTOMATIC: "auto",
    StartupMode.DISABLED: "disabled",
}

# Win32 error codes returned by sc.exe
ERROR_SERVICE_ALREADY_RUNNING = 1056
ERROR_SERVICE_NOT_ACTIVE = 1062


class WindowsBackend(ServiceBackend):
    """Windows backend driving the service control manager via sc.exe.

    Requires an elevated prompt for config/stop/start.
    """

    @property
    def name(self) -> str:
        return "windows"

    @property
    def is_available(self) -> bool:
        return sys.platform == "win32" and shutil.which(SC_EXE) is not None

    async def _run_sc(self, *args: str) -> tuple[int, str]:
        """Run sc.exe and return (returncode, combined output)."""
        try:
            proc = await asyncio.create_subprocess_exec(
                SC_EXE,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise BackendError(f"Could not run {SC_EXE}: {e}") from e
        stdout, _ = await proc.communicate()
        output = stdout.decode(errors="replace").strip() if stdout else ""
        logger.debug("%s %s -> %s", SC_EXE, " ".join(args), proc.returncode)
        return proc.returncode or 0, output

    async def set_startup_mode(self, service_name: str, mode: StartupMode) -> None:
        # sc.exe wants "start=" and its value as separate arguments
        returncode, output = await self._run_sc(
            "config", service_name, "start=", START_TYPES[mode]
        )
        if returncode != 0:
            raise BackendError(
                f"sc config {service_name} start= {START_TYPES[mode]} failed "
                f"({returncode}): {output}"
            )

    async def stop(self, service_name: str) -> None:
        returncode, output = await self._run_sc("stop", service_name)
        if returncode == ERROR_SERVICE_NOT_ACTIVE:
            logger.debug("Service %s was not running", service_name)
            return
        if returncode != 0:
            raise BackendError(f"sc stop {service_name} failed ({returncode}): {output}")

    async def start(self, service_name: str) -> int:
        returncode, output = await self._run_sc("start", service_name)
        if returncode == ERROR_SERVICE_ALREADY_RUNNING:
            logger.debug("Service %s was already running", service_name)
            return 0
        if returncode != 0:
            logger.debug("sc start %s output: %s", service_name, output)
        return returncode
