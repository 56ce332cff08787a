"""Systemd backend for Linux hosts."""

import asyncio
import logging
import shutil
import subprocess

from maintctl.service.base import BackendError, ServiceBackend, StartupMode

logger = logging.getLogger(__name__)


class SystemdBackend(ServiceBackend):
    """Systemd backend using system-level systemctl.

    ``enable``/``disable`` stand in for the Windows startup type.
    """

    @property
    def name(self) -> str:
        return "systemd"

    @property
    def is_available(self) -> bool:
        """Check if systemctl is present and answers."""
        if shutil.which("systemctl") is None:
            return False
        try:
            subprocess.run(
                ["systemctl", "is-system-running"],
                capture_output=True,
                timeout=5,
            )
            return True
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
            return False

    async def _run_systemctl(self, *args: str) -> tuple[int, str, str]:
        """Run a systemctl command."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "systemctl",
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BackendError(f"Could not run systemctl: {e}") from e
        stdout, stderr = await proc.communicate()
        return proc.returncode or 0, stdout.decode(), stderr.decode()

    async def set_startup_mode(self, service_name: str, mode: StartupMode) -> None:
        action = "enable" if mode is StartupMode.AUTOMATIC else "disable"
        returncode, _, stderr = await self._run_systemctl(action, service_name)
        if returncode != 0:
            raise BackendError(
                f"systemctl {action} {service_name} failed: {stderr.strip()}"
            )

    async def stop(self, service_name: str) -> None:
        # --no-block: return once queued, the caller waits on the process
        returncode, _, stderr = await self._run_systemctl(
            "stop", "--no-block", service_name
        )
        if returncode != 0:
            raise BackendError(f"systemctl stop {service_name} failed: {stderr.strip()}")

    async def start(self, service_name: str) -> int:
        returncode, _, stderr = await self._run_systemctl(
            "start", "--no-block", service_name
        )
        if returncode != 0:
            logger.debug("systemctl start %s: %s", service_name, stderr.strip())
        return returncode
