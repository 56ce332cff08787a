"""Service lifecycle management.

Provides OS-native service control:
- Windows service control manager (sc.exe)
- systemd on Linux

Example:
    from maintctl.service import ServiceLifecycleController, ServiceHandle

    controller = ServiceLifecycleController(get_backend(), audit)
    result = await controller.stop(handle, budget)
"""

from maintctl.service.backends import detect_backend, get_backend
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
from maintctl.service.controller import ServiceLifecycleController

__all__ = [
    "BackendError",
    "ProcessProbe",
    "ProcessState",
    "ServiceBackend",
    "ServiceHandle",
    "ServiceLifecycleController",
    "StartOutcome",
    "StartResult",
    "StartupMode",
    "StopOutcome",
    "StopResult",
    "detect_backend",
    "get_backend",
]
