"""Service backend detection and factory."""

import importlib
import sys

from maintctl.service.base import BackendError, ServiceBackend

BACKENDS = {
    "windows": "maintctl.service.backends.windows.WindowsBackend",
    "systemd": "maintctl.service.backends.systemd.SystemdBackend",
}


def detect_backend() -> ServiceBackend:
    """Detect the service manager for the current system.

    Raises:
        BackendError: If no supported service manager is available.
    """
    if sys.platform == "win32":
        from maintctl.service.backends.windows import WindowsBackend

        return WindowsBackend()

    if sys.platform == "linux":
        from maintctl.service.backends.systemd import SystemdBackend

        backend = SystemdBackend()
        if backend.is_available:
            return backend

    raise BackendError(f"No supported service manager on platform {sys.platform}")


def get_backend(name: str | None = None) -> ServiceBackend:
    """Get a specific backend by name, or auto-detect.

    Args:
        name: Backend name ('windows', 'systemd') or None for auto.

    Raises:
        ValueError: If the named backend doesn't exist.
    """
    if name is None:
        return detect_backend()

    if name not in BACKENDS:
        raise ValueError(f"Unknown backend: {name}. Available: {list(BACKENDS)}")

    module_path, class_name = BACKENDS[name].rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)()


__all__ = ["detect_backend", "get_backend"]
