"""
ServiceAdapter - Windows service startup type.

Provides:
- Lookup by service name or display name (case-insensitive)
- Startup type probe (QueryServiceConfig)
- Startup type change (ChangeServiceConfig)

Canonical vocabulary: "Automatic", "Manual", "Disabled".
"""

from typing import List, Optional, Tuple

from ..logging import get_logger
from ..protocol.errors import MutationError, PlatformUnavailableError
from ..protocol.result import ResourceKind
from ..protocol.tweak import ServiceEntry
from .base import ProbeResult, ResourceAdapter

log = get_logger("service")

# Native start types (winsvc.h)
SERVICE_BOOT_START = 0
SERVICE_SYSTEM_START = 1
SERVICE_AUTO_START = 2
SERVICE_DEMAND_START = 3
SERVICE_DISABLED = 4

AUTOMATIC = "Automatic"
MANUAL = "Manual"
DISABLED = "Disabled"

_NATIVE_TO_CANONICAL = {
    SERVICE_BOOT_START: AUTOMATIC,
    SERVICE_SYSTEM_START: AUTOMATIC,
    SERVICE_AUTO_START: AUTOMATIC,
    SERVICE_DEMAND_START: MANUAL,
    SERVICE_DISABLED: DISABLED,
}

_CANONICAL_TO_NATIVE = {
    "automatic": SERVICE_AUTO_START,
    "manual": SERVICE_DEMAND_START,
    "disabled": SERVICE_DISABLED,
}


def to_startup_type(start_type: Optional[int]) -> str:
    """Native start type -> canonical startup type. Unknown maps to Manual."""
    return _NATIVE_TO_CANONICAL.get(start_type, MANUAL)


def to_start_type(startup_type: Optional[str]) -> int:
    """Canonical startup type -> native start type. Unknown maps to demand start."""
    return _CANONICAL_TO_NATIVE.get((startup_type or "").strip().lower(), SERVICE_DEMAND_START)


def normalize_startup_type(startup_type: Optional[str]) -> str:
    """Canonical spelling of a startup type string."""
    return to_startup_type(to_start_type(startup_type))


class Win32ServiceBackend:
    """
    Service Control Manager access through pywin32.
    """

    def __init__(self):
        try:
            import win32service
        except ImportError as e:
            raise PlatformUnavailableError(
                "Windows service control requires pywin32 on Windows"
            ) from e
        self._ws = win32service

    def list_services(self) -> List[Tuple[str, str]]:
        """(service name, display name) for every Win32 service."""
        ws = self._ws
        scm = ws.OpenSCManager(None, None, ws.SC_MANAGER_ENUMERATE_SERVICE)
        try:
            return [(name, display) for name, display, _status in ws.EnumServicesStatus(scm)]
        finally:
            ws.CloseServiceHandle(scm)

    def query_start_type(self, service_name: str) -> int:
        ws = self._ws
        scm = ws.OpenSCManager(None, None, ws.SC_MANAGER_CONNECT)
        try:
            svc = ws.OpenService(scm, service_name, ws.SERVICE_QUERY_CONFIG)
            try:
                return ws.QueryServiceConfig(svc)[1]
            finally:
                ws.CloseServiceHandle(svc)
        finally:
            ws.CloseServiceHandle(scm)

    def change_start_type(self, service_name: str, start_type: int):
        ws = self._ws
        scm = ws.OpenSCManager(None, None, ws.SC_MANAGER_CONNECT)
        try:
            svc = ws.OpenService(scm, service_name, ws.SERVICE_CHANGE_CONFIG)
            try:
                ws.ChangeServiceConfig(
                    svc,
                    ws.SERVICE_NO_CHANGE,
                    start_type,
                    ws.SERVICE_NO_CHANGE,
                    None, None, 0, None, None, None, None,
                )
            finally:
                ws.CloseServiceHandle(svc)
        finally:
            ws.CloseServiceHandle(scm)


class ServiceAdapter(ResourceAdapter):
    """
    Startup type of a Windows service.

    Supports any backend with list_services/query_start_type/change_start_type.
    """

    kind = ResourceKind.SERVICE
    label = "Service"

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        """Get or create the SCM backend."""
        if self._backend is None:
            self._backend = Win32ServiceBackend()
        return self._backend

    def identity_of(self, entry: ServiceEntry) -> str:
        """Resolved service name, so a display name and the short name share a backup.

        Falls back to the entry name when the service cannot be looked up.
        """
        try:
            service_name = self.resolve_name(entry.name)
        except PlatformUnavailableError:
            raise
        except Exception as e:
            log.debug(f"Could not resolve service '{entry.name}': {e}")
            service_name = None
        return (service_name or entry.name).strip().casefold()

    def resolve_name(self, name: str) -> Optional[str]:
        """Service name matching name or display name, or None."""
        wanted = name.strip().casefold()
        for service_name, display_name in self.backend.list_services():
            if service_name.casefold() == wanted or (display_name or "").casefold() == wanted:
                return service_name
        return None

    def probe(self, entry: ServiceEntry) -> ProbeResult:
        try:
            service_name = self.resolve_name(entry.name)
            if service_name is None:
                return ProbeResult.not_found()
            start_type = self.backend.query_start_type(service_name)
        except PlatformUnavailableError:
            raise
        except Exception as e:
            log.debug(f"Startup type query failed for '{entry.name}': {e}")
            return ProbeResult.unreadable(e)

        log.debug(f"Service '{service_name}' start type {start_type}")
        return ProbeResult.found(to_startup_type(start_type))

    def mutate(self, entry: ServiceEntry, state: str):
        start_type = to_start_type(state)
        try:
            service_name = self.resolve_name(entry.name)
            if service_name is None:
                raise MutationError(entry.name, message="service disappeared")
            self.backend.change_start_type(service_name, start_type)
        except (MutationError, PlatformUnavailableError):
            raise
        except Exception as e:
            raise MutationError(entry.name, e) from e

        log.debug(f"Service '{service_name}' start type set to {start_type}")

    def desired_state(self, entry: ServiceEntry) -> str:
        return normalize_startup_type(entry.startup_type)

    def original_hint(self, entry: ServiceEntry) -> str:
        return entry.original_type.strip()

    def matches_hint(self, entry: ServiceEntry, state: str) -> bool:
        return str(state).casefold() == self.original_hint(entry).casefold()
