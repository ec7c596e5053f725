"""
RegistryAdapter - a single registry value.

Identity is path + value name. A missing key or value is still a readable
state (existed=False): backing it up lets restore delete a value that apply
created. Unknown hives are unreadable.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..logging import get_logger
from ..protocol.errors import MutationError, PlatformUnavailableError
from ..protocol.result import ResourceKind
from ..protocol.tweak import REMOVE_ENTRY, RegistryEntry
from .base import ProbeResult, ResourceAdapter

log = get_logger("registry")

# Value type codes (winnt.h)
REG_SZ = 1
REG_EXPAND_SZ = 2
REG_BINARY = 3
REG_DWORD = 4
REG_MULTI_SZ = 7
REG_QWORD = 11

_TYPE_CODES = {
    "string": REG_SZ,
    "reg_sz": REG_SZ,
    "expandstring": REG_EXPAND_SZ,
    "reg_expand_sz": REG_EXPAND_SZ,
    "binary": REG_BINARY,
    "reg_binary": REG_BINARY,
    "dword": REG_DWORD,
    "reg_dword": REG_DWORD,
    "multistring": REG_MULTI_SZ,
    "reg_multi_sz": REG_MULTI_SZ,
    "qword": REG_QWORD,
    "reg_qword": REG_QWORD,
}

TYPE_NAMES = {
    REG_SZ: "String",
    REG_EXPAND_SZ: "ExpandString",
    REG_BINARY: "Binary",
    REG_DWORD: "DWord",
    REG_MULTI_SZ: "MultiString",
    REG_QWORD: "QWord",
}

HIVES = {
    "HKLM": "HKLM",
    "HKEY_LOCAL_MACHINE": "HKLM",
    "HKCU": "HKCU",
    "HKEY_CURRENT_USER": "HKCU",
    "HKCR": "HKCR",
    "HKEY_CLASSES_ROOT": "HKCR",
    "HKU": "HKU",
    "HKEY_USERS": "HKU",
    "HKCC": "HKCC",
    "HKEY_CURRENT_CONFIG": "HKCC",
}


def type_code(type_name: Optional[str]) -> int:
    """Registry type name -> type code. Unknown names are written as strings."""
    return _TYPE_CODES.get((type_name or "").strip().lower(), REG_SZ)


def parse_registry_path(path: str) -> Tuple[str, str]:
    """
    Split "HKLM:\\SOFTWARE\\Policies" into ("HKLM", "SOFTWARE\\Policies").

    Raises:
        ValueError: unknown hive prefix
    """
    cleaned = path.strip().replace("/", "\\")
    hive, _, subkey = cleaned.partition("\\")
    hive = hive.rstrip(":").upper()
    if hive not in HIVES:
        raise ValueError(f"Unknown registry hive: '{hive}'")
    return HIVES[hive], subkey.strip("\\")


def coerce_value(value: Any, code: int) -> Any:
    """
    Convert a document value to the Python type winreg expects for code.

    Raises:
        ValueError: value cannot be represented as the requested type
    """
    if not isinstance(value, str):
        return value
    if code in (REG_DWORD, REG_QWORD):
        text = value.strip()
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    if code == REG_MULTI_SZ:
        return value.split("\0")
    if code == REG_BINARY:
        cleaned = value.replace(",", " ").replace("0x", "").replace("0X", "")
        return bytes.fromhex(cleaned)
    return value


@dataclass(frozen=True)
class RegistryValueState:
    """Observed or desired state of one registry value."""
    existed: bool
    value: Any = None
    type_code: int = REG_SZ

    @property
    def type_name(self) -> str:
        return TYPE_NAMES.get(self.type_code, f"Type{self.type_code}")


class WinRegBackend:
    """
    Registry access through the winreg module.
    """

    def __init__(self):
        try:
            import winreg
        except ImportError as e:
            raise PlatformUnavailableError("Registry access is only available on Windows") from e
        self._reg = winreg
        self._handles = {
            "HKLM": winreg.HKEY_LOCAL_MACHINE,
            "HKCU": winreg.HKEY_CURRENT_USER,
            "HKCR": winreg.HKEY_CLASSES_ROOT,
            "HKU": winreg.HKEY_USERS,
            "HKCC": winreg.HKEY_CURRENT_CONFIG,
        }

    def query_value(self, hive: str, subkey: str, name: str) -> Optional[Tuple[Any, int]]:
        """(value, type code), or None if the key or value is missing."""
        reg = self._reg
        try:
            with reg.OpenKey(self._handles[hive], subkey, 0, reg.KEY_READ | reg.KEY_WOW64_64KEY) as key:
                return reg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None

    def set_value(self, hive: str, subkey: str, name: str, value: Any, code: int):
        reg = self._reg
        with reg.CreateKeyEx(self._handles[hive], subkey, 0, reg.KEY_WRITE | reg.KEY_WOW64_64KEY) as key:
            reg.SetValueEx(key, name, 0, code, value)

    def delete_value(self, hive: str, subkey: str, name: str):
        reg = self._reg
        try:
            with reg.OpenKey(self._handles[hive], subkey, 0, reg.KEY_SET_VALUE | reg.KEY_WOW64_64KEY) as key:
                reg.DeleteValue(key, name)
        except FileNotFoundError:
            pass


class RegistryAdapter(ResourceAdapter):
    """
    Value and type of one registry value.

    Supports any backend with query_value/set_value/delete_value.
    """

    kind = ResourceKind.REGISTRY
    label = "Registry value"

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        """Get or create the registry backend."""
        if self._backend is None:
            self._backend = WinRegBackend()
        return self._backend

    def identity_of(self, entry: RegistryEntry) -> str:
        try:
            hive, subkey = parse_registry_path(entry.path)
            path = f"{hive}\\{subkey}"
        except ValueError:
            path = entry.path.strip()
        return f"{path}\\{entry.name}".casefold()

    def probe(self, entry: RegistryEntry) -> ProbeResult:
        try:
            hive, subkey = parse_registry_path(entry.path)
            current = self.backend.query_value(hive, subkey, entry.name)
        except PlatformUnavailableError:
            raise
        except Exception as e:
            log.debug(f"Could not read '{entry.path}\\{entry.name}': {e}")
            return ProbeResult.unreadable(e)

        if current is None:
            return ProbeResult.found(RegistryValueState(existed=False))
        value, code = current
        return ProbeResult.found(RegistryValueState(existed=True, value=value, type_code=code))

    def mutate(self, entry: RegistryEntry, state: RegistryValueState):
        identity = f"{entry.path}\\{entry.name}"
        try:
            hive, subkey = parse_registry_path(entry.path)
            if not state.existed:
                self.backend.delete_value(hive, subkey, entry.name)
                log.debug(f"Deleted '{identity}'")
                return
            value = coerce_value(state.value, state.type_code)
            self.backend.set_value(hive, subkey, entry.name, value, state.type_code)
        except PlatformUnavailableError:
            raise
        except Exception as e:
            raise MutationError(identity, e) from e

        log.debug(f"Set '{identity}' = {value!r} ({state.type_name})")

    def desired_state(self, entry: RegistryEntry) -> RegistryValueState:
        if entry.value == REMOVE_ENTRY:
            return RegistryValueState(existed=False)
        return RegistryValueState(existed=True, value=entry.value, type_code=type_code(entry.type))

    def original_hint(self, entry: RegistryEntry) -> str:
        return entry.original_value.strip()

    def matches_hint(self, entry: RegistryEntry, state: RegistryValueState) -> bool:
        hint = self.original_hint(entry)
        if hint == REMOVE_ENTRY:
            return not state.existed
        if not state.existed:
            return False
        if isinstance(state.value, int):
            try:
                return coerce_value(hint, REG_QWORD) == state.value
            except ValueError:
                return False
        return str(state.value).casefold() == hint.casefold()

    def display_name(self, entry: RegistryEntry) -> str:
        return f"{entry.path}\\{entry.name}"

    def describe(self, state: RegistryValueState) -> str:
        if not state.existed:
            return "(not set)"
        return f"{state.value!r} ({state.type_name})"
