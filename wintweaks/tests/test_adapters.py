"""Tests for resource adapters: state conversions, identities and probes."""

import subprocess

import pytest

from wintweaks.protocol.errors import MutationError, PlatformUnavailableError
from wintweaks.protocol.tweak import RegistryEntry, ScheduledTaskEntry, ServiceEntry
from wintweaks.tuning.base import ProbeStatus
from wintweaks.tuning.registry import (
    REG_BINARY,
    REG_DWORD,
    REG_EXPAND_SZ,
    REG_MULTI_SZ,
    REG_QWORD,
    REG_SZ,
    RegistryAdapter,
    RegistryValueState,
    coerce_value,
    parse_registry_path,
    type_code,
)
from wintweaks.tuning.service import (
    SERVICE_AUTO_START,
    SERVICE_BOOT_START,
    SERVICE_DEMAND_START,
    SERVICE_DISABLED,
    SERVICE_SYSTEM_START,
    ServiceAdapter,
    normalize_startup_type,
    to_start_type,
    to_startup_type,
)
from wintweaks.tuning import task as task_module
from wintweaks.tuning.task import (
    ScheduledTaskAdapter,
    normalize_task_path,
    parse_query_status,
    to_enabled,
    to_state_text,
)


class TestServiceConversions:
    """Native start type <-> canonical startup type."""

    @pytest.mark.parametrize("native,expected", [
        (SERVICE_BOOT_START, "Automatic"),
        (SERVICE_SYSTEM_START, "Automatic"),
        (SERVICE_AUTO_START, "Automatic"),
        (SERVICE_DEMAND_START, "Manual"),
        (SERVICE_DISABLED, "Disabled"),
        (99, "Manual"),
        (None, "Manual"),
    ])
    def test_to_startup_type(self, native, expected):
        assert to_startup_type(native) == expected

    @pytest.mark.parametrize("canonical,expected", [
        ("Automatic", SERVICE_AUTO_START),
        ("automatic", SERVICE_AUTO_START),
        ("Manual", SERVICE_DEMAND_START),
        ("DISABLED", SERVICE_DISABLED),
        ("AutomaticDelayedStart", SERVICE_DEMAND_START),
        ("", SERVICE_DEMAND_START),
        (None, SERVICE_DEMAND_START),
    ])
    def test_to_start_type(self, canonical, expected):
        assert to_start_type(canonical) == expected

    def test_normalize(self):
        assert normalize_startup_type(" disabled ") == "Disabled"
        assert normalize_startup_type("whatever") == "Manual"


class TestServiceAdapter:

    def test_identity_is_casefolded(self):
        adapter = ServiceAdapter(backend=object())
        assert adapter.identity_of(ServiceEntry("WuAuServ")) == "wuauserv"

    def test_identity_resolves_display_name(self, services):
        adapter = ServiceAdapter(backend=services)
        assert adapter.identity_of(ServiceEntry("windows update")) == "wuauserv"
        assert adapter.identity_of(ServiceEntry("foo-svc")) == "foo-svc"

    def test_probe_found(self, services):
        adapter = ServiceAdapter(backend=services)
        probe = adapter.probe(ServiceEntry("DiagTrack"))
        assert probe.status == ProbeStatus.FOUND
        assert probe.state == "Automatic"

    def test_probe_not_found(self, services):
        adapter = ServiceAdapter(backend=services)
        assert adapter.probe(ServiceEntry("foo-svc")).status == ProbeStatus.NOT_FOUND

    def test_probe_unreadable(self, services):
        services.fail_query.add("DiagTrack")
        probe = ServiceAdapter(backend=services).probe(ServiceEntry("DiagTrack"))
        assert probe.status == ProbeStatus.UNREADABLE
        assert isinstance(probe.error, OSError)

    def test_mutate_missing_service_raises(self, services):
        adapter = ServiceAdapter(backend=services)
        with pytest.raises(MutationError) as exc:
            adapter.mutate(ServiceEntry("foo-svc"), "Disabled")
        assert exc.value.identity == "foo-svc"

    def test_mutate_wraps_backend_error(self, services):
        services.fail_change.add("DiagTrack")
        with pytest.raises(MutationError) as exc:
            ServiceAdapter(backend=services).mutate(ServiceEntry("DiagTrack"), "Disabled")
        assert isinstance(exc.value.cause, OSError)


class TestTaskConversions:

    @pytest.mark.parametrize("text,expected", [
        ("Enabled", True),
        ("enabled", True),
        (" ENABLED ", True),
        ("Disabled", False),
        ("Ready", False),
        ("", False),
        (None, False),
    ])
    def test_to_enabled(self, text, expected):
        assert to_enabled(text) is expected

    def test_to_state_text(self):
        assert to_state_text(True) == "Enabled"
        assert to_state_text(False) == "Disabled"

    def test_normalize_task_path(self):
        expected = "\\Microsoft\\Windows\\Feedback\\Siuf\\DmClient"
        assert normalize_task_path("Microsoft\\Windows\\Feedback\\Siuf\\DmClient") == expected
        assert normalize_task_path("/Microsoft/Windows/Feedback/Siuf/DmClient") == expected
        assert normalize_task_path("\\MyTask") == "\\MyTask"

    @pytest.mark.parametrize("output,expected", [
        ('"\\Microsoft\\Windows\\X\\Y","N/A","Ready"\n', True),
        ('"\\Microsoft\\Windows\\X\\Y","N/A","Running"', True),
        ('"\\Microsoft\\Windows\\X\\Y","N/A","Disabled"', False),
        ('\n"\\X","N/A","Deaktiviert"\n', False),
    ])
    def test_parse_query_status(self, output, expected):
        assert parse_query_status(output) is expected

    def test_parse_query_status_empty(self):
        with pytest.raises(ValueError):
            parse_query_status("\n")

    def test_identity_ignores_slashes_and_case(self):
        adapter = ScheduledTaskAdapter(backend=object())
        a = adapter.identity_of(ScheduledTaskEntry("\\Microsoft\\Windows\\X\\Y"))
        b = adapter.identity_of(ScheduledTaskEntry("microsoft\\windows\\x\\y"))
        c = adapter.identity_of(ScheduledTaskEntry("/Microsoft/Windows/X/Y"))
        assert a == b == c == "microsoft\\windows\\x\\y"

    def test_matches_hint(self):
        adapter = ScheduledTaskAdapter(backend=object())
        entry = ScheduledTaskEntry("T", state="Disabled", original_state="enabled")
        assert adapter.matches_hint(entry, True)
        assert not adapter.matches_hint(entry, False)

    def test_probe_error_unreadable(self, tasks):
        tasks.fail_read.add("T")
        assert ScheduledTaskAdapter(backend=tasks).probe(ScheduledTaskEntry("T")).status == ProbeStatus.UNREADABLE


class TestSchtasksBackend:

    @pytest.fixture
    def backend(self, mocker):
        mocker.patch.object(task_module.os, "name", "nt")
        mocker.patch.object(task_module.shutil, "which", return_value="schtasks.exe")
        return task_module.SchtasksBackend()

    def _completed(self, returncode=0, stdout="", stderr=""):
        return subprocess.CompletedProcess(["schtasks"], returncode, stdout, stderr)

    def test_unavailable_off_windows(self, mocker):
        mocker.patch.object(task_module.os, "name", "posix")
        with pytest.raises(PlatformUnavailableError):
            task_module.SchtasksBackend()

    def test_query_disabled(self, backend, mocker):
        run = mocker.patch.object(task_module.subprocess, "run", return_value=self._completed(
            stdout='"\\Microsoft\\Windows\\X\\Y","N/A","Disabled"\n'))
        assert backend.get_enabled("Microsoft\\Windows\\X\\Y") is False
        assert run.call_args[0][0] == [
            "schtasks", "/Query", "/TN", "\\Microsoft\\Windows\\X\\Y", "/FO", "CSV", "/NH",
        ]

    def test_query_missing_task(self, backend, mocker):
        mocker.patch.object(task_module.subprocess, "run", return_value=self._completed(
            1, stderr="ERROR: The system cannot find the file specified.\n"))
        assert backend.get_enabled("Nope") is None

    def test_query_other_error(self, backend, mocker):
        mocker.patch.object(task_module.subprocess, "run", return_value=self._completed(
            1, stderr="ERROR: Access is denied.\n"))
        with pytest.raises(RuntimeError, match="Access is denied"):
            backend.get_enabled("T")

    def test_change(self, backend, mocker):
        run = mocker.patch.object(task_module.subprocess, "run", return_value=self._completed())
        backend.set_enabled("T", False)
        assert run.call_args[0][0] == ["schtasks", "/Change", "/TN", "\\T", "/Disable"]

    def test_change_missing_task(self, backend, mocker):
        mocker.patch.object(task_module.subprocess, "run", return_value=self._completed(
            1, stderr="ERROR: The specified task name \"\\T\" does not exist in the system.\n"))
        with pytest.raises(LookupError):
            backend.set_enabled("T", True)


class TestRegistryHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("DWord", REG_DWORD),
        ("dword", REG_DWORD),
        ("QWord", REG_QWORD),
        ("String", REG_SZ),
        ("ExpandString", REG_EXPAND_SZ),
        ("MultiString", REG_MULTI_SZ),
        ("Binary", REG_BINARY),
        ("REG_DWORD", REG_DWORD),
        ("Unknown", REG_SZ),
        (None, REG_SZ),
    ])
    def test_type_code(self, name, expected):
        assert type_code(name) == expected

    @pytest.mark.parametrize("path,expected", [
        ("HKLM:\\SOFTWARE\\Policies", ("HKLM", "SOFTWARE\\Policies")),
        ("HKLM\\SOFTWARE\\Policies", ("HKLM", "SOFTWARE\\Policies")),
        ("HKEY_CURRENT_USER\\Control Panel\\Mouse", ("HKCU", "Control Panel\\Mouse")),
        ("hkcu:/Software/Test", ("HKCU", "Software\\Test")),
        ("HKU:\\.DEFAULT\\Control Panel", ("HKU", ".DEFAULT\\Control Panel")),
    ])
    def test_parse_registry_path(self, path, expected):
        assert parse_registry_path(path) == expected

    def test_parse_unknown_hive(self):
        with pytest.raises(ValueError):
            parse_registry_path("HKZZ:\\Software")

    def test_coerce_integers(self):
        assert coerce_value("1", REG_DWORD) == 1
        assert coerce_value("0x10", REG_DWORD) == 16
        assert coerce_value("4294967296", REG_QWORD) == 4294967296
        with pytest.raises(ValueError):
            coerce_value("one", REG_DWORD)

    def test_coerce_other_types(self):
        assert coerce_value("a\0b", REG_MULTI_SZ) == ["a", "b"]
        assert coerce_value("01,ff", REG_BINARY) == b"\x01\xff"
        assert coerce_value("%SystemRoot%", REG_EXPAND_SZ) == "%SystemRoot%"
        assert coerce_value(5, REG_DWORD) == 5


class TestRegistryAdapter:

    def test_identity_normalizes_hive(self):
        adapter = RegistryAdapter(backend=object())
        a = adapter.identity_of(RegistryEntry("HKLM:\\Software\\X", "Name"))
        b = adapter.identity_of(RegistryEntry("HKEY_LOCAL_MACHINE\\SOFTWARE\\x", "name"))
        assert a == b == "hklm\\software\\x\\name"

    def test_missing_value_is_found_absent(self, registry):
        probe = RegistryAdapter(backend=registry).probe(RegistryEntry("HKCU:\\Nope", "Missing"))
        assert probe.status == ProbeStatus.FOUND
        assert probe.state == RegistryValueState(existed=False)

    def test_desired_state(self):
        adapter = RegistryAdapter(backend=object())
        assert adapter.desired_state(RegistryEntry("HKCU:\\X", "N", value="<RemoveEntry>")) == RegistryValueState(existed=False)
        state = adapter.desired_state(RegistryEntry("HKCU:\\X", "N", type="DWord", value="1"))
        assert state.existed and state.type_code == REG_DWORD

    def test_matches_hint(self):
        adapter = RegistryAdapter(backend=object())
        entry = RegistryEntry("HKCU:\\X", "N", type="DWord", value="0", original_value="1")
        assert adapter.matches_hint(entry, RegistryValueState(True, 1, REG_DWORD))
        assert not adapter.matches_hint(entry, RegistryValueState(True, 0, REG_DWORD))
        assert not adapter.matches_hint(entry, RegistryValueState(False))

        text = RegistryEntry("HKCU:\\X", "N", value="Off", original_value="ON")
        assert adapter.matches_hint(text, RegistryValueState(True, "on", REG_SZ))

    def test_describe(self):
        adapter = RegistryAdapter(backend=object())
        assert adapter.describe(RegistryValueState(False)) == "(not set)"
        assert adapter.describe(RegistryValueState(True, 1, REG_DWORD)) == "1 (DWord)"
