"""
ScheduledTaskAdapter - enabled state of a Task Scheduler task.

Canonical vocabulary: "Enabled", "Disabled". The probed state is a bool.
Tasks are read and changed with schtasks.exe.
"""

import csv
import os
import shutil
import subprocess
from typing import List, Optional

from ..logging import get_logger
from ..protocol.errors import MutationError, PlatformUnavailableError
from ..protocol.result import ResourceKind
from ..protocol.tweak import ScheduledTaskEntry
from .base import ProbeResult, ResourceAdapter

log = get_logger("scheduledTask")

ENABLED = "Enabled"
DISABLED = "Disabled"

# schtasks status column values meaning "disabled" (English and German installs)
_DISABLED_STATUSES = {"disabled", "deaktiviert"}

# stderr fragments schtasks prints for a missing task
_NOT_FOUND_MARKERS = ("cannot find", "does not exist", "nicht finden")


def to_enabled(state: Optional[str]) -> bool:
    """Canonical state -> bool. Anything but "Enabled" leaves the task disabled."""
    return (state or "").strip().lower() == "enabled"


def to_state_text(enabled: bool) -> str:
    return ENABLED if enabled else DISABLED


def normalize_task_path(path: str) -> str:
    """
    Full task name as schtasks expects it.

    "Microsoft/Windows/Feedback/Siuf/DmClient" ->
    "\\Microsoft\\Windows\\Feedback\\Siuf\\DmClient"
    """
    return "\\" + path.strip().replace("/", "\\").strip("\\")


def parse_query_status(output: str) -> bool:
    """
    Enabled flag from `schtasks /Query /FO CSV /NH` output.

    The last CSV column is the status: "Disabled" means disabled, anything
    else ("Ready", "Running", "Queued") means enabled.

    Raises:
        ValueError: output has no rows
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise ValueError("schtasks returned no rows")
    fields = next(csv.reader([lines[0]], skipinitialspace=True))
    return fields[-1].strip().lower() not in _DISABLED_STATUSES


class SchtasksBackend:
    """
    Task Scheduler access through schtasks.exe.
    """

    def __init__(self):
        if os.name != "nt" or shutil.which("schtasks") is None:
            raise PlatformUnavailableError("Task Scheduler access requires schtasks.exe on Windows")

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        log.debug(f"Executing: schtasks {' '.join(args)}")
        return subprocess.run(
            ["schtasks", *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="ignore",
            timeout=30,
            check=False,
        )

    @staticmethod
    def _is_not_found(result: subprocess.CompletedProcess) -> bool:
        message = (result.stderr or "").lower()
        return any(marker in message for marker in _NOT_FOUND_MARKERS)

    def get_enabled(self, path: str) -> Optional[bool]:
        """Enabled flag of the task, or None if it does not exist."""
        result = self._run(["/Query", "/TN", normalize_task_path(path), "/FO", "CSV", "/NH"])
        if result.returncode != 0:
            if self._is_not_found(result):
                return None
            raise RuntimeError(result.stderr.strip() or f"schtasks exited with {result.returncode}")
        return parse_query_status(result.stdout)

    def set_enabled(self, path: str, enabled: bool):
        flag = "/Enable" if enabled else "/Disable"
        result = self._run(["/Change", "/TN", normalize_task_path(path), flag])
        if result.returncode != 0:
            if self._is_not_found(result):
                raise LookupError(f"Scheduled task '{path}' not found")
            raise RuntimeError(result.stderr.strip() or f"schtasks exited with {result.returncode}")


class ScheduledTaskAdapter(ResourceAdapter):
    """
    Enabled/disabled state of a scheduled task.

    Supports any backend with get_enabled/set_enabled.
    """

    kind = ResourceKind.SCHEDULED_TASK
    label = "Scheduled task"

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        """Get or create the Task Scheduler backend."""
        if self._backend is None:
            self._backend = SchtasksBackend()
        return self._backend

    def identity_of(self, entry: ScheduledTaskEntry) -> str:
        return normalize_task_path(entry.name).lstrip("\\").casefold()

    def probe(self, entry: ScheduledTaskEntry) -> ProbeResult:
        try:
            enabled = self.backend.get_enabled(entry.name)
        except PlatformUnavailableError:
            raise
        except Exception as e:
            log.debug(f"Could not read task '{entry.name}': {e}")
            return ProbeResult.unreadable(e)

        if enabled is None:
            return ProbeResult.not_found()
        return ProbeResult.found(bool(enabled))

    def mutate(self, entry: ScheduledTaskEntry, state: bool):
        try:
            self.backend.set_enabled(entry.name, bool(state))
        except PlatformUnavailableError:
            raise
        except Exception as e:
            raise MutationError(entry.name, e) from e

        log.debug(f"Task '{entry.name}' enabled={bool(state)}")

    def desired_state(self, entry: ScheduledTaskEntry) -> bool:
        return to_enabled(entry.state)

    def original_hint(self, entry: ScheduledTaskEntry) -> str:
        return entry.original_state.strip()

    def matches_hint(self, entry: ScheduledTaskEntry, state: bool) -> bool:
        return to_state_text(bool(state)).casefold() == self.original_hint(entry).casefold()

    def describe(self, state: bool) -> str:
        return to_state_text(bool(state))
