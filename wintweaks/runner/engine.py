"""
TweakEngine - Session over one tweak document.

Owns one BackupStore per resource kind for the lifetime of the session, so
a restore can only bring back states captured by an apply in the same
session. Within a tweak, entries run services, then scheduled tasks, then
registry values.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..logging import get_logger
from ..protocol.errors import ErrorKind
from ..protocol.result import EntryOutcome, Outcome, ResourceKind, RunReport
from ..protocol.tweak import Tweak, TweakDocument
from ..snapshot.store import IdentityLocks
from ..tuning.base import ResourceAdapter
from ..tuning.executor import ExecutorConfig, TweakExecutor
from ..tuning.registry import RegistryAdapter
from ..tuning.service import ServiceAdapter
from ..tuning.task import ScheduledTaskAdapter

log = get_logger("engine")

# Entry processing order inside a tweak
KIND_ORDER = (ResourceKind.SERVICE, ResourceKind.SCHEDULED_TASK, ResourceKind.REGISTRY)


@dataclass
class EngineConfig:
    """Configuration for the tweak engine."""
    keep_existing_customization: bool = True
    max_workers: int = 1

    @classmethod
    def from_config(cls, config) -> "EngineConfig":
        """Build from the [engine] section of a loaded Config."""
        return cls(
            keep_existing_customization=config.engine.keep_existing_customization,
            max_workers=config.engine.max_workers,
        )


def default_adapters() -> Dict[ResourceKind, ResourceAdapter]:
    """Adapters backed by the real Windows APIs (connected on first use)."""
    return {
        ResourceKind.SERVICE: ServiceAdapter(),
        ResourceKind.SCHEDULED_TASK: ScheduledTaskAdapter(),
        ResourceKind.REGISTRY: RegistryAdapter(),
    }


def _entries_of(tweak: Tweak, kind: ResourceKind) -> list:
    if kind == ResourceKind.SERVICE:
        return tweak.service
    if kind == ResourceKind.SCHEDULED_TASK:
        return tweak.scheduled_task
    return tweak.registry


class TweakEngine:
    """
    Applies and restores tweaks from a document.

    Usage:
        engine = TweakEngine(document)
        report = engine.apply(["WPFTweaksTele"])
        ...
        report = engine.restore(["WPFTweaksTele"])
    """

    def __init__(
        self,
        document: TweakDocument,
        adapters: Optional[Dict[ResourceKind, ResourceAdapter]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.document = document
        self.config = config or EngineConfig()
        self.adapters = adapters or default_adapters()

        # Shared so entries of different tweaks touching one identity serialize
        self._locks = IdentityLocks()
        executor_config = ExecutorConfig(
            keep_existing_customization=self.config.keep_existing_customization,
        )
        self._executors: Dict[ResourceKind, TweakExecutor] = {
            kind: TweakExecutor(adapter, config=executor_config, locks=self._locks)
            for kind, adapter in self.adapters.items()
        }

        # Callbacks
        self._on_outcome: Optional[Callable[[EntryOutcome], None]] = None

    def set_outcome_callback(self, callback: Optional[Callable[[EntryOutcome], None]]):
        """Called with every outcome as soon as it is known (sequential runs)."""
        self._on_outcome = callback

    @property
    def keep_existing_customization(self) -> bool:
        return self.config.keep_existing_customization

    @keep_existing_customization.setter
    def keep_existing_customization(self, value: bool):
        self.config.keep_existing_customization = value
        for executor in self._executors.values():
            executor.config.keep_existing_customization = value

    # =========================================================================
    # Runs
    # =========================================================================

    def apply(self, keys: Iterable[str]) -> RunReport:
        """Apply the named tweaks, in the given order."""
        return self._run("apply", list(keys))

    def restore(self, keys: Iterable[str]) -> RunReport:
        """Restore the named tweaks from this session's backups."""
        return self._run("restore", list(keys))

    def apply_all(self) -> RunReport:
        """Fresh apply of every tweak: backups from earlier runs are dropped first."""
        self.reset()
        return self.apply(self.document.keys())

    def restore_all(self) -> RunReport:
        return self.restore(self.document.keys())

    def _run(self, operation: str, keys: List[str]) -> RunReport:
        report = RunReport(operation=operation)
        log.info(f"Starting {operation} of {len(keys)} tweak(s)")

        # An executor of None marks an unknown tweak key
        jobs: List[Tuple[Optional[TweakExecutor], object, str]] = []

        for key in keys:
            tweak = self.document.get(key)
            if tweak is None:
                jobs.append((None, None, key))
                continue

            report.notes.extend(self._script_notes(tweak, operation))
            for kind in KIND_ORDER:
                executor = self._executors.get(kind)
                entries = _entries_of(tweak, kind)
                if entries and executor is None:
                    log.warning(f"No adapter for {kind.value}, {len(entries)} entries ignored")
                    continue
                for entry in entries:
                    jobs.append((executor, entry, key))

        report.extend(self._execute(operation, jobs))

        report.backup_counts = self.backup_counts()
        counts = ", ".join(
            f"{o.value}={report.count(o)}" for o in Outcome if report.count(o)
        )
        log.info(f"Finished {operation}: {counts or 'nothing to do'}")
        return report

    def _execute(self, operation: str, jobs: List[Tuple[Optional[TweakExecutor], object, str]]) -> List[EntryOutcome]:
        def run(job):
            executor, entry, key = job
            if executor is None:
                return self._unknown_tweak(key)
            if operation == "restore":
                return executor.restore_entry(entry, tweak_key=key)
            return executor.apply_entry(entry, tweak_key=key)

        if self.config.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                outcomes = list(pool.map(run, jobs))
            if self._on_outcome:
                for outcome in outcomes:
                    self._on_outcome(outcome)
            return outcomes

        outcomes = []
        for job in jobs:
            outcome = run(job)
            if self._on_outcome:
                self._on_outcome(outcome)
            outcomes.append(outcome)
        return outcomes

    def _unknown_tweak(self, key: str) -> EntryOutcome:
        message = f"WARNING: Unknown tweak '{key}'"
        log.warning(message)
        return EntryOutcome(
            identity=key,
            kind=ResourceKind.TWEAK,
            outcome=Outcome.FAILED,
            message=message,
            reason=ErrorKind.UNKNOWN_TWEAK,
            tweak_key=key,
        )

    def _script_notes(self, tweak: Tweak, operation: str) -> List[str]:
        """Script and appx entries are reported, never run."""
        notes = []
        scripts = tweak.undo_script if operation == "restore" else tweak.invoke_script
        if scripts:
            label = "undo" if operation == "restore" else "invoke"
            notes.append(f"{tweak.key}: {len(scripts)} {label} script(s) not executed")
        if tweak.appx and operation == "apply":
            notes.append(f"{tweak.key}: {len(tweak.appx)} appx package(s) not removed")
        return notes

    # =========================================================================
    # Backups
    # =========================================================================

    def reset(self):
        """Drop every backup; the next apply captures fresh states."""
        for executor in self._executors.values():
            executor.clear_backups()
        log.info("Backups cleared")

    def backup_count(self, kind: ResourceKind) -> int:
        executor = self._executors.get(kind)
        return executor.backup_count if executor else 0

    def backup_counts(self) -> Dict[str, int]:
        return {kind.value: executor.backup_count for kind, executor in self._executors.items()}
