"""
TweakExecutor - Safe application and restore of tweak entries.

Apply, per entry:
1. PROBE - Read current state (absent entries are skipped)
2. BACKUP - Record the state on first touch only
3. POLICY - Keep resources the user changed outside the engine
4. MUTATE - Write the desired state

Restore, per entry:
1. PROBE - Absent entries are skipped
2. LOOKUP - Find the backed-up state
3. MUTATE - Write it back

Every entry ends in an EntryOutcome; errors never escape except when the
platform itself is unavailable.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from ..logging import get_logger
from ..protocol.errors import ErrorKind, MutationError, PlatformUnavailableError
from ..protocol.result import EntryOutcome, Outcome
from ..snapshot.store import BackupStore, IdentityLocks
from .base import ProbeStatus, ResourceAdapter

log = get_logger("executor")


@dataclass
class ExecutorConfig:
    """Configuration for the tweak executor."""
    keep_existing_customization: bool = True


class TweakExecutor:
    """
    Applies and restores entries of one resource kind.

    The state machine lives here once; the adapter supplies the kind-specific
    probe and mutate.
    """

    def __init__(
        self,
        adapter: ResourceAdapter,
        store: Optional[BackupStore] = None,
        config: Optional[ExecutorConfig] = None,
        locks: Optional[IdentityLocks] = None,
    ):
        self.adapter = adapter
        self.store = store or BackupStore(kind=adapter.kind.value)
        self.config = config or ExecutorConfig()
        self.locks = locks or IdentityLocks()

    @property
    def backup_count(self) -> int:
        return self.store.count

    def clear_backups(self):
        self.store.clear()

    # =========================================================================
    # Apply
    # =========================================================================

    def apply_entry(self, entry, tweak_key: str = "") -> EntryOutcome:
        """
        Apply one entry.

        Returns:
            EntryOutcome with Applied, Skipped or Failed
        """
        identity = self.adapter.identity_of(entry)
        with self.locks.hold(identity):
            try:
                return self._apply_locked(entry, identity, tweak_key)
            except PlatformUnavailableError:
                raise
            except MutationError as e:
                return self._failed(identity, tweak_key, ErrorKind.MUTATION_FAILED, f"ERROR: {e}")
            except Exception as e:
                name = self.adapter.display_name(entry)
                return self._failed(
                    identity, tweak_key, ErrorKind.MUTATION_FAILED,
                    f"ERROR: Failed to apply {self.adapter.label.lower()} '{name}': {e}",
                )

    def _apply_locked(self, entry, identity: str, tweak_key: str) -> EntryOutcome:
        adapter = self.adapter
        name = adapter.display_name(entry)

        probe = adapter.probe(entry)
        if probe.status == ProbeStatus.NOT_FOUND:
            return self._outcome(
                identity, tweak_key, Outcome.SKIPPED,
                f"{adapter.label} '{name}' not found, skipping",
                ErrorKind.NOT_FOUND,
            )
        if probe.status == ProbeStatus.UNREADABLE:
            return self._failed(
                identity, tweak_key, ErrorKind.UNREADABLE,
                f"WARNING: Unable to determine current state of {adapter.label.lower()} "
                f"'{name}': {probe.error}",
            )

        current = probe.state
        if self.store.set_if_absent(identity, current):
            log.debug(f"Backed up '{name}' = {adapter.describe(current)}")

        hint = adapter.original_hint(entry)
        if (
            self.config.keep_existing_customization
            and hint
            and not adapter.matches_hint(entry, current)
        ):
            return self._outcome(
                identity, tweak_key, Outcome.SKIPPED,
                f"{adapter.label} '{name}' was modified from {hint} to "
                f"{adapter.describe(current)}, keeping user changes",
                ErrorKind.CUSTOMIZED,
            )

        desired = adapter.desired_state(entry)
        adapter.mutate(entry, desired)
        return self._outcome(
            identity, tweak_key, Outcome.APPLIED,
            f"Set {adapter.label.lower()} '{name}' to {adapter.describe(desired)}",
        )

    # =========================================================================
    # Restore
    # =========================================================================

    def restore_entry(self, entry, tweak_key: str = "") -> EntryOutcome:
        """
        Restore one entry to its backed-up state.

        The backup is kept, so restoring again gives the same result.
        """
        identity = self.adapter.identity_of(entry)
        with self.locks.hold(identity):
            try:
                return self._restore_locked(entry, identity, tweak_key)
            except PlatformUnavailableError:
                raise
            except MutationError as e:
                return self._failed(identity, tweak_key, ErrorKind.MUTATION_FAILED, f"ERROR: {e}")
            except Exception as e:
                name = self.adapter.display_name(entry)
                return self._failed(
                    identity, tweak_key, ErrorKind.MUTATION_FAILED,
                    f"ERROR: Failed to restore {self.adapter.label.lower()} '{name}': {e}",
                )

    def _restore_locked(self, entry, identity: str, tweak_key: str) -> EntryOutcome:
        adapter = self.adapter
        name = adapter.display_name(entry)

        probe = adapter.probe(entry)
        if probe.status == ProbeStatus.NOT_FOUND:
            return self._outcome(
                identity, tweak_key, Outcome.SKIPPED,
                f"{adapter.label} '{name}' not found, skipping restore",
                ErrorKind.NOT_FOUND,
            )

        record = self.store.get_record(identity)
        if record is None:
            return self._failed(
                identity, tweak_key, ErrorKind.NO_BACKUP_AVAILABLE,
                f"WARNING: No backup found for {adapter.label.lower()} '{name}'",
            )

        adapter.mutate(entry, record.state)
        return self._outcome(
            identity, tweak_key, Outcome.RESTORED,
            f"Restored {adapter.label.lower()} '{name}' to {adapter.describe(record.state)}",
        )

    # =========================================================================
    # Batches
    # =========================================================================

    def apply_multiple(self, entries: List[Any], tweak_key: str = "") -> List[EntryOutcome]:
        """Apply entries in order; a failure never stops the batch."""
        return [self.apply_entry(entry, tweak_key) for entry in entries]

    # =========================================================================
    # Outcome helpers
    # =========================================================================

    def _outcome(
        self,
        identity: str,
        tweak_key: str,
        outcome: Outcome,
        message: str,
        reason: Optional[ErrorKind] = None,
    ) -> EntryOutcome:
        log.info(message)
        return EntryOutcome(
            identity=identity,
            kind=self.adapter.kind,
            outcome=outcome,
            message=message,
            reason=reason,
            tweak_key=tweak_key,
        )

    def _failed(self, identity: str, tweak_key: str, reason: ErrorKind, message: str) -> EntryOutcome:
        if reason == ErrorKind.MUTATION_FAILED:
            log.error(message)
        else:
            log.warning(message)
        return EntryOutcome(
            identity=identity,
            kind=self.adapter.kind,
            outcome=Outcome.FAILED,
            message=message,
            reason=reason,
            tweak_key=tweak_key,
        )
