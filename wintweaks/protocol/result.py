"""
Result Protocol - Engine → UI.

EntryOutcome: terminal state of one entry (Applied/Skipped/Failed/Restored)
RunReport: ordered outcomes of one apply/restore run plus per-kind counters
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
import json

from .errors import ErrorKind


class ResourceKind(str, Enum):
    """Kinds of mutable OS resources handled by the engine."""
    SERVICE = "service"
    SCHEDULED_TASK = "scheduledTask"
    REGISTRY = "registry"
    TWEAK = "tweak"  # Document-level problems, not a real resource


class Outcome(str, Enum):
    """Terminal state of one entry."""
    APPLIED = "Applied"
    SKIPPED = "Skipped"
    FAILED = "Failed"
    RESTORED = "Restored"


@dataclass
class EntryOutcome:
    """Reported result for a single entry."""
    identity: str
    kind: ResourceKind
    outcome: Outcome
    message: str = ""
    reason: Optional[ErrorKind] = None
    tweak_key: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome != Outcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "identity": self.identity,
            "kind": self.kind.value,
            "outcome": self.outcome.value,
            "message": self.message,
        }
        if self.reason:
            result["reason"] = self.reason.value
        if self.tweak_key:
            result["tweak"] = self.tweak_key
        return result


@dataclass
class KindCounters:
    """Outcome counts for one resource kind."""
    applied: int = 0
    skipped: int = 0
    failed: int = 0
    restored: int = 0

    def add(self, outcome: Outcome):
        if outcome == Outcome.APPLIED:
            self.applied += 1
        elif outcome == Outcome.SKIPPED:
            self.skipped += 1
        elif outcome == Outcome.FAILED:
            self.failed += 1
        elif outcome == Outcome.RESTORED:
            self.restored += 1

    @property
    def total(self) -> int:
        return self.applied + self.skipped + self.failed + self.restored


@dataclass
class RunReport:
    """
    Outcomes of one apply or restore run, in processing order.
    """
    operation: str = "apply"  # apply, restore
    outcomes: List[EntryOutcome] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    backup_counts: Dict[str, int] = field(default_factory=dict)

    def add(self, outcome: EntryOutcome):
        self.outcomes.append(outcome)

    def extend(self, outcomes: List[EntryOutcome]):
        self.outcomes.extend(outcomes)

    @property
    def counters(self) -> Dict[ResourceKind, KindCounters]:
        """Counts by outcome per resource kind, in first-seen order."""
        counters: Dict[ResourceKind, KindCounters] = {}
        for item in self.outcomes:
            counters.setdefault(item.kind, KindCounters()).add(item.outcome)
        return counters

    def count(self, outcome: Outcome, kind: Optional[ResourceKind] = None) -> int:
        return sum(
            1 for item in self.outcomes
            if item.outcome == outcome and (kind is None or item.kind == kind)
        )

    @property
    def has_failures(self) -> bool:
        return any(item.outcome == Outcome.FAILED for item in self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "notes": list(self.notes),
            "summary": {
                kind.value: {
                    "applied": c.applied,
                    "skipped": c.skipped,
                    "failed": c.failed,
                    "restored": c.restored,
                }
                for kind, c in self.counters.items()
            },
            "backup_counts": dict(self.backup_counts),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
