"""
ResourceAdapter - the per-kind capability the executor is generic over.

Each resource kind (service, scheduled task, registry value) implements:
- identity_of: stable, case-insensitive identity of an entry's target
- probe: read current state (Found / NotFound / Unreadable), never raises
- mutate: write a state, raising MutationError on failure
- desired_state / matches_hint: what to write and the customization check
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..protocol.result import ResourceKind


class ProbeStatus(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    UNREADABLE = "UNREADABLE"


@dataclass(frozen=True)
class ProbeResult:
    """Ternary result of reading a resource."""
    status: ProbeStatus
    state: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def found(cls, state: Any) -> "ProbeResult":
        return cls(status=ProbeStatus.FOUND, state=state)

    @classmethod
    def not_found(cls) -> "ProbeResult":
        return cls(status=ProbeStatus.NOT_FOUND)

    @classmethod
    def unreadable(cls, error: BaseException) -> "ProbeResult":
        return cls(status=ProbeStatus.UNREADABLE, error=error)

    @property
    def is_found(self) -> bool:
        return self.status == ProbeStatus.FOUND


class ResourceAdapter(ABC):
    """
    Capability interface implemented once per resource kind.
    """

    kind: ResourceKind
    label: str = "resource"  # Used in user-facing messages

    @abstractmethod
    def identity_of(self, entry) -> str:
        """Identity used for backups and locking."""

    @abstractmethod
    def probe(self, entry) -> ProbeResult:
        """Read the current state of the entry's target."""

    @abstractmethod
    def mutate(self, entry, state: Any) -> None:
        """Write state to the entry's target."""

    @abstractmethod
    def desired_state(self, entry) -> Any:
        """State the entry asks for, in this adapter's canonical form."""

    @abstractmethod
    def original_hint(self, entry) -> str:
        """Config-declared original state ('' if not declared)."""

    @abstractmethod
    def matches_hint(self, entry, state: Any) -> bool:
        """True if state equals the entry's declared original state."""

    def display_name(self, entry) -> str:
        """Name shown in outcome messages."""
        return entry.name

    def describe(self, state: Any) -> str:
        """Human readable form of a state."""
        return str(state)
