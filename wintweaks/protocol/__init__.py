"""
Protocol definitions for wintweaks.

Plain dataclasses shared between the engine and its collaborators:
- Tweak/TweakDocument and the per-kind entries: Document → Engine
- EntryOutcome/RunReport: Engine → UI
- ErrorKind and engine exceptions
"""

from .tweak import (
    REMOVE_ENTRY,
    Tweak,
    TweakDocument,
    ServiceEntry,
    ScheduledTaskEntry,
    RegistryEntry,
)
from .result import (
    ResourceKind,
    Outcome,
    EntryOutcome,
    KindCounters,
    RunReport,
)
from .errors import (
    ErrorKind,
    TweakEngineError,
    MutationError,
    PlatformUnavailableError,
    ConfigurationError,
)

__all__ = [
    # Document
    "REMOVE_ENTRY",
    "Tweak",
    "TweakDocument",
    "ServiceEntry",
    "ScheduledTaskEntry",
    "RegistryEntry",
    # Result
    "ResourceKind",
    "Outcome",
    "EntryOutcome",
    "KindCounters",
    "RunReport",
    # Errors
    "ErrorKind",
    "TweakEngineError",
    "MutationError",
    "PlatformUnavailableError",
    "ConfigurationError",
]
