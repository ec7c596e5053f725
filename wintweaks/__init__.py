"""
wintweaks - Windows tweak apply/restore engine

Applies tweaks (service startup types, scheduled task states, registry
values) from a JSON tweak document, backing up every resource on first
touch so the session can put it back.

Usage:
    # As a module
    python -m wintweaks apply WPFTweaksTele

    # Programmatically
    from wintweaks import TweakEngine, TweakDocumentLoader

    document = TweakDocumentLoader().load("config/tweaks.json")
    engine = TweakEngine(document)
    report = engine.apply(["WPFTweaksTele"])
    ...
    engine.restore(["WPFTweaksTele"])
"""

__version__ = "0.3.0"

# Main exports
from .runner.engine import TweakEngine, EngineConfig
from .discovery.loader import TweakDocumentLoader, tweaks_by_category

# Protocol exports
from .protocol.tweak import Tweak, TweakDocument, ServiceEntry, ScheduledTaskEntry, RegistryEntry
from .protocol.result import EntryOutcome, Outcome, ResourceKind, RunReport
from .protocol.errors import ErrorKind, TweakEngineError

# Snapshot exports
from .snapshot.store import BackupStore

__all__ = [
    # Version
    "__version__",
    # Engine
    "TweakEngine",
    "EngineConfig",
    "TweakDocumentLoader",
    "tweaks_by_category",
    # Protocol
    "Tweak",
    "TweakDocument",
    "ServiceEntry",
    "ScheduledTaskEntry",
    "RegistryEntry",
    "EntryOutcome",
    "Outcome",
    "ResourceKind",
    "RunReport",
    "ErrorKind",
    "TweakEngineError",
    # Snapshot
    "BackupStore",
]
