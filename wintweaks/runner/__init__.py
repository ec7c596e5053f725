"""
Runner module - Drives apply and restore runs over a tweak document.

The engine owns the session: one backup store per resource kind and the
per-identity locks shared by every executor.
"""

from .engine import TweakEngine, EngineConfig, default_adapters

__all__ = [
    "TweakEngine",
    "EngineConfig",
    "default_adapters",
]
