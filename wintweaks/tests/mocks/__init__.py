"""
Mock components for testing wintweaks.

In-memory service, scheduled task and registry backends stand in for the
Windows APIs, so the engine can be exercised on any platform.
"""

from .backends import (
    FakeServiceBackend,
    FakeTaskBackend,
    FakeRegistryBackend,
    standard_machine,
)
from .documents import SAMPLE_DOCUMENT

__all__ = [
    "FakeServiceBackend",
    "FakeTaskBackend",
    "FakeRegistryBackend",
    "standard_machine",
    "SAMPLE_DOCUMENT",
]
