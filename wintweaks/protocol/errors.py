"""
Error Protocols - failure taxonomy for the tweak engine.

ErrorKind: why an entry did not reach Applied/Restored
TweakEngineError: base of every exception raised by the engine
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Reason attached to a Skipped or Failed entry outcome."""
    NOT_FOUND = "NOT_FOUND"                       # Target absent, expected
    CUSTOMIZED = "CUSTOMIZED"                     # Changed outside the engine, kept
    UNREADABLE = "UNREADABLE"                     # Current state could not be read
    MUTATION_FAILED = "MUTATION_FAILED"           # Underlying OS write failed
    NO_BACKUP_AVAILABLE = "NO_BACKUP_AVAILABLE"   # Restore without a prior apply
    UNKNOWN_TWEAK = "UNKNOWN_TWEAK"               # Key not in the document


class TweakEngineError(Exception):
    """Base class for engine errors."""
    pass


class MutationError(TweakEngineError):
    """A state write failed for one resource."""

    def __init__(self, identity: str, cause: Optional[BaseException] = None, message: str = ""):
        self.identity = identity
        self.cause = cause
        detail = message or (str(cause) if cause else "unknown error")
        super().__init__(f"Failed to change '{identity}': {detail}")


class PlatformUnavailableError(TweakEngineError):
    """The OS subsystem behind a resource kind is not available here."""
    pass


class ConfigurationError(TweakEngineError):
    """The tweak document or configuration could not be loaded."""
    pass
