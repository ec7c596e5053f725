"""
Backup system for wintweaks.

Keeps the pre-change state of every resource the engine touches so that
applied tweaks can be restored within the same run. Key features:

- Write-once records: the first observed state wins
- Case-insensitive identities
- Per-identity locks for callers that run entries concurrently

Scope: in-memory only, one store per resource kind per engine session.
"""

from .store import BackupRecord, BackupStore, IdentityLocks

__all__ = [
    'BackupRecord',
    'BackupStore',
    'IdentityLocks',
]
