"""
Tuning module - Applies and restores tweak entries.

Components:
- TweakExecutor: generic probe/backup/policy/mutate state machine
- ServiceAdapter: Windows service startup type
- ScheduledTaskAdapter: Task Scheduler enabled state
- RegistryAdapter: registry values
"""

from .base import ProbeResult, ProbeStatus, ResourceAdapter
from .executor import TweakExecutor, ExecutorConfig
from .service import ServiceAdapter
from .task import ScheduledTaskAdapter
from .registry import RegistryAdapter, RegistryValueState

__all__ = [
    "ProbeResult",
    "ProbeStatus",
    "ResourceAdapter",
    "TweakExecutor",
    "ExecutorConfig",
    "ServiceAdapter",
    "ScheduledTaskAdapter",
    "RegistryAdapter",
    "RegistryValueState",
]
