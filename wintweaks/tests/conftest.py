"""
Pytest configuration and shared fixtures for wintweaks tests.

Every fixture runs against the in-memory backends in tests/mocks, so the
suite needs neither Windows nor administrator rights.
"""

import json
from pathlib import Path

import pytest
from loguru import logger

from wintweaks.protocol.result import ResourceKind
from wintweaks.protocol.tweak import TweakDocument
from wintweaks.runner.engine import EngineConfig, TweakEngine
from wintweaks.tuning.registry import RegistryAdapter
from wintweaks.tuning.service import ServiceAdapter
from wintweaks.tuning.task import ScheduledTaskAdapter

from .mocks import SAMPLE_DOCUMENT, standard_machine


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru off stderr during tests."""
    logger.remove()
    yield
    logger.remove()


# ==============================================================================
# Machine Fixtures
# ==============================================================================


@pytest.fixture
def machine():
    """(services, tasks, registry) fake backends with a few known resources."""
    return standard_machine()


@pytest.fixture
def services(machine):
    return machine[0]


@pytest.fixture
def tasks(machine):
    return machine[1]


@pytest.fixture
def registry(machine):
    return machine[2]


@pytest.fixture
def adapters(machine):
    services, tasks, registry = machine
    return {
        ResourceKind.SERVICE: ServiceAdapter(backend=services),
        ResourceKind.SCHEDULED_TASK: ScheduledTaskAdapter(backend=tasks),
        ResourceKind.REGISTRY: RegistryAdapter(backend=registry),
    }


# ==============================================================================
# Document Fixtures
# ==============================================================================


@pytest.fixture
def document() -> TweakDocument:
    return TweakDocument.from_dict(SAMPLE_DOCUMENT, source="sample")


@pytest.fixture
def document_file(tmp_path) -> Path:
    """SAMPLE_DOCUMENT written to tmp_path/config/tweaks.json."""
    path = tmp_path / "config" / "tweaks.json"
    path.parent.mkdir()
    path.write_text(json.dumps(SAMPLE_DOCUMENT, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def engine(document, adapters) -> TweakEngine:
    return TweakEngine(document, adapters=adapters, config=EngineConfig())
