"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the Grid Monitor test suite.
"""
import os
from datetime import datetime, timezone

import numpy as np
import pytest

# Use in-memory SQLite for tests
os.environ.setdefault("DATABASE_URL", ":memory:")
os.environ.setdefault("SIMULATION_SEED", "42")


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def kv():
    from src.data.store import KeyValueStore
    store = KeyValueStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def store(kv):
    from src.data.store import DocumentStore
    return DocumentStore(kv)


@pytest.fixture
def bus():
    from src.data.events import ChangeBus
    return ChangeBus()


@pytest.fixture
def repository(store, bus, rng, now):
    """Repository over a freshly seeded document."""
    from src.data.repository import GridRepository
    store.load()
    return GridRepository(store, bus, rng=rng, clock=lambda: now)


@pytest.fixture
def cache(kv):
    from src.workflow.cache import SessionCache
    return SessionCache(kv)


@pytest.fixture
def timing():
    """Default timeline without random command failures."""
    from src.workflow.engine import WorkflowTiming
    return WorkflowTiming(failure_rate=0.0)


@pytest.fixture
def engine(repository, cache, rng, now, timing):
    from src.workflow.engine import FaultResolutionEngine
    return FaultResolutionEngine(repository, cache=cache, clock=lambda: now, rng=rng, timing=timing)


@pytest.fixture
def breaker_alert(repository):
    """The seeded pending error alert on circuit breaker EQ-2023-002."""
    return next(a for a in repository.list_alerts() if a.equipment_id == "EQ-2023-002")
