"""
src/runtime.py
──────────────
Wires the data core together once per process and hands it to every
callback module.

  KeyValueStore ─▶ DocumentStore ─▶ GridRepository ─▶ ChangeBus ─▶ RevisionCounter
        │                                                  └──▶ session pruning
        └────────▶ SessionCache ─▶ FaultResolutionEngine ─▶ workflow event log
  ExpertChatClient
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field

import numpy as np
import structlog

from config.settings import Settings
from src.data.events import ChangeBus, RevisionCounter
from src.data.repository import GridRepository
from src.data.store import DocumentStore, KeyValueStore
from src.services.expert_chat import ExpertChatClient
from src.workflow.cache import SessionCache
from src.workflow.engine import FaultResolutionEngine, WorkflowEvent, WorkflowTiming

logger = structlog.get_logger(__name__)


def log_workflow_event(event: WorkflowEvent) -> None:
    logger.info(
        "workflow_event",
        equipment_id=event.equipment_id,
        kind=event.kind,
        target=event.target,
        status=event.status,
        detail=event.detail or None,
    )


@dataclass
class Runtime:
    kv: KeyValueStore
    store: DocumentStore
    bus: ChangeBus
    revision: RevisionCounter
    repository: GridRepository
    sessions: SessionCache
    engine: FaultResolutionEngine
    chat: ExpertChatClient
    # Serialises fault-session ticks and actions coming from concurrent requests
    workflow_lock: threading.Lock = field(default_factory=threading.Lock)


def build_runtime(settings: Settings, chat: ExpertChatClient | None = None) -> Runtime:
    rng = np.random.default_rng(settings.SIMULATION_SEED)

    kv = KeyValueStore(settings.DATABASE_URL)
    store = DocumentStore(kv, key=settings.DOCUMENT_KEY)
    bus = ChangeBus()
    revision = RevisionCounter()
    bus.subscribe(revision)

    repository = GridRepository(
        store,
        bus,
        rng=rng,
        maintenance_interval_months=settings.MAINTENANCE_INTERVAL_MONTHS,
    )
    sessions = SessionCache(kv)
    engine = FaultResolutionEngine(
        repository,
        cache=sessions,
        rng=rng,
        timing=WorkflowTiming.from_settings(settings),
    )
    engine.subscribe(log_workflow_event)

    def prune_sessions() -> None:
        sessions.prune({eq.id for eq in repository.list_equipment()})

    bus.subscribe(prune_sessions)

    # First load seeds an empty database
    store.load()
    logger.info("runtime_ready", database=settings.DATABASE_URL, key=settings.DOCUMENT_KEY)

    return Runtime(
        kv=kv,
        store=store,
        bus=bus,
        revision=revision,
        repository=repository,
        sessions=sessions,
        engine=engine,
        chat=chat or ExpertChatClient.from_settings(settings),
    )
