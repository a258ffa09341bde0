"""
src/workflow/cache.py
─────────────────────
Per-equipment persistence of fault-resolution sessions.

One JSON blob per unit under `fault_session:<equipment_id>` in the same
key-value store as the grid document. Sessions of units that no longer
exist are pruned after each grid change; otherwise a session lingers until
the next one for that unit overwrites it.
"""
from __future__ import annotations

import structlog
from pydantic import ValidationError

from src.data.store import KeyValueStore
from src.workflow.session import FaultSession

logger = structlog.get_logger(__name__)

KEY_PREFIX = "fault_session:"


def session_key(equipment_id: str) -> str:
    return f"{KEY_PREFIX}{equipment_id}"


class SessionCache:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def load(self, equipment_id: str) -> FaultSession | None:
        raw = self.kv.get(session_key(equipment_id))
        if raw is None:
            return None
        try:
            return FaultSession.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("session_discarded", equipment_id=equipment_id, errors=exc.error_count())
            self.kv.delete(session_key(equipment_id))
            return None

    def save(self, session: FaultSession) -> None:
        self.kv.set(session_key(session.equipment_id), session.model_dump_json())

    def delete(self, equipment_id: str) -> bool:
        return self.kv.delete(session_key(equipment_id))

    def equipment_ids(self) -> list[str]:
        return [key[len(KEY_PREFIX):] for key in self.kv.keys(KEY_PREFIX)]

    def prune(self, keep: set[str]) -> list[str]:
        """Drop sessions whose equipment is not in `keep`; returns the dropped ids."""
        stale = [eq_id for eq_id in self.equipment_ids() if eq_id not in keep]
        for eq_id in stale:
            self.delete(eq_id)
        if stale:
            logger.info("sessions_pruned", equipment_ids=stale)
        return stale
