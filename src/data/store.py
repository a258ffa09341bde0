"""
src/data/store.py
─────────────────
SQLite-backed key-value slot and the document store layered on top of it.

Provides:
  - KeyValueStore     : get / set / delete / keys over a single `kv` table
  - DocumentStore     : load() / save() of the whole GridDocument
  - serialize_document: deterministic JSON text for a document

The document is always read and written whole: no partial writes, no
transactions, last writer wins. An absent or unreadable document is replaced
by the seed document; the recovery is logged and flagged so the UI can warn
that previous data was discarded.

Thread safety: uses check_same_thread=False + a per-store lock.
"""
from __future__ import annotations

import json
import sqlite3
import threading

import structlog
from pydantic import ValidationError

from src.data.models import GridDocument
from src.data.seed import build_seed_document

logger = structlog.get_logger(__name__)


# ── Schema ────────────────────────────────────────────────────────────────────

_CREATE_KV = """
CREATE TABLE IF NOT EXISTS kv (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""


class KeyValueStore:
    """Durable string slots addressed by key."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._lock, self._conn:
            self._conn.executescript(_CREATE_KV)

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def delete(self, key: str) -> bool:
        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        return cur.rowcount > 0

    def keys(self, prefix: str = "") -> list[str]:
        # Filter in Python so "_" and "%" in prefixes are not LIKE wildcards
        with self._lock:
            rows = self._conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [r[0] for r in rows if r[0].startswith(prefix)]

    def close(self) -> None:
        with self._lock:
            self._conn.close()


# ── Document store ────────────────────────────────────────────────────────────

def serialize_document(doc: GridDocument) -> str:
    """Compact, order-preserving JSON; identical documents give identical text."""
    return json.dumps(doc.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))


class DocumentStore:
    """Whole-document persistence for the dashboard state."""

    def __init__(self, kv: KeyValueStore, key: str = "power_grid_db") -> None:
        self.kv = kv
        self.key = key
        self._recovered = False

    def load(self) -> GridDocument:
        raw = self.kv.get(self.key)
        if raw is None:
            logger.info("document_seeded", key=self.key, reason="absent")
            return self._reseed()

        try:
            return GridDocument.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "document_corrupted_reseeding",
                key=self.key,
                errors=exc.error_count(),
                size=len(raw),
            )
            self._recovered = True
            return self._reseed()

    def save(self, doc: GridDocument) -> None:
        self.kv.set(self.key, serialize_document(doc))

    def consume_recovery_notice(self) -> bool:
        """True once after a corrupted document was replaced by the seed."""
        recovered, self._recovered = self._recovered, False
        return recovered

    def _reseed(self) -> GridDocument:
        doc = build_seed_document()
        self.save(doc)
        return doc
