"""
src/analytics/status.py
───────────────────────
Substation status derivation.

A substation is as healthy as its least healthy equipment:
  any error   → error
  any warning → warning
  otherwise   → normal (including no equipment at all)
"""
from __future__ import annotations

from collections.abc import Iterable

from config.alerts import STATUS_ORDER, Status
from src.data.models import Equipment


def worst_status(statuses: Iterable[Status | str]) -> Status:
    """Max-severity of a collection of statuses; empty → normal."""
    worst = Status.NORMAL
    for status in statuses:
        status = Status(status)
        if STATUS_ORDER[status] > STATUS_ORDER[worst]:
            worst = status
            if worst is Status.ERROR:
                break
    return worst


def derive_substation_status(equipment: Iterable[Equipment]) -> Status:
    return worst_status(eq.status for eq in equipment)
