"""
src/data/simulator.py
─────────────────────
Synthetic alert generator for demos.

Each call to simulate_alert():
  - picks a random unit that has no active alert
  - picks a fault message from config.alerts.SIMULATED_FAULTS
  - raises an error-level alert with probability ERROR_PROBABILITY,
    a warning otherwise
  - pushes abnormal telemetry matching the level onto the unit

Reproducible when the repository is built with a seeded generator
(SIMULATION_SEED).
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import structlog

from config.alerts import SIMULATED_FAULTS, AlertLevel
from src.data.models import Alert
from src.data.repository import GridRepository
from src.data.telemetry import fault_telemetry

logger = structlog.get_logger(__name__)

ERROR_PROBABILITY = 0.7


@dataclass(frozen=True)
class SimulationResult:
    alert: Alert | None
    reason: str = ""


def candidate_equipment_ids(repository: GridRepository) -> list[str]:
    """Units attached to a substation and without an active alert."""
    alerted = {a.equipment_id for a in repository.list_active_alerts()}
    return [
        eq.id for eq in repository.list_equipment()
        if eq.substation_id and eq.id not in alerted
    ]


def simulate_alert(repository: GridRepository, rng: np.random.Generator | None = None) -> SimulationResult:
    rng = rng or repository.rng

    if not repository.list_equipment():
        return SimulationResult(alert=None, reason="No equipment available")

    candidates = candidate_equipment_ids(repository)
    if not candidates:
        return SimulationResult(alert=None, reason="Every unit already has an active alert")

    equipment_id = candidates[int(rng.integers(0, len(candidates)))]
    message = SIMULATED_FAULTS[int(rng.integers(0, len(SIMULATED_FAULTS)))]
    level = AlertLevel.ERROR if rng.random() < ERROR_PROBABILITY else AlertLevel.WARNING

    alert = repository.add_alert(equipment_id, message=message, level=level)
    repository.update_equipment(equipment_id, **fault_telemetry(level, rng))

    logger.info("alert_simulated", equipment_id=equipment_id, level=level.value, message=message)
    return SimulationResult(alert=alert)
