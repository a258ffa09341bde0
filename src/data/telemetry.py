"""
src/data/telemetry.py
─────────────────────
Synthetic telemetry draws.

  normal_telemetry   — restored readings after a fault is resolved
  fault_telemetry    — readings pushed by the alert simulator
  infer_vibration    — vibration estimate for the fault sensor snapshot
"""
from __future__ import annotations

import numpy as np

from config.alerts import AlertLevel
from config.equipment import (
    DEFAULT_NORMAL_BAND,
    HIGH_LOAD_PCT,
    HIGH_LOAD_VIBRATION_MMS,
    IDLE_VIBRATION_RANGE_MMS,
    NORMAL_BANDS,
)


def _draw(rng: np.random.Generator, band: tuple[int, int]) -> float:
    low, high = band
    return float(rng.integers(low, high))


def normal_telemetry(equipment_type: str, rng: np.random.Generator) -> dict[str, float]:
    """Draw temperature / current / load inside the type's normal band."""
    band = NORMAL_BANDS.get(equipment_type, DEFAULT_NORMAL_BAND)
    return {
        "temperature": _draw(rng, band.temperature_c),
        "current": _draw(rng, band.current_a),
        "load": _draw(rng, band.load_pct),
    }


def fault_telemetry(level: AlertLevel | str, rng: np.random.Generator) -> dict[str, float]:
    """Abnormal readings matching a simulated alert level."""
    if AlertLevel(level) == AlertLevel.ERROR:
        return {
            "temperature": _draw(rng, (70, 100)),
            "current": _draw(rng, (150, 200)),
            "load": 0.0,
        }
    return {
        "temperature": _draw(rng, (60, 80)),
        "current": _draw(rng, (80, 110)),
        "load": _draw(rng, (80, 100)),
    }


def infer_vibration(load: float, rng: np.random.Generator) -> float:
    """Heavily loaded units vibrate; others get a quiet random reading."""
    if load > HIGH_LOAD_PCT:
        return HIGH_LOAD_VIBRATION_MMS
    low, high = IDLE_VIBRATION_RANGE_MMS
    return round(float(rng.uniform(low, high)), 1)
