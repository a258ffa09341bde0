"""
src/analytics/thresholds.py
────────────────────────────
Sensor threshold engine for the fault-processing sensor cards.

Provides:
  - Static per-sensor threshold lookup from config.equipment.SENSOR_LIMITS
  - Classification of a reading: "normal" | "elevated" | "abnormal"
  - Gauge fill fraction and colour helpers for the sensor cards

Limits are strict: a reading equal to a limit is still on the lower side.
"""
from __future__ import annotations

from dataclasses import dataclass

from config.equipment import SENSOR_LIMITS

SENSORS = ("temperature", "current", "voltage", "vibration")


@dataclass(frozen=True)
class ThresholdBand:
    variable: str
    elevated: float | None
    abnormal: float | None
    lower_elevated: float | None = None   # e.g., undervoltage
    lower_abnormal: float | None = None
    unit: str = ""
    gauge_min: float = 0.0
    gauge_max: float = 100.0


def get_static_thresholds(variable: str) -> ThresholdBand:
    """Return the threshold band for one of the fault-snapshot sensors."""
    if variable == "temperature":
        return ThresholdBand(
            variable=variable,
            elevated=SENSOR_LIMITS.temperature_c["elevated"],
            abnormal=SENSOR_LIMITS.temperature_c["abnormal"],
            unit="°C",
            gauge_max=100.0,
        )
    if variable == "current":
        return ThresholdBand(
            variable=variable,
            elevated=SENSOR_LIMITS.current_a["elevated"],
            abnormal=SENSOR_LIMITS.current_a["abnormal"],
            unit="A",
            gauge_max=200.0,
        )
    if variable == "voltage":
        return ThresholdBand(
            variable=variable,
            elevated=SENSOR_LIMITS.voltage_kv["high"],
            abnormal=SENSOR_LIMITS.voltage_kv["max"],
            lower_elevated=SENSOR_LIMITS.voltage_kv["low"],
            lower_abnormal=SENSOR_LIMITS.voltage_kv["min"],
            unit="kV",
            gauge_min=9.0,
            gauge_max=12.0,
        )
    if variable == "vibration":
        return ThresholdBand(
            variable=variable,
            elevated=SENSOR_LIMITS.vibration_mms["elevated"],
            abnormal=SENSOR_LIMITS.vibration_mms["abnormal"],
            unit="mm/s",
            gauge_max=5.0,
        )
    # Fallback: no thresholds defined
    return ThresholdBand(variable=variable, elevated=None, abnormal=None)


def evaluate_current_value(value: float, band: ThresholdBand) -> str:
    """
    Classify a reading against a ThresholdBand.

    Returns: "normal" | "elevated" | "abnormal"
    """
    if band.abnormal is not None and value > band.abnormal:
        return "abnormal"
    if band.lower_abnormal is not None and value < band.lower_abnormal:
        return "abnormal"
    if band.elevated is not None and value > band.elevated:
        return "elevated"
    if band.lower_elevated is not None and value < band.lower_elevated:
        return "elevated"
    return "normal"


def gauge_fraction(value: float, band: ThresholdBand) -> float:
    """Position of the reading on the card gauge, clamped to [0, 1]."""
    span = band.gauge_max - band.gauge_min
    if span <= 0:
        return 0.0
    return min(1.0, max(0.0, (value - band.gauge_min) / span))


# ── Chart helpers ─────────────────────────────────────────────────────────────

STATUS_COLORS = {
    "normal": "#2ea44f",
    "elevated": "#e8a020",
    "abnormal": "#da3633",
}

STATUS_LABELS = {
    "normal": "Normal",
    "elevated": "Elevated",
    "abnormal": "Abnormal",
}


def get_value_color(value: float, band: ThresholdBand) -> str:
    return STATUS_COLORS[evaluate_current_value(value, band)]
