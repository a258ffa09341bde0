"""
config/equipment.py
───────────────────
Equipment type definitions, normal operating bands and sensor limits.

Normal bands are the ranges telemetry is restored into once a fault has been
resolved. Bounds are integers, lower bound inclusive, upper bound exclusive:
  transformer             35–50 °C   40–60 A   50–70 %
  breaker                 30–40 °C   35–50 A   45–60 %
  disconnector            25–35 °C   30–50 A   40–60 %
  instrument_transformer  30–45 °C   35–60 A   45–70 %
  arrester                30–40 °C   25–35 A   35–50 %

Sensor limits drive both the fault-diagnosis rule table and the sensor
status badges (normal / elevated / abnormal).
"""
from dataclasses import dataclass
from enum import Enum


class EquipmentType(str, Enum):
    TRANSFORMER = "transformer"
    BREAKER = "breaker"
    DISCONNECTOR = "disconnector"
    INSTRUMENT_TRANSFORMER = "instrument_transformer"
    ARRESTER = "arrester"


EQUIPMENT_TYPE_LABELS: dict[str, str] = {
    EquipmentType.TRANSFORMER: "Transformer",
    EquipmentType.BREAKER: "Circuit breaker",
    EquipmentType.DISCONNECTOR: "Disconnector",
    EquipmentType.INSTRUMENT_TRANSFORMER: "Instrument transformer",
    EquipmentType.ARRESTER: "Surge arrester",
}

EQUIPMENT_TYPE_COLORS: dict[str, str] = {
    EquipmentType.TRANSFORMER: "#58a6ff",
    EquipmentType.BREAKER: "#2ea44f",
    EquipmentType.DISCONNECTOR: "#e8a020",
    EquipmentType.INSTRUMENT_TRANSFORMER: "#f0883e",
    EquipmentType.ARRESTER: "#a371f7",
}


@dataclass(frozen=True)
class NormalBand:
    """Half-open integer ranges [low, high) for restored telemetry."""
    temperature_c: tuple[int, int]
    current_a: tuple[int, int]
    load_pct: tuple[int, int]


NORMAL_BANDS: dict[str, NormalBand] = {
    EquipmentType.TRANSFORMER: NormalBand((35, 50), (40, 60), (50, 70)),
    EquipmentType.BREAKER: NormalBand((30, 40), (35, 50), (45, 60)),
    EquipmentType.DISCONNECTOR: NormalBand((25, 35), (30, 50), (40, 60)),
    EquipmentType.INSTRUMENT_TRANSFORMER: NormalBand((30, 45), (35, 60), (45, 70)),
    EquipmentType.ARRESTER: NormalBand((30, 40), (25, 35), (35, 50)),
}

# Used for equipment whose type is missing from NORMAL_BANDS
DEFAULT_NORMAL_BAND = NormalBand((30, 45), (30, 50), (40, 60))


@dataclass(frozen=True)
class SensorLimits:
    temperature_c: dict[str, float]       # elevated / abnormal
    current_a: dict[str, float]           # elevated / abnormal
    voltage_kv: dict[str, float]          # low / high (elevated), min / max (abnormal)
    vibration_mms: dict[str, float]       # elevated / abnormal


SENSOR_LIMITS = SensorLimits(
    temperature_c={"elevated": 60.0, "abnormal": 75.0},
    current_a={"elevated": 100.0, "abnormal": 150.0},
    voltage_kv={"low": 10.0, "high": 11.0, "min": 9.5, "max": 11.5},
    vibration_mms={"elevated": 2.5, "abnormal": 3.5},
)

# Vibration is not stored on equipment; it is inferred from load when a
# fault session captures its sensor snapshot.
HIGH_LOAD_PCT = 80.0
HIGH_LOAD_VIBRATION_MMS = 4.2
IDLE_VIBRATION_RANGE_MMS = (1.5, 3.5)
