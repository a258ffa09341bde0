"""
src/analytics/diagnosis.py
──────────────────────────
Rule-table fault diagnosis.

Given a sensor snapshot and an equipment type, every matching condition
contributes one diagnosis sentence and one remediation checklist:

  temperature  > 75 °C
  current      > 150 A
  voltage      outside [9.5, 11.5] kV
  vibration    > 3.5 mm/s
  visual anomaly flagged by the camera feed

Checklists are looked up by (condition, equipment type), falling back to the
condition's default checklist. Without sensor data a per-type generic
diagnosis is returned instead. The output always carries the same three
command templates.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from config.equipment import SENSOR_LIMITS, EquipmentType


class Condition(str, Enum):
    TEMPERATURE = "temperature"
    CURRENT = "current"
    VOLTAGE = "voltage"
    VIBRATION = "vibration"
    VISUAL = "visual"


class SensorSnapshot(BaseModel):
    temperature: float
    current: float
    voltage: float
    vibration: float
    has_visual_anomaly: bool = False


@dataclass(frozen=True)
class CommandTemplate:
    key: str
    name: str
    content: str


# Issued for every diagnosis regardless of which conditions matched
COMMAND_TEMPLATES: tuple[CommandTemplate, ...] = (
    CommandTemplate("trip", "Emergency trip", "DEVICE_CONTROL;OPERATION=TRIP;PRIORITY=EMERGENCY"),
    CommandTemplate("diagnose", "Detailed diagnosis", "DEVICE_DIAGNOSIS;LEVEL=DETAILED;PARAMS=TEMP,PRESSURE,CURRENT"),
    CommandTemplate("reset", "System reset", "SYSTEM_RESET;DELAY=10;AUTO_RECOVER=TRUE"),
)


@dataclass
class Diagnosis:
    diagnosis: str
    sections: list[list[str]] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)

    @property
    def solution(self) -> str:
        """Checklists as text: one line per action, blank line between sections."""
        return "\n\n".join("\n".join(section) for section in self.sections)


# ── Checklists ────────────────────────────────────────────────────────────────

_T = EquipmentType

CHECKLISTS: dict[tuple[Condition, EquipmentType], list[str]] = {
    (Condition.TEMPERATURE, _T.TRANSFORMER): [
        "Check contacts for oxidation or arc erosion",
        "Clear cooling passages and confirm good ventilation",
        "Measure contact resistance, must stay below 20 μΩ",
        "Check operating mechanism lubricant for ageing, replace if needed",
        "Request an outage for repair if temperature exceeds 90 °C",
        "Test operating mechanism response time against the standard",
        "Check interrupter pressure or SF6 gas density",
        "Lubricate and tighten mechanical transmission parts",
        "Measure DC resistance of the open/close coils",
        "Check insulation resistance of auxiliary circuits",
    ],
    (Condition.TEMPERATURE, _T.DISCONNECTOR): [
        "Check contact engagement and look for overheating marks",
        "Clean insulator surfaces and inspect for cracks",
        "Measure loop resistance against requirements",
        "Check the operating mechanism moves freely without binding",
        "Lubricate rotating parts",
        "Check mechanical interlock between earthing and main blades",
        "Test the operating voltage range of the motor mechanism",
        "Check auxiliary switch changeover is reliable",
        "Adjust contact pressure and insertion depth",
        "Run open/close trials and check pole synchronism",
    ],
    (Condition.TEMPERATURE, _T.INSTRUMENT_TRANSFORMER): [
        "Check the body for oil leaks",
        "Measure winding insulation resistance and dielectric loss",
        "Check secondary circuit earthing is reliable",
        "Test ratio error characteristics against the accuracy class",
        "Check expander or oil level gauge reading",
        "Clean bushing surfaces and inspect for damage",
        "Check primary terminals for overheating",
        "Tighten secondary wiring",
        "Run a polarity test to confirm wiring",
        "Run ratio and excitation tests if required",
    ],
    (Condition.TEMPERATURE, _T.ARRESTER): [
        "Check the arrester body for damage or leakage",
        "Measure leakage current against the normal range",
        "Check the surge counter operates",
        "Clean porcelain housing and inspect for cracks",
        "Check base insulation resistance",
        "Check lead connections are tight and not overheating",
        "Test disconnector operating characteristics",
        "Check the earthing down-conductor is intact",
        "Compare nameplate ratings with operating requirements",
        "Decide on replacement from service age and test results",
    ],
    (Condition.CURRENT, _T.TRANSFORMER): [
        "Check three-phase load balance",
        "Run winding DC resistance test",
        "Check tap changer contacts",
        "Analyse overcurrent cause and limit load",
        "Run short-circuit impedance test if required",
    ],
    (Condition.CURRENT, _T.BREAKER): [
        "Send a remote trip command to interrupt fault current",
        "Check the interrupter chamber for damage",
        "Analyse fault current waveform to classify the fault",
        "Check operating mechanism spring charge",
        "Test trip unit characteristics",
    ],
    (Condition.CURRENT, _T.INSTRUMENT_TRANSFORMER): [
        "Check the primary side for overload",
        "Test the secondary circuit for short circuits",
        "Check the core for overheating",
        "Analyse overcurrent cause and act accordingly",
        "Verify dynamic and thermal withstand if required",
    ],
    (Condition.VOLTAGE, _T.TRANSFORMER): [
        "Check tap changer position",
        "Test on-load tap changer operation",
        "Check voltage regulator status",
        "Analyse the voltage deviation and contact dispatch",
        "Run ratio and vector group checks if required",
    ],
    (Condition.VOLTAGE, _T.INSTRUMENT_TRANSFORMER): [
        "Check primary fuses",
        "Check the secondary circuit for open or short circuits",
        "Test meter voltage circuits",
        "Check earthing arrangement",
        "Run voltage ratio test to confirm accuracy",
    ],
    (Condition.VIBRATION, _T.TRANSFORMER): [
        "Run vibration spectrum analysis to find fault frequencies",
        "Check the core for looseness or multi-point earthing",
        "Check winding clamping",
        "Check cooling fans and oil pumps",
        "Test tap changer for poor contact",
    ],
    (Condition.VIBRATION, _T.BREAKER): [
        "Check operating mechanism for loose parts",
        "Test closing spring charge",
        "Check opening damper performance",
        "Tighten base and fixing bolts",
        "Check the interrupter chamber for looseness",
    ],
    (Condition.VISUAL, _T.TRANSFORMER): [
        "Check oil level and look for leaks",
        "Inspect bushings for damage or cracks",
        "Check radiators for deformation or blockage",
        "Check Buchholz relay for gas",
        "Check earthing connections",
    ],
    (Condition.VISUAL, _T.BREAKER): [
        "Inspect porcelain or enclosure for damage",
        "Check SF6 pressure gauge reading",
        "Check operating mechanism for oil leaks",
        "Check terminals for overheating discoloration",
        "Check operation counter reading",
    ],
}

DEFAULT_CHECKLISTS: dict[Condition, list[str]] = {
    Condition.TEMPERATURE: [
        "Check the cooling system is working",
        "Clean dust and debris from heat sinks",
        "Check related sensors and wiring",
        "Log temperature hourly to track the trend",
        "Run electrical and mechanical performance tests",
        "Analyse historical data for the fault trend",
        "Plan repairs from the test results",
        "Replace faulty components and verify function",
        "Run a full performance test against the standard",
        "Define preventive measures against recurrence",
    ],
    Condition.CURRENT: [
        "Check for overload",
        "Analyse overcurrent cause and act accordingly",
        "Check protection relay operation",
        "Test accuracy of related current transformers",
        "Verify equipment ratings if required",
    ],
    Condition.VOLTAGE: [
        "Check the voltage regulation equipment",
        "Measure three-phase voltage balance",
        "Check the neutral earthing system",
        "Determine whether the deviation is system-wide or local",
        "Contact dispatch to adjust system voltage if required",
    ],
    Condition.VIBRATION: [
        "Run vibration spectrum analysis to find fault frequencies",
        "Check bearings and rotating parts for wear",
        "Tighten loose bolts and parts",
        "Check the foundation for settlement or damage",
        "Balance or replace worn parts if required",
    ],
    Condition.VISUAL: [
        "Send a technician to inspect the visual anomaly on site",
        "Check insulators for cracks or contamination",
        "Check joints for overheating discoloration",
        "Check equipment labels and safety signs",
        "Clean, tighten or replace parts based on the inspection",
    ],
}

# ── Diagnoses without sensor data ─────────────────────────────────────────────

NO_SENSOR_DIAGNOSES: dict[EquipmentType, tuple[str, list[str]]] = {
    _T.TRANSFORMER: (
        "Combined fault signature suggests an internal transformer fault; urgent action required.",
        [
            "Reduce load to 30% of rated capacity immediately",
            "Monitor temperature and Buchholz relay closely",
            "Start all cooling stages",
            "Run dissolved gas analysis on the oil",
            "Measure winding DC resistance and ratio",
            "Check bushing insulation",
            "Test core insulation resistance",
            "Check on-load tap changer operation",
            "Decide on an emergency outage from the test results",
            "Request an outage for repair if an internal fault is confirmed",
        ],
    ),
    _T.BREAKER: (
        "Operating mechanism fault, likely worn mechanical parts or low hydraulic "
        "pressure causing a failed trip.",
        [
            "Send a remote trip command as an emergency operation",
            "Check hydraulic pressure is within range",
            "Test operating mechanism response time",
            "If it fails, send a technician to inspect mechanical parts",
            "Replace worn linkages and bearings",
            "Recalibrate mechanism travel and synchronism",
            "Check closing spring condition",
            "Measure open/close coil resistance",
            "Check auxiliary switch changeover",
            "Run mechanical characteristic tests",
        ],
    ),
    _T.DISCONNECTOR: (
        "Disconnector operating fault, likely a binding mechanism or poor contact engagement.",
        [
            "Check the mechanism for foreign objects",
            "Lubricate transmission parts",
            "Check the operating power supply",
            "Test motor direction and limit switches",
            "Check the mechanical interlock is released",
            "Try manual operation if remote operation fails",
            "Check contacts for oxidation or deformation",
            "Adjust contact pressure and insertion depth",
            "Tighten loose connection bolts",
            "Run open/close trials",
        ],
    ),
    _T.INSTRUMENT_TRANSFORMER: (
        "Secondary circuit abnormality; protection and metering may be compromised.",
        [
            "Check the secondary circuit for open or short circuits",
            "Measure secondary winding insulation resistance",
            "Check terminal block connections",
            "Test fuses or miniature circuit breakers",
            "Check earthing circuit",
            "Confirm meters and protection relays work",
            "Check polarity connections",
            "Run ratio test",
            "Check enclosure earthing",
            "Replace the instrument transformer if required",
        ],
    ),
    _T.ARRESTER: (
        "Abnormal arrester leakage current; overvoltage protection may fail.",
        [
            "Measure leakage current and its resistive component",
            "Check surge counter operation",
            "Test disconnector performance",
            "Inspect porcelain housing for damage or contamination",
            "Check earthing down-conductor connection",
            "Check base insulation",
            "Compare with historical data to find the trend",
            "Request an outage and replace if limits are exceeded",
            "Apply safety measures before replacement",
            "Run commissioning tests before energising new equipment",
        ],
    ),
}

NO_SENSOR_FALLBACK = (
    "Fault signature suggests an internal component failure; further inspection required.",
    [
        "Perform a full equipment inspection",
        "Check sensor connections and calibration",
        "Analyse historical data for abnormal trends",
        "Run electrical and mechanical performance tests",
        "Plan repairs from the test results",
        "Replace faulty components and verify function",
        "Run a full performance test against the standard",
        "Analyse the root cause and define preventive measures",
        "Update the equipment health record",
        "Increase condition monitoring to prevent recurrence",
    ],
)

# Used when sensors are available but no condition matched
GENERIC_CHECKLIST = [
    "Perform a full equipment inspection",
    "Check sensor connections and calibration",
    "Analyse historical operating data for abnormal trends",
    "Run electrical and mechanical tests",
    "Plan maintenance from the test results",
    "Carry out maintenance and verify equipment function",
]
NO_FINDINGS = "No sensor reading exceeds its limit; fault cause not identified from telemetry."


# ── Rules ─────────────────────────────────────────────────────────────────────

def matched_conditions(sensors: SensorSnapshot) -> list[Condition]:
    """Conditions triggered by a snapshot, in fixed rule order."""
    voltage = SENSOR_LIMITS.voltage_kv
    matched = []
    if sensors.temperature > SENSOR_LIMITS.temperature_c["abnormal"]:
        matched.append(Condition.TEMPERATURE)
    if sensors.current > SENSOR_LIMITS.current_a["abnormal"]:
        matched.append(Condition.CURRENT)
    if sensors.voltage < voltage["min"] or sensors.voltage > voltage["max"]:
        matched.append(Condition.VOLTAGE)
    if sensors.vibration > SENSOR_LIMITS.vibration_mms["abnormal"]:
        matched.append(Condition.VIBRATION)
    if sensors.has_visual_anomaly:
        matched.append(Condition.VISUAL)
    return matched


def _fmt(value: float) -> str:
    return f"{value:g}"


def _finding(condition: Condition, sensors: SensorSnapshot) -> str:
    if condition == Condition.TEMPERATURE:
        return f"Temperature abnormally high ({_fmt(sensors.temperature)} °C), above the safety limit."
    if condition == Condition.CURRENT:
        return f"Abnormal current ({_fmt(sensors.current)} A), above rating."
    if condition == Condition.VOLTAGE:
        return f"Abnormal voltage ({_fmt(sensors.voltage)} kV), outside the normal range."
    if condition == Condition.VIBRATION:
        return f"Abnormal vibration ({_fmt(sensors.vibration)} mm/s), possible mechanical fault."
    return "Camera detected an abnormal equipment appearance."


def checklist_for(condition: Condition, equipment_type: EquipmentType | str) -> list[str]:
    try:
        key = (condition, EquipmentType(equipment_type))
    except ValueError:
        return list(DEFAULT_CHECKLISTS[condition])
    return list(CHECKLISTS.get(key, DEFAULT_CHECKLISTS[condition]))


def diagnose(equipment_type: EquipmentType | str, sensors: SensorSnapshot | None) -> Diagnosis:
    """Run the rule table for one unit."""
    if sensors is None:
        try:
            text, checklist = NO_SENSOR_DIAGNOSES[EquipmentType(equipment_type)]
        except (KeyError, ValueError):
            text, checklist = NO_SENSOR_FALLBACK
        return Diagnosis(diagnosis=text, sections=[list(checklist)])

    conditions = matched_conditions(sensors)
    if not conditions:
        return Diagnosis(diagnosis=NO_FINDINGS, sections=[list(GENERIC_CHECKLIST)])

    return Diagnosis(
        diagnosis=" ".join(_finding(c, sensors) for c in conditions),
        sections=[checklist_for(c, equipment_type) for c in conditions],
        conditions=conditions,
    )
