"""
config/alerts.py
────────────────
Status, alert and maintenance enumerations with their display configuration.
"""

from enum import Enum


class Status(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ERROR = "error"


class AlertLevel(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class AlertStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    INSPECTION = "inspection"
    REPAIR = "repair"


STATUS_COLORS: dict[str, str] = {
    Status.NORMAL: "#2ea44f",
    Status.WARNING: "#e8a020",
    Status.ERROR: "#da3633",
}

STATUS_LABELS: dict[str, str] = {
    Status.NORMAL: "Normal",
    Status.WARNING: "Warning",
    Status.ERROR: "Fault",
}

# Severity ordering for derivation and sorting (higher = more severe)
STATUS_ORDER: dict[str, int] = {
    Status.ERROR: 2,
    Status.WARNING: 1,
    Status.NORMAL: 0,
}

ALERT_STATUS_LABELS: dict[str, str] = {
    AlertStatus.PENDING: "Pending",
    AlertStatus.PROCESSING: "Processing",
    AlertStatus.COMPLETED: "Completed",
}

MAINTENANCE_TYPE_LABELS: dict[str, str] = {
    MaintenanceType.PREVENTIVE: "Preventive maintenance",
    MaintenanceType.INSPECTION: "Inspection",
    MaintenanceType.REPAIR: "Fault repair",
}

MAINTENANCE_TYPE_COLORS: dict[str, str] = {
    MaintenanceType.PREVENTIVE: "#58a6ff",
    MaintenanceType.INSPECTION: "#2ea44f",
    MaintenanceType.REPAIR: "#da3633",
}

# Messages picked by the alert simulator
SIMULATED_FAULTS: list[str] = [
    "Over-temperature",
    "Abnormal current",
    "Voltage fluctuation",
    "Abnormal vibration",
    "Loose connection",
    "Insulation degradation",
    "Mechanical fault",
    "Communication loss",
    "Abnormal pressure",
    "Gas leak",
]

MAX_ALERTS_DISPLAY = 100
