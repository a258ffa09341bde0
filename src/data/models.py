"""
src/data/models.py
──────────────────
Pydantic v2 data models for substations, equipment, alerts, maintenance
records and the persisted document that holds them.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from config.alerts import AlertLevel, AlertStatus, MaintenanceType, Status
from config.equipment import EquipmentType


def new_id(prefix: str) -> str:
    """Short random identity such as ``EQ-3F9A12C0``."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class Substation(BaseModel):
    id: str
    name: str
    location: str = ""
    capacity: str = ""
    status: Status = Status.NORMAL
    image_url: str = ""
    equipment_ids: list[str] = Field(default_factory=list)


class Equipment(BaseModel):
    id: str
    name: str
    type: EquipmentType
    substation_id: str
    location: str = ""
    status: Status = Status.NORMAL
    temperature: float = Field(ge=-50.0, le=200.0)
    voltage: float = Field(ge=0.0, le=1_000.0)
    current: float = Field(ge=0.0, le=10_000.0)
    load: float = Field(ge=0.0, le=100.0)
    last_maintenance: date | None = None
    next_maintenance: date | None = None
    image_url: str = ""
    specifications: dict[str, str] = Field(default_factory=dict)


class Alert(BaseModel):
    id: str
    equipment_id: str
    equipment_name: str
    equipment_type: str
    substation_id: str = ""
    substation_name: str = ""
    message: str
    level: AlertLevel
    time: datetime
    status: AlertStatus = AlertStatus.PENDING


class MaintenanceRecord(BaseModel):
    id: str
    equipment_id: str
    equipment_name: str
    type: MaintenanceType
    date: date
    technician: str
    content: str
    duration: str = ""


class GridDocument(BaseModel):
    """The single persisted document: everything the dashboard knows."""
    substations: dict[str, Substation] = Field(default_factory=dict)
    equipment: dict[str, Equipment] = Field(default_factory=dict)
    alerts: list[Alert] = Field(default_factory=list)
    maintenance: list[MaintenanceRecord] = Field(default_factory=list)
