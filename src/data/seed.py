"""
src/data/seed.py
────────────────
Fixed seed document used on first start and whenever the stored document
cannot be read.

Contents:
  - 3 substations (north, south, east)
  - 5 equipment units distributed across them
  - 1 pending alert per equipment seeded in warning or error
  - 2 maintenance records
"""
from __future__ import annotations

from datetime import UTC, date, datetime

from config.alerts import AlertLevel, AlertStatus, MaintenanceType, Status
from config.equipment import EquipmentType
from src.analytics.status import derive_substation_status
from src.data.models import Alert, Equipment, GridDocument, MaintenanceRecord, Substation, new_id

_SUBSTATIONS: list[dict] = [
    {
        "id": "SUB-001",
        "name": "North Substation",
        "location": "Northern industrial district",
        "capacity": "110kV",
        "image_url": "/assets/img/substation-north.jpg",
    },
    {
        "id": "SUB-002",
        "name": "South Substation",
        "location": "Southern residential district",
        "capacity": "220kV",
        "image_url": "/assets/img/substation-south.jpg",
    },
    {
        "id": "SUB-003",
        "name": "East Substation",
        "location": "Eastern technology park",
        "capacity": "110kV",
        "image_url": "/assets/img/substation-east.jpg",
    },
]

_EQUIPMENT: list[dict] = [
    {
        "id": "EQ-2023-001",
        "name": "Main transformer T1",
        "type": EquipmentType.TRANSFORMER,
        "substation_id": "SUB-001",
        "location": "Cabinet 1",
        "status": Status.NORMAL,
        "temperature": 45, "voltage": 10.5, "current": 42, "load": 65,
        "last_maintenance": date(2025, 5, 12),
        "next_maintenance": date(2025, 8, 12),
        "image_url": "/assets/img/transformer.jpg",
        "specifications": {
            "Rated capacity": "1000 kVA",
            "Primary voltage": "10 kV",
            "Secondary voltage": "0.4 kV",
            "Vector group": "Dyn11",
            "Cooling": "ONAN",
            "Impedance voltage": "4%",
        },
    },
    {
        "id": "EQ-2023-003",
        "name": "Disconnector DS-18",
        "type": EquipmentType.DISCONNECTOR,
        "substation_id": "SUB-001",
        "location": "Cabinet 5",
        "status": Status.NORMAL,
        "temperature": 32, "voltage": 10.2, "current": 38, "load": 45,
        "last_maintenance": date(2025, 5, 20),
        "next_maintenance": date(2025, 8, 20),
        "image_url": "/assets/img/disconnector.jpg",
        "specifications": {
            "Rated voltage": "12 kV",
            "Rated current": "630 A",
            "Short-time withstand current": "20 kA",
            "Operation": "Manual / motor",
            "Insulation level": "30 kV",
        },
    },
    {
        "id": "EQ-2023-002",
        "name": "Circuit breaker CB-24",
        "type": EquipmentType.BREAKER,
        "substation_id": "SUB-002",
        "location": "Cabinet 3",
        "status": Status.ERROR,
        "temperature": 78, "voltage": 10.1, "current": 0, "load": 0,
        "last_maintenance": date(2025, 4, 28),
        "next_maintenance": date(2025, 7, 28),
        "image_url": "/assets/img/breaker.jpg",
        "specifications": {
            "Rated voltage": "12 kV",
            "Rated current": "630 A",
            "Rated breaking current": "20 kA",
            "Mechanism": "Spring operated",
            "Insulation level": "30 kV",
        },
    },
    {
        "id": "EQ-2023-005",
        "name": "Surge arrester LA-12",
        "type": EquipmentType.ARRESTER,
        "substation_id": "SUB-002",
        "location": "Cabinet 7",
        "status": Status.NORMAL,
        "temperature": 41, "voltage": 10.3, "current": 32, "load": 58,
        "last_maintenance": date(2025, 6, 2),
        "next_maintenance": date(2025, 9, 2),
        "image_url": "/assets/img/arrester.jpg",
        "specifications": {
            "Rated voltage": "10 kV",
            "Continuous operating voltage": "8.6 kV",
            "Residual voltage": "26 kV",
            "Response time": "<100ns",
            "Temperature range": "-40 °C to 70 °C",
        },
    },
    {
        "id": "EQ-2023-004",
        "name": "Current transformer CT-09",
        "type": EquipmentType.INSTRUMENT_TRANSFORMER,
        "substation_id": "SUB-003",
        "location": "Cabinet 2",
        "status": Status.WARNING,
        "temperature": 65, "voltage": 10.4, "current": 78, "load": 78,
        "last_maintenance": date(2025, 5, 5),
        "next_maintenance": date(2025, 8, 5),
        "image_url": "/assets/img/current-transformer.jpg",
        "specifications": {
            "Rated voltage": "10 kV",
            "Rated current ratio": "600/5 A",
            "Accuracy class": "0.5",
            "Rated burden": "10 VA",
            "Temperature range": "-40 °C to 70 °C",
        },
    },
]

_MAINTENANCE: list[dict] = [
    {
        "id": "M-2023-001",
        "equipment_id": "EQ-2023-001",
        "equipment_name": "Main transformer T1",
        "type": MaintenanceType.PREVENTIVE,
        "date": date(2025, 5, 12),
        "technician": "Zhang",
        "content": "Routine inspection and oil sample analysis, equipment operating normally",
        "duration": "2h 30min",
    },
    {
        "id": "M-2023-002",
        "equipment_id": "EQ-2023-003",
        "equipment_name": "Disconnector DS-18",
        "type": MaintenanceType.INSPECTION,
        "date": date(2025, 5, 20),
        "technician": "Li",
        "content": "Operating mechanism check and lubrication, mechanical characteristics test",
        "duration": "1h 45min",
    },
]


def _seed_alert(equipment: Equipment, substation: Substation, index: int, now: datetime) -> Alert:
    level = AlertLevel.ERROR if equipment.status == Status.ERROR else AlertLevel.WARNING
    return Alert(
        id=new_id("ALM"),
        equipment_id=equipment.id,
        equipment_name=equipment.name,
        equipment_type=equipment.type.value,
        substation_id=substation.id,
        substation_name=substation.name,
        message="Equipment fault" if level == AlertLevel.ERROR else "Abnormal equipment state",
        level=level,
        # Stagger seed alerts one hour apart so the feed has a stable order
        time=now.replace(hour=max(0, 10 - index), minute=30, second=0, microsecond=0),
        status=AlertStatus.PENDING,
    )


def build_seed_document(now: datetime | None = None) -> GridDocument:
    """Build a fresh seed document with substation linkage and statuses derived."""
    now = now or datetime.now(tz=UTC)
    substations = {row["id"]: Substation(**row) for row in _SUBSTATIONS}
    equipment = {row["id"]: Equipment(**row) for row in _EQUIPMENT}

    for eq in equipment.values():
        substations[eq.substation_id].equipment_ids.append(eq.id)

    for sub in substations.values():
        sub.status = derive_substation_status(equipment[eq_id] for eq_id in sub.equipment_ids)

    abnormal = [eq for eq in equipment.values() if eq.status in (Status.WARNING, Status.ERROR)]
    alerts = [
        _seed_alert(eq, substations[eq.substation_id], index, now)
        for index, eq in enumerate(abnormal)
    ]

    return GridDocument(
        substations=substations,
        equipment=equipment,
        alerts=alerts,
        maintenance=[MaintenanceRecord(**row) for row in _MAINTENANCE],
    )
