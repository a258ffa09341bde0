"""
src/data/repository.py
──────────────────────
CRUD operations over substations, equipment, alerts and maintenance records.

Every mutation is one logical step:
  load document → mutate in memory → save whole document → notify bus

Referential bookkeeping kept here:
  - equipment ↔ substation linkage (equipment_ids on the substation)
  - substation status re-derived whenever an owned unit's status changes,
    a unit is added, moved or deleted
  - alerts set their equipment's status; completing an alert restores it
  - maintenance records roll the equipment's maintenance dates forward

Unknown IDs never raise: update/delete return False, lookups return None.
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

import numpy as np
import pandas as pd
import structlog

from config.alerts import AlertLevel, AlertStatus, MaintenanceType, Status
from src.analytics.status import derive_substation_status
from src.data.events import ChangeBus
from src.data.models import (
    Alert,
    Equipment,
    GridDocument,
    MaintenanceRecord,
    Substation,
    new_id,
)
from src.data.store import DocumentStore
from src.data.telemetry import normal_telemetry

logger = structlog.get_logger(__name__)

UNKNOWN_SUBSTATION = "Unknown substation"
UNKNOWN_EQUIPMENT = "Unknown equipment"

# Fields managed by the repository itself; ignored in shallow-merge updates
_SUBSTATION_MANAGED = {"id", "equipment_ids", "status"}
_EQUIPMENT_MANAGED = {"id"}
_MAINTENANCE_MANAGED = {"id"}


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic; day-of-month is clamped to the target month."""
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


class GridRepository:
    def __init__(
        self,
        store: DocumentStore,
        bus: ChangeBus,
        rng: np.random.Generator | None = None,
        maintenance_interval_months: int = 3,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.bus = bus
        self.rng = rng or np.random.default_rng()
        self.maintenance_interval_months = maintenance_interval_months
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    # ── Internals ─────────────────────────────────────────────────────────────

    def _commit(self, doc: GridDocument) -> None:
        self.store.save(doc)
        self.bus.notify()

    @staticmethod
    def _rederive(doc: GridDocument, substation_id: str) -> None:
        substation = doc.substations.get(substation_id)
        if substation is None:
            return
        members = [doc.equipment[eq_id] for eq_id in substation.equipment_ids if eq_id in doc.equipment]
        status = derive_substation_status(members)
        if status != substation.status:
            logger.info(
                "substation_status_changed",
                substation_id=substation_id,
                old=substation.status.value,
                new=status.value,
            )
            substation.status = status

    def _restore(self, doc: GridDocument, equipment: Equipment) -> None:
        readings = normal_telemetry(equipment.type, self.rng)
        updated = equipment.model_copy(update={"status": Status.NORMAL, **readings})
        doc.equipment[equipment.id] = updated
        self._rederive(doc, equipment.substation_id)
        logger.info("equipment_restored", equipment_id=equipment.id, **readings)

    # ── Substations ───────────────────────────────────────────────────────────

    def list_substations(self) -> list[Substation]:
        return list(self.store.load().substations.values())

    def get_substation(self, substation_id: str) -> Substation | None:
        return self.store.load().substations.get(substation_id)

    def add_substation(
        self,
        name: str,
        location: str = "",
        capacity: str = "",
        image_url: str = "",
    ) -> Substation:
        doc = self.store.load()
        substation = Substation(
            id=new_id("SUB"),
            name=name,
            location=location,
            capacity=capacity,
            image_url=image_url,
        )
        doc.substations[substation.id] = substation
        self._commit(doc)
        logger.info("substation_added", substation_id=substation.id, name=name)
        return substation

    def update_substation(self, substation_id: str, **changes) -> bool:
        doc = self.store.load()
        current = doc.substations.get(substation_id)
        if current is None:
            logger.debug("substation_not_found", substation_id=substation_id)
            return False
        changes = {k: v for k, v in changes.items() if k not in _SUBSTATION_MANAGED}
        doc.substations[substation_id] = Substation.model_validate({**current.model_dump(), **changes})
        self._commit(doc)
        return True

    def delete_substation(self, substation_id: str) -> bool:
        doc = self.store.load()
        substation = doc.substations.pop(substation_id, None)
        if substation is None:
            logger.debug("substation_not_found", substation_id=substation_id)
            return False
        owned = set(substation.equipment_ids)
        owned.update(eq.id for eq in doc.equipment.values() if eq.substation_id == substation_id)
        for eq_id in owned:
            doc.equipment.pop(eq_id, None)
        # Alerts keep their denormalized names and stay in storage
        self._commit(doc)
        logger.info("substation_deleted", substation_id=substation_id, equipment_removed=len(owned))
        return True

    # ── Equipment ─────────────────────────────────────────────────────────────

    def list_equipment(self) -> list[Equipment]:
        return list(self.store.load().equipment.values())

    def get_equipment(self, equipment_id: str) -> Equipment | None:
        return self.store.load().equipment.get(equipment_id)

    def list_equipment_by_substation(self, substation_id: str) -> list[Equipment]:
        return [eq for eq in self.store.load().equipment.values() if eq.substation_id == substation_id]

    def add_equipment(self, **fields) -> Equipment | None:
        """
        Create a unit and link it into its substation.

        Returns None when the owning substation does not exist. Invalid field
        values raise pydantic.ValidationError.
        """
        doc = self.store.load()
        substation = doc.substations.get(fields.get("substation_id", ""))
        if substation is None:
            logger.debug("substation_not_found", substation_id=fields.get("substation_id"))
            return None
        fields.pop("id", None)
        equipment = Equipment(id=new_id("EQ"), **fields)
        doc.equipment[equipment.id] = equipment
        substation.equipment_ids.append(equipment.id)
        self._rederive(doc, substation.id)
        self._commit(doc)
        logger.info("equipment_added", equipment_id=equipment.id, substation_id=substation.id)
        return equipment

    def update_equipment(self, equipment_id: str, **changes) -> bool:
        doc = self.store.load()
        current = doc.equipment.get(equipment_id)
        if current is None:
            logger.debug("equipment_not_found", equipment_id=equipment_id)
            return False
        changes = {k: v for k, v in changes.items() if k not in _EQUIPMENT_MANAGED}
        updated = Equipment.model_validate({**current.model_dump(), **changes})

        moved = updated.substation_id != current.substation_id
        if moved:
            target = doc.substations.get(updated.substation_id)
            if target is None:
                logger.debug("substation_not_found", substation_id=updated.substation_id)
                return False
            source = doc.substations.get(current.substation_id)
            if source is not None:
                source.equipment_ids = [i for i in source.equipment_ids if i != equipment_id]
            target.equipment_ids.append(equipment_id)

        doc.equipment[equipment_id] = updated
        if moved or updated.status != current.status:
            self._rederive(doc, current.substation_id)
            if moved:
                self._rederive(doc, updated.substation_id)
        self._commit(doc)
        return True

    def delete_equipment(self, equipment_id: str) -> bool:
        doc = self.store.load()
        equipment = doc.equipment.pop(equipment_id, None)
        if equipment is None:
            logger.debug("equipment_not_found", equipment_id=equipment_id)
            return False
        substation = doc.substations.get(equipment.substation_id)
        if substation is not None:
            substation.equipment_ids = [i for i in substation.equipment_ids if i != equipment_id]
            self._rederive(doc, substation.id)
        doc.alerts = [a for a in doc.alerts if a.equipment_id != equipment_id]
        self._commit(doc)
        logger.info("equipment_deleted", equipment_id=equipment_id)
        return True

    def restore_equipment_normal_state(self, equipment_id: str) -> bool:
        """Reset status to normal with telemetry drawn from the type's normal band."""
        doc = self.store.load()
        equipment = doc.equipment.get(equipment_id)
        if equipment is None:
            logger.debug("equipment_not_found", equipment_id=equipment_id)
            return False
        self._restore(doc, equipment)
        self._commit(doc)
        return True

    # ── Alerts ────────────────────────────────────────────────────────────────

    def list_alerts(self) -> list[Alert]:
        return sorted(self.store.load().alerts, key=lambda a: a.time, reverse=True)

    def list_active_alerts(self) -> list[Alert]:
        """Alerts not yet completed, newest first."""
        return [a for a in self.list_alerts() if a.status != AlertStatus.COMPLETED]

    def list_alerts_by_equipment(self, equipment_id: str) -> list[Alert]:
        return [a for a in self.list_alerts() if a.equipment_id == equipment_id]

    def get_alert(self, alert_id: str) -> Alert | None:
        return next((a for a in self.store.load().alerts if a.id == alert_id), None)

    def add_alert(
        self,
        equipment_id: str,
        message: str,
        level: AlertLevel | str,
        time: datetime | None = None,
        status: AlertStatus | str = AlertStatus.PENDING,
        equipment_name: str | None = None,
        equipment_type: str | None = None,
    ) -> Alert:
        """
        Record an anomaly against a unit.

        Substation linkage is resolved from the equipment now and copied onto
        the alert. The equipment's status follows the alert level and the
        substation status is re-derived.
        """
        doc = self.store.load()
        level = AlertLevel(level)
        equipment = doc.equipment.get(equipment_id)
        substation = doc.substations.get(equipment.substation_id) if equipment else None

        alert = Alert(
            id=new_id("ALM"),
            equipment_id=equipment_id,
            equipment_name=equipment_name or (equipment.name if equipment else UNKNOWN_EQUIPMENT),
            equipment_type=equipment_type or (equipment.type.value if equipment else ""),
            substation_id=equipment.substation_id if equipment else "",
            substation_name=substation.name if substation else UNKNOWN_SUBSTATION,
            message=message,
            level=level,
            time=time or self._clock(),
            status=AlertStatus(status),
        )
        doc.alerts.append(alert)

        if equipment is not None:
            new_status = Status.ERROR if level == AlertLevel.ERROR else Status.WARNING
            doc.equipment[equipment_id] = equipment.model_copy(update={"status": new_status})
            self._rederive(doc, equipment.substation_id)

        self._commit(doc)
        logger.info("alert_added", alert_id=alert.id, equipment_id=equipment_id, level=level.value)
        return alert

    def update_alert_status(self, alert_id: str, status: AlertStatus | str) -> bool:
        """
        Move an alert through pending → processing → completed.

        Completion restores the referenced equipment to normal telemetry in
        the same mutation, so subscribers see a single notification.
        """
        doc = self.store.load()
        alert = next((a for a in doc.alerts if a.id == alert_id), None)
        if alert is None:
            logger.debug("alert_not_found", alert_id=alert_id)
            return False

        status = AlertStatus(status)
        completing = status == AlertStatus.COMPLETED and alert.status != AlertStatus.COMPLETED
        alert.status = status

        if completing:
            equipment = doc.equipment.get(alert.equipment_id)
            if equipment is not None:
                self._restore(doc, equipment)
            logger.info("alert_completed", alert_id=alert_id, equipment_id=alert.equipment_id)

        self._commit(doc)
        return True

    def delete_alert(self, alert_id: str) -> bool:
        doc = self.store.load()
        remaining = [a for a in doc.alerts if a.id != alert_id]
        if len(remaining) == len(doc.alerts):
            logger.debug("alert_not_found", alert_id=alert_id)
            return False
        doc.alerts = remaining
        self._commit(doc)
        return True

    def clear_alerts(self) -> None:
        doc = self.store.load()
        doc.alerts = []
        self._commit(doc)
        logger.info("alerts_cleared")

    # ── Maintenance ───────────────────────────────────────────────────────────

    def list_maintenance(self) -> list[MaintenanceRecord]:
        """All records, most recent first."""
        return sorted(self.store.load().maintenance, key=lambda m: m.date, reverse=True)

    def list_maintenance_by_equipment(self, equipment_id: str) -> list[MaintenanceRecord]:
        return [m for m in self.list_maintenance() if m.equipment_id == equipment_id]

    def add_maintenance(
        self,
        equipment_id: str,
        type: MaintenanceType | str,
        date: date,
        technician: str,
        content: str,
        duration: str = "",
        equipment_name: str | None = None,
    ) -> MaintenanceRecord:
        doc = self.store.load()
        equipment = doc.equipment.get(equipment_id)
        record = MaintenanceRecord(
            id=new_id("M"),
            equipment_id=equipment_id,
            equipment_name=equipment_name or (equipment.name if equipment else UNKNOWN_EQUIPMENT),
            type=MaintenanceType(type),
            date=date,
            technician=technician,
            content=content,
            duration=duration,
        )
        doc.maintenance.append(record)

        if equipment is not None:
            doc.equipment[equipment_id] = equipment.model_copy(update={
                "last_maintenance": record.date,
                "next_maintenance": add_months(record.date, self.maintenance_interval_months),
            })

        self._commit(doc)
        logger.info("maintenance_added", record_id=record.id, equipment_id=equipment_id, type=record.type.value)
        return record

    def update_maintenance(self, record_id: str, **changes) -> bool:
        doc = self.store.load()
        for index, record in enumerate(doc.maintenance):
            if record.id == record_id:
                changes = {k: v for k, v in changes.items() if k not in _MAINTENANCE_MANAGED}
                doc.maintenance[index] = MaintenanceRecord.model_validate({**record.model_dump(), **changes})
                self._commit(doc)
                return True
        logger.debug("maintenance_not_found", record_id=record_id)
        return False

    def delete_maintenance(self, record_id: str) -> bool:
        doc = self.store.load()
        remaining = [m for m in doc.maintenance if m.id != record_id]
        if len(remaining) == len(doc.maintenance):
            logger.debug("maintenance_not_found", record_id=record_id)
            return False
        doc.maintenance = remaining
        self._commit(doc)
        return True
