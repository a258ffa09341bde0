"""
tests/test_repository.py
─────────────────────────
Tests for CRUD operations and referential bookkeeping.
"""
from datetime import date

import pytest
from pydantic import ValidationError

from config.alerts import AlertLevel, AlertStatus, MaintenanceType, Status
from src.data.repository import UNKNOWN_EQUIPMENT, UNKNOWN_SUBSTATION, add_months


def _new_transformer(substation_id: str = "SUB-001", **overrides) -> dict:
    fields = dict(
        name="Transformer T9", type="transformer", substation_id=substation_id,
        temperature=40, voltage=10.4, current=45, load=55,
    )
    fields.update(overrides)
    return fields


class TestAddMonths:
    def test_plain(self):
        assert add_months(date(2025, 6, 1), 3) == date(2025, 9, 1)

    def test_clamps_to_month_end(self):
        assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)


class TestSubstations:
    def test_add_and_get(self, repository):
        sub = repository.add_substation("West Substation", location="West", capacity="35kV")
        assert sub.id.startswith("SUB-")
        assert sub.status == Status.NORMAL
        assert repository.get_substation(sub.id).name == "West Substation"

    def test_update_ignores_managed_fields(self, repository):
        assert repository.update_substation("SUB-002", name="South", status="normal", equipment_ids=[])
        sub = repository.get_substation("SUB-002")
        assert sub.name == "South"
        assert sub.status == Status.ERROR
        assert len(sub.equipment_ids) == 2

    def test_update_unknown_returns_false(self, repository, bus):
        before = bus.notifications
        assert repository.update_substation("SUB-404", name="x") is False
        assert bus.notifications == before

    def test_delete_cascades_equipment_keeps_alerts(self, repository):
        alerts_before = len(repository.list_alerts())
        assert repository.delete_substation("SUB-002")
        assert repository.get_equipment("EQ-2023-002") is None
        assert repository.get_equipment("EQ-2023-005") is None
        assert len(repository.list_alerts()) == alerts_before

    def test_delete_unknown(self, repository):
        assert repository.delete_substation("SUB-404") is False


class TestEquipment:
    def test_add_links_and_rederives(self, repository):
        eq = repository.add_equipment(**_new_transformer(status="warning"))
        assert eq.id.startswith("EQ-")
        sub = repository.get_substation("SUB-001")
        assert eq.id in sub.equipment_ids
        assert sub.status == Status.WARNING

    def test_add_to_unknown_substation(self, repository, bus):
        before = bus.notifications
        assert repository.add_equipment(**_new_transformer("SUB-404")) is None
        assert bus.notifications == before

    def test_add_invalid_values_raise(self, repository):
        with pytest.raises(ValidationError):
            repository.add_equipment(**_new_transformer(load=150))

    def test_list_by_substation(self, repository):
        ids = {eq.id for eq in repository.list_equipment_by_substation("SUB-001")}
        assert ids == {"EQ-2023-001", "EQ-2023-003"}

    def test_status_change_rederives_substation(self, repository):
        assert repository.update_equipment("EQ-2023-001", status="error")
        assert repository.get_substation("SUB-001").status == Status.ERROR

    def test_move_relinks_both_substations(self, repository):
        assert repository.update_equipment("EQ-2023-002", substation_id="SUB-001")
        assert "EQ-2023-002" not in repository.get_substation("SUB-002").equipment_ids
        assert "EQ-2023-002" in repository.get_substation("SUB-001").equipment_ids
        assert repository.get_substation("SUB-002").status == Status.NORMAL
        assert repository.get_substation("SUB-001").status == Status.ERROR

    def test_move_to_unknown_substation(self, repository):
        assert repository.update_equipment("EQ-2023-002", substation_id="SUB-404") is False
        assert repository.get_equipment("EQ-2023-002").substation_id == "SUB-002"

    def test_id_cannot_be_changed(self, repository):
        repository.update_equipment("EQ-2023-001", id="EQ-HACK", name="T1")
        assert repository.get_equipment("EQ-2023-001").name == "T1"
        assert repository.get_equipment("EQ-HACK") is None

    def test_update_unknown_returns_false(self, repository):
        assert repository.update_equipment("EQ-404", name="x") is False

    def test_delete_unlinks_and_drops_alerts(self, repository):
        assert repository.delete_equipment("EQ-2023-002")
        sub = repository.get_substation("SUB-002")
        assert "EQ-2023-002" not in sub.equipment_ids
        assert sub.status == Status.NORMAL
        assert repository.list_alerts_by_equipment("EQ-2023-002") == []

    def test_restore_normal_state(self, repository):
        assert repository.restore_equipment_normal_state("EQ-2023-004")
        eq = repository.get_equipment("EQ-2023-004")
        assert eq.status == Status.NORMAL
        assert 30 <= eq.temperature < 45
        assert 35 <= eq.current < 60
        assert 45 <= eq.load < 70
        assert repository.get_substation("SUB-003").status == Status.NORMAL

    def test_restore_unknown(self, repository):
        assert repository.restore_equipment_normal_state("EQ-404") is False


class TestAlerts:
    def test_seeded_alerts_newest_first(self, repository):
        alerts = repository.list_alerts()
        assert [a.time for a in alerts] == sorted((a.time for a in alerts), reverse=True)

    def test_add_alert_sets_equipment_status(self, repository, now):
        alert = repository.add_alert("EQ-2023-001", "Over-temperature", AlertLevel.ERROR)
        assert alert.time == now
        assert alert.substation_name == "North Substation"
        assert repository.get_equipment("EQ-2023-001").status == Status.ERROR
        assert repository.get_substation("SUB-001").status == Status.ERROR

    def test_breaker_fault_marks_unit_and_substation(self, repository, breaker_alert):
        repository.update_alert_status(breaker_alert.id, AlertStatus.COMPLETED)
        assert repository.get_substation("SUB-002").status == Status.NORMAL

        repository.add_alert("EQ-2023-002", "Breaker trip", AlertLevel.ERROR)
        assert repository.get_equipment("EQ-2023-002").status == Status.ERROR
        assert repository.get_substation("SUB-002").status == Status.ERROR

    def test_warning_alert(self, repository):
        repository.add_alert("EQ-2023-003", "Loose connection", "warning")
        assert repository.get_equipment("EQ-2023-003").status == Status.WARNING

    def test_add_alert_unknown_equipment(self, repository):
        alert = repository.add_alert("EQ-404", "Ghost", "warning")
        assert alert.equipment_name == UNKNOWN_EQUIPMENT
        assert alert.substation_name == UNKNOWN_SUBSTATION
        assert repository.get_alert(alert.id) is not None

    def test_active_alerts_exclude_completed(self, repository, breaker_alert):
        repository.update_alert_status(breaker_alert.id, "completed")
        assert breaker_alert.id not in {a.id for a in repository.list_active_alerts()}

    def test_processing_does_not_restore(self, repository, breaker_alert):
        assert repository.update_alert_status(breaker_alert.id, AlertStatus.PROCESSING)
        assert repository.get_alert(breaker_alert.id).status == AlertStatus.PROCESSING
        assert repository.get_equipment("EQ-2023-002").status == Status.ERROR

    def test_completion_restores_breaker_in_one_notification(self, repository, bus, breaker_alert):
        before = bus.notifications
        assert repository.update_alert_status(breaker_alert.id, AlertStatus.COMPLETED)
        assert bus.notifications == before + 1

        breaker = repository.get_equipment("EQ-2023-002")
        assert breaker.status == Status.NORMAL
        assert 30 <= breaker.temperature < 40
        assert 35 <= breaker.current < 50
        assert 45 <= breaker.load < 60
        assert repository.get_substation("SUB-002").status == Status.NORMAL
        assert repository.get_alert(breaker_alert.id).status == AlertStatus.COMPLETED

    def test_update_status_unknown_alert(self, repository):
        assert repository.update_alert_status("ALM-404", "completed") is False

    def test_delete_alert(self, repository, breaker_alert):
        assert repository.delete_alert(breaker_alert.id)
        assert repository.get_alert(breaker_alert.id) is None
        assert repository.delete_alert(breaker_alert.id) is False

    def test_clear_alerts(self, repository):
        repository.clear_alerts()
        assert repository.list_alerts() == []


class TestMaintenance:
    def test_add_rolls_dates_forward(self, repository):
        record = repository.add_maintenance(
            "EQ-2023-005", MaintenanceType.INSPECTION, date(2025, 6, 1), "Wang", "Leakage current test"
        )
        assert record.equipment_name == "Surge arrester LA-12"
        eq = repository.get_equipment("EQ-2023-005")
        assert eq.last_maintenance == date(2025, 6, 1)
        assert eq.next_maintenance == date(2025, 9, 1)

    def test_listed_most_recent_first(self, repository):
        repository.add_maintenance("EQ-2023-001", "repair", date(2025, 7, 1), "Zhao", "Bushing replaced")
        records = repository.list_maintenance()
        assert records[0].date == date(2025, 7, 1)
        assert [r.date for r in records] == sorted((r.date for r in records), reverse=True)

    def test_by_equipment(self, repository):
        records = repository.list_maintenance_by_equipment("EQ-2023-003")
        assert [r.id for r in records] == ["M-2023-002"]

    def test_invalid_type_raises(self, repository):
        with pytest.raises(ValueError):
            repository.add_maintenance("EQ-2023-001", "overhaul", date(2025, 6, 1), "Zhang", "x")

    def test_update_and_delete(self, repository):
        assert repository.update_maintenance("M-2023-001", technician="Chen", id="M-X")
        assert repository.list_maintenance_by_equipment("EQ-2023-001")[0].technician == "Chen"
        assert repository.delete_maintenance("M-2023-001")
        assert repository.delete_maintenance("M-2023-001") is False
        assert repository.update_maintenance("M-404", technician="x") is False
