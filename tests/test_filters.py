"""
tests/test_filters.py
──────────────────────
Tests for the equipment and alert table filters used by the pages.
"""
from src.analytics.metrics import equipment_frame
from src.callbacks.alerts import filter_alerts
from src.callbacks.equipment import filter_equipment


class TestFilterEquipment:
    def test_no_filters(self, repository):
        df = equipment_frame(repository.list_equipment())
        assert len(filter_equipment(df)) == 5

    def test_combined_filters(self, repository):
        df = equipment_frame(repository.list_equipment())
        result = filter_equipment(df, substation="SUB-002", status="error")
        assert list(result["id"]) == ["EQ-2023-002"]

    def test_search_matches_name_or_id(self, repository):
        df = equipment_frame(repository.list_equipment())
        assert list(filter_equipment(df, search="cb-24")["id"]) == ["EQ-2023-002"]
        assert list(filter_equipment(df, search="2023-005")["id"]) == ["EQ-2023-005"]

    def test_type_filter(self, repository):
        df = equipment_frame(repository.list_equipment())
        assert list(filter_equipment(df, equipment_type="instrument_transformer")["id"]) == ["EQ-2023-004"]


class TestFilterAlerts:
    def test_active_sorted_by_severity(self, repository):
        df = filter_alerts(repository.list_alerts())
        assert list(df["level"]) == ["error", "warning"]

    def test_completed_hidden_unless_all(self, repository, breaker_alert):
        repository.update_alert_status(breaker_alert.id, "completed")
        assert len(filter_alerts(repository.list_alerts(), scope="active")) == 1
        assert len(filter_alerts(repository.list_alerts(), scope="all")) == 2

    def test_level_filter(self, repository):
        df = filter_alerts(repository.list_alerts(), scope="all", level="warning")
        assert [a.equipment_id for a in repository.list_alerts() if a.id in set(df["id"])] == ["EQ-2023-004"]

    def test_empty(self):
        assert filter_alerts([]).empty
