"""
tests/test_metrics.py
──────────────────────
Tests for fleet KPIs and report aggregates.
"""
from datetime import date

import pandas as pd

from src.analytics.metrics import (
    alerts_by_level,
    compute_system_metrics,
    equipment_frame,
    maintenance_by_month,
    maintenance_by_type,
    status_by_type,
)
from src.data.seed import build_seed_document


class TestComputeSystemMetrics:
    def test_seed_metrics(self, now):
        doc = build_seed_document(now)
        metrics = compute_system_metrics(
            list(doc.equipment.values()), list(doc.substations.values()), doc.alerts, doc.maintenance,
            today=date(2025, 5, 15),
        )
        assert metrics.total_equipment == 5
        assert (metrics.normal, metrics.warning, metrics.error) == (3, 1, 1)
        assert (metrics.normal_rate, metrics.warning_rate, metrics.error_rate) == (60, 20, 20)
        assert metrics.health_rate == 60.0
        # (65 + 45 + 0 + 58 + 78) / 5
        assert metrics.average_load == 49.2
        assert metrics.total_substations == 3
        assert metrics.active_alerts == 2
        assert metrics.maintenance_this_month == 2

    def test_empty_fleet(self):
        metrics = compute_system_metrics([], [], [], [], today=date(2025, 6, 1))
        assert metrics.total_equipment == 0
        assert metrics.normal_rate == 0
        assert metrics.average_load == 0.0

    def test_to_dict(self, now):
        doc = build_seed_document(now)
        data = compute_system_metrics(list(doc.equipment.values()), [], [], []).to_dict()
        assert data["total_equipment"] == 5


class TestFrames:
    def test_equipment_frame_columns(self, now):
        df = equipment_frame(list(build_seed_document(now).equipment.values()))
        assert {"id", "type", "status", "load"} <= set(df.columns)
        assert len(df) == 5

    def test_empty_equipment_frame(self):
        assert equipment_frame([]).empty


class TestReportAggregates:
    def test_status_by_type_covers_all_types(self, now):
        table = status_by_type(list(build_seed_document(now).equipment.values()))
        assert list(table.columns) == ["normal", "warning", "error"]
        assert len(table) == 5
        assert table.loc["breaker", "error"] == 1
        assert table.values.sum() == 5

    def test_maintenance_by_month(self, now):
        table = maintenance_by_month(build_seed_document(now).maintenance, months=3, today=date(2025, 6, 10))
        assert list(table.index) == [pd.Timestamp("2025-04-01"), pd.Timestamp("2025-05-01"), pd.Timestamp("2025-06-01")]
        assert table.loc[pd.Timestamp("2025-05-01"), "preventive"] == 1
        assert table.loc[pd.Timestamp("2025-05-01"), "inspection"] == 1
        assert table.loc[pd.Timestamp("2025-06-01")].sum() == 0

    def test_maintenance_by_type(self, now):
        counts = maintenance_by_type(build_seed_document(now).maintenance)
        assert counts.to_dict() == {"preventive": 1, "inspection": 1, "repair": 0}

    def test_alerts_by_level(self, repository, breaker_alert):
        repository.update_alert_status(breaker_alert.id, "completed")
        alerts = repository.list_alerts()
        assert alerts_by_level(alerts).to_dict() == {"warning": 1, "error": 1}
        assert alerts_by_level(alerts, active_only=True).to_dict() == {"warning": 1, "error": 0}
