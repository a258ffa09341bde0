"""
tests/test_simulator.py
────────────────────────
Tests for the synthetic alert simulator and telemetry draws.
"""
import numpy as np

from config.alerts import SIMULATED_FAULTS, AlertLevel, AlertStatus, Status
from config.equipment import HIGH_LOAD_VIBRATION_MMS, NORMAL_BANDS
from src.data.simulator import candidate_equipment_ids, simulate_alert
from src.data.telemetry import fault_telemetry, infer_vibration, normal_telemetry


class TestTelemetry:
    def test_normal_telemetry_inside_band(self, rng):
        band = NORMAL_BANDS["transformer"]
        for _ in range(50):
            t = normal_telemetry("transformer", rng)
            assert band.temperature_c[0] <= t["temperature"] < band.temperature_c[1]
            assert band.current_a[0] <= t["current"] < band.current_a[1]
            assert band.load_pct[0] <= t["load"] < band.load_pct[1]

    def test_unknown_type_uses_default_band(self, rng):
        t = normal_telemetry("capacitor", rng)
        assert 30 <= t["temperature"] < 45

    def test_error_telemetry_drops_load(self, rng):
        t = fault_telemetry(AlertLevel.ERROR, rng)
        assert t["load"] == 0.0
        assert t["temperature"] >= 70

    def test_warning_telemetry_high_load(self, rng):
        t = fault_telemetry("warning", rng)
        assert 80 <= t["load"] < 100

    def test_vibration_follows_load(self, rng):
        assert infer_vibration(90.0, rng) == HIGH_LOAD_VIBRATION_MMS
        assert 1.5 <= infer_vibration(40.0, rng) <= 3.5


class TestSimulateAlert:
    def test_candidates_skip_units_with_active_alerts(self, repository):
        assert set(candidate_equipment_ids(repository)) == {"EQ-2023-001", "EQ-2023-003", "EQ-2023-005"}

    def test_raises_alert_and_pushes_telemetry(self, repository, bus):
        before = bus.notifications
        result = simulate_alert(repository, rng=np.random.default_rng(7))
        alert = result.alert
        assert alert is not None
        assert alert.message in SIMULATED_FAULTS
        assert alert.status == AlertStatus.PENDING
        assert bus.notifications == before + 2

        eq = repository.get_equipment(alert.equipment_id)
        expected = Status.ERROR if alert.level == AlertLevel.ERROR else Status.WARNING
        assert eq.status == expected
        assert eq.temperature >= 60

    def test_reproducible(self, kv, store, bus):
        from src.data.repository import GridRepository

        first = simulate_alert(GridRepository(store, bus), rng=np.random.default_rng(3)).alert
        kv.delete(store.key)  # next load reseeds
        second = simulate_alert(GridRepository(store, bus), rng=np.random.default_rng(3)).alert
        assert (first.equipment_id, first.message, first.level) == (second.equipment_id, second.message, second.level)

    def test_every_unit_alerted(self, repository):
        for _ in range(3):
            assert simulate_alert(repository).alert is not None
        result = simulate_alert(repository)
        assert result.alert is None
        assert result.reason == "Every unit already has an active alert"

    def test_no_equipment(self, repository):
        for sub in repository.list_substations():
            repository.delete_substation(sub.id)
        result = simulate_alert(repository)
        assert result.alert is None
        assert result.reason == "No equipment available"
