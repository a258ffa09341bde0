"""
tests/test_diagnosis.py
────────────────────────
Tests for the rule-table fault diagnosis.
"""
import pytest

from src.analytics.diagnosis import (
    CHECKLISTS,
    COMMAND_TEMPLATES,
    DEFAULT_CHECKLISTS,
    GENERIC_CHECKLIST,
    NO_FINDINGS,
    NO_SENSOR_DIAGNOSES,
    NO_SENSOR_FALLBACK,
    Condition,
    SensorSnapshot,
    checklist_for,
    diagnose,
    matched_conditions,
)
from src.workflow.engine import build_solution


def _snapshot(**overrides) -> SensorSnapshot:
    fields = dict(temperature=40.0, current=50.0, voltage=10.5, vibration=2.0, has_visual_anomaly=False)
    fields.update(overrides)
    return SensorSnapshot(**fields)


class TestMatchedConditions:
    def test_quiet_snapshot(self):
        assert matched_conditions(_snapshot()) == []

    def test_limits_are_strict(self):
        snapshot = _snapshot(temperature=75.0, current=150.0, voltage=11.5, vibration=3.5)
        assert matched_conditions(snapshot) == []

    def test_low_voltage(self):
        assert matched_conditions(_snapshot(voltage=9.4)) == [Condition.VOLTAGE]

    def test_fixed_rule_order(self):
        snapshot = _snapshot(temperature=78, current=160, voltage=12, vibration=4.2, has_visual_anomaly=True)
        assert matched_conditions(snapshot) == [
            Condition.TEMPERATURE,
            Condition.CURRENT,
            Condition.VOLTAGE,
            Condition.VIBRATION,
            Condition.VISUAL,
        ]


class TestChecklistFor:
    def test_type_specific(self):
        assert checklist_for(Condition.CURRENT, "breaker") == CHECKLISTS[(Condition.CURRENT, "breaker")]

    def test_falls_back_to_condition_default(self):
        assert checklist_for(Condition.VIBRATION, "arrester") == DEFAULT_CHECKLISTS[Condition.VIBRATION]

    def test_unknown_type_uses_default(self):
        assert checklist_for(Condition.TEMPERATURE, "capacitor") == DEFAULT_CHECKLISTS[Condition.TEMPERATURE]

    def test_returns_copy(self):
        checklist_for(Condition.CURRENT, "breaker").append("extra")
        assert "extra" not in CHECKLISTS[(Condition.CURRENT, "breaker")]


class TestDiagnose:
    def test_breaker_overtemperature_with_visual(self):
        result = diagnose("breaker", _snapshot(temperature=78, current=0, has_visual_anomaly=True))
        assert result.conditions == [Condition.TEMPERATURE, Condition.VISUAL]
        assert "78 °C" in result.diagnosis
        assert "Camera detected" in result.diagnosis
        assert len(result.sections) == 2
        # One blank line between sections
        assert result.solution.count("\n\n") == 1

    def test_no_findings_gives_generic_checklist(self):
        result = diagnose("transformer", _snapshot())
        assert result.diagnosis == NO_FINDINGS
        assert result.sections == [GENERIC_CHECKLIST]
        assert result.conditions == []

    @pytest.mark.parametrize("equipment_type", ["transformer", "breaker", "disconnector", "instrument_transformer", "arrester"])
    def test_without_sensors_uses_type_diagnosis(self, equipment_type):
        result = diagnose(equipment_type, None)
        text, checklist = NO_SENSOR_DIAGNOSES[equipment_type]
        assert result.diagnosis == text
        assert result.sections == [checklist]

    def test_without_sensors_unknown_type(self):
        assert diagnose("capacitor", None).diagnosis == NO_SENSOR_FALLBACK[0]


class TestBuildSolution:
    @pytest.mark.parametrize("sensors", [None, _snapshot(), _snapshot(temperature=90, vibration=4.2)])
    def test_always_three_commands(self, sensors):
        solution = build_solution("transformer", sensors)
        assert [c.key for c in solution.commands] == [t.key for t in COMMAND_TEMPLATES]
        assert all(c.status == "pending" for c in solution.commands)
        assert len({c.id for c in solution.commands}) == 3
