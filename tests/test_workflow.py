"""
tests/test_workflow.py
───────────────────────
Tests for the fault-resolution workflow engine.

Time is driven explicitly: every call passes `now`, so the timeline is
checked at exact offsets from the start.
"""
from datetime import date, timedelta

import pytest

from config.alerts import AlertStatus, MaintenanceType, Status
from src.workflow.engine import (
    FAULT_CLEARED,
    REPAIR_TECHNICIAN,
    WAITING_FOR_COMMANDS,
    FaultResolutionEngine,
    WorkflowStateError,
    WorkflowTiming,
)
from src.workflow.session import CommandStatus, SessionStage, StepKey, StepStatus

# start 1s, 4 steps of (2s dwell + 1s gap), step 5 dwells 2s then waits
SOLUTION_VISIBLE_AT = 15


def at(now, seconds: float):
    return now + timedelta(seconds=seconds)


def _analysed(engine, now, equipment_id="EQ-2023-002", alert_id=None):
    session = engine.open(equipment_id, alert_id)
    engine.start(session, now=now)
    engine.tick(session, now=at(now, SOLUTION_VISIBLE_AT))
    return session


def _dispatch_all(engine, session, when):
    for command in session.solution.commands:
        engine.dispatch_command(session, command.id, now=when)


class TestOpen:
    def test_new_session_is_idle(self, engine):
        session = engine.open("EQ-2023-002")
        assert session.stage == SessionStage.IDLE
        assert session.equipment_name == "Circuit breaker CB-24"
        assert [s.key for s in session.thinking_steps] == list(StepKey)

    def test_unknown_equipment(self, engine):
        with pytest.raises(WorkflowStateError):
            engine.open("EQ-404")

    def test_resumes_cached_session(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        resumed = engine.open("EQ-2023-002", alert_id="ALM-1")
        assert resumed.stage == SessionStage.ANALYZING
        assert resumed.alert_id == "ALM-1"


class TestTimeline:
    def test_start_only_from_idle(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        with pytest.raises(WorkflowStateError):
            engine.start(session, now=now)

    def test_start_resets_every_step_to_pending(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        assert [s.key for s in session.thinking_steps] == list(StepKey)
        assert all(s.status == StepStatus.PENDING for s in session.thinking_steps)
        assert session.active_step is None

    def test_start_captures_sensors(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        assert session.sensors.temperature == 78
        assert session.sensors.has_visual_anomaly is True
        assert session.solution is not None
        assert session.visible_solution is None

    def test_nothing_happens_before_start_delay(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        assert engine.tick(session, now=at(now, 0.5)) == []
        assert session.active_step is None

    def test_first_step_in_progress_after_one_second(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        engine.tick(session, now=at(now, 1))
        assert session.active_step.key == StepKey.DATA_COLLECTION
        assert "78 °C" in session.active_step.detail

    def test_steps_advance_on_schedule(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        engine.tick(session, now=at(now, 4))
        assert session.step(StepKey.DATA_COLLECTION).status == StepStatus.COMPLETED
        assert session.step(StepKey.DATA_COLLECTION).finished_at == at(now, 3)
        assert session.active_step.key == StepKey.FAULT_ANALYSIS

    def test_long_gap_replays_whole_timeline(self, engine, now):
        session = _analysed(engine, now)
        assert session.stage == SessionStage.AWAITING_COMMANDS
        assert session.visible_solution is not None
        completed = [s.key for s in session.thinking_steps if s.status == StepStatus.COMPLETED]
        assert completed == list(StepKey)[:4]
        verification = session.step(StepKey.RESULT_VERIFICATION)
        assert verification.status == StepStatus.PENDING
        assert verification.detail == WAITING_FOR_COMMANDS

    def test_solution_hidden_until_timeline_finishes(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        engine.tick(session, now=at(now, SOLUTION_VISIBLE_AT - 0.1))
        assert session.stage == SessionStage.ANALYZING
        assert session.visible_solution is None

    def test_events_reach_listeners(self, engine, now):
        seen = []
        engine.subscribe(seen.append)
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        engine.tick(session, now=at(now, 1))
        assert [(e.kind, e.target) for e in seen] == [
            ("stage", "analyzing"),
            ("step", "data_collection"),
        ]

    def test_failing_listener_is_isolated(self, engine, now):
        def broken(event):
            raise RuntimeError("boom")

        engine.subscribe(broken)
        session = engine.open("EQ-2023-002")
        assert engine.start(session, now=now)


class TestCommands:
    def test_dispatch_requires_visible_solution(self, engine, now):
        session = engine.open("EQ-2023-002")
        engine.start(session, now=now)
        with pytest.raises(WorkflowStateError):
            engine.dispatch_command(session, session.solution.commands[0].id, now=now)

    def test_command_path(self, engine, now):
        session = _analysed(engine, now)
        command = session.solution.commands[0]
        t = at(now, 20)
        engine.dispatch_command(session, command.id, now=t)
        assert command.status == CommandStatus.PROCESSING

        engine.tick(session, now=at(t, 1.5))
        assert command.status == CommandStatus.SENT
        engine.tick(session, now=at(t, 2.5))
        assert command.status == CommandStatus.COMPLETED
        assert command.attempts == 1

    def test_cannot_dispatch_twice(self, engine, now):
        session = _analysed(engine, now)
        command = session.solution.commands[0]
        engine.dispatch_command(session, command.id, now=at(now, 20))
        with pytest.raises(WorkflowStateError):
            engine.dispatch_command(session, command.id, now=at(now, 20.5))

    def test_unknown_command(self, engine, now):
        session = _analysed(engine, now)
        with pytest.raises(WorkflowStateError):
            engine.dispatch_command(session, "CMD-404", now=at(now, 20))

    def test_barrier_waits_for_every_command(self, engine, now):
        session = _analysed(engine, now)
        first, *rest = session.solution.commands
        engine.dispatch_command(session, first.id, now=at(now, 20))
        engine.tick(session, now=at(now, 30))
        assert first.status == CommandStatus.COMPLETED
        assert session.stage == SessionStage.AWAITING_COMMANDS

        for command in rest:
            engine.dispatch_command(session, command.id, now=at(now, 40))
        engine.tick(session, now=at(now, 42.5))
        assert session.stage == SessionStage.VERIFYING
        assert session.step(StepKey.RESULT_VERIFICATION).status == StepStatus.IN_PROGRESS

        engine.tick(session, now=at(now, 44.5))
        assert session.stage == SessionStage.RESOLVED
        verification = session.step(StepKey.RESULT_VERIFICATION)
        assert verification.status == StepStatus.COMPLETED
        assert verification.detail == FAULT_CLEARED

    def test_failed_command_can_be_retried(self, repository, cache, rng, now):
        failing = FaultResolutionEngine(
            repository, cache=cache, rng=rng, timing=WorkflowTiming(failure_rate=1.0)
        )
        session = _analysed(failing, now)
        command = session.solution.commands[0]
        failing.dispatch_command(session, command.id, now=at(now, 20))
        failing.tick(session, now=at(now, 21.5))
        assert command.status == CommandStatus.FAILED

        reliable = FaultResolutionEngine(repository, cache=cache, rng=rng, timing=WorkflowTiming(failure_rate=0.0))
        events = reliable.dispatch_command(session, command.id, now=at(now, 25))
        assert [e.status for e in events] == ["pending", "processing"]
        assert events[0].detail == "Retrying"
        reliable.tick(session, now=at(now, 27.5))
        assert command.status == CommandStatus.COMPLETED
        assert command.attempts == 2


class TestComplete:
    def _resolve(self, engine, now, alert_id=None):
        session = _analysed(engine, now, alert_id=alert_id)
        _dispatch_all(engine, session, at(now, 20))
        engine.tick(session, now=at(now, 30))
        assert session.stage == SessionStage.RESOLVED
        return session

    def test_complete_requires_resolved(self, engine, now):
        session = _analysed(engine, now)
        with pytest.raises(WorkflowStateError):
            engine.complete(session, now=at(now, 20))

    def test_complete_closes_alert_and_logs_repair(self, engine, repository, now, breaker_alert):
        session = self._resolve(engine, now, alert_id=breaker_alert.id)
        record = engine.complete(session, now=at(now, 31))

        assert session.stage == SessionStage.CLOSED
        assert record.type == MaintenanceType.REPAIR
        assert record.technician == REPAIR_TECHNICIAN
        assert record.date == date(2025, 6, 1)
        assert repository.get_alert(breaker_alert.id).status == AlertStatus.COMPLETED

        breaker = repository.get_equipment("EQ-2023-002")
        assert breaker.status == Status.NORMAL
        assert 30 <= breaker.temperature < 40
        assert breaker.last_maintenance == date(2025, 6, 1)
        assert repository.get_substation("SUB-002").status == Status.NORMAL

    def test_complete_restores_unit_that_faulted_again(self, engine, repository, now, breaker_alert):
        session = _analysed(engine, now, alert_id=breaker_alert.id)
        _dispatch_all(engine, session, at(now, 20))
        # Alert closed from the alerts page, then the breaker trips again
        repository.update_alert_status(breaker_alert.id, AlertStatus.COMPLETED)
        repository.add_alert("EQ-2023-002", "Refault", "error")
        engine.tick(session, now=at(now, 30))
        assert session.stage == SessionStage.RESOLVED

        record = engine.complete(session, now=at(now, 31))

        breaker = repository.get_equipment("EQ-2023-002")
        assert breaker.status == Status.NORMAL
        assert 30 <= breaker.temperature < 40
        assert repository.get_substation("SUB-002").status == Status.NORMAL
        assert record.type == MaintenanceType.REPAIR

    def test_complete_ignores_alert_of_another_unit(self, engine, repository, now, breaker_alert):
        session = self._resolve(engine, now, alert_id=breaker_alert.id)
        session.equipment_id = "EQ-2023-004"
        engine.complete(session, now=at(now, 31))
        assert repository.get_alert(breaker_alert.id).status == AlertStatus.PENDING
        assert repository.get_equipment("EQ-2023-004").status == Status.NORMAL

    def test_complete_without_alert_restores_equipment(self, engine, repository, now):
        session = self._resolve(engine, now)
        engine.complete(session, now=at(now, 31))
        assert repository.get_equipment("EQ-2023-002").status == Status.NORMAL

    def test_closed_session_is_not_resumed(self, engine, now):
        session = self._resolve(engine, now)
        engine.complete(session, now=at(now, 31))
        assert engine.open("EQ-2023-002").stage == SessionStage.IDLE
