"""
src/workflow/engine.py
──────────────────────
Fault-resolution workflow engine.

A cooperative state machine: nothing runs in the background. The fault page
calls tick() from a dcc.Interval; every timer is a timestamp on the session
and tick() applies, in order, every transition whose time has come. A long
gap between ticks therefore replays the whole timeline deterministically.

Timeline (defaults from config.settings):

  start ──1s──▶ step 1 in_progress ──2s──▶ completed ──1s──▶ step 2 ...
  step 5 (result_verification) reverts to pending instead of completing,
  the solution becomes visible and the session awaits its commands.

Command path, one per command, dispatched independently:

  pending/failed ──dispatch──▶ processing ──1.5s──▶ sent ──1s──▶ completed
                                             └─(5%)─▶ failed (retryable)

Barrier: when every command is completed, result_verification goes
in_progress and completes 2s later; the session is then resolved and the
operator can confirm completion.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import numpy as np
import structlog

from config.alerts import AlertStatus, MaintenanceType, Status
from src.analytics.diagnosis import COMMAND_TEMPLATES, SensorSnapshot, diagnose
from src.data.models import Equipment, MaintenanceRecord, new_id
from src.data.repository import GridRepository
from src.data.telemetry import infer_vibration
from src.workflow.cache import SessionCache
from src.workflow.session import (
    Command,
    CommandStatus,
    FaultSession,
    SessionStage,
    Solution,
    StepKey,
    StepStatus,
    initial_steps,
)

logger = structlog.get_logger(__name__)

WAITING_FOR_COMMANDS = "Waiting for all commands to complete..."
VERIFYING_COMMANDS = "All commands executed, verifying whether the fault is cleared..."
FAULT_CLEARED = "All commands executed, fault cleared."

REPAIR_TECHNICIAN = "Automated fault handling"
REPAIR_CONTENT = "Fault handled automatically, equipment back in normal operation"
REPAIR_DURATION = "30min"


class WorkflowStateError(RuntimeError):
    """Raised when an operation is not allowed in the session's current stage."""


@dataclass(frozen=True)
class WorkflowTiming:
    start_delay: float = 1.0
    step_dwell: float = 2.0
    step_gap: float = 1.0
    finalize_delay: float = 2.0
    send_delay: float = 1.5
    execution_delay: float = 1.0
    failure_rate: float = 0.05

    @classmethod
    def from_settings(cls, settings) -> WorkflowTiming:
        return cls(
            start_delay=settings.WORKFLOW_START_DELAY_S,
            step_dwell=settings.WORKFLOW_STEP_DWELL_S,
            step_gap=settings.WORKFLOW_STEP_GAP_S,
            finalize_delay=settings.WORKFLOW_FINALIZE_DELAY_S,
            send_delay=settings.COMMAND_SEND_DELAY_S,
            execution_delay=settings.COMMAND_EXECUTION_DELAY_S,
            failure_rate=settings.COMMAND_FAILURE_RATE,
        )


@dataclass(frozen=True)
class WorkflowEvent:
    equipment_id: str
    kind: str            # "stage" | "step" | "command"
    target: str          # stage name, step key or command id
    status: str
    detail: str = ""
    at: datetime | None = None


WorkflowListener = Callable[[WorkflowEvent], None]


# ── Solution & step texts ─────────────────────────────────────────────────────

def capture_sensors(equipment: Equipment, rng: np.random.Generator) -> SensorSnapshot:
    """Readings the diagnosis runs on; vibration is inferred from load."""
    return SensorSnapshot(
        temperature=equipment.temperature,
        current=equipment.current,
        voltage=equipment.voltage,
        vibration=infer_vibration(equipment.load, rng),
        has_visual_anomaly=equipment.status != Status.NORMAL,
    )


def build_solution(equipment_type: str, sensors: SensorSnapshot | None) -> Solution:
    result = diagnose(equipment_type, sensors)
    return Solution(
        diagnosis=result.diagnosis,
        solution=result.solution,
        commands=[
            Command(id=new_id("CMD"), key=t.key, name=t.name, content=t.content)
            for t in COMMAND_TEMPLATES
        ],
    )


def step_detail(session: FaultSession, key: StepKey, status: StepStatus) -> str:
    done = status == StepStatus.COMPLETED
    if key == StepKey.DATA_COLLECTION:
        s = session.sensors
        if s is None:
            return f"Collected fault data for {session.equipment_name} ({session.equipment_id})."
        text = (
            f"Collected live readings for {session.equipment_name}: "
            f"temperature {s.temperature:g} °C, current {s.current:g} A, "
            f"voltage {s.voltage:g} kV, vibration {s.vibration:g} mm/s."
        )
        if s.has_visual_anomaly:
            text += " Camera detected an abnormal appearance."
        return text
    if key == StepKey.FAULT_ANALYSIS:
        if done and session.solution is not None:
            return f"Analysis complete. {session.solution.diagnosis}"
        return "Analysing sensor features and matching against historical fault cases"
    if key == StepKey.SOLUTION_GENERATION:
        if done and session.solution is not None:
            actions = len([line for line in session.solution.solution.splitlines() if line.strip()])
            return f"Solution generated: {actions} remediation actions, {len(session.solution.commands)} control commands."
        return "Building a preliminary solution from the analysis, assessing feasibility and risk"
    if key == StepKey.COMMAND_DISPATCH:
        if done:
            return "Control commands prepared and ready for dispatch."
        return "Preparing control commands for staged dispatch"
    if key == StepKey.RESULT_VERIFICATION:
        if done:
            return FAULT_CLEARED
        return "Verifying equipment state"
    return ""


# ── Engine ────────────────────────────────────────────────────────────────────

class FaultResolutionEngine:
    def __init__(
        self,
        repository: GridRepository,
        cache: SessionCache | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: np.random.Generator | None = None,
        timing: WorkflowTiming | None = None,
    ) -> None:
        self.repository = repository
        self.cache = cache
        self.clock = clock or (lambda: datetime.now(tz=UTC))
        self.rng = rng or np.random.default_rng()
        self.timing = timing or WorkflowTiming()
        self._listeners: list[WorkflowListener] = []

    # ── Observers ─────────────────────────────────────────────────────────────

    def subscribe(self, listener: WorkflowListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: WorkflowListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, events: list[WorkflowEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception("workflow_listener_failed", listener=repr(listener))

    def _finish(self, session: FaultSession, events: list[WorkflowEvent], now: datetime) -> list[WorkflowEvent]:
        if events:
            session.updated_at = now
            if self.cache is not None:
                self.cache.save(session)
        self._emit(events)
        return events

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _stage(self, session: FaultSession, stage: SessionStage, at: datetime, events: list[WorkflowEvent]) -> None:
        logger.info(
            "workflow_stage_changed",
            equipment_id=session.equipment_id,
            old=session.stage.value,
            new=stage.value,
        )
        session.stage = stage
        events.append(WorkflowEvent(session.equipment_id, "stage", stage.value, stage.value, at=at))

    @staticmethod
    def _step_event(session: FaultSession, key: StepKey, at: datetime) -> WorkflowEvent:
        step = session.step(key)
        return WorkflowEvent(session.equipment_id, "step", key.value, step.status.value, step.detail, at)

    @staticmethod
    def _command_event(session: FaultSession, command: Command, at: datetime, detail: str = "") -> WorkflowEvent:
        return WorkflowEvent(session.equipment_id, "command", command.id, command.status.value, detail, at)

    # ── Public API ────────────────────────────────────────────────────────────

    def open(self, equipment_id: str, alert_id: str | None = None) -> FaultSession:
        """
        Return the unit's session, resuming a cached one unless it is closed.

        Raises WorkflowStateError when the equipment does not exist.
        """
        equipment = self.repository.get_equipment(equipment_id)
        if equipment is None:
            raise WorkflowStateError(f"Unknown equipment {equipment_id}")

        if self.cache is not None:
            cached = self.cache.load(equipment_id)
            if cached is not None and cached.stage != SessionStage.CLOSED:
                if alert_id:
                    cached.alert_id = alert_id
                logger.debug("session_resumed", equipment_id=equipment_id, stage=cached.stage.value)
                return cached

        session = FaultSession(
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            equipment_type=equipment.type.value,
            alert_id=alert_id,
        )
        if self.cache is not None:
            self.cache.save(session)
        return session

    def start(self, session: FaultSession, now: datetime | None = None) -> list[WorkflowEvent]:
        """Reset the steps, capture sensors and schedule the analysis timeline."""
        if session.stage != SessionStage.IDLE:
            raise WorkflowStateError(f"Session already {session.stage.value}")
        now = now or self.clock()
        events: list[WorkflowEvent] = []

        session.thinking_steps = initial_steps()
        session.timeline_index = 0
        session.show_solution = False

        equipment = self.repository.get_equipment(session.equipment_id)
        session.sensors = capture_sensors(equipment, self.rng) if equipment else None
        session.solution = build_solution(session.equipment_type, session.sensors)
        session.next_transition_at = now + timedelta(seconds=self.timing.start_delay)

        self._stage(session, SessionStage.ANALYZING, now, events)
        return self._finish(session, events, now)

    def tick(self, session: FaultSession, now: datetime | None = None) -> list[WorkflowEvent]:
        """Apply every transition that is due at `now`; returns the events produced."""
        now = now or self.clock()
        events: list[WorkflowEvent] = []
        self._advance_timeline(session, now, events)
        self._advance_commands(session, now, events)
        self._advance_verification(session, now, events)
        return self._finish(session, events, now)

    def dispatch_command(self, session: FaultSession, command_id: str, now: datetime | None = None) -> list[WorkflowEvent]:
        """Send one command; a failed command is reset to pending and re-sent."""
        if session.stage != SessionStage.AWAITING_COMMANDS or not session.show_solution:
            raise WorkflowStateError("Commands can only be sent once the solution is available")
        command = session.command(command_id)
        if command is None:
            raise WorkflowStateError(f"Unknown command {command_id}")
        if command.status not in (CommandStatus.PENDING, CommandStatus.FAILED):
            raise WorkflowStateError(f"Command {command.name} is already {command.status.value}")

        now = now or self.clock()
        events: list[WorkflowEvent] = []
        if command.status == CommandStatus.FAILED:
            command.status = CommandStatus.PENDING
            command.timestamp = now
            events.append(self._command_event(session, command, now, "Retrying"))

        command.status = CommandStatus.PROCESSING
        command.attempts += 1
        command.timestamp = now
        command.due_at = now + timedelta(seconds=self.timing.send_delay)
        events.append(self._command_event(session, command, now))
        logger.info("command_dispatched", equipment_id=session.equipment_id, command=command.key, attempt=command.attempts)
        return self._finish(session, events, now)

    def complete(self, session: FaultSession, now: datetime | None = None) -> MaintenanceRecord:
        """
        Confirm a resolved session.

        Completes the originating alert (which restores the equipment). When
        that alert is gone, already completed or belongs to another unit, the
        equipment is restored directly. Logs a repair maintenance record and
        closes the session.
        """
        if session.stage != SessionStage.RESOLVED:
            raise WorkflowStateError("Fault can only be confirmed once verification has completed")
        now = now or self.clock()

        alert = self.repository.get_alert(session.alert_id) if session.alert_id else None
        if (
            alert is not None
            and alert.equipment_id == session.equipment_id
            and alert.status != AlertStatus.COMPLETED
        ):
            self.repository.update_alert_status(alert.id, AlertStatus.COMPLETED)
        else:
            self.repository.restore_equipment_normal_state(session.equipment_id)

        record = self.repository.add_maintenance(
            equipment_id=session.equipment_id,
            type=MaintenanceType.REPAIR,
            date=now.date(),
            technician=REPAIR_TECHNICIAN,
            content=REPAIR_CONTENT,
            duration=REPAIR_DURATION,
            equipment_name=session.equipment_name or None,
        )

        events: list[WorkflowEvent] = []
        self._stage(session, SessionStage.CLOSED, now, events)
        self._finish(session, events, now)
        return record

    # ── Transitions ───────────────────────────────────────────────────────────

    def _advance_timeline(self, session: FaultSession, now: datetime, events: list[WorkflowEvent]) -> None:
        while (
            session.stage == SessionStage.ANALYZING
            and session.next_transition_at is not None
            and session.next_transition_at <= now
        ):
            due = session.next_transition_at
            step = session.thinking_steps[session.timeline_index]

            if step.status == StepStatus.PENDING:
                step.status = StepStatus.IN_PROGRESS
                step.started_at = due
                step.detail = step_detail(session, step.key, step.status)
                session.next_transition_at = due + timedelta(seconds=self.timing.step_dwell)
                events.append(self._step_event(session, step.key, due))

            elif step.key == StepKey.RESULT_VERIFICATION:
                # Last step waits for the commands instead of completing
                step.status = StepStatus.PENDING
                step.detail = WAITING_FOR_COMMANDS
                session.show_solution = True
                session.next_transition_at = None
                events.append(self._step_event(session, step.key, due))
                self._stage(session, SessionStage.AWAITING_COMMANDS, due, events)

            else:
                step.status = StepStatus.COMPLETED
                step.finished_at = due
                step.detail = step_detail(session, step.key, step.status)
                session.timeline_index += 1
                session.next_transition_at = due + timedelta(seconds=self.timing.step_gap)
                events.append(self._step_event(session, step.key, due))

    def _advance_commands(self, session: FaultSession, now: datetime, events: list[WorkflowEvent]) -> None:
        if session.solution is None or session.stage != SessionStage.AWAITING_COMMANDS:
            return
        for command in session.solution.commands:
            while command.due_at is not None and command.due_at <= now:
                due = command.due_at
                command.timestamp = due
                detail = ""
                if command.status == CommandStatus.PROCESSING:
                    if self.rng.random() < self.timing.failure_rate:
                        command.status = CommandStatus.FAILED
                        command.due_at = None
                        detail = "Command send failed, please retry"
                        logger.warning(
                            "command_failed",
                            equipment_id=session.equipment_id,
                            command=command.key,
                            attempt=command.attempts,
                        )
                    else:
                        command.status = CommandStatus.SENT
                        command.due_at = due + timedelta(seconds=self.timing.execution_delay)
                elif command.status == CommandStatus.SENT:
                    command.status = CommandStatus.COMPLETED
                    command.due_at = None
                else:
                    command.due_at = None
                    continue
                events.append(self._command_event(session, command, due, detail))

    def _advance_verification(self, session: FaultSession, now: datetime, events: list[WorkflowEvent]) -> None:
        step = session.step(StepKey.RESULT_VERIFICATION)

        if session.stage == SessionStage.AWAITING_COMMANDS and session.all_commands_completed:
            finished = max(c.timestamp or now for c in session.solution.commands)
            step.status = StepStatus.IN_PROGRESS
            step.started_at = finished
            step.detail = VERIFYING_COMMANDS
            session.next_transition_at = finished + timedelta(seconds=self.timing.finalize_delay)
            events.append(self._step_event(session, step.key, finished))
            self._stage(session, SessionStage.VERIFYING, finished, events)

        if (
            session.stage == SessionStage.VERIFYING
            and session.next_transition_at is not None
            and session.next_transition_at <= now
        ):
            due = session.next_transition_at
            step.status = StepStatus.COMPLETED
            step.finished_at = due
            step.detail = FAULT_CLEARED
            session.next_transition_at = None
            events.append(self._step_event(session, step.key, due))
            self._stage(session, SessionStage.RESOLVED, due, events)
