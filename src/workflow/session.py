"""
src/workflow/session.py
───────────────────────
Pydantic models for a fault-resolution session.

A session belongs to one equipment unit and walks five thinking steps:

  data_collection → fault_analysis → solution_generation
                  → command_dispatch → result_verification

Stage of the session as a whole:

  idle → analyzing → awaiting_commands → verifying → resolved → closed

Timers are stored as timestamps (`next_transition_at`, `Command.due_at`)
and compared by the engine on every tick.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.analytics.diagnosis import SensorSnapshot


class StepKey(str, Enum):
    DATA_COLLECTION = "data_collection"
    FAULT_ANALYSIS = "fault_analysis"
    SOLUTION_GENERATION = "solution_generation"
    COMMAND_DISPATCH = "command_dispatch"
    RESULT_VERIFICATION = "result_verification"


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class CommandStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SessionStage(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    AWAITING_COMMANDS = "awaiting_commands"
    VERIFYING = "verifying"
    RESOLVED = "resolved"
    CLOSED = "closed"


# (key, title, description, Font Awesome icon)
STEP_DEFINITIONS: list[tuple[StepKey, str, str, str]] = [
    (StepKey.DATA_COLLECTION, "Data collection",
     "Collecting fault data and maintenance history", "fa-database"),
    (StepKey.FAULT_ANALYSIS, "Fault analysis",
     "Analysing fault features and likely causes", "fa-search"),
    (StepKey.SOLUTION_GENERATION, "Solution generation",
     "Building a solution from history and the knowledge base", "fa-lightbulb"),
    (StepKey.COMMAND_DISPATCH, "Command dispatch",
     "Sending remediation commands to the unit", "fa-paper-plane"),
    (StepKey.RESULT_VERIFICATION, "Result verification",
     "Verifying the fault has been cleared", "fa-check-circle"),
]


class ThinkingStep(BaseModel):
    key: StepKey
    title: str
    description: str
    icon: str = ""
    status: StepStatus = StepStatus.PENDING
    detail: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None


def initial_steps() -> list[ThinkingStep]:
    return [
        ThinkingStep(key=key, title=title, description=description, icon=icon)
        for key, title, description, icon in STEP_DEFINITIONS
    ]


class Command(BaseModel):
    id: str
    key: str
    name: str
    content: str
    status: CommandStatus = CommandStatus.PENDING
    timestamp: datetime | None = None     # last transition
    due_at: datetime | None = None        # next timed transition
    attempts: int = 0


class Solution(BaseModel):
    diagnosis: str
    solution: str
    commands: list[Command] = Field(default_factory=list)


class FaultSession(BaseModel):
    equipment_id: str
    equipment_name: str = ""
    equipment_type: str = ""
    alert_id: str | None = None
    stage: SessionStage = SessionStage.IDLE
    thinking_steps: list[ThinkingStep] = Field(default_factory=initial_steps)
    sensors: SensorSnapshot | None = None
    solution: Solution | None = None
    show_solution: bool = False
    timeline_index: int = 0
    next_transition_at: datetime | None = None
    updated_at: datetime | None = None

    def step(self, key: StepKey) -> ThinkingStep:
        return next(s for s in self.thinking_steps if s.key == key)

    def command(self, command_id: str) -> Command | None:
        if self.solution is None:
            return None
        return next((c for c in self.solution.commands if c.id == command_id), None)

    @property
    def visible_solution(self) -> Solution | None:
        """The solution once the analysis timeline has finished, else None."""
        return self.solution if self.show_solution else None

    @property
    def active_step(self) -> ThinkingStep | None:
        return next((s for s in self.thinking_steps if s.status == StepStatus.IN_PROGRESS), None)

    @property
    def all_commands_completed(self) -> bool:
        return self.solution is not None and all(
            c.status == CommandStatus.COMPLETED for c in self.solution.commands
        )
