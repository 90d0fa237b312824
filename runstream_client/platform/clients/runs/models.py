"""Run event and run state types.

Wire payloads (progress, done and error events, run results and tool call
records) are Pydantic models validated from the JSON carried in ``data:``
lines. RunState is an immutable snapshot owned by one consumer; the reducer
produces a new snapshot for every applied event.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RunPhase(StrEnum):
    """Lifecycle phase of a run."""

    IDLE = "idle"
    CONNECTING = "connecting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunPhase.COMPLETED, RunPhase.FAILED)


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _null_fields_as_defaults(cls, data: Any) -> Any:
        # the service sends null for unset fields
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ToolCallRecord(_WireModel):
    """One tool invocation performed during a run."""

    tool_name: str = Field(alias="toolName")
    input: Any = None
    output: Any = None
    duration: float = 0


class RunResult(_WireModel):
    """Final result of a run as reported by the run service.

    Attributes:
        id: Run identifier.
        status: ``success`` or ``error``.
        output: The final text response.
        logs: Step-by-step log lines of the run.
        tool_calls: Every tool call made during the run, in order.
        duration: Run duration in milliseconds.
        error: Error description when status is ``error``.
        skill_id: Skill the run belongs to, when the run executed a skill.
        started_at: ISO timestamp of the run start.
    """

    id: str = ""
    status: Literal["success", "error"]
    output: str = ""
    logs: list[str] = Field(default_factory=list)
    tool_calls: list[ToolCallRecord] = Field(default_factory=list, alias="toolCalls")
    duration: float = 0
    error: str | None = None
    skill_id: str | None = Field(default=None, alias="skillId")
    started_at: str | None = Field(default=None, alias="startedAt")

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class ProgressEvent(_WireModel):
    """Progress update emitted while a run executes.

    ``type`` is the service's sub-kind (phase, step, tool-start, tool-done,
    info) and ``elapsed`` is in milliseconds.
    """

    message: str = ""
    type: str | None = None
    elapsed: float | None = None
    phase: str | None = None
    tool: str | None = None


class DoneEvent(_WireModel):
    """Terminal event carrying the run result, if any."""

    result: RunResult | None = None
    success: bool | None = None


class ErrorEvent(_WireModel):
    """Terminal event reporting a failed run."""

    message: str | None = None


RunEvent = ProgressEvent | DoneEvent | ErrorEvent

EVENT_TYPES: dict[str, type[ProgressEvent] | type[DoneEvent] | type[ErrorEvent]] = {
    "progress": ProgressEvent,
    "done": DoneEvent,
    "error": ErrorEvent,
}


@dataclass(frozen=True)
class RunState:
    """Snapshot of one run.

    Attributes:
        phase: Current lifecycle phase.
        progress: Every progress event received, in arrival order.
        result: The run result once a ``done`` event delivered one.
        error: Failure description when the run failed.
        late_events: Terminal events that arrived after the run was already
            terminal. Kept for diagnostics only.
    """

    phase: RunPhase = RunPhase.IDLE
    progress: tuple[ProgressEvent, ...] = ()
    result: RunResult | None = None
    error: str | None = None
    late_events: tuple[DoneEvent | ErrorEvent, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.phase == RunPhase.COMPLETED
