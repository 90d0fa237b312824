"""Pure reduction of run events into run state.

The first terminal event of a run wins. Progress is recorded in every phase,
terminal events arriving after the run already finished are only kept in
``late_events``.
"""

from dataclasses import replace

from runstream_client.platform.clients.runs.models import (
    DoneEvent,
    ErrorEvent,
    ProgressEvent,
    RunEvent,
    RunPhase,
    RunState,
)

NO_RESULT_MESSAGE = "No result returned"
RUN_FAILED_MESSAGE = "Run failed"


def reduce_run_event(state: RunState, event: RunEvent) -> RunState:
    """Fold one event into a run state.

    Args:
        state: The current snapshot. Never mutated.
        event: A decoded progress, done or error event.

    Returns:
        The next snapshot.
    """
    if isinstance(event, ProgressEvent):
        phase = state.phase
        if phase in (RunPhase.IDLE, RunPhase.CONNECTING):
            phase = RunPhase.RUNNING
        return replace(state, phase=phase, progress=(*state.progress, event))

    if state.is_terminal:
        return replace(state, late_events=(*state.late_events, event))

    if isinstance(event, DoneEvent):
        if event.result is None:
            return replace(state, phase=RunPhase.FAILED, error=NO_RESULT_MESSAGE)
        if event.result.succeeded:
            return replace(state, phase=RunPhase.COMPLETED, result=event.result)
        return replace(
            state,
            phase=RunPhase.FAILED,
            result=event.result,
            error=event.result.error or RUN_FAILED_MESSAGE,
        )

    if isinstance(event, ErrorEvent):
        return replace(state, phase=RunPhase.FAILED, error=event.message or RUN_FAILED_MESSAGE)

    raise TypeError(f"Unsupported run event: {type(event).__name__}")
