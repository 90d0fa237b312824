"""runstream-client - Consumes streamed skill and chat runs into a single run state."""

from .platform.clients.runs import (
    RunPhase,
    RunRequest,
    RunResult,
    RunState,
    RunStreamClient,
    StreamConsumer,
    create_client,
)
from .platform.settings import Settings

__all__ = [
    "RunPhase",
    "RunRequest",
    "RunResult",
    "RunState",
    "RunStreamClient",
    "Settings",
    "StreamConsumer",
    "create_client",
]
