"""Run stream client module for consuming streamed skill and chat runs.

A run on the service streams its progress and final result back as
``event:``/``data:`` frames over a chunked response. The module includes:
- Incremental byte and line decoding across chunk boundaries
- Event frame parsing and a pure run state reducer
- A stream consumer publishing RunState snapshots
- An HTTP transport and a high-level client for skill and chat runs
"""

from runstream_client.platform.clients.runs.client import RunStreamClient, create_client
from runstream_client.platform.clients.runs.config import AuthConfig, RunClientConfig
from runstream_client.platform.clients.runs.consumer import StreamConsumer
from runstream_client.platform.clients.runs.decoding import ByteDecoder, LineAccumulator
from runstream_client.platform.clients.runs.exceptions import (
    RunAlreadyStartedError,
    RunClientError,
    RunConnectionError,
    RunHTTPStatusError,
    RunNotStartedError,
    RunTransportError,
)
from runstream_client.platform.clients.runs.frames import (
    EventFrame,
    EventFrameParser,
    decode_event,
    encode_frame,
)
from runstream_client.platform.clients.runs.models import (
    DoneEvent,
    ErrorEvent,
    ProgressEvent,
    RunEvent,
    RunPhase,
    RunResult,
    RunState,
    ToolCallRecord,
)
from runstream_client.platform.clients.runs.reducer import reduce_run_event
from runstream_client.platform.clients.runs.transport import (
    HttpxRunTransport,
    RunRequest,
    RunTransport,
)

__all__ = [
    # Client
    "RunStreamClient",
    "RunClientConfig",
    "AuthConfig",
    "create_client",
    # Consumer
    "StreamConsumer",
    "RunRequest",
    "RunTransport",
    "HttpxRunTransport",
    # Decoding
    "ByteDecoder",
    "LineAccumulator",
    "EventFrame",
    "EventFrameParser",
    "decode_event",
    "encode_frame",
    # State
    "reduce_run_event",
    "RunPhase",
    "RunState",
    "RunEvent",
    "ProgressEvent",
    "DoneEvent",
    "ErrorEvent",
    "RunResult",
    "ToolCallRecord",
    # Exceptions
    "RunClientError",
    "RunTransportError",
    "RunConnectionError",
    "RunHTTPStatusError",
    "RunAlreadyStartedError",
    "RunNotStartedError",
]
