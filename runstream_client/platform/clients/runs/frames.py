"""Event frame parsing for the run stream wire format.

A frame is a group of header lines terminated by a blank line::

    event: progress
    data: {"type":"progress","message":"Searching the web","elapsed":1200}

The ``event:`` and ``data:`` lines may come in either order; if repeated,
the last one wins. End of stream terminates a pending frame the same way a
blank line does.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from runstream_client.platform.clients.runs.models import EVENT_TYPES, ErrorEvent, RunEvent
from runstream_client.platform.observability import get_logger, record_dropped_frame

logger = get_logger(__name__)

INVALID_RESULT_MESSAGE = "Invalid result returned"


@dataclass(frozen=True)
class EventFrame:
    """A parsed frame: the event kind and its JSON-decoded payload."""

    kind: str
    payload: Any


def encode_frame(kind: str, payload: Any) -> str:
    """Render a frame the way the run service writes it."""
    return f"event: {kind}\ndata: {json.dumps(payload)}\n\n"


class EventFrameParser:
    """Groups lines into frames, keeping pending fields across feed() calls."""

    def __init__(self) -> None:
        self._kind: str | None = None
        self._data: str | None = None

    def feed(self, lines: list[str]) -> list[EventFrame]:
        frames = []
        for line in lines:
            frame = self.feed_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def feed_line(self, line: str) -> EventFrame | None:
        """Consume one line, returning a frame when the line terminates one."""
        if line.startswith("event:"):
            self._kind = line[len("event:") :].strip()
        elif line.startswith("data:"):
            value = line[len("data:") :]
            self._data = value[1:] if value.startswith(" ") else value
        elif not line.strip():
            return self._terminate()
        return None

    def flush(self) -> EventFrame | None:
        """Emit a frame still pending at end of stream."""
        return self._terminate()

    def _terminate(self) -> EventFrame | None:
        kind, data = self._kind, self._data
        self._kind = None
        self._data = None

        if not kind or not data:
            return None

        try:
            payload = json.loads(data)
        except ValueError:
            logger.debug("Dropping frame with malformed JSON payload", kind=kind)
            record_dropped_frame("malformed_json")
            return None
        return EventFrame(kind=kind, payload=payload)


def decode_event(frame: EventFrame) -> RunEvent | None:
    """Convert a frame to a typed run event.

    Returns None for frames of unknown kind and for payloads that do not
    match the event's shape; neither aborts the stream. A ``done`` frame
    whose result cannot be read still ends the run, as an ErrorEvent.
    """
    event_type = EVENT_TYPES.get(frame.kind)
    if event_type is None:
        logger.debug("Ignoring frame of unknown kind", kind=frame.kind)
        record_dropped_frame("unknown_kind")
        return None

    try:
        return event_type.model_validate(frame.payload)
    except ValidationError as e:
        if frame.kind == "done":
            event = _unreadable_result(frame.payload, e)
            if event is not None:
                return event
        logger.debug(
            "Dropping frame with invalid payload",
            kind=frame.kind,
            errors=e.error_count(),
        )
        record_dropped_frame("invalid_payload")
        return None


def _unreadable_result(payload: Any, error: ValidationError) -> ErrorEvent | None:
    result = payload.get("result") if isinstance(payload, dict) else None
    if not result:
        return None

    logger.warning("Done frame carries an invalid result", errors=error.error_count())
    message = result.get("error") if isinstance(result, dict) else None
    if isinstance(message, str) and message:
        return ErrorEvent(message=message)
    return ErrorEvent(message=INVALID_RESULT_MESSAGE)
