"""Stream consumer driving one run from request to terminal state.

Each inbound chunk goes through ByteDecoder, LineAccumulator and
EventFrameParser, the resulting events are folded by the reducer, and the
new snapshot is published to subscribers when it changed. Every run that is
not cancelled ends in a terminal phase: transport failures and streams that
close without a terminal event are turned into synthesized error events.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import replace

from runstream_client.platform.clients.runs.config import RunClientConfig
from runstream_client.platform.clients.runs.decoding import ByteDecoder, LineAccumulator
from runstream_client.platform.clients.runs.exceptions import (
    RunAlreadyStartedError,
    RunClientError,
    RunNotStartedError,
    RunTransportError,
)
from runstream_client.platform.clients.runs.frames import (
    EventFrame,
    EventFrameParser,
    decode_event,
)
from runstream_client.platform.clients.runs.models import ErrorEvent, RunEvent, RunPhase, RunState
from runstream_client.platform.clients.runs.reducer import reduce_run_event
from runstream_client.platform.clients.runs.transport import RunRequest, RunTransport
from runstream_client.platform.observability import get_logger, record_run_finished

logger = get_logger(__name__)

STREAM_ENDED_MESSAGE = "Stream ended unexpectedly"
CANCELLED_MESSAGE = "Run cancelled"

StateListener = Callable[[RunState], None]


class StreamConsumer:
    """Consumes one streamed run and publishes RunState snapshots.

    Usage:
        ```
        consumer = StreamConsumer(transport)
        consumer.subscribe(render)
        consumer.start(RunRequest.for_skill("seo-audit", {"url": "..."}))
        final = await consumer.wait()
        ```
    """

    def __init__(self, transport: RunTransport, config: RunClientConfig | None = None):
        """Initialize the consumer.

        Args:
            transport: Transport used to open the run stream.
            config: Optional client configuration.
        """
        self._transport = transport
        self._config = config or RunClientConfig()
        self._listeners: list[StateListener] = []
        self._queues: list[asyncio.Queue[RunState | None]] = []
        self._state = RunState()
        self._published: RunState | None = None
        self._task: asyncio.Task[RunState] | None = None
        self._cancelled = False

    @property
    def state(self) -> RunState:
        """The current snapshot of the run."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every published snapshot.

        Returns:
            A callable removing the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self, request: RunRequest) -> "StreamConsumer":
        """Start the run in a background task.

        Must be called from a running event loop.

        Raises:
            RunAlreadyStartedError: If this consumer already started a run.
        """
        if self._task is not None:
            raise RunAlreadyStartedError()

        self._state = RunState()
        self._task = asyncio.create_task(self._run(request))
        return self

    async def snapshots(self) -> AsyncIterator[RunState]:
        """Iterate over published snapshots until the run ends or is cancelled."""
        if self._task is not None and self._task.done():
            if self._published is not None:
                yield self._published
            return

        queue: asyncio.Queue[RunState | None] = asyncio.Queue()
        self._queues.append(queue)
        if self._published is not None:
            queue.put_nowait(self._published)
        try:
            while True:
                state = await queue.get()
                if state is None:
                    return
                yield state
        finally:
            self._queues.remove(queue)

    async def wait(self) -> RunState:
        """Wait for the run to finish and return its final snapshot.

        Raises:
            RunNotStartedError: If start() was never called.
        """
        if self._task is None:
            raise RunNotStartedError()

        await asyncio.wait([self._task])
        if not self._task.cancelled():
            self._task.result()
        return self._state

    async def cancel(self) -> None:
        """Abort the transport. Nothing is published for this run afterwards."""
        if self._task is None or self._task.done():
            return

        self._cancelled = True
        self._task.cancel()
        await asyncio.wait([self._task])

        if self._config.fail_on_cancel and not self._state.is_terminal:
            self._state = reduce_run_event(self._state, ErrorEvent(message=CANCELLED_MESSAGE))
        self._close_queues()
        logger.info("Run cancelled", phase=self._state.phase.value)

    def reset(self) -> None:
        """Discard the finished run so the consumer can start a new one."""
        if self.is_running:
            raise RunClientError("Cannot reset a running consumer; cancel() it first")

        self._task = None
        self._state = RunState()
        self._published = None
        self._cancelled = False

    async def _run(self, request: RunRequest) -> RunState:
        log = logger.bind(path=request.path)
        started = time.monotonic()
        decoder = ByteDecoder()
        lines = LineAccumulator()
        parser = EventFrameParser()
        failure: str | None = None

        try:
            self._state = replace(self._state, phase=RunPhase.CONNECTING)
            self._publish()

            try:
                async with self._transport.open(request) as chunks:
                    async for chunk in chunks:
                        self._process(parser.feed(lines.feed(decoder.decode(chunk))))
            except RunTransportError as e:
                log.warning("Run stream transport failed", error=str(e))
                failure = e.detail
            except Exception as e:
                log.exception("Run stream broke with an unexpected error")
                failure = str(e) or type(e).__name__

            # end of stream terminates the trailing line, then the trailing frame
            frames = parser.feed(lines.feed(decoder.decode(b"", final=True)))
            last_line = lines.flush()
            if last_line is not None:
                frames.extend(parser.feed([last_line]))
            last_frame = parser.flush()
            if last_frame is not None:
                frames.append(last_frame)
            self._apply_frames(frames)

            if failure is not None:
                self._apply(ErrorEvent(message=failure))
            elif not self._state.is_terminal:
                log.warning("Run stream ended without a terminal event")
                self._apply(ErrorEvent(message=STREAM_ENDED_MESSAGE))

            self._publish()
        finally:
            self._close_queues()

        duration = time.monotonic() - started
        record_run_finished(self._state.phase.value, duration)
        log.info(
            "Run finished",
            phase=self._state.phase.value,
            progress_events=len(self._state.progress),
            duration_ms=round(duration * 1000),
        )
        return self._state

    def _process(self, frames: list[EventFrame]) -> None:
        self._apply_frames(frames)
        self._publish()

    def _apply_frames(self, frames: list[EventFrame]) -> None:
        for frame in frames:
            event = decode_event(frame)
            if event is not None:
                self._apply(event)

    def _apply(self, event: RunEvent) -> None:
        state = reduce_run_event(self._state, event)
        if len(state.late_events) > len(self._state.late_events):
            logger.warning(
                "Ignoring terminal event received after the run finished",
                event=type(event).__name__,
                phase=state.phase.value,
            )
        self._state = state

    def _publish(self) -> None:
        if self._cancelled or self._state is self._published:
            return

        self._published = self._state
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Run state listener failed", phase=self._state.phase.value)
        for queue in self._queues:
            queue.put_nowait(self._state)

    def _close_queues(self) -> None:
        for queue in self._queues:
            queue.put_nowait(None)
