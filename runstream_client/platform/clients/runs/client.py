"""High-level client for streamed skill and chat runs.

Owns the HTTP connection to the run service, builds run requests and hands
each run to its own StreamConsumer.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from opentelemetry import propagate

from runstream_client.platform.clients.runs.config import AuthConfig, RunClientConfig
from runstream_client.platform.clients.runs.consumer import StateListener, StreamConsumer
from runstream_client.platform.clients.runs.exceptions import RunClientError
from runstream_client.platform.clients.runs.models import RunState
from runstream_client.platform.clients.runs.transport import HttpxRunTransport, RunRequest
from runstream_client.platform.observability import correlation_id_ctx, get_logger

logger = get_logger(__name__)


async def _inject_trace_context(request: httpx.Request) -> None:
    """Inject OpenTelemetry trace context into each outgoing request.

    Note: Must be async because httpx AsyncClient awaits event hooks.
    """
    propagate.inject(request.headers)

    correlation_id = correlation_id_ctx.get()
    if correlation_id:
        request.headers["X-Request-ID"] = correlation_id


class RunStreamClient:
    """Runs skills and chats on the run service and consumes their streams.

    Every run gets a fresh StreamConsumer; runs started from one client are
    independent of each other.
    """

    def __init__(
        self,
        base_url: str,
        config: RunClientConfig | None = None,
        auth: AuthConfig | None = None,
        httpx_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the run service API.
            config: Optional client configuration.
            auth: Optional authentication configuration.
            httpx_client: Optional pre-configured HTTP client.
        """
        self._base_url = base_url.rstrip("/")
        self._config = config or RunClientConfig()
        self._auth = auth
        self._httpx_client = httpx_client
        self._owns_httpx_client = httpx_client is None
        self._transport: HttpxRunTransport | None = None

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._transport is not None

    async def connect(self) -> None:
        """Create the HTTP client and transport."""
        if self._transport is not None:
            return

        if self._httpx_client is None:
            self._httpx_client = httpx.AsyncClient(
                timeout=httpx.Timeout(None, connect=self._config.connect_timeout_seconds),
                event_hooks={"request": [_inject_trace_context]},
            )
            self._owns_httpx_client = True

        self._apply_headers_to_client()
        self._transport = HttpxRunTransport(self._httpx_client, self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client if this client created it."""
        self._transport = None

        if self._owns_httpx_client and self._httpx_client is not None:
            await self._httpx_client.aclose()
            self._httpx_client = None

    async def __aenter__(self) -> "RunStreamClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    def skill_request(
        self,
        skill_id: str,
        inputs: dict[str, Any] | None = None,
        instructions: str | None = None,
    ) -> RunRequest:
        return RunRequest.for_skill(
            skill_id,
            inputs,
            instructions,
            skills_path=self._config.skills_path,
        )

    def chat_request(self, message: str) -> RunRequest:
        return RunRequest.for_chat(message, skills_path=self._config.skills_path)

    async def consumer(self) -> StreamConsumer:
        """Create a fresh consumer bound to this client's transport."""
        transport = await self._ensure_connected()
        return StreamConsumer(transport, self._config)

    async def run(self, request: RunRequest, on_state: StateListener | None = None) -> RunState:
        """Run a request to completion.

        Args:
            request: The run request.
            on_state: Optional listener receiving every published snapshot.

        Returns:
            The final RunState. When the configured deadline elapses the run
            is cancelled and its last snapshot is returned.
        """
        consumer = await self.consumer()
        if on_state is not None:
            consumer.subscribe(on_state)
        consumer.start(request)

        try:
            async with asyncio.timeout(self._config.deadline_seconds):
                return await consumer.wait()
        except TimeoutError:
            logger.warning(
                "Run deadline elapsed, cancelling",
                path=request.path,
                deadline_seconds=self._config.deadline_seconds,
            )
            await consumer.cancel()
            return consumer.state

    async def run_skill(
        self,
        skill_id: str,
        inputs: dict[str, Any] | None = None,
        instructions: str | None = None,
        *,
        on_state: StateListener | None = None,
    ) -> RunState:
        """Run a skill and return its final state.

        Args:
            skill_id: ID of the skill to run.
            inputs: Values for the skill's inputs.
            instructions: Optional extra instructions for the run.
            on_state: Optional listener receiving every published snapshot.
        """
        return await self.run(self.skill_request(skill_id, inputs, instructions), on_state)

    async def run_chat(self, message: str, *, on_state: StateListener | None = None) -> RunState:
        """Send a freeform chat message and return the final state."""
        return await self.run(self.chat_request(message), on_state)

    async def stream(self, request: RunRequest) -> AsyncIterator[RunState]:
        """Start a run and yield its snapshots as they are published.

        Leaving the iteration early cancels the run.
        """
        consumer = await self.consumer()
        consumer.start(request)
        try:
            async for state in consumer.snapshots():
                yield state
        finally:
            await consumer.cancel()

    def stream_skill(
        self,
        skill_id: str,
        inputs: dict[str, Any] | None = None,
        instructions: str | None = None,
    ) -> AsyncIterator[RunState]:
        return self.stream(self.skill_request(skill_id, inputs, instructions))

    def stream_chat(self, message: str) -> AsyncIterator[RunState]:
        return self.stream(self.chat_request(message))

    async def _ensure_connected(self) -> HttpxRunTransport:
        """Ensure the client is connected and return its transport."""
        if self._transport is None:
            await self.connect()
        if self._transport is None:
            raise RunClientError("Run client failed to connect")
        return self._transport

    def _apply_headers_to_client(self) -> None:
        """Apply authentication headers to the HTTP client."""
        if self._httpx_client is None:
            return

        if self._auth is None:
            return

        if self._auth.api_key:
            self._httpx_client.headers[self._auth.api_key_header] = self._auth.api_key

        if self._auth.bearer_token:
            self._httpx_client.headers["Authorization"] = f"Bearer {self._auth.bearer_token}"


@asynccontextmanager
async def create_client(
    base_url: str,
    config: RunClientConfig | None = None,
    auth: AuthConfig | None = None,
) -> AsyncIterator[RunStreamClient]:
    """Create a run stream client as an async context manager.

    Args:
        base_url: Base URL of the run service API.
        config: Optional client configuration.
        auth: Optional authentication configuration.

    Yields:
        Connected RunStreamClient instance.
    """
    client = RunStreamClient(base_url, config=config, auth=auth)
    try:
        await client.connect()
        yield client
    finally:
        await client.disconnect()
