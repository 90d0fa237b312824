"""Transports delivering run streams as ordered byte chunks.

The consumer only needs an async iterator of byte chunks that ends on close
and raises RunTransportError on failure. HttpxRunTransport provides that over
a chunked HTTP response from the run service.
"""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from runstream_client.platform.clients.runs.exceptions import (
    RunConnectionError,
    RunHTTPStatusError,
)


@dataclass(frozen=True)
class RunRequest:
    """Describes the request that starts a streamed run.

    Attributes:
        path: Path of the streaming endpoint, relative to the service base URL.
        payload: JSON body of the request.
        method: HTTP method (default: POST).
    """

    path: str
    payload: dict[str, Any] = field(default_factory=dict)
    method: str = "POST"

    @classmethod
    def for_skill(
        cls,
        skill_id: str,
        inputs: dict[str, Any] | None = None,
        instructions: str | None = None,
        *,
        skills_path: str = "/skills",
    ) -> "RunRequest":
        """Build the request running one skill with the given inputs."""
        payload: dict[str, Any] = {"inputs": inputs or {}}
        if instructions:
            payload["instructions"] = instructions
        return cls(path=f"{skills_path}/{skill_id}/run-stream", payload=payload)

    @classmethod
    def for_chat(cls, message: str, *, skills_path: str = "/skills") -> "RunRequest":
        """Build the request for a freeform chat run."""
        return cls(path=f"{skills_path}/chat-stream", payload={"message": message})


class RunTransport(Protocol):
    """Opens a run stream."""

    def open(self, request: RunRequest) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Open the stream for a request.

        Args:
            request: The run request.

        Returns:
            Async context manager yielding the byte chunks of the response.
            Leaving the context closes the underlying connection.

        Raises:
            RunTransportError: If the stream cannot be opened or breaks.
        """
        ...


class HttpxRunTransport:
    """Streams runs from the run service over HTTP."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = ""):
        """Initialize the transport.

        Args:
            client: The HTTP client to send requests with.
            base_url: Base URL of the run service.
        """
        self._client = client
        self._base_url = base_url.rstrip("/")

    @asynccontextmanager
    async def open(self, request: RunRequest) -> AsyncIterator[AsyncIterator[bytes]]:
        url = f"{self._base_url}{request.path}"
        try:
            async with self._client.stream(
                request.method,
                url,
                json=request.payload,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if not response.is_success:
                    body = await response.aread()
                    raise RunHTTPStatusError(
                        response.status_code,
                        body.decode("utf-8", errors="replace"),
                    )
                yield response.aiter_bytes()
        except httpx.HTTPError as e:
            raise RunConnectionError(str(e) or type(e).__name__, url=url) from e
