"""Shared test fixtures.

This module provides fixtures for driving the run stream pipeline:
- A scripted in-memory transport delivering predefined byte chunks
- Wire payloads and encoded streams for the common run outcomes
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import pytest

from runstream_client.platform.clients.runs.frames import encode_frame
from runstream_client.platform.clients.runs.transport import RunRequest


class ScriptedTransport:
    """Transport delivering predefined chunks, optionally failing or hanging."""

    def __init__(
        self,
        chunks: list[bytes],
        *,
        error: Exception | None = None,
        open_error: Exception | None = None,
        hang: bool = False,
    ):
        self.chunks = chunks
        self.error = error
        self.open_error = open_error
        self.hang = hang
        self.requests: list[RunRequest] = []
        self.delivered = 0
        self.closed = False

    @asynccontextmanager
    async def open(self, request: RunRequest) -> AsyncIterator[AsyncIterator[bytes]]:
        self.requests.append(request)
        if self.open_error is not None:
            raise self.open_error
        try:
            yield self._iterate()
        finally:
            self.closed = True

    async def _iterate(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            await asyncio.sleep(0)
            self.delivered += 1
            yield chunk
        if self.error is not None:
            raise self.error
        if self.hang:
            await asyncio.Event().wait()


@pytest.fixture
def transport_factory():
    """Factory creating ScriptedTransport instances."""
    return ScriptedTransport


@pytest.fixture
def run_request() -> RunRequest:
    """A skill run request."""
    return RunRequest.for_skill("skill-1", {"topic": "solar"})


@pytest.fixture
def success_result() -> dict[str, Any]:
    """Wire payload of a successful run result."""
    return {
        "id": "r1",
        "skillId": "skill-1",
        "status": "success",
        "output": "# Report\nAll good",
        "logs": ["step 1", "step 2"],
        "toolCalls": [
            {
                "toolName": "web-search",
                "input": {"query": "solar"},
                "output": {"hits": 3},
                "duration": 812,
            }
        ],
        "duration": 4300,
        "startedAt": "2026-01-05T10:00:00.000Z",
    }


@pytest.fixture
def full_stream(success_result) -> bytes:
    """Encoded stream with two progress frames and a successful done frame."""
    return (
        encode_frame("progress", {"type": "phase", "message": "Searching", "elapsed": 100})
        + encode_frame("progress", {"type": "tool-start", "message": "Calling", "tool": "web"})
        + encode_frame("done", {"success": True, "result": success_result})
    ).encode("utf-8")
