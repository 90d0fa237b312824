"""HTTP clients for external services.

This module provides the client for the run service, which streams skill
and chat runs back as event frames.
"""

from runstream_client.platform.clients.runs import (
    AuthConfig,
    RunClientConfig,
    RunClientError,
    RunState,
    RunStreamClient,
    StreamConsumer,
    create_client,
)

__all__ = [
    "RunStreamClient",
    "RunClientConfig",
    "AuthConfig",
    "StreamConsumer",
    "RunState",
    "RunClientError",
    "create_client",
]
