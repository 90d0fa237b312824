"""Configuration for the run stream client.

This module provides configuration dataclasses for the run stream client,
including connection timeouts, cancellation behavior and authentication.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RunClientConfig:
    """Configuration for a run stream client instance.

    Attributes:
        connect_timeout_seconds: Timeout for establishing the connection (default: 10s).
            Reads are never timed out; runs may stream for minutes.
        deadline_seconds: Optional caller-side deadline for a whole run. When it
            elapses the run is cancelled (default: None, no deadline).
        fail_on_cancel: Whether a cancelled run resolves to ``failed`` in the
            consumer's final state (default: False, the state is left as-is).
        skills_path: Path prefix of the skills API on the run service.
    """

    connect_timeout_seconds: float = 10.0
    deadline_seconds: float | None = None
    fail_on_cancel: bool = False
    skills_path: str = "/skills"


@dataclass(frozen=True)
class AuthConfig:
    """Authentication configuration for the run service.

    Attributes:
        api_key: API key for apiKey authentication.
        api_key_header: Header name for API key (default: X-API-Key).
        bearer_token: Bearer token for JWT authentication.
    """

    api_key: str | None = None
    api_key_header: str = "X-API-Key"
    bearer_token: str | None = None
