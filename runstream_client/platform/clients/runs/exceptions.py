"""Custom exception hierarchy for the run stream client.

Transport failures are raised by transports and turned into a terminal
``failed`` RunState by the consumer. Misuse of the consumer API is the only
thing raised back to callers.
"""


class RunClientError(Exception):
    """Base exception for all run client errors."""


class RunTransportError(RunClientError):
    """Base exception for failures while opening or reading a run stream."""

    def __init__(self, message: str):
        self.detail = message
        super().__init__(message)


class RunConnectionError(RunTransportError):
    """Raised when the connection to the run service fails."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        return f"Connection failed{f' to {self.url}' if self.url else ''}: {self.detail}"


class RunHTTPStatusError(RunTransportError):
    """Raised when the run service answers with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(body.strip() or "Stream failed")


class RunAlreadyStartedError(RunClientError):
    """Raised when start() is called twice on one consumer without reset()."""

    def __init__(self) -> None:
        super().__init__("Run already started; call reset() before starting a new run")


class RunNotStartedError(RunClientError):
    """Raised when waiting on a consumer that was never started."""

    def __init__(self) -> None:
        super().__init__("Run has not been started")
