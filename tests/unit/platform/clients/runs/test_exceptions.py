"""Unit tests for run client exceptions."""

from runstream_client.platform.clients.runs.exceptions import (
    RunAlreadyStartedError,
    RunClientError,
    RunConnectionError,
    RunHTTPStatusError,
    RunNotStartedError,
    RunTransportError,
)


class TestRunTransportError:
    """Tests for RunTransportError."""

    def test_inherits_from_base(self):
        """Transport errors are client errors."""
        assert isinstance(RunTransportError("x"), RunClientError)

    def test_stores_detail(self):
        """The detail is kept for the synthesized error state."""
        assert RunTransportError("broken pipe").detail == "broken pipe"


class TestRunConnectionError:
    """Tests for RunConnectionError."""

    def test_message_without_url(self):
        """Error message formats without URL."""
        error = RunConnectionError("timeout")
        assert str(error) == "Connection failed: timeout"
        assert error.detail == "timeout"

    def test_message_with_url(self):
        """Error message includes URL when provided."""
        error = RunConnectionError("timeout", url="http://example.com/api")
        assert "http://example.com/api" in str(error)
        assert error.url == "http://example.com/api"


class TestRunHTTPStatusError:
    """Tests for RunHTTPStatusError."""

    def test_body_is_detail(self):
        """The response body becomes the detail."""
        error = RunHTTPStatusError(404, "Skill not found\n")
        assert error.status_code == 404
        assert error.detail == "Skill not found"

    def test_empty_body_fallback(self):
        """An empty body falls back to a generic detail."""
        assert RunHTTPStatusError(502, "  ").detail == "Stream failed"


class TestMisuseErrors:
    """Tests for API misuse errors."""

    def test_already_started(self):
        """RunAlreadyStartedError explains how to recover."""
        error = RunAlreadyStartedError()
        assert isinstance(error, RunClientError)
        assert "reset()" in str(error)

    def test_not_started(self):
        """RunNotStartedError is a client error."""
        assert isinstance(RunNotStartedError(), RunClientError)
