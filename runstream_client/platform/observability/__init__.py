"""Observability infrastructure module.

This module provides monitoring for consumed runs:
- Structured logging with correlation IDs
- Prometheus metrics
"""

from runstream_client.platform.observability.logging import (
    configure_logging,
    correlation_id_ctx,
    get_logger,
)
from runstream_client.platform.observability.metrics import (
    BUCKETS,
    metrics,
    record_dropped_frame,
    record_run_finished,
)

__all__ = [
    "BUCKETS",
    "configure_logging",
    "correlation_id_ctx",
    "get_logger",
    "metrics",
    "record_dropped_frame",
    "record_run_finished",
]
