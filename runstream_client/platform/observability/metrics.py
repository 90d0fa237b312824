"""Prometheus metrics for consumed runs.

Counts runs by the terminal phase they resolved to, frames the parser had
to drop, and observes run durations as seen by the client.
"""

from typing import NamedTuple

import prometheus_client


class RunLabels(NamedTuple):
    phase: str


class DroppedFrameLabels(NamedTuple):
    reason: str


BUCKETS = (
    # log spaced, runs take from sub-second to several minutes
    0.1,
    0.2,
    0.5,
    1,
    2,
    5,
    10,
    20,
    50,
    100,
    200,
    500,
    float("inf"),
)


def setup_run_metrics(registry):
    """Create the run counter and duration histogram.

    Args:
        registry: Prometheus registry to register the metrics with

    Returns:
        Tuple of (runs counter, run duration histogram)
    """
    counter = prometheus_client.Counter(
        name="run_stream_runs",
        documentation="Runs consumed, by terminal phase",
        labelnames=RunLabels._fields,
        registry=registry,
    )
    histogram = prometheus_client.Histogram(
        name="run_stream_duration_seconds",
        documentation="Run duration from start to terminal phase (seconds)",
        labelnames=RunLabels._fields,
        registry=registry,
        buckets=BUCKETS,
    )
    return counter, histogram


def setup_frame_metrics(registry):
    """Create the dropped frame counter.

    Args:
        registry: Prometheus registry to register the metric with

    Returns:
        Counter for frames dropped by the parser, by reason
    """
    return prometheus_client.Counter(
        name="run_stream_dropped_frames",
        documentation="Frames dropped while parsing run streams",
        labelnames=DroppedFrameLabels._fields,
        registry=registry,
    )


def record_run_finished(phase: str, duration_seconds: float) -> None:
    labels = RunLabels(phase=phase)
    runs_counter.labels(*labels).inc()
    run_duration_histogram.labels(*labels).observe(duration_seconds)


def record_dropped_frame(reason: str) -> None:
    dropped_frames_counter.labels(*DroppedFrameLabels(reason=reason)).inc()


runs_counter, run_duration_histogram = setup_run_metrics(registry=prometheus_client.REGISTRY)
dropped_frames_counter = setup_frame_metrics(registry=prometheus_client.REGISTRY)


def metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics output.

    Returns:
        Tuple of (metrics_body, content_type)
    """
    return (
        prometheus_client.generate_latest(prometheus_client.REGISTRY),
        prometheus_client.CONTENT_TYPE_LATEST,
    )
