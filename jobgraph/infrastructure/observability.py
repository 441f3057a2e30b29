# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import Counter, Histogram

from jobgraph.shared.config import load_config

_config = load_config()

REQUEST_LATENCY = Histogram(
    "jobgraph_request_latency_seconds",
    "Request latency",
    labelnames=("endpoint",),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_COUNTER = Counter(
    "jobgraph_requests_total",
    "Number of processed requests",
    labelnames=("endpoint", "status"),
)
AUTH_FAILURES = Counter(
    "jobgraph_auth_failures_total",
    "Rejected authentication and authorization attempts",
    labelnames=("code",),
)
REFRESH_ROTATIONS = Counter(
    "jobgraph_refresh_rotations_total",
    "Refresh token exchanges by outcome",
    labelnames=("outcome",),
)


def observe_request(endpoint: str, status: int, duration: float) -> None:
    if not _config.observability.metrics_enabled:
        return
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()


def record_auth_failure(code: str) -> None:
    if _config.observability.metrics_enabled:
        AUTH_FAILURES.labels(code=code).inc()


def record_refresh(outcome: str) -> None:
    if _config.observability.metrics_enabled:
        REFRESH_ROTATIONS.labels(outcome=outcome).inc()


__all__ = [
    "AUTH_FAILURES",
    "REFRESH_ROTATIONS",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "observe_request",
    "record_auth_failure",
    "record_refresh",
]
