"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- SMS command and degradation counters
"""

from smsjobs.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_command,
    record_degradation,
    record_sessions_swept,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    SMS_COMMANDS,
    UPSTREAM_DEGRADATIONS,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_command",
    "record_degradation",
    "record_sessions_swept",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "SMS_COMMANDS",
    "UPSTREAM_DEGRADATIONS",
]
