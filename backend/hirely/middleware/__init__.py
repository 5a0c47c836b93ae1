"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- Job lifecycle transition counters
"""

from hirely.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_transition,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    JOB_TRANSITIONS,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_transition",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "JOB_TRANSITIONS",
]
