"""Monitoring and metrics instrumentation for the sanitization pipeline.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from payload_guard.monitoring.metrics import (
    payload_budget_exceeded_total,
    payload_budget_reductions_total,
    record_budget,
    record_sanitize_run,
    sanitize_duration_seconds,
    sanitize_leaves_total,
    sanitize_runs_total,
)

__all__ = [
    "sanitize_runs_total",
    "sanitize_leaves_total",
    "sanitize_duration_seconds",
    "payload_budget_reductions_total",
    "payload_budget_exceeded_total",
    "record_sanitize_run",
    "record_budget",
]
