"""Custom Prometheus metrics for the sanitization pipeline.

These metrics are exposed by the embedding service's /metrics endpoint.
Alert rules should be configured for:
- payload_budget_exceeded_total (records too large to send even after reduction)
- sanitize_leaves_total{outcome="removed_sensitive"} spikes (upstream schema drift)
"""

from prometheus_client import Counter, Histogram

# === Sanitize Metrics ===

sanitize_runs_total = Counter(
    "sanitize_runs_total",
    "Total sanitize pipeline runs by policy variant",
    ["variant"],
)

sanitize_leaves_total = Counter(
    "sanitize_leaves_total",
    "Leaf decisions by policy variant and outcome",
    ["variant", "outcome"],
)
"""
Leaf decisions counter.

Labels:
- variant: allow_encrypt, delete_on_deny, strip_noise
- outcome: any SanitizeStats field name (allowed, encrypted, removed_sensitive, ...)
"""

sanitize_duration_seconds = Histogram(
    "sanitize_duration_seconds",
    "Wall time of one pipeline run (filter + sanitize + budget)",
    ["variant"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# === Budget Metrics ===

payload_budget_reductions_total = Counter(
    "payload_budget_reductions_total",
    "Reductions applied to fit the payload byte budget",
    ["kind"],
)
"""
Labels:
- kind: array_removed, string_trimmed
"""

payload_budget_exceeded_total = Counter(
    "payload_budget_exceeded_total",
    "Payloads still over budget after every reduction",
)


def record_sanitize_run(variant: str, stats: dict[str, int], duration_seconds: float) -> None:
    """Push the stats of one run into the counters."""
    sanitize_runs_total.labels(variant=variant).inc()
    sanitize_duration_seconds.labels(variant=variant).observe(duration_seconds)
    for outcome, count in stats.items():
        if outcome == "total_leaves" or count <= 0:
            continue
        sanitize_leaves_total.labels(variant=variant, outcome=outcome).inc(count)


def record_budget(arrays_removed: int, strings_trimmed: int, exceeded: bool) -> None:
    if arrays_removed:
        payload_budget_reductions_total.labels(kind="array_removed").inc(arrays_removed)
    if strings_trimmed:
        payload_budget_reductions_total.labels(kind="string_trimmed").inc(strings_trimmed)
    if exceeded:
        payload_budget_exceeded_total.inc()
