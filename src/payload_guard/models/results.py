"""
Result records returned by the sanitization pipeline.

Stats are per call and mutable while the walk runs; everything else is
returned to the caller and never touched again.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from .enums import PolicyVariant


@dataclass
class SanitizeStats:
    """
    Per-call counters.

    total_leaves counts every leaf seen: scalar leaves, entries dropped by
    name, depth-limited nodes, strings carrying embedded JSON and array
    elements cut past the limit. Each truncated array cuts at least one
    element and each parsed document has its carrying string, so no
    category can exceed total_leaves.
    """

    total_leaves: int = 0
    allowed: int = 0
    removed_sensitive: int = 0
    removed_binary: int = 0
    removed_not_allowlisted: int = 0
    removed_by_path: int = 0
    encrypted: int = 0
    masked: int = 0
    secrets_replaced: int = 0
    urls_scrubbed: int = 0
    parsed_json: int = 0
    truncated_strings: int = 0
    truncated_arrays: int = 0
    depth_limited: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @property
    def removed_total(self) -> int:
        return (
            self.removed_sensitive
            + self.removed_binary
            + self.removed_not_allowlisted
            + self.removed_by_path
        )


@dataclass
class BudgetResult:
    """Outcome of fitting a sanitized tree into a byte budget."""

    payload: Any
    bytes: int
    arrays_removed: int = 0
    strings_trimmed: int = 0
    exceeded: bool = False
    size_history: list[int] = field(default_factory=list)

    @property
    def trimmed(self) -> bool:
        return self.arrays_removed > 0 or self.strings_trimmed > 0


@dataclass
class SanitizeResult:
    """
    Final output of one pipeline run.

    sanitized is never ABSENT: a fully removed root collapses to {}.
    """

    sanitized: Any
    stats: SanitizeStats
    variant: PolicyVariant
    window: Optional[str] = None
    budget: Optional[BudgetResult] = None

    @property
    def payload_trimmed(self) -> bool:
        return self.budget is not None and self.budget.trimmed

    @property
    def exceeded(self) -> bool:
        return self.budget is not None and self.budget.exceeded
