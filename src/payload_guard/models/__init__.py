"""
Data models for the sanitization pipeline.

- enums.py: Policy variants, deny actions, truncation and oversize modes, secret kinds
- policy.py: SanitizePolicy presets, CryptoConfig, PathFilterConfig
- results.py: SanitizeStats, BudgetResult, SanitizeResult
"""

from .enums import ArrayTruncation, DenyAction, PolicyVariant, SecretKind, StringOversize, TimeWindow
from .policy import CryptoConfig, PathFilterConfig, SanitizePolicy
from .results import BudgetResult, SanitizeResult, SanitizeStats

__all__ = [
    # Enums
    "ArrayTruncation",
    "DenyAction",
    "PolicyVariant",
    "SecretKind",
    "StringOversize",
    "TimeWindow",
    # Policy
    "CryptoConfig",
    "PathFilterConfig",
    "SanitizePolicy",
    # Results
    "BudgetResult",
    "SanitizeResult",
    "SanitizeStats",
]
