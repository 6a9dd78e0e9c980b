"""
Payload sanitization (path filter -> recursive sanitizer -> byte budget).

- normalize.py: Field name canonicalization and marker matching
- path_matcher.py: Path patterns with [] array wildcards
- path_filter.py: keepPaths / dropPaths pruning
- detectors.py: CPF/CNPJ masking, secret detection, URL query scrubbing
- crypto.py: Windowed PBKDF2 + AES-GCM field encryption
- allow_list.py: Allow-list file loading and the immutable SanitizeContext
- engine.py: Recursive sanitizer applying one SanitizePolicy
- budget.py: Payload byte-budget enforcement
- redaction.py: Key-based redaction for log events
- pipeline.py: Orchestrator used by callers
"""

from .allow_list import AllowList, SanitizeContext, load_allow_list_entries
from .budget import apply_payload_budget
from .crypto import FieldEncryptor, format_window, parse_envelope
from .engine import Sanitizer, SanitizeOutcome
from .exceptions import (
    AllowListLoadError,
    ConfigurationError,
    CryptoConfigurationError,
    DecryptionError,
    PolicyConfigurationError,
    SanitizerError,
    UnsupportedNodeError,
)
from .path_filter import filter_by_paths
from .path_matcher import PathMatcher, match_path
from .pipeline import SanitizationPipeline
from .redaction import redact_event_processor, redact_sensitive
from .tree import ABSENT

__all__ = [
    # Main pipeline
    "SanitizationPipeline",
    "Sanitizer",
    "SanitizeOutcome",
    "SanitizeContext",
    "AllowList",
    "load_allow_list_entries",
    # Building blocks
    "ABSENT",
    "PathMatcher",
    "match_path",
    "filter_by_paths",
    "FieldEncryptor",
    "format_window",
    "parse_envelope",
    "apply_payload_budget",
    "redact_sensitive",
    "redact_event_processor",
    # Exceptions
    "SanitizerError",
    "ConfigurationError",
    "CryptoConfigurationError",
    "PolicyConfigurationError",
    "AllowListLoadError",
    "UnsupportedNodeError",
    "DecryptionError",
]
