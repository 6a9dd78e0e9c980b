"""
Recursive sanitizer.

Walks a tree node by node and applies one SanitizePolicy:

- Depth: nodes deeper than max_depth become a visible placeholder
- Arrays: bounded to max_array_items surviving elements (sliced or wrapped
  with truncation metadata)
- Mappings: keys dropped by sensitive/binary name markers, then recursion
- Strings: embedded JSON re-parsed and sanitized, then binary/secret
  detection, URL scrubbing, CPF/CNPJ masking, length limit per field kind
- Denied leaves (not allow-listed) are deleted or encrypted

Removal is silent: removed keys and elements are omitted, and a container
left empty is itself removed from its parent, up to the root.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..models.enums import ArrayTruncation, DenyAction, StringOversize
from ..models.results import SanitizeStats
from .allow_list import SanitizeContext
from .crypto import FieldEncryptor
from .detectors import (
    collapse_spaces,
    detect_secret,
    looks_like_base64_blob,
    looks_like_json,
    mask_national_ids,
    scrub_url,
)
from .exceptions import PolicyConfigurationError
from .normalize import normalize_field_name
from .path_matcher import join_index, join_key
from .tree import ABSENT, NodeKind, node_kind, serialize_scalar, to_json


logger = structlog.get_logger(__name__)

DEFAULT_FIELD_NAME = "field"


@dataclass
class SanitizeOutcome:
    """Raw walk result: tree may be ABSENT when everything was removed."""

    tree: Any
    stats: SanitizeStats


class Sanitizer:
    """
    Applies a SanitizeContext to input trees.

    Stateless between calls; safe to share once built. Each call gets its
    own stats.

    Raises:
        PolicyConfigurationError: At construction, when the policy encrypts
            denied values but no encryptor is given
    """

    def __init__(self, context: SanitizeContext, encryptor: Optional[FieldEncryptor] = None):
        if context.policy.deny_action is DenyAction.ENCRYPT and encryptor is None:
            raise PolicyConfigurationError(
                "Policy denies by encryption but no encryptor was provided",
                details={"variant": context.policy.variant.value},
            )
        self.context = context
        self.encryptor = encryptor

    def sanitize(self, node: Any, field_name: str = "", path: str = "") -> SanitizeOutcome:
        """
        Sanitize one tree.

        Args:
            node: JSON-compatible input (never mutated)
            field_name: Key the node lives under, if any (drives allow-listing)
            path: Actual path of the node, "" for the root

        Returns:
            SanitizeOutcome with the new tree (or ABSENT) and the call stats
        """
        walker = _Walker(self.context, self.encryptor, SanitizeStats())
        tree = walker.visit(node, field_name, normalize_field_name(field_name), path, 0, 0)
        logger.debug(
            "Sanitize walk complete",
            variant=self.context.policy.variant.value,
            absent=tree is ABSENT,
            **walker.stats.to_dict(),
        )
        return SanitizeOutcome(tree, walker.stats)


class _Walker:
    """One sanitize call: policy lookups plus the stats being accumulated."""

    def __init__(
        self,
        context: SanitizeContext,
        encryptor: Optional[FieldEncryptor],
        stats: SanitizeStats,
    ):
        self.ctx = context
        self.policy = context.policy
        self.encryptor = encryptor
        self.stats = stats

    def visit(self, node: Any, field: str, norm: str, path: str, depth: int, json_level: int) -> Any:
        if depth > self.policy.max_depth:
            self.stats.total_leaves += 1
            self.stats.depth_limited += 1
            return self.policy.depth_placeholder

        kind = node_kind(node, path)
        if kind is NodeKind.MAPPING:
            return self._mapping(node, path, depth, json_level)
        if kind is NodeKind.SEQUENCE:
            return self._sequence(node, field, norm, path, depth, json_level)
        if kind is NodeKind.STRING:
            return self._string(node, field, norm, path, depth, json_level)
        return self._scalar(node, field, norm, path)

    # === Containers ===

    def _mapping(self, node: dict, path: str, depth: int, json_level: int) -> Any:
        entries: dict[str, Any] = {}
        for key, child in node.items():
            key = str(key)
            norm = normalize_field_name(key)
            if not norm:
                continue
            child_path = join_key(path, key)

            if self.policy.drop_sensitive_keys and self.ctx.is_sensitive_name(norm):
                self.stats.total_leaves += 1
                self.stats.removed_sensitive += 1
                continue

            if self.ctx.is_binary_name(norm) and self._drops_binary_entry(child, norm, child_path):
                self.stats.total_leaves += 1
                self.stats.removed_binary += 1
                continue

            value = self.visit(child, key, norm, child_path, depth + 1, json_level)
            if value is ABSENT:
                continue
            entries[key] = value

        return entries if entries else ABSENT

    def _drops_binary_entry(self, child: Any, norm: str, path: str) -> bool:
        if not self.policy.detection_overrides_allow_list and self.ctx.is_allowed(norm, path):
            return False
        if not self.policy.binary_key_requires_blob:
            return True
        return isinstance(child, str) and looks_like_base64_blob(child)

    def _sequence(self, node: list, field: str, norm: str, path: str, depth: int, json_level: int) -> Any:
        limit = self.policy.max_array_items
        items: list[Any] = []
        cut = 0
        for index, item in enumerate(node):
            if len(items) >= limit:
                cut = len(node) - index
                break
            value = self.visit(item, field, norm, join_index(path, index), depth + 1, json_level)
            if value is not ABSENT:
                items.append(value)

        if not items:
            return ABSENT
        if not cut:
            return items

        # Elements past the limit are seen but never visited: one leaf each.
        self.stats.total_leaves += cut
        self.stats.truncated_arrays += 1
        if self.policy.array_truncation is ArrayTruncation.METADATA:
            return {
                "meta": {
                    "arrayTruncated": True,
                    "originalLength": len(node),
                    "kept": len(items),
                },
                "items": items,
            }
        return items

    # === Leaves ===

    def _string(self, text: str, field: str, norm: str, path: str, depth: int, json_level: int) -> Any:
        if self.policy.parse_embedded_json and self.policy.sanitize_strings:
            embedded = self._parse_embedded_json(text, json_level)
            if embedded is not None:
                return self._embedded(embedded, field, norm, path, depth, json_level)

        self.stats.total_leaves += 1
        allowed = self.ctx.is_allowed(norm, path)
        detection_applies = self.policy.detection_overrides_allow_list or not allowed

        if self.policy.remove_binary and detection_applies and looks_like_base64_blob(text):
            self.stats.removed_binary += 1
            return ABSENT

        if not allowed:
            return self._deny(text, field)

        secret = detect_secret(text) if self.policy.detection_overrides_allow_list else None
        if secret is not None:
            self.stats.secrets_replaced += 1
            result = secret.marker
        elif not self.policy.sanitize_strings:
            result = text
        elif self.ctx.is_url_name(norm):
            result = self._url(text, norm)
        else:
            result = text
            if self.policy.mask_allow_listed:
                result, masked = mask_national_ids(result, self.policy.mask_char)
                if masked:
                    self.stats.masked += 1
                result = collapse_spaces(result)
            result = self._limit_length(result, norm)

        # A dropped URL is counted as removed, not allowed.
        if result is not ABSENT:
            self.stats.allowed += 1
        return result

    def _embedded(
        self, embedded: tuple[Any, int], field: str, norm: str, path: str, depth: int, json_level: int
    ) -> Any:
        # The carrying string is itself a leaf.
        self.stats.total_leaves += 1
        value, attempts = embedded
        result = self.visit(value, field, norm, path, depth, json_level + attempts)
        if result is ABSENT:
            return ABSENT
        self.stats.parsed_json += 1
        text = to_json(result)
        if self.policy.string_oversize is StringOversize.REPLACE and len(text) > self.policy.max_string_length:
            self.stats.truncated_strings += 1
            return self.policy.oversize_marker
        return text

    def _parse_embedded_json(self, text: str, json_level: int) -> Optional[tuple[Any, int]]:
        """
        Decode a stringified object/array, following at most the remaining
        re-parse budget through repeatedly stringified JSON.

        Returns (decoded container, attempts used) or None for opaque text.
        """
        remaining = self.policy.max_json_reparse - json_level
        current: Any = text
        attempts = 0
        while remaining > 0 and isinstance(current, str) and looks_like_json(current):
            try:
                current = json.loads(current)
            except (ValueError, RecursionError):
                return None
            attempts += 1
            remaining -= 1
        if attempts and isinstance(current, (dict, list)):
            return current, attempts
        return None

    def _url(self, text: str, norm: str) -> Any:
        scrubbed = scrub_url(text, self.ctx.sensitive_markers, self.policy.mask_char)
        if scrubbed is not None:
            if scrubbed != text.strip():
                self.stats.urls_scrubbed += 1
            return self._limit_length(collapse_spaces(scrubbed), norm)

        if not self.policy.preserve_unparseable_urls:
            self.stats.removed_sensitive += 1
            return ABSENT

        masked, count = mask_national_ids(text, self.policy.mask_char)
        if count:
            self.stats.masked += 1
        return self._limit_length(masked, norm)

    def _limit_length(self, text: str, norm: str) -> str:
        """
        Apply the length limit of the field kind.

        Stack traces and messages have their own limits and are always cut
        with the suffix; any other field follows string_oversize.
        """
        policy = self.policy
        if policy.max_stacktrace_length is not None and self.ctx.is_stacktrace_name(norm):
            limit, oversize = policy.max_stacktrace_length, StringOversize.TRUNCATE
        elif policy.max_message_length is not None and self.ctx.is_message_name(norm):
            limit, oversize = policy.max_message_length, StringOversize.TRUNCATE
        else:
            limit, oversize = policy.max_string_length, policy.string_oversize

        if len(text) <= limit:
            return text
        self.stats.truncated_strings += 1
        if oversize is StringOversize.REPLACE:
            return policy.oversize_marker
        return text[:limit] + policy.truncation_suffix

    def _scalar(self, value: Any, field: str, norm: str, path: str) -> Any:
        self.stats.total_leaves += 1
        if self.ctx.is_allowed(norm, path):
            self.stats.allowed += 1
            return value
        return self._deny(value, field)

    def _deny(self, value: Any, field: str) -> Any:
        if self.policy.deny_action is DenyAction.ENCRYPT:
            self.stats.encrypted += 1
            return self.encryptor.encrypt(field or DEFAULT_FIELD_NAME, serialize_scalar(value))
        self.stats.removed_not_allowlisted += 1
        return ABSENT
