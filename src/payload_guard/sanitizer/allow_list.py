"""
Allow-list loading and the immutable sanitize context.

The allow-list file is a JSON array of strings. Plain entries are field
names (compared after normalization); entries containing "." or "[" are
path patterns such as ``data.set0[].STA_PAGO``.

The SanitizeContext bundles the allow-list, the compiled path matchers and
the policy. Build it once at startup and pass it to every sanitize call.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

import structlog

from ..models.policy import PathFilterConfig, SanitizePolicy
from .exceptions import AllowListLoadError
from .normalize import matches_marker, normalize_field_name, normalize_markers
from .path_matcher import PathMatcher


logger = structlog.get_logger(__name__)


def load_allow_list_entries(path: Union[str, Path]) -> list[str]:
    """
    Read raw allow-list entries from a JSON file.

    Raises:
        AllowListLoadError: If the file is missing, not JSON, or not an array
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise AllowListLoadError(
            "Allow-list file could not be read", path=str(file_path), reason=str(e)
        ) from e

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AllowListLoadError(
            "Allow-list file is not valid JSON",
            path=str(file_path),
            reason=f"{e.msg} at line {e.lineno} col {e.colno}",
        ) from e

    if not isinstance(parsed, list):
        raise AllowListLoadError(
            "Allow-list file must be a JSON array of strings",
            path=str(file_path),
            reason=f"got {type(parsed).__name__}",
        )
    return [str(entry) for entry in parsed]


def _is_path_pattern(entry: str) -> bool:
    return "." in entry or "[" in entry


class AllowList:
    """
    Immutable allow-list: normalized field names plus path patterns.

    Examples:
        >>> allow = AllowList(["COD_PROPOSTA", "data.set0[].STA_PAGO"])
        >>> allow.allows("codproposta", "x.COD_PROPOSTA")
        True
        >>> allow.allows("stapago", "data.set0[3].STA_PAGO")
        True
    """

    __slots__ = ("_fields", "_paths")

    def __init__(self, entries: Iterable[str] = ()):
        fields: set[str] = set()
        patterns: list[str] = []
        for entry in entries:
            entry = entry.strip()
            if not entry:
                continue
            if _is_path_pattern(entry):
                patterns.append(entry)
                continue
            normalized = normalize_field_name(entry)
            if normalized:
                fields.add(normalized)
        self._fields = frozenset(fields)
        self._paths = PathMatcher(patterns)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AllowList":
        allow_list = cls(load_allow_list_entries(path))
        logger.info(
            "Allow-list loaded",
            path=str(path),
            fields=len(allow_list.fields),
            patterns=len(allow_list.path_patterns),
        )
        return allow_list

    @property
    def fields(self) -> frozenset[str]:
        return self._fields

    @property
    def path_patterns(self) -> tuple[str, ...]:
        return self._paths.patterns

    def allows(self, normalized_name: str, path: str) -> bool:
        if normalized_name and normalized_name in self._fields:
            return True
        return self._paths.matches(path)

    def __len__(self) -> int:
        return len(self._fields) + len(self._paths)


@dataclass(frozen=True)
class SanitizeContext:
    """
    Process-wide, read-only inputs of every sanitize call.

    Marker lists from the policy are normalized once here so the hot path
    only does substring tests.
    """

    policy: SanitizePolicy
    allow_list: AllowList
    keep_paths: PathMatcher
    drop_paths: PathMatcher
    sensitive_markers: tuple[str, ...]
    binary_markers: tuple[str, ...]
    url_markers: tuple[str, ...]
    allow_markers: tuple[str, ...]
    allow_prefixes: tuple[str, ...]
    message_markers: tuple[str, ...]
    stacktrace_markers: tuple[str, ...]

    @classmethod
    def build(
        cls,
        policy: SanitizePolicy,
        allow_list: Union[AllowList, Iterable[str]] = (),
        path_filter: PathFilterConfig | None = None,
    ) -> "SanitizeContext":
        if not isinstance(allow_list, AllowList):
            allow_list = AllowList(allow_list)
        path_filter = path_filter or PathFilterConfig()
        return cls(
            policy=policy,
            allow_list=allow_list,
            keep_paths=PathMatcher(path_filter.keep_paths),
            drop_paths=PathMatcher(path_filter.drop_paths),
            sensitive_markers=normalize_markers(policy.sensitive_markers),
            binary_markers=normalize_markers(policy.binary_markers),
            url_markers=normalize_markers(policy.url_markers),
            allow_markers=normalize_markers(policy.allow_markers),
            allow_prefixes=normalize_markers(policy.allow_prefixes),
            message_markers=normalize_markers(policy.message_markers),
            stacktrace_markers=normalize_markers(policy.stacktrace_markers),
        )

    def is_allowed(self, normalized_name: str, path: str) -> bool:
        if self.allow_list.allows(normalized_name, path):
            return True
        if matches_marker(normalized_name, self.allow_markers):
            return True
        return bool(normalized_name) and normalized_name.startswith(self.allow_prefixes)

    def is_sensitive_name(self, normalized_name: str) -> bool:
        return matches_marker(normalized_name, self.sensitive_markers)

    def is_binary_name(self, normalized_name: str) -> bool:
        return matches_marker(normalized_name, self.binary_markers)

    def is_url_name(self, normalized_name: str) -> bool:
        return matches_marker(normalized_name, self.url_markers)

    def is_message_name(self, normalized_name: str) -> bool:
        return matches_marker(normalized_name, self.message_markers)

    def is_stacktrace_name(self, normalized_name: str) -> bool:
        return matches_marker(normalized_name, self.stacktrace_markers)
