"""
Path pattern matching with array wildcards.

Actual paths look like ``data.set0[2].STA_PAGO``. A pattern segment ``[]``
matches any concrete index, so ``data.set0[].STA_PAGO`` matches the path above.
Patterns are anchored: they match the whole path, never a substring.
"""

import re
from functools import lru_cache
from typing import Iterable


_WILDCARD = re.escape("[]")
_INDEX = r"\[\d+\]"


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile a textual path pattern into an anchored regex.

    Compiled patterns are cached process-wide; the cache is only ever
    read after warm-up.
    """
    escaped = re.escape(pattern).replace(_WILDCARD, _INDEX)
    return re.compile(f"^{escaped}$")


def match_path(actual_path: str, pattern: str) -> bool:
    """
    Check whether an actual path matches a single pattern.

    Examples:
        >>> match_path("data.set0[2].STA_PAGO", "data.set0[].STA_PAGO")
        True
        >>> match_path("data.set1[2].STA_PAGO", "data.set0[].STA_PAGO")
        False
    """
    return compile_pattern(pattern).match(actual_path) is not None


class PathMatcher:
    """Immutable pattern set; matches when any of its patterns matches."""

    __slots__ = ("_patterns", "_regexes")

    def __init__(self, patterns: Iterable[str] = ()):
        self._patterns = tuple(p for p in patterns if p)
        self._regexes = tuple(compile_pattern(p) for p in self._patterns)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def matches(self, path: str) -> bool:
        return any(regex.match(path) for regex in self._regexes)

    def __bool__(self) -> bool:
        return bool(self._regexes)

    def __len__(self) -> int:
        return len(self._regexes)

    def __repr__(self) -> str:
        return f"PathMatcher({list(self._patterns)!r})"


def join_key(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def join_index(path: str, index: int) -> str:
    return f"{path}[{index}]"
