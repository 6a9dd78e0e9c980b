"""
Payload byte-budget enforcement.

Runs after sanitization. Shrinks a tree until its compact JSON form fits
max_bytes, in two phases:

1. Empty arrays, largest first (one big cut per step)
2. Truncate strings, longest first, to a short prefix plus a marker

Size is recomputed after every step and the loop stops as soon as the
budget is met. A tree that still does not fit is returned with
exceeded=True; the caller decides what to do with it.
"""

import copy
from dataclasses import dataclass
from typing import Any, Union

import structlog

from ..models.results import BudgetResult
from .tree import serialized_size, to_json


logger = structlog.get_logger(__name__)

STRING_KEEP_CHARS = 200
STRING_TRUNCATION_MARKER = "…[truncado]"

PathSegment = Union[str, int]
_MISSING = object()


@dataclass
class _Candidate:
    path: tuple[PathSegment, ...]
    size: int


def _get(root: Any, path: tuple[PathSegment, ...]) -> Any:
    cursor = root
    for segment in path:
        if isinstance(cursor, dict) and isinstance(segment, str) and segment in cursor:
            cursor = cursor[segment]
        elif isinstance(cursor, list) and isinstance(segment, int) and segment < len(cursor):
            cursor = cursor[segment]
        else:
            return _MISSING
    return cursor


def _set(root: Any, path: tuple[PathSegment, ...], value: Any) -> None:
    cursor = root
    for segment in path[:-1]:
        cursor = cursor[segment]
    cursor[path[-1]] = value


def _collect(
    node: Any,
    path: tuple[PathSegment, ...],
    arrays: list[_Candidate],
    strings: list[_Candidate],
) -> None:
    if isinstance(node, list):
        arrays.append(_Candidate(path, serialized_size(node)))
        for index, item in enumerate(node):
            _collect(item, path + (index,), arrays, strings)
    elif isinstance(node, dict):
        for key, child in node.items():
            _collect(child, path + (key,), arrays, strings)
    elif isinstance(node, str):
        strings.append(_Candidate(path, len(node)))


def _truncated(text: str) -> str:
    return text[:STRING_KEEP_CHARS] + STRING_TRUNCATION_MARKER


def apply_payload_budget(payload: Any, max_bytes: int) -> BudgetResult:
    """
    Fit a sanitized tree into max_bytes of compact JSON.

    The input is deep-copied and never mutated. Every step strictly shrinks
    the serialized size, so size_history is non-increasing.

    Args:
        payload: Sanitized tree
        max_bytes: Budget in UTF-8 bytes

    Returns:
        BudgetResult with the (possibly reduced) payload and reduction counts
    """
    tree = copy.deepcopy(payload)
    size = serialized_size(tree)
    result = BudgetResult(payload=tree, bytes=size, size_history=[size])

    if size <= max_bytes:
        return result

    arrays: list[_Candidate] = []
    strings: list[_Candidate] = []
    _collect(tree, (), arrays, strings)

    # A root-level array is zeroed in place of the whole tree.
    arrays.sort(key=lambda c: c.size, reverse=True)
    for candidate in arrays:
        current = _get(tree, candidate.path)
        if not isinstance(current, list) or not current:
            continue
        if candidate.path:
            _set(tree, candidate.path, [])
        else:
            tree = []
            result.payload = tree
        result.arrays_removed += 1
        size = serialized_size(tree)
        result.size_history.append(size)
        if size <= max_bytes:
            result.bytes = size
            return result

    strings.sort(key=lambda c: c.size, reverse=True)
    for candidate in strings:
        current = _get(tree, candidate.path)
        if not isinstance(current, str) or not current:
            continue
        shortened = _truncated(current)
        if len(to_json(shortened).encode("utf-8")) >= len(to_json(current).encode("utf-8")):
            continue
        if candidate.path:
            _set(tree, candidate.path, shortened)
        else:
            tree = shortened
            result.payload = tree
        result.strings_trimmed += 1
        size = serialized_size(tree)
        result.size_history.append(size)
        if size <= max_bytes:
            result.bytes = size
            return result

    result.bytes = size
    result.exceeded = size > max_bytes
    logger.warning(
        "Payload still over budget after reduction",
        max_bytes=max_bytes,
        bytes=size,
        arrays_removed=result.arrays_removed,
        strings_trimmed=result.strings_trimmed,
    )
    return result
