"""
keepPaths / dropPaths pruning.

Runs before the sanitizer. keepPaths (when configured) select the subtrees
worth analysing; dropPaths then excise known-noisy subtrees. Containers left
empty by either pass disappear from their parent.
"""

from dataclasses import dataclass
from typing import Any

from .path_matcher import PathMatcher, join_index, join_key
from .tree import ABSENT, NodeKind, node_kind


@dataclass
class FilterResult:
    """Pruned tree (possibly ABSENT) and how many nodes were cut."""

    tree: Any
    removed: int = 0


def filter_by_keep_paths(tree: Any, keep: PathMatcher) -> FilterResult:
    """
    Keep only the subtrees whose path matches a keep pattern.

    A matching node is kept whole. Unmatched leaves are removed. With no
    patterns the tree is returned untouched.
    """
    if not keep:
        return FilterResult(tree)

    result = FilterResult(ABSENT)

    def walk(node: Any, path: str) -> Any:
        if keep.matches(path):
            return node
        kind = node_kind(node, path)
        if kind is NodeKind.SEQUENCE:
            items = [walk(item, join_index(path, i)) for i, item in enumerate(node)]
            items = [item for item in items if item is not ABSENT]
            return items if items else ABSENT
        if kind is NodeKind.MAPPING:
            entries = {}
            for key, child in node.items():
                kept = walk(child, join_key(path, key))
                if kept is not ABSENT:
                    entries[key] = kept
            return entries if entries else ABSENT
        result.removed += 1
        return ABSENT

    result.tree = walk(tree, "")
    return result


def filter_by_drop_paths(tree: Any, drop: PathMatcher) -> FilterResult:
    """Excise every node whose path matches a drop pattern."""
    if not drop or tree is ABSENT:
        return FilterResult(tree)

    result = FilterResult(ABSENT)

    def walk(node: Any, path: str) -> Any:
        if drop.matches(path):
            result.removed += 1
            return ABSENT
        kind = node_kind(node, path)
        if kind is NodeKind.SEQUENCE:
            items = [walk(item, join_index(path, i)) for i, item in enumerate(node)]
            items = [item for item in items if item is not ABSENT]
            return items if items else ABSENT
        if kind is NodeKind.MAPPING:
            entries = {}
            for key, child in node.items():
                kept = walk(child, join_key(path, key))
                if kept is not ABSENT:
                    entries[key] = kept
            return entries if entries else ABSENT
        return node

    result.tree = walk(tree, "")
    return result


def filter_by_paths(tree: Any, keep: PathMatcher, drop: PathMatcher) -> FilterResult:
    """keep-filter, then drop-filter. Counts from both passes are summed."""
    kept = filter_by_keep_paths(tree, keep)
    dropped = filter_by_drop_paths(kept.tree, drop)
    return FilterResult(dropped.tree, kept.removed + dropped.removed)
