"""
Tree model shared by every transform.

A tree is a JSON-compatible value. Transforms never mutate their input and
use the ABSENT sentinel (not None) to say "this node was removed".
"""

import json
from enum import Enum
from typing import Any, Union

from .exceptions import UnsupportedNodeError


Node = Union[None, bool, int, float, str, list["Node"], dict[str, "Node"]]


class _Absent:
    """Marker for a removed node. Distinct from JSON null."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


class NodeKind(str, Enum):
    """Closed set of node kinds. Every walker dispatches on these."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def node_kind(value: Any, path: str = "") -> NodeKind:
    """
    Classify a value into its NodeKind.

    bool is checked before int because bool is an int subclass.

    Raises:
        UnsupportedNodeError: For anything that is not JSON-compatible
    """
    if value is None:
        return NodeKind.NULL
    if isinstance(value, bool):
        return NodeKind.BOOL
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if isinstance(value, str):
        return NodeKind.STRING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    if isinstance(value, dict):
        return NodeKind.MAPPING
    raise UnsupportedNodeError(value, path)


def to_json(value: Node) -> str:
    """Compact serialization used for sizes and re-serialized JSON strings."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def serialized_size(value: Node) -> int:
    """UTF-8 byte length of the compact serialization."""
    return len(to_json(value).encode("utf-8"))


def serialize_scalar(value: Node) -> str:
    """Strings as-is, everything else as compact JSON (used before encryption)."""
    if isinstance(value, str):
        return value
    return to_json(value)
