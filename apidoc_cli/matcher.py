"""Structural matching over the node model.

A *pattern* is a plain mapping shaped like a node: ``kind`` plus any subset of
fields. Fields missing from the pattern are wildcards, so ``{}`` matches every
node. Patterns nest, and matching recurses through them::

    pattern("member",
            object=pattern("identifier", name="module"),
            property=pattern("identifier", name="exports"))

Two forms of existential matching are supported. The ``ANY_FIELD`` key matches
when *some* field of the candidate satisfies its sub-pattern, and a list or
tuple of sub-patterns matches a candidate sequence when each sub-pattern
matches at least one element.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import ShapeError
from .models import Node

ANY_FIELD = "*"


class FindMode(str, Enum):
    SINGLE = "single"
    ARRAY = "array"
    RECURSIVE = "recursive"


def pattern(kind: Optional[str] = None, **fields: Any) -> Dict[str, Any]:
    """Build a pattern dict; ``kind=None`` leaves the kind unconstrained."""
    result: Dict[str, Any] = {}
    if kind is not None:
        result["kind"] = kind
    result.update(fields)
    return result


def _field_items(value: Any) -> Optional[Iterable[tuple]]:
    if isinstance(value, Node):
        return value.items()
    if isinstance(value, Mapping):
        return value.items()
    return None


def _field_value(value: Any, name: str) -> tuple:
    """Return ``(present, content)`` for field *name* of a field-bearing value."""
    if isinstance(value, Node):
        if name == "kind":
            return True, value.kind
        return (name in value.fields), value.fields.get(name)
    return (name in value), value.get(name)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _same_scalar(node: Any, expected: Any) -> bool:
    # bool is an int subclass; True must not match 1
    return type(node) is type(expected) and node == expected


def match(node: Any, criteria: Any) -> bool:
    """Return True when *node* satisfies *criteria*."""
    if isinstance(criteria, Mapping):
        if _field_items(node) is None:
            return False
        for key, expected in criteria.items():
            if key == ANY_FIELD:
                if not any(match(content, expected) for _, content in _field_items(node)):
                    return False
                continue
            present, content = _field_value(node, key)
            if not present or not match(content, expected):
                return False
        return True

    if _is_sequence(criteria):
        if not _is_sequence(node):
            return False
        return all(any(match(item, expected) for item in node) for expected in criteria)

    if _field_items(node) is not None or _is_sequence(node):
        return False
    return _same_scalar(node, criteria)


def find(node: Any, criteria: Any, mode: FindMode = FindMode.SINGLE) -> List[Any]:
    """Collect the values under *node* that match *criteria*.

    A matching value is returned as-is and its descendants are not searched.
    """
    if match(node, criteria):
        return [node]

    results: List[Any] = []
    if mode == FindMode.ARRAY and _is_sequence(node):
        for item in node:
            results.extend(find(item, criteria, mode))
    elif mode == FindMode.RECURSIVE:
        if _is_sequence(node):
            for item in node:
                results.extend(find(item, criteria, mode))
        elif isinstance(node, Node):
            for content in node.fields.values():
                results.extend(find(content, criteria, mode))
    return results


def find_one(
    node: Any,
    criteria: Any,
    mode: FindMode,
    what: str,
    file_path: Optional[str] = None,
) -> Any:
    """Like :func:`find`, but require exactly one match."""
    found = find(node, criteria, mode)
    if len(found) != 1:
        raise ShapeError(f"Expected 1 {what}, found {len(found)}", file_path)
    return found[0]


def find_all(nodes: Sequence[Any], criteria: Any) -> List[Any]:
    """Shorthand for an array-mode search over sibling nodes."""
    return find(list(nodes), criteria, FindMode.ARRAY)
