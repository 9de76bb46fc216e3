"""Shape queries shared by the extraction targets.

Each helper locates one construct with the matcher and asserts its shape.
Irregular sources raise :class:`~.errors.ShapeError` instead of being guessed
at.
"""

from __future__ import annotations

from typing import Any, Collection, Dict, List, Optional, Sequence

from .errors import MissingFieldError, ShapeError
from .evaluator import to_text
from .matcher import FindMode, find, find_all, find_one, pattern
from .models import Node

FUNCTION_KINDS = frozenset({"function"})
ARRAY_KINDS = frozenset({"array"})
OBJECT_KINDS = frozenset({"object"})
LITERAL_KINDS = frozenset({"literal"})


def identifier(name: str) -> Dict[str, Any]:
    return pattern("identifier", name=name)


def member_of(obj: Dict[str, Any], prop: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if prop is None:
        return pattern("member", object=obj)
    return pattern("member", object=obj, property=prop)


MODULE_EXPORTS = member_of(identifier("module"), identifier("exports"))

# module.exports = ..., module.exports.name = ..., exports.name = ...
EXPORT_TARGETS = (
    MODULE_EXPORTS,
    member_of(MODULE_EXPORTS),
    member_of(identifier("exports")),
)


def assert_kind(
    node: Optional[Node],
    kinds: Collection[str],
    file_path: Optional[str] = None,
) -> Node:
    """Raise ShapeError unless *node* exists and has one of *kinds*."""
    expected = ",".join(sorted(kinds))
    if node is None:
        raise ShapeError(f"Expected type [{expected}], found nothing", file_path)
    if node.kind not in kinds:
        raise ShapeError(
            f'Expected type [{expected}], found "{node.kind}" '
            f'at column "{node.location.column}"',
            file_path,
            node.location,
        )
    return node


def find_assignments_to(node: Any, target: Dict[str, Any]) -> List[Node]:
    """Find ``<target> = ...`` assignments anywhere under *node*."""
    return find(node, pattern("assignment", operator="=", left=target), FindMode.RECURSIVE)


def find_module_exports(statements: Sequence[Node]) -> List[Node]:
    """Every assignment to ``module.exports`` or one of its properties."""
    exported: List[Node] = []
    for target in EXPORT_TARGETS:
        exported.extend(find_assignments_to(list(statements), target))
    exported.sort(key=lambda node: (node.location.line, node.location.column))
    return exported


def export_key(assignment: Node) -> str:
    """The property name an export assignment writes to."""
    left = assignment["left"]
    prop = left.get("property")
    if prop is None:
        return "exports"
    if prop.kind == "literal":
        # exports['foo-bar'] = ...
        return to_text(prop["value"])
    if prop.kind == "identifier" and not left.get("computed"):
        return prop["name"]
    return "exports"


def find_exported_function(statements: Sequence[Node], file_path: Optional[str] = None) -> Node:
    """Return the function assigned as the module's single export."""
    exported = find_module_exports(statements)
    if len(exported) != 1:
        raise ShapeError(f"Expected 1 export, found {len(exported)}", file_path)
    return assert_kind(exported[0]["right"], FUNCTION_KINDS, file_path)


def find_returned_data(function: Node, file_path: Optional[str] = None) -> Sequence[Node]:
    """Return the elements of the array literal a function returns.

    The returned value may be the array itself or an identifier naming a
    variable declared (once) inside the function.
    """
    body = function.get("body")
    if body is not None and body.kind == "block":
        returned = find_one(
            list(body["body"]), pattern("return"), FindMode.ARRAY,
            "return statement", file_path,
        )
        data = returned.get("argument")
    else:
        data = body

    if data is not None and data.kind == "identifier":
        declarator = find_one(
            function,
            pattern("variable-declarator", id=identifier(data["name"])),
            FindMode.RECURSIVE,
            "set of route definitions",
            file_path,
        )
        data = declarator.get("init")

    return assert_kind(data, ARRAY_KINDS, file_path)["elements"]


def property_pattern(key: str) -> Dict[str, Any]:
    return pattern("property", key=identifier(key))


def find_property(
    obj: Optional[Node],
    key: str,
    kinds: Optional[Collection[str]] = None,
    file_path: Optional[str] = None,
) -> Optional[Node]:
    """Return the value of the first ``key:`` property of an object literal.

    When *kinds* is given the value must have one of them.
    """
    if obj is None:
        return None
    found = find_all(obj.get("properties") or (), property_pattern(key))
    if not found:
        return None
    value = found[0].get("value")
    if kinds is not None:
        assert_kind(value, kinds, file_path)
    return value


def require_property(
    obj: Node,
    key: str,
    kinds: Collection[str],
    file_path: Optional[str] = None,
) -> Node:
    """Like :func:`find_property`, but a missing property is fatal."""
    value = find_property(obj, key, kinds, file_path)
    if value is None:
        raise MissingFieldError(f'Missing property "{key}"', file_path, obj.location)
    return value
