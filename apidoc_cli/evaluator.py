"""Best-effort partial evaluation of expression nodes.

Nothing is executed. Expressions are reduced to a scalar when they are
literals or bound identifiers, and to a readable text approximation when they
are calls, member accesses or object literals. Everything else is
``UNRESOLVED``; callers treat that as "nothing to document", never as an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .models import Node, Scalar

Environment = Mapping[str, Scalar]

EMPTY_ENV: Environment = MappingProxyType({})


@dataclass(frozen=True)
class Resolved:
    value: Scalar

    @property
    def text(self) -> str:
        return to_text(self.value)


class _Unresolved:
    _instance: Optional["_Unresolved"] = None

    def __new__(cls) -> "_Unresolved":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED = _Unresolved()

Resolution = Union[Resolved, _Unresolved]


def to_text(value: Any) -> str:
    """Render a scalar the way JavaScript's ``String()`` does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _interpolated(result: Resolution) -> str:
    # `${value}` semantics
    if isinstance(result, Resolved):
        return result.text
    return "undefined"


def _joined(result: Resolution) -> str:
    # Array.prototype.join semantics: null and undefined become empty
    if isinstance(result, Resolved) and result.value is not None:
        return result.text
    return ""


def evaluate(node: Optional[Node], env: Environment = EMPTY_ENV) -> Resolution:
    """Reduce *node* to a :class:`Resolved` value or ``UNRESOLVED``."""
    if node is None:
        return UNRESOLVED

    handler = _HANDLERS.get(node.kind)
    if handler is None:
        return UNRESOLVED
    return handler(node, env)


def evaluate_value(node: Optional[Node], env: Environment = EMPTY_ENV) -> Scalar:
    """Like :func:`evaluate`, unwrapped: the resolved scalar or ``None``."""
    result = evaluate(node, env)
    return result.value if isinstance(result, Resolved) else None


def _literal(node: Node, env: Environment) -> Resolution:
    return Resolved(node["value"])


def _identifier(node: Node, env: Environment) -> Resolution:
    name = node["name"]
    if name in env:
        return Resolved(env[name])
    return Resolved(name)


def _call(node: Node, env: Environment) -> Resolution:
    # the callee is never substituted, only the arguments are
    callee = evaluate(node.get("callee"), EMPTY_ENV)
    if not isinstance(callee, Resolved):
        return UNRESOLVED

    result = callee.text
    arguments = node.get("arguments") or ()
    if arguments:
        rendered = ", ".join(_joined(evaluate(arg, env)) for arg in arguments)
        result += f"({rendered})"
    return Resolved(result)


def _member(node: Node, env: Environment) -> Resolution:
    prop = node.get("property")
    unmapped = evaluate(prop, EMPTY_ENV)
    mapped = evaluate(prop, env)
    if mapped != unmapped:
        # a bound property name stands in for the whole namespaced access
        return mapped

    obj = evaluate(node.get("object"), EMPTY_ENV)
    if not isinstance(obj, Resolved) or not isinstance(unmapped, Resolved):
        return UNRESOLVED
    return Resolved(f"{obj.text}.{unmapped.text}")


def property_key(prop: Node) -> str:
    """Return the verbatim key text of an object ``property`` node."""
    key = prop.get("key")
    if key is None:
        return "undefined"
    if key.kind == "identifier":
        return key["name"]
    return _interpolated(evaluate(key, EMPTY_ENV))


def _object(node: Node, env: Environment) -> Resolution:
    parts = [
        f"{property_key(prop)}: {_interpolated(evaluate(prop.get('value'), env))}"
        for prop in node.get("properties") or ()
        if prop.kind == "property"
    ]
    return Resolved("{ " + ", ".join(parts) + " }")


_HANDLERS = {
    "literal": _literal,
    "identifier": _identifier,
    "call": _call,
    "member": _member,
    "object": _object,
}
