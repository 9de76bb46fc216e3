"""Seed evaluation environments from variable declarations."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Sequence

from .evaluator import EMPTY_ENV, Environment, Resolved, evaluate, property_key
from .matcher import find_all, pattern
from .models import Node, Scalar

logger = logging.getLogger(__name__)

VARIABLE_DECLARATION = pattern("variable-declaration")


def find_variables(statements: Sequence[Node]) -> list:
    """Return the variable declarations among *statements* (not nested ones)."""
    return find_all(statements, VARIABLE_DECLARATION)


def build_environment(statements: Sequence[Node]) -> Environment:
    """Bind every declared name whose initializer resolves.

    Initializers are evaluated under the empty environment, so declarations
    never see each other.
    """
    bindings: Dict[str, Scalar] = {}
    for declaration in find_variables(statements):
        for declarator in declaration["declarations"]:
            init = declarator.get("init")
            target = declarator.get("id")
            if init is None or target is None or target.kind != "identifier":
                continue
            value = evaluate(init, EMPTY_ENV)
            if isinstance(value, Resolved):
                bindings[target["name"]] = value.value
    logger.debug("Environment holds %d binding(s)", len(bindings))
    return MappingProxyType(bindings)


def object_environment(obj: Node, env: Environment = EMPTY_ENV) -> Environment:
    """Evaluate each property of an object literal into a lookup mapping."""
    bindings: Dict[str, Scalar] = {}
    for prop in obj.get("properties") or ():
        if prop.kind != "property":
            continue
        value = evaluate(prop.get("value"), env)
        if isinstance(value, Resolved):
            bindings[property_key(prop)] = value.value
    return MappingProxyType(bindings)
