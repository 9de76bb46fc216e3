"""Error-table extraction.

The error module declares an errno table and a defaults table, then a family
of ``AppError.<name> = function (...) { return new AppError({...}) }``
constructors. Each ``return new AppError(...)`` documents one error.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from .config import DEFAULT_CONFIG, ExtractionConfig
from .environment import find_variables, object_environment
from .errors import ShapeError
from .evaluator import EMPTY_ENV, Environment, property_key
from .matcher import FindMode, find, pattern
from .models import ErrorParams, ErrorRecord, ErrorTable, Node, Scalar
from .shapes import OBJECT_KINDS, assert_kind, find_assignments_to, find_property, identifier, member_of

logger = logging.getLogger(__name__)

ERROR_PROPERTY_KINDS = frozenset({"literal", "member", "binary", "logical"})


def find_declaration(declarations: List[Node], name: str, file_path: str) -> Node:
    """Return the initializer of the first top-level declarator called *name*."""
    for declarator in declarations:
        target = declarator.get("id")
        init = declarator.get("init")
        if init is not None and target is not None and target.get("name") == name:
            return init
    raise ShapeError(f"Expected declaration {name}, found nothing", file_path)


def find_error_constructors(program: Node, config: ExtractionConfig = DEFAULT_CONFIG) -> List[Node]:
    """Assignments to ``<namespace>.<name>``, minus the non-error helpers."""
    assignments = find_assignments_to(program["body"], member_of(identifier(config.error_namespace)))
    return [
        assignment for assignment in assignments
        if assignment["left"]["property"].get("name") not in config.not_errors
    ]


def operand_heuristic(node: Node) -> Scalar:
    """Pick one operand of a compound error field.

    Binary expressions yield their left operand and logical expressions their
    right one. This only fits the handful of shapes the error module uses
    (``'...' + reason``, ``errno || ERRNO.X``); it is not general evaluation.
    """
    operand = node.get("left") if node.kind == "binary" else node.get("right")
    if operand is not None and operand.kind == "literal":
        return operand["value"]
    return None


def error_property(
    error: Node,
    name: str,
    file_path: str,
    errno_map: Optional[Environment] = None,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Scalar:
    value = find_property(error, name, ERROR_PROPERTY_KINDS, file_path)
    if value is None:
        return None
    if value.kind == "literal":
        return value["value"]
    if value.kind in ("binary", "logical"):
        return operand_heuristic(value)

    # member access: only ERRNO.<name> lookups resolve
    obj = value.get("object")
    prop = value.get("property")
    if (
        errno_map is not None
        and obj is not None and obj.get("name") == config.errno_name
        and prop is not None and prop.kind == "identifier"
    ):
        return errno_map.get(prop["name"])
    return None


def _or_default(value: Scalar, defaults: Environment, key: str) -> Scalar:
    return value if value is not None else defaults.get(key)


def marshall_errors(
    constructor: Node,
    errno_map: Environment,
    defaults_map: Environment,
    file_path: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Tuple[List[ErrorRecord], List[ErrorParams]]:
    returns = find(
        constructor,
        pattern("return", argument=pattern("new", callee=identifier(config.error_namespace))),
        FindMode.RECURSIVE,
    )

    errors: List[ErrorRecord] = []
    params: List[ErrorParams] = []
    for returned in returns:
        arguments = returned["argument"].get("arguments") or ()
        error = assert_kind(arguments[0] if arguments else None, OBJECT_KINDS, file_path)
        code = error_property(error, "code", file_path, config=config)
        errno = _or_default(
            error_property(error, "errno", file_path, errno_map, config), defaults_map, "errno",
        )
        message = error_property(error, "message", file_path, config=config)

        if len(arguments) > 1 and arguments[1].kind == "object":
            params.append(ErrorParams(
                errno=errno,
                params=tuple(
                    property_key(prop) for prop in arguments[1]["properties"]
                    if prop.kind == "property"
                ),
            ))

        errors.append(ErrorRecord(
            errno=errno,
            code=_or_default(code, defaults_map, "code"),
            definition=_or_default(message, defaults_map, "message"),
        ))
    return errors, params


def _errno_order(record: Any) -> Tuple[int, Any]:
    errno = record.errno
    if isinstance(errno, (int, float)) and not isinstance(errno, bool):
        return 0, errno
    return 1, str(errno)


def extract_errors(
    program: Node,
    file_path: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> ErrorTable:
    declarations: List[Node] = []
    for variable in find_variables(program["body"]):
        declarations.extend(variable["declarations"])

    errno = assert_kind(find_declaration(declarations, config.errno_name, file_path), OBJECT_KINDS, file_path)
    defaults = assert_kind(
        find_declaration(declarations, config.defaults_name, file_path), OBJECT_KINDS, file_path,
    )

    errno_map = object_environment(errno, EMPTY_ENV)
    defaults_map = object_environment(defaults, errno_map)

    errors: List[ErrorRecord] = []
    params: List[ErrorParams] = []
    for constructor in find_error_constructors(program, config):
        found_errors, found_params = marshall_errors(constructor, errno_map, defaults_map, file_path, config)
        errors.extend(found_errors)
        params.extend(found_params)

    logger.debug("%s: %d error(s), %d with extra params", file_path, len(errors), len(params))
    return ErrorTable(
        errors=tuple(sorted(errors, key=_errno_order)),
        additional_error_params=tuple(sorted(params, key=_errno_order)),
    )
