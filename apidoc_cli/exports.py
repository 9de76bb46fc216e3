"""Module-export extraction (validators, metrics context keys)."""

from __future__ import annotations

import logging
from typing import Tuple

from .environment import build_environment
from .evaluator import Resolved, evaluate
from .models import ExportEntry, Node
from .shapes import export_key, find_module_exports

logger = logging.getLogger(__name__)


def extract_exports(program: Node, file_path: str = "") -> Tuple[ExportEntry, ...]:
    """Evaluate every ``exports.<key> = <value>`` of a module.

    Exports whose value is unresolved or falsy (functions, empty strings, zero)
    are skipped.
    """
    statements = program["body"]
    variables = build_environment(statements)

    entries = []
    for assignment in find_module_exports(statements):
        value = evaluate(assignment["right"], variables)
        if not isinstance(value, Resolved) or not value.value:
            continue
        entries.append(ExportEntry(key=export_key(assignment), value=value.value))

    logger.debug("%s: %d export(s)", file_path or "<module>", len(entries))
    return tuple(entries)
