"""Core data models: the syntax-tree node model and extracted records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class Location:
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True, eq=False)
class Node:
    """One syntax-tree element.

    ``fields`` maps a field name to a child Node, a tuple of Nodes, or a scalar.
    The mapping is read-only; nodes are never mutated after parsing.
    """

    kind: str
    location: Location
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def items(self) -> Iterator[Tuple[str, Any]]:
        yield "kind", self.kind
        yield from self.fields.items()


# ---------------------------------------------------------------------------
# Extracted records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Parameter:
    name: str
    validation: Scalar


@dataclass(frozen=True)
class Authentication:
    optional: bool
    tokens: Tuple[str, ...]
    emojis: str
    token: str
    summary: str


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    slug: str
    authentication: Optional[Authentication] = None
    query_parameters: Tuple[Parameter, ...] = ()
    request_body: Tuple[Parameter, ...] = ()
    response_body: Tuple[Parameter, ...] = ()

    @property
    def has_query_parameters(self) -> bool:
        return len(self.query_parameters) > 0

    @property
    def has_request_body(self) -> bool:
        return len(self.request_body) > 0

    @property
    def has_response_body(self) -> bool:
        return len(self.response_body) > 0


@dataclass(frozen=True)
class RouteModule:
    name: str
    slug: str
    routes: Tuple[Route, ...]


@dataclass(frozen=True)
class ExportEntry:
    key: str
    value: Scalar


@dataclass(frozen=True)
class ErrorRecord:
    errno: Scalar
    code: Scalar
    definition: Scalar


@dataclass(frozen=True)
class ErrorParams:
    errno: Scalar
    params: Tuple[str, ...]

    @property
    def has_params(self) -> bool:
        return len(self.params) > 0


@dataclass(frozen=True)
class ErrorTable:
    errors: Tuple[ErrorRecord, ...]
    additional_error_params: Tuple[ErrorParams, ...]


@dataclass(frozen=True)
class ApiDocument:
    modules: Tuple[RouteModule, ...]
    validators: Tuple[ExportEntry, ...]
    metrics_context: Tuple[ExportEntry, ...]
    errors: Tuple[ErrorRecord, ...]
    additional_error_params: Tuple[ErrorParams, ...] = ()

    def route_count(self) -> int:
        return sum(len(m.routes) for m in self.modules)


def slugify(text: str) -> str:
    """Lower-case *text*, dash out whitespace and drop anything else unsafe."""
    return re.sub(r"[^a-z0-9_-]", "", re.sub(r"\s", "-", text.lower()))

