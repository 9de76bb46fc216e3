"""Route-table extraction.

A route module exports one function returning an array of route objects::

    module.exports = (log, db) => {
      const routes = [
        {
          method: 'POST',
          path: '/account/create',
          config: {
            auth: { strategy: 'sessionToken' },
            validate: { payload: { email: validators.email.required() } },
            response: { schema: { uid: isA.string() } }
          },
          handler: ...
        }
      ]
      return routes
    }
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, ExtractionConfig
from .environment import build_environment
from .errors import MissingFieldError
from .evaluator import Environment, evaluate_value, property_key
from .models import Authentication, Node, Parameter, Route, RouteModule, slugify
from .shapes import (
    ARRAY_KINDS,
    LITERAL_KINDS,
    OBJECT_KINDS,
    assert_kind,
    find_exported_function,
    find_property,
    find_returned_data,
    require_property,
)

logger = logging.getLogger(__name__)

OPTIONAL_MODES = frozenset({"try", "optional"})


def module_name(file_path: str) -> str:
    """``account.js`` -> ``Account``."""
    stem = Path(file_path).stem
    return re.sub(r"^[a-z]", lambda m: m.group(0).upper(), stem)


def extract_route_module(
    program: Node,
    file_path: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> RouteModule:
    statements = program["body"]
    variables = build_environment(statements)
    exported = find_exported_function(statements, file_path)
    elements = find_returned_data(exported, file_path)

    routes = tuple(extract_route(element, variables, file_path, config) for element in elements)
    name = module_name(file_path)
    logger.debug("%s: %d route(s)", name, len(routes))
    return RouteModule(name=name, slug=slugify(name), routes=routes)


def extract_route(
    route: Node,
    variables: Environment,
    file_path: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Route:
    assert_kind(route, OBJECT_KINDS, file_path)

    method = require_property(route, "method", LITERAL_KINDS, file_path)["value"]
    path = require_property(route, "path", LITERAL_KINDS, file_path)["value"]

    authentication = validation = response = None
    route_config = find_property(route, "config", OBJECT_KINDS, file_path)
    if route_config is not None:
        authentication = find_authentication(route_config, file_path, config)
        validation = find_property(route_config, "validate", OBJECT_KINDS, file_path)
        response = find_property(route_config, "response", OBJECT_KINDS, file_path)

    return Route(
        method=method,
        path=path,
        slug=slugify(f"{method} {path}"),
        authentication=authentication,
        query_parameters=marshall_parameters(validation, "query", variables),
        request_body=marshall_parameters(validation, "payload", variables),
        response_body=marshall_parameters(response, "schema", variables),
    )


def marshall_parameters(
    node: Optional[Node],
    key: str,
    variables: Environment,
) -> Tuple[Parameter, ...]:
    """List the fields of ``node.<key>`` when it is an object literal.

    Anything else (a schema built by a call, a variable) documents nothing.
    """
    parameters = find_property(node, key)
    if parameters is None or parameters.kind != "object":
        return ()
    return tuple(
        Parameter(name=property_key(prop), validation=evaluate_value(prop.get("value"), variables))
        for prop in parameters["properties"]
        if prop.kind == "property"
    )


def find_authentication(
    route_config: Node,
    file_path: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[Authentication]:
    auth = find_property(route_config, "auth", OBJECT_KINDS, file_path)
    if auth is None:
        return None

    mode = find_property(auth, "mode", LITERAL_KINDS, file_path)
    optional = mode is not None and mode["value"] in OPTIONAL_MODES

    tokens: Optional[List[str]] = None
    strategies = find_property(auth, "strategies", ARRAY_KINDS, file_path)
    if strategies is not None:
        tokens = [
            assert_kind(strategy, LITERAL_KINDS, file_path)["value"]
            for strategy in strategies["elements"]
        ]
    else:
        strategy = find_property(auth, "strategy", LITERAL_KINDS, file_path)
        if strategy is not None:
            tokens = [strategy["value"]]

    if tokens is None:
        raise MissingFieldError("Missing authentication strategy", file_path, auth.location)

    return marshall_authentication(tokens, optional, config)


def canonical_token(token: str, config: ExtractionConfig = DEFAULT_CONFIG) -> str:
    if config.session_token_strategy.search(token):
        return "sessionToken"
    if config.key_fetch_token_strategy.search(token):
        return "keyFetchToken"
    return token


def uncamel(text: str) -> str:
    return re.sub(r"[A-Z]", lambda m: f" {m.group(0).lower()}", text)


def marshall_authentication(
    tokens: Sequence[str],
    optional: bool,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Authentication:
    deduped: List[str] = []
    for token in (canonical_token(t, config) for t in tokens):
        if token not in deduped:
            deduped.append(token)

    # OAuth reads best first; the rest keep their order
    ordered = sorted(deduped, key=lambda token: token != config.oauth_token)
    summary = "Optionally " if optional else ""
    for index, token in enumerate(ordered):
        if token == config.oauth_token:
            summary += "authenticated with OAuth bearer token"
        else:
            summary += f"{'' if index == 0 else ', or '}HAWK-authenticated with {uncamel(token)}"

    return Authentication(
        optional=optional,
        tokens=tuple(deduped),
        emojis=":lock:" + (":question:" if optional else ""),
        token=", ".join(deduped),
        summary=summary,
    )
