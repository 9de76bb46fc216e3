"""Markdown rendering for extracted API documentation."""

from __future__ import annotations

from typing import Iterable, List

from .evaluator import to_text
from .models import ApiDocument, ExportEntry, Parameter, Route, RouteModule


def _esc(value: object) -> str:
    return to_text(value).replace("|", "\\|").replace("\n", " ")


def _parameter_lines(title: str, parameters: Iterable[Parameter]) -> List[str]:
    lines = [f"##### {title}", ""]
    for parameter in parameters:
        lines.append(f"* `{parameter.name}`")
        if parameter.validation is not None:
            lines.append("")
            lines.append("  ```js")
            lines.append(f"  {to_text(parameter.validation)}")
            lines.append("  ```")
        lines.append("")
    return lines


def _route_lines(route: Route) -> List[str]:
    lines = [f"#### {route.method} {route.path}", ""]
    lines.append(f'<a name="{route.slug}"></a>')
    lines.append("")
    if route.authentication is not None:
        auth = route.authentication
        lines.append(f"{auth.emojis} {auth.summary}")
        lines.append("")
    if route.has_query_parameters:
        lines.extend(_parameter_lines("Query parameters", route.query_parameters))
    if route.has_request_body:
        lines.extend(_parameter_lines("Request body", route.request_body))
    if route.has_response_body:
        lines.extend(_parameter_lines("Response body", route.response_body))
    return lines


def _module_lines(module: RouteModule) -> List[str]:
    lines = [f"### {module.name}", "", f'<a name="{module.slug}"></a>', ""]
    for route in module.routes:
        lines.extend(_route_lines(route))
    return lines


def _export_lines(title: str, entries: Iterable[ExportEntry]) -> List[str]:
    lines = [f"## {title}", ""]
    for entry in entries:
        lines.append(f"* `{entry.key}`: `{to_text(entry.value)}`")
    lines.append("")
    return lines


def render_markdown(document: ApiDocument, title: str = "API documentation") -> str:
    """Render the whole document; nothing is written here."""
    lines = [f"# {title}", "", "## Table of contents", ""]
    for module in document.modules:
        lines.append(f"* [{module.name}](#{module.slug})")
        for route in module.routes:
            lines.append(f"  * [{route.method} {route.path}](#{route.slug})")
    lines.append("")

    lines.extend(["## Errors", "", "| errno | code | definition |", "| --- | --- | --- |"])
    for error in document.errors:
        lines.append(f"| {_esc(error.errno)} | {_esc(error.code)} | {_esc(error.definition)} |")
    lines.append("")

    params = [p for p in document.additional_error_params if p.has_params]
    if params:
        lines.append("The following errors include additional response properties:")
        lines.append("")
        for error_params in params:
            lines.append(f"* `errno: {to_text(error_params.errno)}`: {', '.join(error_params.params)}")
        lines.append("")

    lines.extend(_export_lines("Validators", document.validators))
    lines.extend(_export_lines("Metrics context", document.metrics_context))

    lines.extend(["## API endpoints", ""])
    for module in document.modules:
        lines.extend(_module_lines(module))

    return "\n".join(lines).rstrip("\n") + "\n"
