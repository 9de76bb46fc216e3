"""JavaScript parser built on Tree-sitter.

Tree-sitter produces a *concrete* syntax tree that keeps every token. The
extraction engine works on a smaller uniform model (:class:`~.models.Node`),
so this module converts one into the other:

- comments and punctuation are dropped
- parentheses are unwrapped
- identifiers of every flavour become ``identifier`` nodes
- strings, numbers, booleans, ``null`` and regexes become ``literal`` nodes
  carrying a decoded Python value
- node types without a dedicated converter keep their Tree-sitter fields
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Parser as TSParser

from .errors import SourceReadError
from .models import Location, Node, Scalar

logger = logging.getLogger(__name__)

LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_IDENTIFIER_TYPES = frozenset({
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
    "private_property_identifier",
    "statement_identifier",
})

_FUNCTION_TYPES = frozenset({"function_expression", "function", "generator_function"})
_FUNCTION_DECLARATION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
})

_ESCAPE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})


class JavaScriptParser:
    """Parse JavaScript source into the uniform node model."""

    def __init__(self) -> None:
        self._parser = TSParser(Language(tree_sitter_javascript.language()))
        logger.debug("Loaded tree-sitter parser for javascript")

    def parse(self, source: str, file_path: Optional[str] = None) -> Node:
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        if tree.root_node.has_error:
            logger.warning(
                "Syntax errors in %s; extraction may be incomplete",
                file_path or "<source>",
            )
        return _Converter().convert(tree.root_node)

    def parse_file(self, file_path: Path) -> Node:
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"Cannot read source: {exc}", str(file_path)) from exc
        return self.parse(source, str(file_path))


# ===================================================================
# Tree-sitter -> Node conversion
# ===================================================================

def _text(ts_node: Any) -> str:
    return ts_node.text.decode("utf-8")


def _location(ts_node: Any) -> Location:
    row, column = ts_node.start_point
    return Location(line=row + 1, column=column)


def _named(ts_node: Any) -> List[Any]:
    return [child for child in ts_node.named_children if child.type != "comment"]


def _first_named(ts_node: Any) -> Optional[Any]:
    children = _named(ts_node)
    return children[0] if children else None


def _fields_and_children(ts_node: Any) -> List[Tuple[Optional[str], Any]]:
    """Every named child of *ts_node* paired with its field name (or None)."""
    pairs: List[Tuple[Optional[str], Any]] = []
    cursor = ts_node.walk()
    if not cursor.goto_first_child():
        return pairs
    while True:
        child = cursor.node
        if child.is_named and child.type != "comment":
            pairs.append((cursor.field_name, child))
        if not cursor.goto_next_sibling():
            break
    return pairs


def _unescape(match: "re.Match[str]") -> str:
    seq = match.group(1)
    if seq.startswith("u{"):
        return chr(int(seq[2:-1], 16))
    if seq[0] == "u" and len(seq) == 5:
        return chr(int(seq[1:], 16))
    if seq[0] == "x" and len(seq) == 3:
        return chr(int(seq[1:], 16))
    if seq[0] in "01234567":
        return chr(int(seq, 8))
    if seq in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(seq, seq)


def decode_string(raw: str) -> str:
    """Strip the quotes from a JavaScript string literal and decode escapes."""
    return _ESCAPE.sub(_unescape, raw[1:-1])


def parse_number(raw: str) -> Scalar:
    cleaned = raw.replace("_", "")
    if cleaned.endswith("n"):
        return int(cleaned[:-1], 0)
    lowered = cleaned.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(lowered, 0)
    if re.fullmatch(r"0[0-7]+", cleaned):
        return int(cleaned, 8)
    if cleaned.isdigit():
        return int(cleaned)
    return float(cleaned)


class _Converter:
    def __init__(self) -> None:
        self._dispatch: Dict[str, Callable[[Any], Node]] = {
            "program": self._program,
            "expression_statement": self._expression_statement,
            "lexical_declaration": self._declaration,
            "variable_declaration": self._declaration,
            "variable_declarator": self._declarator,
            "assignment_expression": self._assignment,
            "augmented_assignment_expression": self._assignment,
            "return_statement": self._return,
            "arrow_function": self._arrow_function,
            "statement_block": self._block,
            "string": self._string,
            "template_string": self._template_string,
            "number": self._number,
            "true": self._boolean,
            "false": self._boolean,
            "null": self._null,
            "undefined": self._undefined,
            "regex": self._regex,
            "member_expression": self._member,
            "subscript_expression": self._subscript,
            "call_expression": self._call,
            "new_expression": self._new,
            "object": self._object,
            "pair": self._pair,
            "shorthand_property_identifier": self._shorthand_property,
            "array": self._array,
            "binary_expression": self._binary,
            "parenthesized_expression": self._parenthesized,
        }
        for ts_type in _FUNCTION_TYPES:
            self._dispatch[ts_type] = self._function
        for ts_type in _FUNCTION_DECLARATION_TYPES:
            self._dispatch[ts_type] = self._function_declaration

    def convert(self, ts_node: Any) -> Node:
        handler = self._dispatch.get(ts_node.type)
        if handler is not None:
            return handler(ts_node)
        if ts_node.type in _IDENTIFIER_TYPES:
            return self._identifier(ts_node)
        return self._generic(ts_node)

    def _optional(self, ts_node: Optional[Any]) -> Optional[Node]:
        return self.convert(ts_node) if ts_node is not None else None

    def _all(self, ts_nodes: List[Any]) -> Tuple[Node, ...]:
        return tuple(self.convert(child) for child in ts_nodes)

    @staticmethod
    def _node(kind: str, ts_node: Any, **fields: Any) -> Node:
        return Node(kind=kind, location=_location(ts_node), fields=fields)

    # -- statements ----------------------------------------------------

    def _program(self, ts_node: Any) -> Node:
        return self._node("program", ts_node, body=self._all(_named(ts_node)))

    def _block(self, ts_node: Any) -> Node:
        return self._node("block", ts_node, body=self._all(_named(ts_node)))

    def _expression_statement(self, ts_node: Any) -> Node:
        return self._node(
            "expression-statement", ts_node,
            expression=self._optional(_first_named(ts_node)),
        )

    def _declaration(self, ts_node: Any) -> Node:
        declarators = [c for c in _named(ts_node) if c.type == "variable_declarator"]
        return self._node(
            "variable-declaration", ts_node,
            declaration_kind=ts_node.children[0].type,
            declarations=self._all(declarators),
        )

    def _declarator(self, ts_node: Any) -> Node:
        return self._node(
            "variable-declarator", ts_node,
            id=self._optional(ts_node.child_by_field_name("name")),
            init=self._optional(ts_node.child_by_field_name("value")),
        )

    def _return(self, ts_node: Any) -> Node:
        return self._node("return", ts_node, argument=self._optional(_first_named(ts_node)))

    # -- functions -----------------------------------------------------

    def _parameters(self, ts_node: Any) -> Tuple[Node, ...]:
        params = ts_node.child_by_field_name("parameters")
        if params is not None:
            return self._all(_named(params))
        single = ts_node.child_by_field_name("parameter")
        return (self.convert(single),) if single is not None else ()

    def _function(self, ts_node: Any, arrow: bool = False) -> Node:
        name = ts_node.child_by_field_name("name")
        return self._node(
            "function", ts_node,
            name=_text(name) if name is not None else None,
            params=self._parameters(ts_node),
            body=self._optional(ts_node.child_by_field_name("body")),
            arrow=arrow,
        )

    def _arrow_function(self, ts_node: Any) -> Node:
        return self._function(ts_node, arrow=True)

    def _function_declaration(self, ts_node: Any) -> Node:
        name = ts_node.child_by_field_name("name")
        return self._node(
            "function-declaration", ts_node,
            name=_text(name) if name is not None else None,
            params=self._parameters(ts_node),
            body=self._optional(ts_node.child_by_field_name("body")),
        )

    # -- literals and identifiers -------------------------------------

    def _literal(self, ts_node: Any, value: Scalar) -> Node:
        return self._node("literal", ts_node, value=value, raw=_text(ts_node))

    def _string(self, ts_node: Any) -> Node:
        return self._literal(ts_node, decode_string(_text(ts_node)))

    def _template_string(self, ts_node: Any) -> Node:
        if any(c.type == "template_substitution" for c in ts_node.named_children):
            return self._generic(ts_node)
        return self._literal(ts_node, decode_string(_text(ts_node)))

    def _number(self, ts_node: Any) -> Node:
        return self._literal(ts_node, parse_number(_text(ts_node)))

    def _boolean(self, ts_node: Any) -> Node:
        return self._literal(ts_node, ts_node.type == "true")

    def _null(self, ts_node: Any) -> Node:
        return self._literal(ts_node, None)

    def _regex(self, ts_node: Any) -> Node:
        return self._literal(ts_node, _text(ts_node))

    def _identifier(self, ts_node: Any) -> Node:
        return self._node("identifier", ts_node, name=_text(ts_node))

    def _undefined(self, ts_node: Any) -> Node:
        return self._identifier(ts_node)

    # -- expressions ---------------------------------------------------

    def _member(self, ts_node: Any) -> Node:
        return self._node(
            "member", ts_node,
            object=self._optional(ts_node.child_by_field_name("object")),
            property=self._optional(ts_node.child_by_field_name("property")),
            computed=False,
        )

    def _subscript(self, ts_node: Any) -> Node:
        return self._node(
            "member", ts_node,
            object=self._optional(ts_node.child_by_field_name("object")),
            property=self._optional(ts_node.child_by_field_name("index")),
            computed=True,
        )

    def _arguments(self, ts_node: Any) -> Tuple[Node, ...]:
        args = ts_node.child_by_field_name("arguments")
        if args is None:
            return ()
        if args.type != "arguments":
            # tagged template
            return (self.convert(args),)
        return self._all(_named(args))

    def _call(self, ts_node: Any) -> Node:
        return self._node(
            "call", ts_node,
            callee=self._optional(ts_node.child_by_field_name("function")),
            arguments=self._arguments(ts_node),
        )

    def _new(self, ts_node: Any) -> Node:
        return self._node(
            "new", ts_node,
            callee=self._optional(ts_node.child_by_field_name("constructor")),
            arguments=self._arguments(ts_node),
        )

    def _assignment(self, ts_node: Any) -> Node:
        operator = ts_node.child_by_field_name("operator")
        return self._node(
            "assignment", ts_node,
            operator=_text(operator) if operator is not None else "=",
            left=self._optional(ts_node.child_by_field_name("left")),
            right=self._optional(ts_node.child_by_field_name("right")),
        )

    def _binary(self, ts_node: Any) -> Node:
        operator = _text(ts_node.child_by_field_name("operator"))
        return self._node(
            "logical" if operator in LOGICAL_OPERATORS else "binary", ts_node,
            operator=operator,
            left=self._optional(ts_node.child_by_field_name("left")),
            right=self._optional(ts_node.child_by_field_name("right")),
        )

    def _parenthesized(self, ts_node: Any) -> Node:
        inner = _first_named(ts_node)
        if inner is None:
            return self._generic(ts_node)
        return self.convert(inner)

    def _object(self, ts_node: Any) -> Node:
        return self._node("object", ts_node, properties=self._all(_named(ts_node)))

    def _pair(self, ts_node: Any) -> Node:
        return self._node(
            "property", ts_node,
            key=self._optional(ts_node.child_by_field_name("key")),
            value=self._optional(ts_node.child_by_field_name("value")),
            shorthand=False,
        )

    def _shorthand_property(self, ts_node: Any) -> Node:
        identifier = self._identifier(ts_node)
        return self._node(
            "property", ts_node, key=identifier, value=identifier, shorthand=True,
        )

    def _array(self, ts_node: Any) -> Node:
        return self._node("array", ts_node, elements=self._all(_named(ts_node)))

    # -- everything else -----------------------------------------------

    def _generic(self, ts_node: Any) -> Node:
        fields: Dict[str, Any] = {}
        children: List[Node] = []
        for field_name, child in _fields_and_children(ts_node):
            converted = self.convert(child)
            if field_name is None:
                children.append(converted)
            elif field_name in fields:
                previous = fields[field_name]
                if not isinstance(previous, tuple):
                    previous = (previous,)
                fields[field_name] = previous + (converted,)
            else:
                fields[field_name] = converted
        if children:
            fields["children"] = tuple(children)
        if not _named(ts_node):
            fields["text"] = _text(ts_node)
        return self._node(ts_node.type.replace("_", "-"), ts_node, **fields)
