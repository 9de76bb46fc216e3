"""Pytest configuration and fixtures for apidoc tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from apidoc_cli.models import Location, Node
from apidoc_cli.parser import JavaScriptParser


class NodeFactory:
    """Build node-model trees by hand, without going through the parser."""

    def __init__(self) -> None:
        self._line = 0

    def node(self, kind: str, **fields: Any) -> Node:
        self._line += 1
        return Node(kind=kind, location=Location(self._line, 0), fields=fields)

    def literal(self, value: Any) -> Node:
        return self.node("literal", value=value, raw=repr(value))

    def ident(self, name: str) -> Node:
        return self.node("identifier", name=name)

    def member(self, obj: Node, prop: str) -> Node:
        return self.node("member", object=obj, property=self.ident(prop), computed=False)

    def call(self, callee: Node, *arguments: Node) -> Node:
        return self.node("call", callee=callee, arguments=tuple(arguments))

    def prop(self, key: str, value: Node) -> Node:
        return self.node("property", key=self.ident(key), value=value, shorthand=False)

    def obj(self, **values: Node) -> Node:
        return self.node("object", properties=tuple(self.prop(k, v) for k, v in values.items()))

    def declare(self, **values: Node) -> Node:
        declarators = tuple(
            self.node("variable-declarator", id=self.ident(name), init=init)
            for name, init in values.items()
        )
        return self.node("variable-declaration", declaration_kind="const", declarations=declarators)


@pytest.fixture
def nodes() -> NodeFactory:
    return NodeFactory()


@pytest.fixture(scope="session")
def js_parser() -> JavaScriptParser:
    return JavaScriptParser()


@pytest.fixture
def parse(js_parser: JavaScriptParser):
    """Parse a JavaScript snippet into a ``program`` node."""
    def _parse(source: str) -> Node:
        return js_parser.parse(source, "test.js")
    return _parse


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_service_path() -> Path:
    """Get path to the sample JavaScript service."""
    return Path(__file__).parent / "fixtures" / "sample_service"


@pytest.fixture
def sample_service_copy(temp_dir: Path, sample_service_path: Path) -> Path:
    """A writable copy of the sample service."""
    target = temp_dir / "service"
    shutil.copytree(sample_service_path, target)
    return target


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Point the default config file at an empty temporary directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr("apidoc_cli.config_manager.CONFIG_FILE", home / "config.toml")
    return home
