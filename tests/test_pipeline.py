"""Tests for the extraction pipeline and Markdown rendering."""

from pathlib import Path

import pytest

from apidoc_cli.config import ExtractionConfig
from apidoc_cli.errors import ExtractionError, ShapeError
from apidoc_cli.models import ApiDocument, ErrorParams, ErrorRecord
from apidoc_cli.pipeline import DocsPipeline
from apidoc_cli.render import render_markdown


@pytest.fixture
def document(sample_service_path: Path, js_parser) -> ApiDocument:
    return DocsPipeline(sample_service_path, parser=js_parser).run()


class TestDocsPipeline:
    """Tests for DocsPipeline."""

    def test_route_files_skip_helpers(self, sample_service_path: Path):
        """Test that helper modules are not treated as route tables."""
        names = [path.name for path in DocsPipeline(sample_service_path).route_files()]
        assert names == ["account.js", "session.js"]

    def test_ignore_list_is_configurable(self, sample_service_path: Path):
        """Test a configured ignore set."""
        config = ExtractionConfig(ignore_files=frozenset({"validators.js"}))
        names = [path.name for path in DocsPipeline(sample_service_path, config).route_files()]
        assert "index.js" in names

    def test_run_collects_every_target(self, document: ApiDocument):
        """Test that run() fills every part of the document."""
        assert [module.name for module in document.modules] == ["Account", "Session"]
        assert document.route_count() == 3
        assert [entry.key for entry in document.validators] == [
            "HEX_STRING", "URL_SAFE_BASE_64", "service",
        ]
        assert [entry.key for entry in document.metrics_context] == ["schema", "FLOW_ID_LENGTH"]
        assert len(document.errors) == 8
        assert len(document.additional_error_params) == 4

    def test_rerun_yields_identical_records(self, sample_service_path: Path, js_parser):
        """Test that extracting unchanged sources twice gives equal documents."""
        first = DocsPipeline(sample_service_path, parser=js_parser).run()
        second = DocsPipeline(sample_service_path).run()
        assert first == second
        assert render_markdown(first) == render_markdown(second)

    def test_missing_module_is_fatal(self, sample_service_copy: Path):
        """Test that a missing error module aborts the run."""
        (sample_service_copy / "lib" / "error.js").unlink()
        with pytest.raises(ShapeError, match="Module not found: lib/error.js"):
            DocsPipeline(sample_service_copy).run()

    def test_missing_routes_dir_is_fatal(self, temp_dir: Path):
        """Test that a missing routes directory is fatal."""
        with pytest.raises(ShapeError, match="Routes directory not found"):
            DocsPipeline(temp_dir).route_files()

    def test_irregular_route_module_aborts(self, sample_service_copy: Path):
        """Test that one bad route module aborts parsing."""
        bad = sample_service_copy / "lib" / "routes" / "broken.js"
        bad.write_text("module.exports = () => [{ path: '/x' }]\n", encoding="utf-8")
        with pytest.raises(ExtractionError) as excinfo:
            DocsPipeline(sample_service_copy).parse_routes()
        assert "lib/routes/broken.js" in str(excinfo.value)


class TestRenderMarkdown:
    """Tests for render_markdown()."""

    def test_table_of_contents(self, document: ApiDocument):
        """Test the table of contents."""
        markdown = render_markdown(document)
        assert markdown.startswith("# API documentation\n")
        assert "* [Account](#account)" in markdown
        assert "  * [POST /account/create](#post-accountcreate)" in markdown

    def test_errors_table(self, document: ApiDocument):
        """Test the errors table and extra params list."""
        markdown = render_markdown(document)
        assert "| errno | code | definition |" in markdown
        assert "| 101 | 400 | Account already exists |" in markdown
        assert "* `errno: 201`: service, operation" in markdown

    def test_route_sections(self, document: ApiDocument):
        """Test a route heading, anchor, auth line and parameters."""
        markdown = render_markdown(document)
        assert "#### GET /account/status" in markdown
        assert '<a name="get-accountstatus"></a>' in markdown
        assert (
            ":lock::question: Optionally authenticated with OAuth bearer token, "
            "or HAWK-authenticated with session token"
        ) in markdown
        assert "##### Query parameters" in markdown
        assert "  isA.string.regex(validators.HEX_STRING)" in markdown

    def test_export_sections(self, document: ApiDocument):
        """Test the validators and metrics context sections."""
        markdown = render_markdown(document)
        assert "## Validators" in markdown
        assert "* `FLOW_ID_LENGTH`: `64`" in markdown

    def test_table_cells_are_escaped(self):
        """Test pipe escaping and the trailing newline."""
        document = ApiDocument(
            modules=(),
            validators=(),
            metrics_context=(),
            errors=(ErrorRecord(errno=1, code=None, definition="a | b"),),
            additional_error_params=(ErrorParams(errno=1, params=()),),
        )
        markdown = render_markdown(document, title="Errors only")
        assert "| 1 | null | a \\| b |" in markdown
        assert "additional response properties" not in markdown
        assert markdown.endswith("\n") and not markdown.endswith("\n\n")
