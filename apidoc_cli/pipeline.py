"""Extraction pipeline: source tree in, :class:`ApiDocument` out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DEFAULT_CONFIG, SOURCE_EXTENSION, ExtractionConfig
from .error_table import extract_errors
from .errors import ShapeError
from .exports import extract_exports
from .models import ApiDocument, ErrorTable, ExportEntry, Node, RouteModule
from .parser import JavaScriptParser
from .routes import extract_route_module

logger = logging.getLogger(__name__)


class DocsPipeline:
    """Parse one project's route, validator, metrics and error modules.

    Modules are independent; the first irregular one aborts the run with an
    :class:`~.errors.ExtractionError`.
    """

    def __init__(
        self,
        source_root: Path,
        config: ExtractionConfig = DEFAULT_CONFIG,
        parser: Optional[JavaScriptParser] = None,
    ) -> None:
        self.source_root = source_root
        self.config = config
        self._parser = parser or JavaScriptParser()

    # ------------------------------------------------------------------
    # Module loading
    # ------------------------------------------------------------------

    def _relative(self, file_path: Path) -> str:
        try:
            return str(file_path.relative_to(self.source_root))
        except ValueError:
            return str(file_path)

    def parse_module(self, relative_path: str) -> Tuple[Node, str]:
        file_path = self.source_root / relative_path
        if not file_path.is_file():
            raise ShapeError(f"Module not found: {relative_path}", str(file_path))
        return self._parser.parse_file(file_path), relative_path

    def route_files(self) -> List[Path]:
        routes_dir = self.source_root / self.config.routes_dir
        if not routes_dir.is_dir():
            raise ShapeError(f"Routes directory not found: {self.config.routes_dir}", str(routes_dir))
        return [
            path for path in sorted(routes_dir.iterdir())
            if path.is_file()
            and path.name.endswith(SOURCE_EXTENSION)
            and path.name not in self.config.ignore_files
        ]

    # ------------------------------------------------------------------
    # Extraction targets
    # ------------------------------------------------------------------

    def parse_routes(self) -> Tuple[RouteModule, ...]:
        modules = []
        for file_path in self.route_files():
            program = self._parser.parse_file(file_path)
            modules.append(extract_route_module(program, self._relative(file_path), self.config))
        return tuple(modules)

    def parse_validators(self) -> Tuple[ExportEntry, ...]:
        return extract_exports(*self.parse_module(self.config.validators_module))

    def parse_metrics_context(self) -> Tuple[ExportEntry, ...]:
        return extract_exports(*self.parse_module(self.config.metrics_context_module))

    def parse_errors(self) -> ErrorTable:
        program, relative_path = self.parse_module(self.config.errors_module)
        return extract_errors(program, relative_path, self.config)

    def run(self) -> ApiDocument:
        logger.info("Extracting API documentation from %s", self.source_root)
        modules = self.parse_routes()
        validators = self.parse_validators()
        metrics_context = self.parse_metrics_context()
        error_table = self.parse_errors()

        document = ApiDocument(
            modules=modules,
            validators=validators,
            metrics_context=metrics_context,
            errors=error_table.errors,
            additional_error_params=error_table.additional_error_params,
        )
        logger.info(
            "Extracted %d module(s), %d route(s), %d error(s)",
            len(document.modules), document.route_count(), len(document.errors),
        )
        return document
