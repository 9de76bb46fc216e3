"""Default settings for API documentation extraction."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Pattern

BASE_DIR = Path(os.environ.get("APIDOC_HOME", str(Path.home() / ".apidoc"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
CONFIG_SECTION = "apidoc"

# Source layout, relative to the project root
ROUTES_DIR = "lib/routes"
VALIDATORS_MODULE = "lib/routes/validators.js"
METRICS_CONTEXT_MODULE = "lib/metrics/context.js"
ERRORS_MODULE = "lib/error.js"
OUTPUT_FILE = "docs/api.md"

SOURCE_EXTENSION = ".js"

# Route files that hold helpers rather than route tables
IGNORE_FILES = frozenset({"defaults.js", "idp.js", "index.js", "validators.js"})

ERROR_NAMESPACE = "AppError"
ERRNO_NAME = "ERRNO"
DEFAULTS_NAME = "DEFAULTS"
# AppError members that are not error constructors
NOT_ERRORS = frozenset({"toString", "header", "backtrace", "translate"})

SESSION_TOKEN_PATTERN = r"^sessionToken"
KEY_FETCH_TOKEN_PATTERN = r"^keyFetchToken"
OAUTH_TOKEN = "oauthToken"


@dataclass(frozen=True)
class ExtractionConfig:
    """Everything the extraction targets need to know about a source tree."""

    routes_dir: str = ROUTES_DIR
    validators_module: str = VALIDATORS_MODULE
    metrics_context_module: str = METRICS_CONTEXT_MODULE
    errors_module: str = ERRORS_MODULE
    output_file: str = OUTPUT_FILE
    ignore_files: FrozenSet[str] = IGNORE_FILES
    error_namespace: str = ERROR_NAMESPACE
    errno_name: str = ERRNO_NAME
    defaults_name: str = DEFAULTS_NAME
    not_errors: FrozenSet[str] = NOT_ERRORS
    session_token_pattern: str = SESSION_TOKEN_PATTERN
    key_fetch_token_pattern: str = KEY_FETCH_TOKEN_PATTERN
    oauth_token: str = OAUTH_TOKEN

    @property
    def session_token_strategy(self) -> Pattern[str]:
        return re.compile(self.session_token_pattern)

    @property
    def key_fetch_token_strategy(self) -> Pattern[str]:
        return re.compile(self.key_fetch_token_pattern)


DEFAULT_CONFIG = ExtractionConfig()
