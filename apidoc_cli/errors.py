"""Fatal extraction errors.

Shape violations and missing required fields abort the whole run. Values the
evaluator cannot resolve are never reported through these classes.
"""

from __future__ import annotations

from typing import Optional

from .models import Location


class ExtractionError(Exception):
    """Base class for every fatal extraction failure."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.location = location
        super().__init__(self._describe())

    def _describe(self) -> str:
        if not self.file_path:
            return self.message
        text = f'Error parsing "{self.file_path}"'
        if self.location is not None:
            text += f" at line {self.location.line}"
        return f"{text}:\n{self.message}"


class ShapeError(ExtractionError):
    """A required construct is absent, duplicated or of the wrong kind."""


class MissingFieldError(ExtractionError):
    """A required property is missing and no default exists."""


class ConfigError(ExtractionError):
    """The configuration file could not be read."""


class SourceReadError(ExtractionError):
    """A source file could not be read or decoded."""
