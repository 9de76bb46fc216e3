"""apidoc-cli: API reference extraction from JavaScript syntax trees."""

__version__ = "0.1.0"
