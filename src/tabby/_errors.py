"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.
"""


class TabbyError(Exception):
    """Base error for all tabby operations."""


class ConfigError(TabbyError):
    """Invalid or missing configuration."""


class ContentError(TabbyError):
    """A source file could not be loaded (parse failure, bad front matter)."""


class RenderError(TabbyError):
    """A page or layout could not be rendered."""


class ScriptError(TabbyError):
    """Unknown or invalid script."""


class SourceNotFound(TabbyError):
    """A source-relative reference (``~/...``) points to nothing.

    Attributes:
        path: The decoded source path that could not be resolved.

    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Source file not found: {path}")
        self.path = path
