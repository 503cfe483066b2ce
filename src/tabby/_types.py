"""Shared type definitions for tabby."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from pathlib import Path

    from tabby.core.page import Page

# Free-form page / global data
type Data = dict[str, Any]

# Logical source path, always posix and rooted at "/" (e.g. "/blog/post.md")
type SourcePath = str

# Lifecycle event names
type EventType = Literal[
    "before_build",
    "after_build",
    "before_update",
    "after_update",
    "after_render",
    "before_render_on_demand",
    "before_save",
]

# Page predicate used for selection and scoping
type PageFilter = Callable[[Page], bool]

# Changed-path predicate used by scopes
type PathMatcher = Callable[[SourcePath], bool]

# Reads a file from disk and returns its data
type Loader = Callable[[Path], Data]

# Mutates a page in place after (or before) rendering
type Processor = Callable[[Page], Any]

# Template helper / filter
type Helper = Callable[..., Any]

# Script step: shell command, script name, callable, or a list run concurrently
type ScriptAction = str | Callable[[], Any] | Callable[[], Awaitable[Any]] | list[ScriptAction]
