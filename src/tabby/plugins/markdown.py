"""Markdown plugin.

Usage::

    from tabby.plugins.markdown import markdown

    site.use(markdown())

Registers ``.md`` pages rendered with Python-Markdown and an ``md`` filter
for templates.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import markdown as md

from tabby.core.loaders import text_loader

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tabby._types import Data, Helper
    from tabby.core.engines import HelperOptions
    from tabby.core.site import Site

DEFAULT_EXTENSIONS = ("extra", "toc", "sane_lists")


class MarkdownEngine:
    """Converts Markdown to HTML. There is nothing to cache."""

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS, **options: Any) -> None:
        self._md = md.Markdown(extensions=list(extensions), **options)
        # Markdown instances keep per-document state.
        self._lock = threading.Lock()

    def convert(self, text: str) -> str:
        with self._lock:
            return self._md.reset().convert(text)

    def render(self, content: Any, data: Data, filename: str) -> str:
        return self.convert(str(content or ""))

    def delete_cache(self, filename: str) -> None:
        pass

    def clear_cache(self) -> None:
        pass

    def add_helper(self, name: str, fn: Helper, options: HelperOptions) -> None:
        pass


def markdown(
    *,
    extensions: Iterable[str] = (".md",),
    markdown_extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Callable[[Site], None]:
    """Create the plugin.

    Args:
        extensions: Page extensions rendered as Markdown.
        markdown_extensions: Python-Markdown extensions to enable.

    """
    extensions = tuple(extensions)

    def plugin(site: Site) -> None:
        engine = MarkdownEngine(markdown_extensions)
        site.load_pages(extensions, text_loader, engine)
        site.filter("md", engine.convert)

    return plugin
