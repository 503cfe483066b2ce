"""Renderer — computes output URLs and renders pages through engines and layouts."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Any

from tabby._errors import RenderError
from tabby.core.page import PageDest
from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tabby._types import Data
    from tabby.core.engines import Engines
    from tabby.core.includes import IncludesLoader
    from tabby.core.page import Page
    from tabby.core.processors import Processors

# Layout chains longer than this are assumed to be cycles
_MAX_LAYOUT_DEPTH = 32


class Renderer:
    """Renders pages.

    Rendering a page means:

    1. computing ``data["url"]`` and ``page.dest``;
    2. rendering ``data["content"]`` with the engines of the page extension;
    3. wrapping the result in the chain of layouts named by ``layout`` keys.

    Asset pages only get a URL; their content is copied as loaded.

    Args:
        includes: Resolves layout names.
        engines: Engine registry.
        preprocessors: Run on pages (by source extension) before rendering.
        pretty_urls: Map ``/about.md`` to ``/about/`` instead of ``/about.html``.

    """

    def __init__(
        self,
        includes: IncludesLoader,
        engines: Engines,
        preprocessors: Processors,
        *,
        pretty_urls: bool = True,
    ) -> None:
        self._includes = includes
        self._engines = engines
        self._preprocessors = preprocessors
        self._pretty_urls = pretty_urls

    async def render_pages(self, pages: Sequence[Page], output: list[Page]) -> None:
        """Render *pages*, appending them to *output* in input order.

        URLs are assigned to every page before any page is rendered so
        templates can refer to the URLs of other pages.
        """
        for page in pages:
            self.prepare(page)

        await self._preprocessors.run(pages)

        for page in pages:
            page.content = self._render(page)
            output.append(page)

    async def render_page_on_demand(self, page: Page) -> None:
        self.prepare(page)
        await self._preprocessors.run([page])
        page.content = self._render(page)

    def prepare(self, page: Page) -> None:
        """Assign ``data["url"]`` and ``page.dest``."""
        url = self.page_url(page)
        page.data["url"] = url
        page.dest = url_to_dest(url)

    def page_url(self, page: Page) -> str:
        explicit = page.data.get("url")
        if isinstance(explicit, str) and explicit:
            if explicit.startswith(("./", "../")):
                base = posixpath.dirname(page.src.path) + "/"
                return normalize_path(posixpath.join(base, explicit))
            return normalize_path(explicit)

        path = page.src.path
        if page.asset:
            return path + page.src.ext
        if not self._pretty_urls:
            return path + ".html"
        if path.endswith("/index"):
            return path[: -len("index")]
        return path + "/"

    def _render(self, page: Page) -> Any:
        data = page.data
        content = data.get("content")
        if page.asset:
            return content

        content = self._engines.render(content, data, page.src.full_path, page.src.ext)

        layout = data.get("layout")
        seen: list[str] = []
        while layout:
            loaded = self._includes.load(layout)
            if loaded is None:
                msg = f"Layout {layout!r} not found (used by {page.src.full_path})"
                raise RenderError(msg)
            path, ext, layout_data = loaded
            if path in seen or len(seen) >= _MAX_LAYOUT_DEPTH:
                msg = f"Layout cycle: {' -> '.join([*seen, path])}"
                raise RenderError(msg)
            seen.append(path)
            if not self._engines.has(ext):
                msg = f"No template engine for layout {path}"
                raise RenderError(msg)

            context: Data = {
                **{k: v for k, v in layout_data.items() if k not in ("content", "layout")},
                **data,
                "content": content,
            }
            content = self._engines.render(layout_data.get("content", ""), context, path, ext)
            layout = layout_data.get("layout")

        return content


def url_to_dest(url: str) -> PageDest:
    """Output file for a URL: ``/about/`` -> ``/about/index.html``."""
    if url.endswith("/"):
        return PageDest(path=url + "index", ext=".html")
    stem, ext = posixpath.splitext(url)
    return PageDest(path=stem, ext=ext or ".html")
