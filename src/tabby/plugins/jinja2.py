"""Jinja2 template engine plugin.

Usage::

    from tabby.plugins.jinja2 import jinja2

    site.use(jinja2())

Pages and layouts with the registered extensions are rendered with Jinja2.
``{% include %}`` and ``{% extends %}`` resolve against the includes
directory first, then the source root.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import jinja2 as j2

from tabby._errors import RenderError
from tabby.core.loaders import text_loader

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from tabby._types import Data, Helper
    from tabby.core.engines import HelperOptions
    from tabby.core.site import Site


class Jinja2Engine:
    """Renders template sources with a shared Jinja2 environment.

    Compiled templates are cached by file name until
    :meth:`delete_cache` is called for that file or :meth:`clear_cache`
    drops them all.
    """

    def __init__(self, search_path: Iterable[Path], **options: Any) -> None:
        self.env = j2.Environment(
            loader=j2.FileSystemLoader([str(path) for path in search_path]),
            auto_reload=True,
            **options,
        )
        self._cache: dict[str, j2.Template] = {}

    def render(self, content: Any, data: Data, filename: str) -> str:
        template = self._cache.get(filename)
        if template is None:
            try:
                template = self.env.from_string(str(content or ""))
            except j2.TemplateSyntaxError as exc:
                msg = f"Template syntax error in {filename}:{exc.lineno}: {exc.message}"
                raise RenderError(msg) from exc
            self._cache[filename] = template
        try:
            return template.render(data)
        except j2.TemplateError as exc:
            msg = f"Failed to render {filename}: {exc}"
            raise RenderError(msg) from exc

    def delete_cache(self, filename: str) -> None:
        self._cache.pop(filename, None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def add_helper(self, name: str, fn: Helper, options: HelperOptions) -> None:
        # Templates render synchronously; async helpers are left out.
        if options.is_async:
            return
        if options.type == "filter":
            self.env.filters[name] = fn
        else:
            self.env.globals[name] = fn


def jinja2(
    *,
    extensions: Iterable[str] = (".html", ".j2"),
    includes: str | None = None,
    **options: Any,
) -> Callable[[Site], None]:
    """Create the plugin.

    Args:
        extensions: Page and layout extensions rendered with Jinja2.
        includes: Includes directory for these extensions (defaults to the
            site's includes directory).
        **options: Extra ``jinja2.Environment`` options.

    """
    extensions = tuple(extensions)

    def plugin(site: Site) -> None:
        includes_dir = includes or site.options.includes
        engine = Jinja2Engine(
            [site.src(includes_dir.strip("/")), site.src()],
            **options,
        )
        site.load_pages(extensions, text_loader, engine)
        if includes is not None:
            site.includes(extensions, includes)

    return plugin
