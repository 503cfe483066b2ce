"""On-demand router — renders ``ondemand`` pages per request.

Pages marked ``ondemand: true`` are rendered during a build (so their URL
is known) but never written. The router remembers their URLs from the
``after_render`` event and, when the dev server cannot find a file, renders
the matching page through :meth:`Site.render_page`.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from starlette.responses import Response

from tabby.server.files import INDEX_DOCUMENT, guess_media_type

if TYPE_CHECKING:
    from tabby.core.events import Event
    from tabby.core.site import Site


class OnDemandRouter:
    """Maps output URLs of on-demand pages to their source files.

    Args:
        site: The site whose pages are rendered.
        lock: Held around each render; share it with whatever runs
            ``Site.update`` so renders never interleave with a rebuild.

    """

    def __init__(self, site: Site, *, lock: asyncio.Lock | None = None) -> None:
        self._site = site
        self._lock = lock if lock is not None else asyncio.Lock()
        self._routes: dict[str, str] = {}
        site.add_event_listener("after_render", self._collect)

    @property
    def routes(self) -> dict[str, str]:
        """URL -> source path of every known on-demand page."""
        return dict(self._routes)

    def _collect(self, event: Event) -> None:
        for page in event.pages:
            url = page.data.get("url")
            if page.data.get("ondemand") and isinstance(url, str):
                self._routes[url] = page.src.full_path

    def match(self, path: str) -> str | None:
        """Source path of the on-demand page served at *path*, if any."""
        if path in self._routes:
            return self._routes[path]
        if path.endswith("/" + INDEX_DOCUMENT):
            return self._routes.get(path[: -len(INDEX_DOCUMENT)])
        if not path.endswith("/"):
            return self._routes.get(path + "/")
        return None

    async def __call__(self, path: str) -> Response | None:
        source = self.match(path)
        if source is None:
            return None

        async with self._lock:
            page = await self._site.render_page(source)
        if page is None or page.content is None:
            return None

        dest = page.dest.full_path if page.dest is not None else path
        return Response(page.content, media_type=guess_media_type(dest))
